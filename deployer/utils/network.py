import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

import dotenv
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

from config.networks import (DEFAULT_NETWORK, KNOWN_ADDRESSES,
                             LOCAL_TEST_PRIVATE_KEY, NETWORKS, TX_DEFAULTS)
from deployer.utils import log
from deployer.utils.errors import ChainMismatch, InvalidAddress, UnknownNetwork

NETWORK_ENV_VAR = "DEPLOY_NETWORK"
DEFAULT_ACCOUNT = "DEPLOYER"
RPC_REQUEST_TIMEOUT = 60


@dataclass(frozen=True)
class NetworkProfile:
    """
    Everything a run needs to know about the network it targets. Resolved once
    per process and passed explicitly to every component with chain access.
    """

    name: str
    chain_id: int
    rpc_url: str
    signer: Optional[LocalAccount] = field(default=None, repr=False)
    known_addresses: Mapping[str, str] = field(default_factory=dict)
    tx_defaults: Mapping[str, int] = field(default_factory=dict)
    confirmation_timeout: int = 120

    def __post_init__(self):
        # freeze the tables as well, not only the attributes
        object.__setattr__(self, "known_addresses", MappingProxyType(dict(self.known_addresses)))
        object.__setattr__(self, "tx_defaults", MappingProxyType(dict(self.tx_defaults)))

    @property
    def sender(self):
        return self.signer.address if self.signer else None


def load_signer(network, account=DEFAULT_ACCOUNT, environ=None):
    """
    Loads the signing account from `<ACCOUNT>_PRIVATE_KEY`.
    Only the local network falls back to the well known test key; other
    networks without a key get no signer (read-only run).
    """
    environ = os.environ if environ is None else environ
    key = environ.get(f"{account}_PRIVATE_KEY")

    if not key and network == "local":
        key = LOCAL_TEST_PRIVATE_KEY
    if not key:
        log.warn(f"No {account}_PRIVATE_KEY set, running {network} read-only")
        return None

    return Account.from_key(key)


def resolve_profile(name=None, account=DEFAULT_ACCOUNT, environ=None) -> NetworkProfile:
    """
    Selects the active network profile: `name` if given, otherwise the
    `DEPLOY_NETWORK` environment variable, otherwise the default network.
    """
    if environ is None:
        # before the network is picked, `.env` may set `DEPLOY_NETWORK`
        dotenv.load_dotenv(dotenv.find_dotenv(usecwd=True))
        environ = os.environ

    name = name or environ.get(NETWORK_ENV_VAR) or DEFAULT_NETWORK
    if name not in NETWORKS:
        raise UnknownNetwork(name, NETWORKS.keys())

    network = NETWORKS[name]
    known_addresses = KNOWN_ADDRESSES.get(name, {})
    for label, address in known_addresses.items():
        if not Web3.is_address(address):
            raise InvalidAddress(address, f"known address `{label}` on {name}")

    return NetworkProfile(
        name=name,
        chain_id=network["chain_id"],
        rpc_url=environ.get(f"{name.upper()}_RPC_URL") or network["rpc_url"],
        signer=load_signer(name, account, environ),
        known_addresses={label: Web3.to_checksum_address(address) for label, address in known_addresses.items()},
        tx_defaults=TX_DEFAULTS.get(name, {}),
        confirmation_timeout=network.get("confirmation_timeout", 120),
    )


def connect(profile: NetworkProfile) -> Web3:
    w3 = Web3(Web3.HTTPProvider(profile.rpc_url, request_kwargs={"timeout": RPC_REQUEST_TIMEOUT}))
    log.info(f"Connected to rpc `{profile.rpc_url}` ({profile.name}).")
    return w3


def verify_chain_id(w3, profile: NetworkProfile):
    # guards against a signer pointed at the wrong endpoint
    actual = w3.eth.chain_id
    if actual != profile.chain_id:
        raise ChainMismatch(profile.name, profile.chain_id, actual)
    return actual
