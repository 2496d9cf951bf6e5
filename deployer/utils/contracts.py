import json
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3 import Web3

from deployer.utils import log
from deployer.utils.errors import (InvalidAddress, MissingSigner,
                                   UnknownContractKind)

ARTIFACTS_DIR = "./artifacts"

VIEW_MUTABILITIES = ("view", "pure")


class ContractKind(Enum):
    """
    Closed set of contract kinds the deployer knows how to talk to.
    """

    VAULT = "Vault"
    TIMELOCK = "Timelock"
    ROUTER = "Router"
    SHORTS_TRACKER = "ShortsTracker"
    POSITION_MANAGER = "PositionManager"
    POSITION_ROUTER = "PositionRouter"
    ORDER_BOOK = "OrderBook"
    ORDER_EXECUTOR = "OrderExecutor"
    REFERRAL_STORAGE = "ReferralStorage"
    TOKEN_MANAGER = "TokenManager"
    REWARD_DISTRIBUTOR = "RewardDistributor"
    WETH = "WETH"

    @classmethod
    def parse(cls, kind):
        if isinstance(kind, cls):
            return kind
        try:
            return cls(kind)
        except ValueError:
            raise UnknownContractKind(kind, "not a supported contract kind") from None


def _as_address(value):
    # handles and deployed contracts are passed around instead of raw addresses
    if hasattr(value, "address"):
        return value.address
    if isinstance(value, (list, tuple)):
        return type(value)(_as_address(item) for item in value)
    return value


class ContractRegistry:
    """
    Maps every supported contract kind to its compiled artifact (ABI and, for
    deployable kinds, bytecode). Artifacts come from the compiler toolchain;
    the registry only reads them.
    """

    def __init__(self, artifacts=None):
        self._artifacts = {}
        for kind, artifact in (artifacts or {}).items():
            self.register(kind, artifact)

    @classmethod
    def from_dir(cls, directory=ARTIFACTS_DIR):
        """
        Loads every `<Kind>.json` artifact found in `directory` and its
        subdirectories. A file holds either a bare ABI list or an object with
        `abi` and `bytecode` keys (hardhat artifact layout).
        """
        registry = cls()
        if not os.path.exists(directory):
            log.warn(f"No artifacts directory at {directory}")
            return registry

        for root, _, files in os.walk(directory):
            for file in sorted(files):
                if not file.endswith(".json") or file.endswith(".dbg.json"):
                    continue

                name = file[:-5]
                try:
                    kind = ContractKind.parse(name)
                except UnknownContractKind:
                    continue

                with open(os.path.join(root, file)) as artifact_file:
                    registry.register(kind, json.load(artifact_file))

        log.info(f"Loaded {len(registry.kinds)} contract artifacts from {directory}.")
        return registry

    def register(self, kind, artifact):
        kind = ContractKind.parse(kind)
        if isinstance(artifact, list):
            artifact = {"abi": artifact}
        if not isinstance(artifact, dict) or not isinstance(artifact.get("abi"), list):
            raise UnknownContractKind(kind.value, "artifact has no ABI")

        self._artifacts[kind] = {
            "abi": artifact["abi"],
            "bytecode": artifact.get("bytecode") or None,
        }

    @property
    def kinds(self):
        return sorted(self._artifacts, key=lambda kind: kind.value)

    def __contains__(self, kind):
        try:
            return ContractKind.parse(kind) in self._artifacts
        except UnknownContractKind:
            return False

    def require(self, *kinds):
        # fails upfront instead of halfway through a run
        for kind in kinds:
            self.abi(kind)

    def abi(self, kind):
        kind = ContractKind.parse(kind)
        if kind not in self._artifacts:
            raise UnknownContractKind(kind.value)
        return self._artifacts[kind]["abi"]

    def bytecode(self, kind):
        kind = ContractKind.parse(kind)
        self.abi(kind)
        bytecode = self._artifacts[kind]["bytecode"]
        if not bytecode or bytecode == "0x":
            raise UnknownContractKind(kind.value, "no bytecode available to deploy")
        return bytecode


class PendingCall:
    """
    A state changing call that has been prepared but not sent yet.
    `submit` builds, signs and broadcasts it and returns the transaction hash.
    """

    def __init__(self, function, description, caller, w3, chain_id, tx_defaults=None, overrides=None):
        self.function = function
        self.description = description
        self.caller = caller
        self.w3 = w3
        self.chain_id = chain_id
        self.tx_defaults = dict(tx_defaults or {})
        self.overrides = dict(overrides or {})

    def __repr__(self):
        return f"<PendingCall {self.description}>"

    def with_overrides(self, **overrides):
        return PendingCall(
            self.function,
            self.description,
            self.caller,
            self.w3,
            self.chain_id,
            self.tx_defaults,
            {**self.overrides, **overrides},
        )

    def submit(self) -> HexBytes:
        if self.caller is None:
            raise MissingSigner(f"{self.description} needs a signer but the handle is read-only")

        params = {
            "from": self.caller.address,
            "nonce": self.w3.eth.get_transaction_count(self.caller.address, "pending"),
            "chainId": self.chain_id,
            **self.tx_defaults,
            **self.overrides,
        }
        transaction = dict(self.function.build_transaction(params))
        transaction.pop("from", None)

        signed = self.caller.sign_transaction(transaction)
        return HexBytes(self.w3.eth.send_raw_transaction(signed.raw_transaction))


@dataclass(frozen=True)
class ContractHandle:
    """
    A contract kind bound to an address and a calling identity.

    ABI functions are reachable as attributes: view functions are called right
    away and return the decoded value, state changing functions return a
    `PendingCall` for the transaction executor. A trailing `tx={...}` keyword
    sets per-call transaction fields (gas, gasPrice, value).
    """

    kind: ContractKind
    address: str
    caller: Optional[LocalAccount] = field(default=None, repr=False)
    label: Optional[str] = None
    contract: Any = field(default=None, repr=False, compare=False)
    chain_id: Optional[int] = field(default=None, repr=False, compare=False)
    tx_defaults: Mapping[str, int] = field(default_factory=dict, repr=False, compare=False)

    def __getattr__(self, name):
        if name.startswith("_") or self.contract is None:
            raise AttributeError(name)
        return self.function(name)

    def describe(self):
        return self.label or self.kind.value

    def is_view(self, name):
        entries = [
            entry for entry in self.contract.abi
            if entry.get("type") == "function" and entry.get("name") == name
        ]
        if not entries:
            raise AttributeError(f"{self.kind.value} has no function `{name}`")
        return entries[0].get("stateMutability") in VIEW_MUTABILITIES or entries[0].get("constant", False)

    def function(self, name):
        """
        Explicit accessor, for ABI functions shadowed by handle attributes.
        """
        view = self.is_view(name)

        def call(*args, tx=None):
            args = [_as_address(arg) for arg in args]
            contract_function = getattr(self.contract.functions, name)(*args)
            if view:
                call_params = {"from": self.caller.address} if self.caller else {}
                return contract_function.call(call_params)

            arg_str = ", ".join(str(arg) for arg in args)
            return PendingCall(
                contract_function,
                f"{self.describe()}.{name}({arg_str})",
                self.caller,
                self.contract.w3,
                self.chain_id,
                self.tx_defaults,
                tx,
            )

        call.__name__ = name
        return call


_PROFILE_SIGNER = object()


class ContractHandleFactory:
    """
    Resolves `(kind, address)` into a `ContractHandle` for the active network.
    """

    def __init__(self, profile, registry: ContractRegistry, w3):
        self.profile = profile
        self.registry = registry
        self.w3 = w3

    def _caller(self, signer):
        return self.profile.signer if signer is _PROFILE_SIGNER else signer

    def resolve(self, kind, address, signer=_PROFILE_SIGNER, label=None) -> ContractHandle:
        kind = ContractKind.parse(kind)
        abi = self.registry.abi(kind)

        address = _as_address(address)
        if not isinstance(address, str) or not Web3.is_address(address):
            raise InvalidAddress(address, kind.value)
        address = Web3.to_checksum_address(address)

        return ContractHandle(
            kind=kind,
            address=address,
            caller=self._caller(signer),
            label=label,
            contract=self.w3.eth.contract(address=address, abi=abi),
            chain_id=self.profile.chain_id,
            tx_defaults=self.profile.tx_defaults,
        )

    def deployment(self, kind, *args, signer=_PROFILE_SIGNER, tx=None) -> PendingCall:
        """
        Prepares the constructor transaction of a new `kind` instance.
        """
        kind = ContractKind.parse(kind)
        factory = self.w3.eth.contract(abi=self.registry.abi(kind), bytecode=self.registry.bytecode(kind))
        args = [_as_address(arg) for arg in args]
        arg_str = " ".join(f'"{arg}"' for arg in args)

        return PendingCall(
            factory.constructor(*args),
            f"deploy {kind.value} {arg_str}".rstrip(),
            self._caller(signer),
            self.w3,
            self.profile.chain_id,
            self.profile.tx_defaults,
            tx,
        )
