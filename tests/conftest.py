import pytest
from eth_account import Account

from constants import TEST_PRIVATE_KEY, TEST_SENDER, ZERO_ADDRESS
from config.networks import KNOWN_ADDRESSES
from deployer.utils.address_cache import AddressCache
from deployer.utils.executor import TransactionExecutor
from deployer.utils.network import NetworkProfile
from deployer.utils.reconciler import Reconciler


def _key(value):
    return getattr(value, "address", value).lower()


class FakeChain:
    """
    In-memory stand-in for the chain: records every submitted transaction and
    answers receipt lookups like `w3.eth` does.
    """

    def __init__(self):
        self.transactions = []
        self.receipts = {}
        self.contracts = {}
        self.reads = []

    @property
    def eth(self):
        return self

    def record(self, label, args=(), contract_address=None):
        tx_hash = "0x" + f"{len(self.transactions) + 1:064x}"
        self.transactions.append((label, args))
        self.receipts[tx_hash] = {
            "status": 1,
            "gasUsed": 21_000,
            "contractAddress": contract_address,
            "transactionHash": tx_hash,
        }
        return tx_hash

    def wait_for_transaction_receipt(self, tx_hash, timeout=None):
        return self.receipts[tx_hash]

    @property
    def labels(self):
        return [label for label, _ in self.transactions]

    def new_address(self):
        return "0x" + f"{0xC0DE0000 + len(self.contracts) + 1:040x}"


class FakeContract:
    """
    Stateful contract double. Getters return values from `state` (dict valued
    getters are looked up by address), setters return a submit callable that
    applies an effect and records a transaction on the chain.
    """

    def __init__(self, chain, name, address, **state):
        self.chain = chain
        self.name = name
        self.address = address
        self.state = dict(state)
        self.effects = {}
        chain.contracts[address.lower()] = self

    def describe(self):
        return self.name

    def on(self, setter, effect):
        self.effects[setter] = effect
        return self

    def grants(self, setter, getter):
        self.state.setdefault(getter, {})
        return self.on(setter, lambda obj, value: self.state[getter].__setitem__(_key(obj), value))

    def adds(self, setter, getter):
        self.state.setdefault(getter, {})
        return self.on(setter, lambda obj: self.state[getter].__setitem__(_key(obj), True))

    def sets(self, setter, getter):
        return self.on(setter, lambda value: self.state.__setitem__(getter, value))

    def __getattr__(self, name):
        if name.startswith("_") or name in ("state", "effects", "chain", "name"):
            raise AttributeError(name)
        if name in self.effects:
            return self._setter(name)
        if name in self.state:
            return self._getter(name)
        raise AttributeError(f"{self.name} has no function `{name}`")

    def _getter(self, name):
        def read(*args):
            self.chain.reads.append(f"{self.name}.{name}")
            value = self.state[name]
            if isinstance(value, dict):
                return value.get(_key(args[0]), False)
            return value
        return read

    def _setter(self, name):
        def write(*args, tx=None):
            def submit():
                self.effects[name](*args)
                return self.chain.record(f"{self.name}.{name}", args)
            return submit
        return write


class FakeFactory:
    """
    Contract handle factory over `FakeChain` contracts. `builders` create the
    fake instance of a deployed kind.
    """

    def __init__(self, chain, builders=None):
        self.chain = chain
        self.builders = builders or {}
        self.w3 = chain

    def resolve(self, kind, address, label=None, **kwargs):
        return self.chain.contracts[_key(address)]

    def deployment(self, kind, *args, tx=None):
        name = getattr(kind, "value", kind)

        def submit():
            address = self.chain.new_address()
            self.builders[name](self.chain, address, *args)
            return self.chain.record(f"deploy {name}", args, contract_address=address)
        return submit


class Events(list):
    def names(self):
        return [event.name for event in self]


@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def executor(chain, sleeps):
    return TransactionExecutor(chain, timeout=5, sleep=sleeps.append)


@pytest.fixture
def events():
    return Events()


@pytest.fixture
def reconciler(executor, events):
    return Reconciler(executor, observer=events.append)


@pytest.fixture
def signer():
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def profile(signer):
    return NetworkProfile(
        name="telos_testnet",
        chain_id=41,
        rpc_url="http://127.0.0.1:8545",
        signer=signer,
        known_addresses=KNOWN_ADDRESSES["telos_testnet"],
        tx_defaults={"gas": 10_000_000},
    )


@pytest.fixture
def cache(tmp_path):
    return AddressCache(str(tmp_path))


@pytest.fixture
def handler_registry(chain):
    return FakeContract(chain, "HandlerRegistry", "0x00000000000000000000000000000000000000a1").grants(
        "setHandler", "isHandler"
    )


@pytest.fixture
def world(chain):
    """
    Fake telos testnet protocol: the core contracts at their known addresses,
    governed by a timelock, with a position manager builder.
    """
    addresses = KNOWN_ADDRESSES["telos_testnet"]
    timelock_address = "0x00000000000000000000000000000000000071e0"

    contracts = {}
    contracts["Vault"] = FakeContract(chain, "Vault", addresses["Vault"], gov=timelock_address, isLiquidator={})
    contracts["Timelock"] = FakeContract(chain, "Timelock", timelock_address).grants(
        "setContractHandler", "isHandler"
    ).on(
        "setLiquidator",
        lambda vault, liquidator, value: chain.contracts[_key(vault)].state["isLiquidator"].__setitem__(
            _key(liquidator), value
        ),
    )
    contracts["Router"] = FakeContract(chain, "Router", addresses["Router"]).adds("addPlugin", "plugins")
    contracts["ShortsTracker"] = FakeContract(chain, "ShortsTracker", addresses["ShortsTracker"]).grants(
        "setHandler", "isHandler"
    )
    contracts["WETH"] = FakeContract(chain, "WETH", addresses["WETH"])
    contracts["OrderBook"] = FakeContract(chain, "OrderBook", addresses["OrderBook"])
    contracts["ReferralStorage"] = FakeContract(chain, "ReferralStorage", addresses["ReferralStorage"]).grants(
        "setHandler", "isHandler"
    )

    def build_position_manager(chain, address, *args):
        contracts["PositionManager"] = (
            FakeContract(
                chain,
                "PositionManager",
                address,
                referralStorage=ZERO_ADDRESS,
                shouldValidateIncreaseOrder=True,
                gov=TEST_SENDER,
                args=args,
            )
            .sets("setReferralStorage", "referralStorage")
            .sets("setShouldValidateIncreaseOrder", "shouldValidateIncreaseOrder")
            .sets("setGov", "gov")
            .grants("setOrderKeeper", "isOrderKeeper")
            .grants("setLiquidator", "isLiquidator")
            .grants("setPartner", "isPartner")
        )

    return contracts, FakeFactory(chain, {"PositionManager": build_position_manager})
