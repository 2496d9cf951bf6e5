from mergedeep import merge

from deployer.utils import log
from deployer.utils.batch import process_batch
from deployer.utils.contracts import ContractKind
from deployer.utils.errors import ConfigurationError
from deployer.utils.reconciler import Reconciler
from deployer.utils.retry import RetryPolicy

READ_RETRY_DELAY = 3


class Deployment:
    """
    Context handed to every task script: the active network profile, contract
    handles, the transaction executor, the reconciliation engine and the
    address cache of the network.
    """

    def __init__(self, profile, factory, executor, cache, retry=None, reconciler=None):
        self.profile = profile
        self._factory = factory
        self._executor = executor
        self._cache = cache
        self.retry = retry or RetryPolicy(max_attempts=3, delay=READ_RETRY_DELAY)
        self.reconciler = reconciler or Reconciler(executor, retry=self.retry)

        # read once, then kept in sync by `remember`
        cached = self._cache.load(profile.name)
        self._addresses = merge({}, dict(profile.known_addresses), cached)
        log.h3(f"Loaded {len(cached)} cached address(es) for {profile.name}")

    @property
    def network(self):
        return self.profile.name

    @property
    def account(self):
        return self.profile.signer

    @property
    def w3(self):
        return self._factory.w3

    @property
    def addresses(self):
        return dict(self._addresses)

    @property
    def log(self):
        return log

    def has_address(self, label):
        return label in self._addresses

    def get_address(self, label):
        if label not in self._addresses:
            raise ConfigurationError(f"No address recorded for `{label}` on {self.network}")
        return self._addresses[label]

    def get_contract(self, kind, address=None, label=None, **kwargs):
        """
        Returns a handle for `kind`, at `address` or at the address recorded
        under `label` (defaults to the kind name).
        """
        kind = ContractKind.parse(kind)
        label = label or kind.value
        if address is None:
            address = self.get_address(label)
        return self._factory.resolve(kind, address, label=label, **kwargs)

    def deploy(self, kind, *args, label=None, tx=None):
        """
        Deploys `kind` with `args` unless an address is already recorded under
        `label`, in which case that instance is reused.
        Returns the contract handle.
        """
        kind = ContractKind.parse(kind)
        label = label or kind.value

        if self.has_address(label):
            log.h3(f"Using {label} at {self.get_address(label)}")
            return self.get_contract(kind, label=label)

        record = self.execute(self._factory.deployment(kind, *args, tx=tx), f"Deploying {label}")
        log.h3(f"Contract {label} deployed at {record.contract_address}")
        self.remember({label: record.contract_address})

        return self.get_contract(kind, label=label)

    def execute(self, transaction, label=None):
        """
        Sends a transaction and waits for it. Returns the confirmed record.
        """
        label = label or getattr(transaction, "description", None) or repr(transaction)
        return self._executor.send(transaction, label)

    def reconcile(self, edges, reads=None):
        return self.reconciler.reconcile(edges, reads=reads)

    def remember(self, addresses):
        """
        Merges `label -> address` pairs into the network's address cache.
        """
        addresses = {label: getattr(address, "address", address) for label, address in addresses.items()}
        self._cache.merge(self.network, addresses)
        self._addresses.update(addresses)
        return self.addresses

    def process_batch(self, batch_lists, batch_size, handler):
        return process_batch(batch_lists, batch_size, handler)

    def end(self):
        log.info(f"Transactions sent: {self._executor.count}")
        log.info(f"Gas spent: {self._executor.gas}")
        return self._executor.gas
