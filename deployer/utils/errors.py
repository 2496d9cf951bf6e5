class DeployerError(Exception):
    """
    Base class for every error raised by the deployer.
    """


class ConfigurationError(DeployerError):
    """
    A typo in a name, address or network table. Never transient, so it is
    never retried.
    """


class UnknownContractKind(ConfigurationError):
    def __init__(self, kind, reason="no registered ABI"):
        self.kind = kind
        super().__init__(f"Unknown contract kind `{kind}`: {reason}")


class InvalidAddress(ConfigurationError):
    def __init__(self, address, context=None):
        self.address = address
        message = f"Invalid address `{address}`"
        if context:
            message = f"{message} for {context}"
        super().__init__(message)


class UnknownNetwork(ConfigurationError):
    def __init__(self, network, known=()):
        self.network = network
        super().__init__(
            f"Unknown network `{network}` (known networks: {', '.join(sorted(known))})"
        )


class MissingSigner(ConfigurationError):
    def __init__(self, message="No signer configured for this handle"):
        super().__init__(message)


class ChainMismatch(ConfigurationError):
    def __init__(self, network, expected, actual):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Incorrect network: `{network}` expects chain id {expected}, endpoint reports {actual}"
        )


class AddressCacheError(ConfigurationError):
    pass


class SubmissionError(DeployerError):
    """
    The chain rejected a transaction (reverted precondition, bad nonce,
    underpriced...) or the transaction was mined with a failed status.
    """

    def __init__(self, label, message="Transaction was rejected"):
        self.label = label
        self.message = message
        super().__init__(self.message)

    def __str__(self):
        return f"{self.message}: {self.label}"


class ConfirmationTimeout(DeployerError):
    """
    The provider did not report the inclusion of a submitted transaction in
    time. The transaction may still be mined later, so it must not be resent
    blindly.
    """

    def __init__(self, label, tx_hash, timeout):
        self.label = label
        self.tx_hash = tx_hash
        self.timeout = timeout
        super().__init__(
            f"Transaction {tx_hash} ({label}) not confirmed after {timeout} seconds"
        )


class RetryExhausted(DeployerError):
    def __init__(self, state):
        self.state = state
        super().__init__(
            f"Operation failed {state.attempt} time{'s' if state.attempt > 1 else ''}: {state.last_error}"
        )


class TaskError(DeployerError):
    """
    Error representing an exception that occurs while executing a task script.
    Provides a `failure_number` to identify the task in which the failure
    occurred, which can be used to resume execution later on.
    """

    def __init__(self, failure_number, message="An error occurred while executing task"):
        self.failure_number = failure_number
        self.message = message
        super().__init__(self.message)

    def __str__(self):
        return f"{self.message}. Number of failed task script: {self.failure_number}"


class BatchLengthMismatch(ValueError):
    def __init__(self, index, expected, actual):
        self.index = index
        super().__init__(
            f"Batch list {index} has {actual} items, expected {expected} (length of the first list)"
        )
