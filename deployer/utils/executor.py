import time
from dataclasses import dataclass, field
from typing import Any, Optional

from hexbytes import HexBytes
from web3.exceptions import TimeExhausted

from deployer.utils import log
from deployer.utils.errors import (ConfigurationError, ConfirmationTimeout,
                                   SubmissionError)

COOLDOWN_SECONDS = 2
DEFAULT_TIMEOUT = 120


@dataclass
class TransactionRecord:
    label: str
    hash: str
    confirmed: bool = False
    receipt: Optional[Any] = field(default=None, repr=False)

    @property
    def contract_address(self):
        if self.receipt is None:
            return None
        return self.receipt["contractAddress"]

    @property
    def gas_used(self):
        if self.receipt is None:
            return 0
        return self.receipt.get("gasUsed", 0) or 0


def _to_hex(tx_hash):
    return HexBytes(tx_hash).to_0x_hex()


class TransactionExecutor:
    """
    Sends one state changing call at a time: submit, wait for the first
    confirmation, then cool down before handing control back so consecutive
    calls don't trip the provider's rate limits.

    Nothing is retried here. A send that timed out may still be mined, so the
    caller decides what to do (re-running the reconciliation is safe).
    """

    def __init__(self, w3, timeout=DEFAULT_TIMEOUT, cooldown=COOLDOWN_SECONDS, sleep=time.sleep):
        self.w3 = w3
        self.timeout = timeout
        self.cooldown = cooldown
        self._sleep = sleep
        self.gas = 0
        self.count = 0

    @classmethod
    def from_profile(cls, profile, w3, **kwargs):
        return cls(w3, timeout=profile.confirmation_timeout, **kwargs)

    def _submit(self, transaction, label):
        if hasattr(transaction, "submit"):
            return transaction.submit()
        if callable(transaction):
            return transaction()
        if transaction is None:
            raise SubmissionError(label, "Nothing to send")
        return transaction

    def send(self, transaction, label) -> TransactionRecord:
        """
        Sends `transaction` (a `PendingCall`, a callable returning a hash or
        an already broadcast hash) and blocks until it is mined.
        Returns the confirmed `TransactionRecord`.
        """
        try:
            tx_hash = _to_hex(self._submit(transaction, label))
        except (ConfigurationError, SubmissionError):
            raise
        except Exception as exception:
            log.error(f"\tSubmission failed: {label}")
            log.error(f"\tException: {exception}\n")
            raise SubmissionError(label, f"Transaction rejected ({exception})") from exception

        record = TransactionRecord(label=label, hash=tx_hash)
        log.h3(f"Sending {label}... {tx_hash}")

        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.timeout)
        except TimeExhausted as exception:
            log.error(f"\tNo confirmation for {tx_hash} after {self.timeout} seconds")
            raise ConfirmationTimeout(label, tx_hash, self.timeout) from exception

        record.receipt = receipt
        if receipt.get("status", 1) == 0:
            log.error(f"\tTransaction reverted: {tx_hash}")
            raise SubmissionError(label, f"Transaction {tx_hash} reverted")

        record.confirmed = True
        self.count += 1
        self.gas += record.gas_used
        log.h3(f"... Sent! {tx_hash}")

        if self.cooldown:
            self._sleep(self.cooldown)

        return record
