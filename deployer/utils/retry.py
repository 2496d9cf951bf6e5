import time
from dataclasses import dataclass
from typing import Any, Optional

from deployer.utils import log
from deployer.utils.errors import ConfigurationError, RetryExhausted


@dataclass
class RetryState:
    attempt: int
    max_attempts: int
    last_error: Optional[BaseException] = None


@dataclass
class RetryOutcome:
    state: RetryState
    value: Any = None
    ok: bool = False


class RetryPolicy:
    """
    Bounded re-attempt loop for reads and other operations that are safe to
    repeat. Never wrap a transaction submission that may already have been
    mined: retrying it sends it twice.
    """

    def __init__(self, max_attempts=3, delay=0, backoff=1, sleep=time.sleep):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        self.max_attempts = max_attempts
        self.delay = delay
        self.backoff = backoff
        self._sleep = sleep

    def _wait(self, attempt):
        wait = self.delay * (self.backoff ** (attempt - 1))
        if wait > 0:
            self._sleep(wait)
        return wait

    def attempt(self, operation, *args, **kwargs) -> RetryOutcome:
        """
        Runs `operation` until it succeeds or `max_attempts` calls have failed.
        Returns the outcome instead of raising for operation failures.
        """
        state = RetryState(attempt=0, max_attempts=self.max_attempts)

        while state.attempt < self.max_attempts:
            state.attempt += 1
            try:
                return RetryOutcome(state=state, value=operation(*args, **kwargs), ok=True)

            except ConfigurationError:
                raise

            except Exception as exception:
                state.last_error = exception
                log.info(
                    f"\tCall failed {state.attempt} time"
                    + ("s" if state.attempt > 1 else "")
                    + f" of {self.max_attempts}"
                )
                log.error(f"\tException: {exception}\n")

                if state.attempt < self.max_attempts:
                    self._wait(state.attempt)

        log.error(f"\tCall failed {self.max_attempts} times. Giving up.\n")
        return RetryOutcome(state=state)

    def run(self, operation, *args, **kwargs):
        """
        Returns the result of the first successful call of `operation`, or
        raises `RetryExhausted` (chained from the last error) once every
        attempt has failed.
        """
        outcome = self.attempt(operation, *args, **kwargs)
        if not outcome.ok:
            raise RetryExhausted(outcome.state) from outcome.state.last_error
        return outcome.value
