"""
Bounded polling — absorb eventual consistency of the provider control plane.

Freshly issued credentials and freshly created resources may not be
visible for a while.  A ``PollPolicy`` calls a condition immediately,
then on a fixed interval until it succeeds or the budget runs out.
Failures inside the window mean "not ready yet"; only the final
timeout is reported, wrapping the last failure.

The clock and sleep functions are injectable so tests can drive the
policy with a fake clock instead of waiting five minutes.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from netconverge.core.errors import PollTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_POLL_TIMEOUT = 300.0


@dataclass
class PollPolicy:
    """Fixed-interval poll with a total budget.

    Args:
        interval: Seconds between attempts.
        timeout: Total seconds before giving up.
        clock: Monotonic time source.
        sleep: Blocking wait, called between attempts.
    """

    interval: float = DEFAULT_POLL_INTERVAL
    timeout: float = DEFAULT_POLL_TIMEOUT
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def poll_immediate(
        self,
        condition: Callable[[], bool],
        deadline: float | None = None,
        description: str = "condition",
    ) -> int:
        """Run ``condition`` until it returns True.

        Args:
            condition: Zero-argument check. Exceptions count as "not yet".
            deadline: Optional absolute ``clock()`` value after which the
                poll stops regardless of the remaining budget.
            description: Used in log lines and the timeout message.

        Returns:
            Number of attempts made.

        Raises:
            PollTimeoutError: Budget or deadline exhausted.
        """
        start = self.clock()
        if deadline is not None and deadline <= start:
            raise PollTimeoutError(f"deadline expired before polling {description}")

        attempt = 0
        last_error: Exception | None = None

        while True:
            attempt += 1
            try:
                if condition():
                    if attempt > 1:
                        logger.info("%s ready after %d attempts", description, attempt)
                    return attempt
            except Exception as e:
                last_error = e
                logger.debug("%s not ready (attempt %d): %s", description, attempt, e)

            now = self.clock()
            if deadline is not None and now >= deadline:
                break
            if now - start >= self.timeout:
                break

            wait = self.interval
            if deadline is not None:
                wait = min(wait, deadline - now)
            self.sleep(wait)

        elapsed = self.clock() - start
        logger.warning(
            "Gave up polling %s after %d attempts (%.1fs)", description, attempt, elapsed
        )
        if last_error is not None:
            raise PollTimeoutError(
                f"timed out polling {description}", last_error=last_error
            ) from last_error
        raise PollTimeoutError(f"timed out waiting for {description}")


def list_with_retry(
    list_fn: Callable[[], T],
    policy: PollPolicy | None = None,
    deadline: float | None = None,
    description: str = "listing",
) -> T:
    """Call a provider listing until it succeeds.

    Returns the first successful result.  Errors from ``list_fn`` are
    swallowed while the poll window is open.
    """
    policy = policy or PollPolicy()
    result: list[T] = []

    def _attempt() -> bool:
        result.append(list_fn())
        return True

    policy.poll_immediate(_attempt, deadline=deadline, description=description)
    return result[-1]
