"""
Error taxonomy — every failure the convergence core can report.

All errors derive from ``ConvergenceError`` and carry an ``ErrorKind``
so an outer reconcile loop can decide what to retry.  Underlying causes
are chained with ``raise ... from``; the message names the step that
failed (domain lookup, subnet filter, create, authorize).
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Classification of convergence failures."""

    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    PROVIDER_ERROR = "provider_error"
    CONFIGURATION_ERROR = "configuration_error"
    UNAVAILABLE = "unavailable"


class ConvergenceError(Exception):
    """Base class for all convergence failures."""

    kind: ErrorKind = ErrorKind.PROVIDER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "error": self.describe()}

    def describe(self) -> str:
        """Message including the chain of wrapped causes."""
        parts = [self.message]
        cause = self.__cause__
        while cause is not None:
            parts.append(str(cause))
            cause = cause.__cause__
        return ": ".join(p for p in parts if p)


class NotFoundError(ConvergenceError):
    """No domain, subnet set or group matched the expected criteria."""

    kind = ErrorKind.NOT_FOUND


class AmbiguousMatchError(NotFoundError):
    """More than one resource matched where exactly one was required."""

    def __init__(self, message: str, candidates: list[str]):
        super().__init__(message)
        self.candidates = candidates


class PollTimeoutError(ConvergenceError):
    """A bounded poll exhausted its budget."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str, last_error: BaseException | None = None):
        super().__init__(message)
        self.last_error = last_error


class ProviderError(ConvergenceError):
    """A provider call failed outside any retry window."""

    kind = ErrorKind.PROVIDER_ERROR


class ConfigurationError(ConvergenceError):
    """Upstream identity, naming or config failure."""

    kind = ErrorKind.CONFIGURATION_ERROR


class IdentityUnavailableError(ConfigurationError):
    """The cluster identity could not be determined."""

    kind = ErrorKind.UNAVAILABLE


_KIND_CLASSES: dict[ErrorKind, type[ConvergenceError]] = {
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.TIMEOUT: PollTimeoutError,
    ErrorKind.PROVIDER_ERROR: ProviderError,
    ErrorKind.CONFIGURATION_ERROR: ConfigurationError,
    ErrorKind.UNAVAILABLE: IdentityUnavailableError,
}


def wrap(error: ConvergenceError, message: str) -> ConvergenceError:
    """Describe a failed step without changing the error's kind.

    Use as ``raise wrap(e, "error finding cidr block") from e``.
    """
    return _KIND_CLASSES[error.kind](message)
