from __future__ import annotations


class VerificationError(AssertionError):
    """Base class for every failed verification."""


class AssertionFailure(VerificationError):
    """Raised when an observed value does not match the expected one."""

    def __init__(self, description: str, expected, actual) -> None:
        self.description = description
        self.expected = expected
        self.actual = actual
        super().__init__(f"{description}: expected {expected!r}, got {actual!r}")


class ConditionTimeout(VerificationError, TimeoutError):
    """Raised when a condition never became observable in time."""


class ExpectationTimeout(ConditionTimeout):
    """Raised when a polled page condition never held; keeps the last observed value."""

    def __init__(self, description: str, expected, actual) -> None:
        self.description = description
        self.expected = expected
        self.actual = actual
        super().__init__(f"{description}: expected {expected!r}, got {actual!r}")


class ElementLookupTimeout(ConditionTimeout):
    """Raised when no locator matched an actionable element."""


class DialogTimeout(ConditionTimeout):
    """Raised when an armed dialog wait saw no dialog."""


class UnexpectedNetworkCall(VerificationError):
    """Raised when an intercepted route was requested but must not have been."""

    def __init__(self, pattern: str, urls: list[str]) -> None:
        self.pattern = pattern
        self.urls = urls
        super().__init__(f"Unexpected request(s) matching {pattern}: {', '.join(urls)}")


class DialogStateError(RuntimeError):
    """Raised when the dialog interceptor is driven out of order."""
