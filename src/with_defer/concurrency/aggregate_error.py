from collections.abc import Iterable
from typing import Any, ClassVar

DEFERRED_CLEANUP_ERROR_MESSAGE = "One or more exceptions caught while executing deferred clean-up functions"


class AggregateError(Exception):
    """
    An exception bundling several failure values under one message.

    Raised by run_with_defer when one or more deferred clean-up functions
    fail. The failures are kept in the order they happened and may be any
    value, not only exceptions.

    Example:
        try:
            await run_with_defer(handler)
        except AggregateError as e:
            for error in e.errors:
                log.error(f"Clean-up failed: {error!r}")
    """

    name: ClassVar[str] = "AggregateError"

    def __init__(self, errors: Iterable[Any], message: str = ""):
        self._errors: tuple[Any, ...] = tuple(errors)
        self._message = message
        super().__init__(message)

    @property
    def errors(self) -> tuple[Any, ...]:
        """Return the collected failures in the order they occurred."""
        return self._errors

    @property
    def message(self) -> str:
        """Return the message given at construction."""
        return self._message

    def __str__(self) -> str:
        return self._message

    def __repr__(self) -> str:
        return f"{self.name}({list(self._errors)!r}, {self._message!r})"


__all__ = ["DEFERRED_CLEANUP_ERROR_MESSAGE", "AggregateError"]
