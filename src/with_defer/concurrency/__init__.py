from .aggregate_error import DEFERRED_CLEANUP_ERROR_MESSAGE, AggregateError
from .defer import (
    CleanupCallback,
    DeferClosedError,
    DeferFunction,
    FunctionWithCleanup,
    run_with_defer,
    with_defer,
)

__all__ = [
    "DEFERRED_CLEANUP_ERROR_MESSAGE",
    "AggregateError",
    "CleanupCallback",
    "DeferClosedError",
    "DeferFunction",
    "FunctionWithCleanup",
    "run_with_defer",
    "with_defer",
]
