from ._cancellation import (
    CancellationRegistration,
    CancellationToken,
    CancellationTokenSource,
    run_cancellable,
)

__all__ = [
    "CancellationRegistration",
    "CancellationToken",
    "CancellationTokenSource",
    "run_cancellable",
]
