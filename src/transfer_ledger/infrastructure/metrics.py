import time
from collections.abc import Awaitable, Callable
from functools import wraps

from prometheus_client import Counter, Histogram


DURATION_BUCKETS = [0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]

LEDGER_TRANSACTIONS_TOTAL = Counter(
    "ledger_transactions_total",
    "Total number of ledger transactions by outcome",
    ["outcome"],
)

LEDGER_TRANSACTION_DURATION_SECONDS = Histogram(
    "ledger_transaction_duration_seconds",
    "Time spent in execute, from session acquisition to commit or rollback, failed begins included",
    buckets=DURATION_BUCKETS,
)

TRANSFERS_TOTAL = Counter(
    "transfers_total",
    "Total number of transfer transactions",
    ["status"],
)

TRANSFER_DURATION_SECONDS = Histogram(
    "transfer_duration_seconds",
    "Transfer transaction duration",
    buckets=DURATION_BUCKETS,
)

AFTER_COMMIT_FAILURES_TOTAL = Counter(
    "after_commit_failures_total",
    "Total number of post-commit effects that failed",
    ["effect"],
)


def track_duration[**P, R](
    histogram: Histogram,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                histogram.observe(time.perf_counter() - start)

        return wrapper

    return decorator
