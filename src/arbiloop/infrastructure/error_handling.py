"""Error types and recovery utilities for the arbitrage pipeline."""
import asyncio
from typing import Callable, Tuple, Type
from functools import wraps
from loguru import logger


class ArbitrageError(Exception):
    """Base class for all arbitrage pipeline errors."""
    pass


class DataFormatError(ArbitrageError):
    """Raised when a pool or token record holds malformed fields."""
    pass


class PairNotFoundError(ArbitrageError):
    """Raised when a cycle hop has no backing pool."""

    def __init__(self, from_token: str, to_token: str, message: str = ""):
        self.from_token = from_token
        self.to_token = to_token
        super().__init__(message or f"Pair not found for {from_token}-{to_token}")


class BrokenCycleError(PairNotFoundError):
    """Raised when a hop does not start in the token held after the previous hop."""

    def __init__(self, held_token: str, from_token: str, to_token: str):
        self.held_token = held_token
        super().__init__(
            from_token,
            to_token,
            f"Hop {from_token}-{to_token} cannot be entered while holding {held_token}",
        )


class SubgraphError(ArbitrageError):
    """Raised when the market-data subgraph cannot be queried."""
    pass


def async_retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    max_delay: float = 60.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
):
    """
    Retry a coroutine on the listed exceptions, sleeping between attempts.

    The first retry waits initial_delay seconds; each later wait is
    multiplied by backoff_factor and capped at max_delay. After
    max_retries retries the last exception propagates unchanged.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            delay = initial_delay
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    attempt += 1
                    if attempt > max_retries:
                        logger.error(f"{func.__name__} gave up after {attempt} attempts: {e}")
                        raise
                    logger.warning(
                        f"{func.__name__} attempt {attempt} failed, "
                        f"retry {attempt}/{max_retries} in {delay:.2f}s: {e}"
                    )
                    await asyncio.sleep(delay)
                    delay = min(delay * backoff_factor, max_delay)

        return wrapper
    return decorator


class ErrorHandler:
    """Counts locally recovered errors so a run can report what it dropped."""

    def __init__(self):
        """Initialize error handler."""
        self.error_counts: dict[str, int] = {}

    def record_error(self, error: Exception | str):
        """Record an error occurrence by type name."""
        error_type = error if isinstance(error, str) else type(error).__name__
        self.error_counts[error_type] = self.error_counts.get(error_type, 0) + 1

    def count(self, error_type: str) -> int:
        """Number of recorded errors of one type."""
        return self.error_counts.get(error_type, 0)

    def get_error_stats(self) -> dict:
        """Get error statistics."""
        return {
            'total_errors': sum(self.error_counts.values()),
            'error_types': self.error_counts.copy(),
        }

    def reset(self):
        """Forget all recorded errors."""
        self.error_counts.clear()
