import logging
import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Awaitable, Callable, Optional, TypeVar
from functools import wraps
from datetime import datetime, timezone

from sqlalchemy.exc import OperationalError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from db import Database
from exceptions.base import ShopException

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TransactionManager:
    """
    Utility class for managing database transactions with explicit
    commit/rollback, timeout protection and retry logic for races that
    surface as constraint violations.
    """

    # Transaction timeout in seconds
    TRANSACTION_TIMEOUT = 30

    # Retry configuration
    MAX_RETRIES = 3
    RETRY_DELAY_BASE = 0.1  # Base delay in seconds

    @staticmethod
    @asynccontextmanager
    async def atomic_transaction(db: Database) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for one atomic database transaction.

        Commits when the block exits normally, rolls back on any exception
        (including cancellation by a timeout) and re-raises it. The isolation
        level (READ COMMITTED outside SQLite) is configured on the engine.

        Usage:
            async with TransactionManager.atomic_transaction(db) as session:
                await OrderRepository.create(order, session)
        """
        async with db.session() as session:
            transaction_start = datetime.now(timezone.utc)
            logger.debug(f"Transaction started at {transaction_start}")
            try:
                yield session
                await session.commit()
            except (Exception, asyncio.CancelledError) as e:
                try:
                    await session.rollback()
                    logger.info(f"Transaction rolled back due to error: {type(e).__name__}: {e}")
                except Exception as rollback_error:
                    logger.critical(f"Failed to rollback transaction: {str(rollback_error)}")
                raise
            duration = (datetime.now(timezone.utc) - transaction_start).total_seconds()
            logger.debug(f"Transaction committed successfully in {duration:.2f}s")

    @staticmethod
    async def run_atomic(db: Database,
                         operation: Callable[[AsyncSession], Awaitable[T]],
                         timeout: Optional[float] = None) -> T:
        """
        Run operation(session) inside one atomic transaction bounded by a timeout.

        On timeout the operation is cancelled, the transaction rolled back and
        TransactionTimeoutException raised.
        """
        timeout = timeout or TransactionManager.TRANSACTION_TIMEOUT

        async def _run() -> T:
            async with TransactionManager.atomic_transaction(db) as session:
                return await operation(session)

        try:
            return await asyncio.wait_for(_run(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(f"Transaction exceeded timeout of {timeout}s and was rolled back")
            raise TransactionTimeoutException(timeout)

    @staticmethod
    def with_retry(max_retries: Optional[int] = None, delay_base: Optional[float] = None):
        """
        Decorator for automatic retry of database operations with exponential backoff.

        The decorated coroutine must run a complete transaction, so each
        attempt starts from a clean session.

        Args:
            max_retries: Maximum number of retry attempts
            delay_base: Base delay for exponential backoff
        """
        max_retries = max_retries if max_retries is not None else TransactionManager.MAX_RETRIES
        delay_base = delay_base if delay_base is not None else TransactionManager.RETRY_DELAY_BASE

        def decorator(func):
            @wraps(func)
            async def wrapper(*args, **kwargs):
                last_exception = None

                for attempt in range(max_retries + 1):
                    try:
                        return await func(*args, **kwargs)
                    except (OperationalError, IntegrityError) as e:
                        last_exception = e

                        if attempt == max_retries:
                            logger.error(f"Function {func.__name__} failed after {max_retries} retries: {str(e)}")
                            break

                        # Exponential backoff with jitter
                        delay = delay_base * (2 ** attempt) + (delay_base * 0.1 * attempt)
                        logger.warning(f"Attempt {attempt + 1} failed for {func.__name__}, retrying in {delay:.2f}s: {str(e)}")
                        await asyncio.sleep(delay)

                raise TransactionRetryExhausted(func.__name__, max_retries) from last_exception

            return wrapper
        return decorator


class TransactionTimeoutException(ShopException):
    """Raised when a transaction does not finish within its time budget."""

    def __init__(self, timeout: float):
        super().__init__(
            f"Transaction did not complete within {timeout}s",
            details={'timeout': timeout}
        )
        self.timeout = timeout


class TransactionRetryExhausted(ShopException):
    """Raised when maximum retry attempts are exhausted"""

    def __init__(self, operation: str, retries: int):
        super().__init__(
            f"Operation '{operation}' failed after {retries} retries",
            details={'operation': operation, 'retries': retries}
        )
        self.operation = operation
        self.retries = retries
