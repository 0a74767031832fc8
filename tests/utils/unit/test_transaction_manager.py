"""
Tests for TransactionManager: commit/rollback, timeout and retry.
"""

import asyncio

import pytest
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError

from models.customer import Customer
from utils.transaction_manager import (
    TransactionManager,
    TransactionTimeoutException,
    TransactionRetryExhausted,
)


async def customer_count(db) -> int:
    async with db.session() as session:
        result = await session.execute(select(func.count()).select_from(Customer))
        return result.scalar_one()


class TestAtomicTransaction:

    @pytest.mark.asyncio
    async def test_commits_on_success(self, db):
        async with TransactionManager.atomic_transaction(db) as session:
            session.add(Customer(email="a@example.com", addresses=[]))

        assert await customer_count(db) == 1

    @pytest.mark.asyncio
    async def test_rolls_back_and_reraises(self, db):
        with pytest.raises(ValueError):
            async with TransactionManager.atomic_transaction(db) as session:
                session.add(Customer(email="a@example.com", addresses=[]))
                await session.flush()
                raise ValueError("boom")

        assert await customer_count(db) == 0

    @pytest.mark.asyncio
    async def test_run_atomic_timeout(self, db):
        async def slow(session):
            session.add(Customer(email="slow@example.com", addresses=[]))
            await session.flush()
            await asyncio.sleep(5)

        with pytest.raises(TransactionTimeoutException) as exc_info:
            await TransactionManager.run_atomic(db, slow, timeout=0.05)

        assert exc_info.value.timeout == 0.05
        assert await customer_count(db) == 0

    @pytest.mark.asyncio
    async def test_run_atomic_returns_result(self, db):
        async def write(session):
            session.add(Customer(email="b@example.com", addresses=[]))
            return "done"

        assert await TransactionManager.run_atomic(db, write) == "done"
        assert await customer_count(db) == 1


class TestWithRetry:

    @pytest.mark.asyncio
    async def test_retries_integrity_error_then_succeeds(self):
        attempts = []

        @TransactionManager.with_retry(max_retries=3, delay_base=0)
        async def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
            return "ok"

        assert await flaky() == "ok"
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_exhausted(self):
        @TransactionManager.with_retry(max_retries=2, delay_base=0)
        async def always_conflicts():
            raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        with pytest.raises(TransactionRetryExhausted) as exc_info:
            await always_conflicts()

        assert exc_info.value.retries == 2
        assert isinstance(exc_info.value.__cause__, IntegrityError)

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self):
        attempts = []

        @TransactionManager.with_retry(max_retries=3, delay_base=0)
        async def broken():
            attempts.append(1)
            raise ValueError("not a database race")

        with pytest.raises(ValueError):
            await broken()
        assert len(attempts) == 1
