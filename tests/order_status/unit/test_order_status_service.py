"""
OrderStatusService Unit Tests

Every transition must update the status column(s) and append exactly one
history row in the same transaction.
"""

from unittest.mock import patch

import pytest

from enums.payment_status import PaymentStatus
from enums.production_status import ProductionStatus
from enums.status_type import StatusType
from exceptions.order import (
    OrderNotFoundException,
    OrderItemNotFoundException,
    InvalidOrderStateException,
    OrderValidationException,
)
from repositories.order import OrderRepository
from repositories.order_status_history import OrderStatusHistoryRepository
from services.order import OrderService
from services.order_status import OrderStatusService


@pytest.fixture
def create_order(db, catalog, make_order_payload):
    async def _create(**kwargs):
        return await OrderService.create_order(make_order_payload(catalog["variant"].id, **kwargs), db)
    return _create


async def history_of(db, order_id):
    async with db.session() as session:
        return await OrderStatusHistoryRepository.get_by_order_id(order_id, session)


class TestPaymentStatus:

    @pytest.mark.asyncio
    async def test_paid_appends_one_history_row(self, db, create_order):
        order = await create_order()

        updated = await OrderStatusService.update_order_payment_status(
            order.id, PaymentStatus.PAID, db, payment_intent_id="pi_123"
        )

        assert updated.payment_status == PaymentStatus.PAID
        assert updated.payment_intent_id == "pi_123"
        assert updated.production_status == ProductionStatus.PENDING
        history = await history_of(db, order.id)
        assert len(history) == 2
        assert history[-1].status_type == StatusType.PAYMENT
        assert history[-1].new_status == "paid"

    @pytest.mark.asyncio
    async def test_absent_intent_id_keeps_stored_one(self, db, create_order):
        order = await create_order()
        await OrderService.attach_payment_intent(order.id, "pi_original", db)

        updated = await OrderStatusService.update_order_payment_status(order.id, "failed", db)

        assert updated.payment_status == PaymentStatus.FAILED
        assert updated.payment_intent_id == "pi_original"

    @pytest.mark.asyncio
    async def test_failed_then_paid(self, db, create_order):
        order = await create_order()
        await OrderStatusService.update_order_payment_status(order.id, PaymentStatus.FAILED, db)

        updated = await OrderStatusService.update_order_payment_status(order.id, PaymentStatus.PAID, db)

        assert updated.payment_status == PaymentStatus.PAID
        assert [h.new_status for h in await history_of(db, order.id)] == ["pending", "failed", "paid"]

    @pytest.mark.asyncio
    async def test_paid_is_final(self, db, create_order):
        order = await create_order()
        await OrderStatusService.update_order_payment_status(order.id, PaymentStatus.PAID, db)

        with pytest.raises(InvalidOrderStateException):
            await OrderStatusService.update_order_payment_status(order.id, PaymentStatus.PENDING, db)

        assert len(await history_of(db, order.id)) == 2

    @pytest.mark.asyncio
    async def test_unknown_order(self, db):
        with pytest.raises(OrderNotFoundException):
            await OrderStatusService.update_order_payment_status("nope", PaymentStatus.PAID, db)

    @pytest.mark.asyncio
    async def test_invalid_status_value(self, db, create_order):
        order = await create_order()
        with pytest.raises(OrderValidationException):
            await OrderStatusService.update_order_payment_status(order.id, "refunded", db)


class TestProductionStatus:

    @pytest.mark.asyncio
    async def test_each_transition_appends_matching_row(self, db, create_order):
        order = await create_order()

        for status in (ProductionStatus.IN_PRODUCTION, ProductionStatus.SHIPPED, ProductionStatus.DELIVERED):
            before = len(await history_of(db, order.id))
            updated = await OrderStatusService.update_order_production_status(order.id, status, db)
            history = await history_of(db, order.id)

            assert updated.production_status == status
            assert len(history) == before + 1
            assert history[-1].new_status == status.value
            assert history[-1].status_type == StatusType.PRODUCTION

    @pytest.mark.asyncio
    async def test_shipped_stamps_shipped_at(self, db, create_order):
        order = await create_order()
        in_production = await OrderStatusService.update_order_production_status(
            order.id, ProductionStatus.IN_PRODUCTION, db
        )
        assert in_production.shipped_at is None

        shipped = await OrderStatusService.update_order_production_status(
            order.id, ProductionStatus.SHIPPED, db, tracking_number="1Z999AA10123456784"
        )

        assert shipped.shipped_at is not None
        assert shipped.tracking_number == "1Z999AA10123456784"
        assert "1Z999AA10123456784" in (await history_of(db, order.id))[-1].notes

    @pytest.mark.asyncio
    async def test_repeated_shipped_restamps(self, db, create_order):
        order = await create_order()
        await OrderStatusService.update_order_production_status(order.id, ProductionStatus.IN_PRODUCTION, db)
        first = await OrderStatusService.update_order_production_status(order.id, ProductionStatus.SHIPPED, db)

        second = await OrderStatusService.update_order_production_status(
            order.id, ProductionStatus.SHIPPED, db, tracking_number="TRACK-2"
        )

        assert second.shipped_at >= first.shipped_at
        assert second.tracking_number == "TRACK-2"
        assert len(await history_of(db, order.id)) == 4

    @pytest.mark.asyncio
    async def test_tracking_number_carried_forward(self, db, create_order):
        order = await create_order()
        await OrderStatusService.update_order_production_status(
            order.id, ProductionStatus.IN_PRODUCTION, db, tracking_number="EARLY-1"
        )
        await OrderStatusService.update_order_production_status(order.id, ProductionStatus.SHIPPED, db)

        delivered = await OrderStatusService.update_order_production_status(order.id, ProductionStatus.DELIVERED, db)

        assert delivered.tracking_number == "EARLY-1"
        assert delivered.shipped_at is not None

    @pytest.mark.asyncio
    async def test_shipping_a_pending_order_stamps_shipped_at(self, db, create_order):
        order = await create_order()

        shipped = await OrderStatusService.update_order_production_status(
            order.id, ProductionStatus.SHIPPED, db, tracking_number="1Z999AA10123456784"
        )

        assert shipped.production_status == ProductionStatus.SHIPPED
        assert shipped.shipped_at is not None
        assert shipped.tracking_number == "1Z999AA10123456784"
        assert [h.new_status for h in await history_of(db, order.id)] == ["pending", "shipped"]

    @pytest.mark.asyncio
    async def test_going_back_is_rejected(self, db, create_order):
        order = await create_order()
        await OrderStatusService.update_order_production_status(order.id, ProductionStatus.SHIPPED, db)

        with pytest.raises(InvalidOrderStateException):
            await OrderStatusService.update_order_production_status(order.id, ProductionStatus.IN_PRODUCTION, db)

        async with db.session() as session:
            stored = await OrderRepository.get_by_id(order.id, session)
        assert stored.production_status == ProductionStatus.SHIPPED
        assert stored.shipped_at is not None
        assert len(await history_of(db, order.id)) == 2

    @pytest.mark.asyncio
    async def test_history_failure_rolls_back_status(self, db, create_order):
        order = await create_order()

        with patch.object(OrderStatusHistoryRepository, "append", side_effect=RuntimeError("disk full")):
            with pytest.raises(RuntimeError):
                await OrderStatusService.update_order_production_status(order.id, ProductionStatus.IN_PRODUCTION, db)

        async with db.session() as session:
            stored = await OrderRepository.get_by_id(order.id, session)
        assert stored.production_status == ProductionStatus.PENDING

    @pytest.mark.asyncio
    async def test_unknown_order(self, db):
        with pytest.raises(OrderNotFoundException):
            await OrderStatusService.update_order_production_status("nope", ProductionStatus.SHIPPED, db)


class TestItemProductionStatus:

    @pytest.mark.asyncio
    async def test_item_transition_recorded_against_order(self, db, create_order):
        order = await create_order()
        async with db.session() as session:
            _, items = await OrderService.get_order(order.id, session)

        updated = await OrderStatusService.update_item_production_status(
            items[0].id, ProductionStatus.IN_PRODUCTION, db
        )

        assert updated.production_status == ProductionStatus.IN_PRODUCTION
        history = await history_of(db, order.id)
        assert len(history) == 2
        assert history[-1].order_item_id == items[0].id
        assert history[-1].new_status == "in_production"

        async with db.session() as session:
            stored = await OrderRepository.get_by_id(order.id, session)
        assert stored.production_status == ProductionStatus.PENDING

    @pytest.mark.asyncio
    async def test_unknown_item(self, db):
        with pytest.raises(OrderItemNotFoundException):
            await OrderStatusService.update_item_production_status("nope", ProductionStatus.SHIPPED, db)
