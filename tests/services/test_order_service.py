import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pos_aggregator.models.order_models import Order, OrderStatus
from pos_aggregator.services.cart_service import CartService
from pos_aggregator.services.order_service import (
    ChargeResult,
    CheckoutError,
    OrderError,
    OrderNotFoundError,
    OrderStore,
    checkout,
)

KEY = "orders:test"


@pytest.fixture
def orders(store):
    return OrderStore(store=store, key=KEY)


def make_order(shop, order_id, status=OrderStatus.SUBMITTED, minutes_ago=0, vendor_order_id="vendor-1"):
    return Order(
        id=order_id,
        created_at=datetime(2024, 6, 5, 12, 0, tzinfo=timezone.utc) - timedelta(minutes=minutes_ago),
        shop=shop,
        transaction_id=order_id,
        vendor_order_id=vendor_order_id,
        total_amount=Decimal("4.75"),
        status=status,
    )


@pytest.mark.asyncio
async def test_orders_listed_newest_first(orders, square_shop):
    await orders.save_order(make_order(square_shop, "old", minutes_ago=30))
    await orders.save_order(make_order(square_shop, "new"))

    assert [o.id for o in await orders.list_orders()] == ["new", "old"]


@pytest.mark.asyncio
async def test_history_never_expires(orders, store, square_shop):
    await orders.save_order(make_order(square_shop, "o-1"))
    assert store.ttls[KEY] == 0


@pytest.mark.asyncio
async def test_save_replaces_same_id(orders, square_shop):
    await orders.save_order(make_order(square_shop, "o-1"))
    await orders.save_order(make_order(square_shop, "o-1", status=OrderStatus.READY))

    history = await orders.list_orders()
    assert len(history) == 1
    assert history[0].status == OrderStatus.READY


@pytest.mark.asyncio
async def test_active_orders_exclude_terminal(orders, square_shop):
    await orders.save_order(make_order(square_shop, "done", status=OrderStatus.COMPLETED))
    await orders.save_order(make_order(square_shop, "live"))

    assert [o.id for o in await orders.active_orders()] == ["live"]


@pytest.mark.asyncio
async def test_update_status(orders, square_shop):
    await orders.save_order(make_order(square_shop, "o-1"))

    updated = await orders.update_status("o-1", OrderStatus.READY)

    assert updated.status == OrderStatus.READY
    assert (await orders.get_order("o-1")).status == OrderStatus.READY
    assert await orders.update_status("missing", OrderStatus.READY) is None


@pytest.mark.asyncio
async def test_cancel_order(orders, square_shop):
    await orders.save_order(make_order(square_shop, "o-1"))
    await orders.save_order(make_order(square_shop, "o-2", status=OrderStatus.COMPLETED))

    assert (await orders.cancel_order("o-1")).status == OrderStatus.CANCELLED
    with pytest.raises(OrderError):
        await orders.cancel_order("o-2")
    with pytest.raises(OrderNotFoundError):
        await orders.cancel_order("missing")


@pytest.mark.asyncio
async def test_remove_and_clear(orders, square_shop):
    await orders.save_order(make_order(square_shop, "o-1"))
    await orders.save_order(make_order(square_shop, "o-2"))

    assert await orders.remove_order("o-1") is True
    assert await orders.remove_order("o-1") is False
    assert await orders.total_spent() == Decimal("4.75")

    await orders.clear_orders()
    assert await orders.list_orders() == []


@pytest.mark.asyncio
async def test_legacy_and_corrupt_records(orders, store):
    await store.set_json(
        KEY,
        [
            {"transactionId": "legacy-1", "orderId": "sq-9", "amount": 500, "status": "READY"},
            {"id": "broken"},
        ],
    )

    history = await orders.list_orders()

    assert [o.id for o in history] == ["legacy-1"]
    assert history[0].total_amount == Decimal("5.00")
    assert history[0].vendor_order_id == "sq-9"


@pytest.mark.asyncio
async def test_checkout_records_submitted_order(orders, hours_service, square_shop, latte, mocker):
    cart = CartService(hours=hours_service)
    cart.add_item(square_shop, latte, "small", {"milk": ["oat"], "syrup": ["vanilla"]}, quantity=3)
    gateway = mocker.AsyncMock()
    gateway.charge.return_value = ChargeResult(transaction_id="txn-1", vendor_order_id="sq-1")

    order = await checkout(cart, gateway, orders)

    gateway.charge.assert_awaited_once()
    assert gateway.charge.await_args.args[0] == Decimal("14.25")
    assert order.status == OrderStatus.SUBMITTED
    assert order.vendor_order_id == "sq-1"
    assert (await orders.get_order("txn-1")).total_amount == Decimal("14.25")
    assert cart.is_empty


@pytest.mark.asyncio
async def test_failed_charge_keeps_cart(orders, hours_service, square_shop, cookie, mocker):
    cart = CartService(hours=hours_service)
    cart.add_item(square_shop, cookie)
    gateway = mocker.AsyncMock()
    gateway.charge.side_effect = RuntimeError("card declined")

    with pytest.raises(CheckoutError, match="card declined"):
        await checkout(cart, gateway, orders)

    assert not cart.is_empty
    assert await orders.list_orders() == []


@pytest.mark.asyncio
async def test_checkout_rejects_empty_cart(orders, hours_service, mocker):
    gateway = mocker.AsyncMock()

    with pytest.raises(CheckoutError, match="Cart is empty"):
        await checkout(CartService(hours=hours_service), gateway, orders)

    gateway.charge.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_status_never_leaves_terminal_state(orders, square_shop):
    await orders.save_order(make_order(square_shop, "o-1", status=OrderStatus.CANCELLED))

    assert await orders.update_status("o-1", OrderStatus.READY) is None
    assert (await orders.get_order("o-1")).status == OrderStatus.CANCELLED


@pytest.mark.asyncio
async def test_update_status_checks_expected(orders, square_shop):
    await orders.save_order(make_order(square_shop, "o-1", status=OrderStatus.IN_PROGRESS))

    assert await orders.update_status("o-1", OrderStatus.READY, expected=OrderStatus.SUBMITTED) is None
    assert (await orders.get_order("o-1")).status == OrderStatus.IN_PROGRESS

    updated = await orders.update_status("o-1", OrderStatus.READY, expected=OrderStatus.IN_PROGRESS)
    assert updated.status == OrderStatus.READY
