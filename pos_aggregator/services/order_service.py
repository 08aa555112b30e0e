"""
Order Service: order history persisted in the key-value store, plus checkout.

Orders are kept as one JSON list under ORDER_STORE_KEY. Read-modify-write
cycles are serialized with an asyncio.Lock.
"""
import asyncio
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Protocol
from pydantic import ValidationError
from pos_aggregator.models.order_models import CartItem, Order, OrderStatus
from pos_aggregator.models.shop_models import Shop
from pos_aggregator.services.cache_service import CacheService, cache_service
from pos_aggregator.services.cart_service import CartService
from pos_aggregator.utils.config import settings
import logging

logger = logging.getLogger(__name__)


class OrderError(Exception):
    """Order could not be created or changed."""


class OrderNotFoundError(OrderError):
    pass


class CheckoutError(OrderError):
    pass


@dataclass
class ChargeResult:
    transaction_id: str
    vendor_order_id: Optional[str] = None
    receipt_url: Optional[str] = None


class PaymentGateway(Protocol):
    """Opaque payment backend. Raises on a declined or failed charge."""

    async def charge(self, amount: Decimal, shop: Shop, items: List[CartItem]) -> ChargeResult:
        ...


class OrderStore:
    def __init__(self, store: CacheService = None, key: str = None):
        self.store = store or cache_service
        self.key = key or settings.ORDER_STORE_KEY
        self._lock = asyncio.Lock()

    async def _read(self) -> List[Order]:
        records = await self.store.get_json(self.key) or []
        orders = []
        for record in records:
            try:
                orders.append(Order.from_record(record))
            except (ValidationError, KeyError, TypeError) as e:
                logger.warning(f"Skipping undecodable order record: {e}")
        return orders

    async def _write(self, orders: List[Order]):
        # expire=0: order history never expires
        await self.store.set_json(self.key, [o.model_dump(mode="json") for o in orders], ttl=0)

    async def list_orders(self) -> List[Order]:
        """All orders, newest first."""
        orders = await self._read()
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    async def active_orders(self) -> List[Order]:
        return [o for o in await self.list_orders() if not o.is_terminal]

    async def get_order(self, order_id: str) -> Optional[Order]:
        return next((o for o in await self._read() if o.id == order_id), None)

    async def save_order(self, order: Order) -> Order:
        async with self._lock:
            orders = [o for o in await self._read() if o.id != order.id]
            orders.append(order)
            await self._write(orders)
        return order

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        expected: Optional[OrderStatus] = None,
    ) -> Optional[Order]:
        """Persist a new status.

        Returns the updated order, or None when the order is unknown, already
        terminal, or no longer in ``expected``.
        """
        async with self._lock:
            orders = await self._read()
            for index, order in enumerate(orders):
                if order.id != order_id:
                    continue
                if order.is_terminal or (expected is not None and order.status != expected):
                    logger.info(f"Order {order_id} is {order.status.value}; not moving to {status.value}")
                    return None
                updated = order.model_copy(update={"status": status})
                orders[index] = updated
                await self._write(orders)
                logger.info(f"Order {order_id}: {order.status.value} -> {status.value}")
                return updated
        return None

    async def cancel_order(self, order_id: str) -> Order:
        """Mark an order CANCELLED. Terminal orders cannot be cancelled."""
        async with self._lock:
            orders = await self._read()
            index = next((i for i, o in enumerate(orders) if o.id == order_id), None)
            if index is None:
                raise OrderNotFoundError(f"Order {order_id} not found")
            order = orders[index]
            if order.is_terminal:
                raise OrderError(f"Order {order_id} is already {order.status.value}")
            cancelled = order.model_copy(update={"status": OrderStatus.CANCELLED})
            orders[index] = cancelled
            await self._write(orders)
        logger.info(f"Order {order_id} cancelled")
        return cancelled

    async def remove_order(self, order_id: str) -> bool:
        async with self._lock:
            orders = await self._read()
            remaining = [o for o in orders if o.id != order_id]
            if len(remaining) == len(orders):
                return False
            await self._write(remaining)
        return True

    async def clear_orders(self):
        async with self._lock:
            await self.store.delete(self.key)

    async def total_spent(self) -> Decimal:
        return sum((o.total_amount for o in await self._read()), Decimal("0.00"))


async def checkout(cart: CartService, gateway: PaymentGateway, orders: OrderStore) -> Order:
    """Charge the cart, record the order as SUBMITTED and empty the cart.

    The cart is left untouched when validation or the charge fails.
    """
    problems = cart.validate_for_checkout()
    if problems:
        raise CheckoutError("; ".join(problems))

    shop, items, amount = cart.shop, cart.items, cart.total_price
    try:
        charge = await gateway.charge(amount, shop, items)
    except Exception as e:
        logger.error(f"Payment failed for shop {shop.id}: {e}", exc_info=True)
        raise CheckoutError(f"Payment failed: {e}") from e

    order = Order(
        id=charge.transaction_id or str(uuid.uuid4()),
        shop=shop,
        items=items,
        total_amount=amount,
        transaction_id=charge.transaction_id,
        vendor_order_id=charge.vendor_order_id,
        status=OrderStatus.SUBMITTED,
        receipt_url=charge.receipt_url,
    )
    await orders.save_order(order)
    cart.clear_cart()
    logger.info(f"Order {order.id} submitted for shop {shop.id}: {amount}")
    return order


order_store = OrderStore()
