"""
Order Status Mapper: vendor order records -> unified OrderStatus.

Mapping never raises. Unknown vendor states fall back to SUBMITTED so a new
vendor state cannot break order synchronization.
"""
from pos_aggregator.models.clover_schemas import CloverOrder
from pos_aggregator.models.order_models import OrderStatus
from pos_aggregator.models.square_schemas import SquareOrder
import logging

logger = logging.getLogger(__name__)

SQUARE_ORDER_STATES = {
    "OPEN": OrderStatus.IN_PROGRESS,
    "COMPLETED": OrderStatus.COMPLETED,
    "CANCELED": OrderStatus.CANCELLED,
    "DRAFT": OrderStatus.DRAFT,
    "PENDING": OrderStatus.PENDING,
}

SQUARE_PICKUP_STATES = {
    "PROPOSED": OrderStatus.SUBMITTED,
    "RESERVED": OrderStatus.IN_PROGRESS,
    "PREPARED": OrderStatus.READY,
    "FULFILLED": OrderStatus.COMPLETED,
    "CANCELED": OrderStatus.CANCELLED,
}

CLOVER_PAYMENT_STATES = {
    "PAID": OrderStatus.COMPLETED,
    "PARTIALLY_PAID": OrderStatus.IN_PROGRESS,
    "REFUNDED": OrderStatus.CANCELLED,
    "PARTIALLY_REFUNDED": OrderStatus.CANCELLED,
}


def map_square_order(order: SquareOrder) -> OrderStatus:
    state = (order.state or "").upper()
    status = SQUARE_ORDER_STATES.get(state)
    if status is None:
        logger.warning(f"Unrecognized Square order state {order.state!r} for order {order.id}")
        return OrderStatus.SUBMITTED

    # An open order is refined by its pickup fulfillment
    if status == OrderStatus.IN_PROGRESS:
        pickup = next((f for f in order.fulfillments or [] if (f.type or "").upper() == "PICKUP"), None)
        if pickup is not None:
            return SQUARE_PICKUP_STATES.get((pickup.state or "").upper(), OrderStatus.IN_PROGRESS)

    return status


def map_clover_order(order: CloverOrder) -> OrderStatus:
    state = (order.state or "").lower()
    if state == "open":
        return OrderStatus.SUBMITTED
    if state == "locked":
        return OrderStatus.IN_PROGRESS
    if state == "paid":
        # Paid without a recognizable payment state reads as READY
        return CLOVER_PAYMENT_STATES.get((order.paymentState or "").upper(), OrderStatus.READY)

    logger.warning(f"Unrecognized Clover order state {order.state!r} for order {order.id}")
    return OrderStatus.SUBMITTED
