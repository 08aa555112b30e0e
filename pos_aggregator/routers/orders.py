"""
Orders Router: order history, manual sync and cancellation.
"""
from dataclasses import asdict
from fastapi import APIRouter, HTTPException, status
from pos_aggregator.services.order_service import OrderError, OrderNotFoundError, order_store
from pos_aggregator.services.order_sync_service import order_sync_service

router = APIRouter()


@router.get("/orders")
async def list_orders(active: bool = False):
    orders = await order_store.active_orders() if active else await order_store.list_orders()
    return {"orders": [o.model_dump(mode="json") for o in orders], "count": len(orders)}


@router.post("/orders/sync")
async def sync_orders():
    report = await order_sync_service.sync_orders()
    return asdict(report)


@router.post("/orders/{order_id}/cancel")
async def cancel_order(order_id: str):
    try:
        order = await order_store.cancel_order(order_id)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except OrderError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return order.model_dump(mode="json")


@router.delete("/orders/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_order(order_id: str):
    if not await order_store.remove_order(order_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Order {order_id} not found")
