"""
Order Sync Service: reconciles stored order statuses with the vendors.

Each non-terminal order that has a vendor order id is checked. A failure on
one order is logged and counted; it never stops the rest of the sweep.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Callable, List
from pos_aggregator.models.order_models import Order
from pos_aggregator.models.shop_models import Shop
from pos_aggregator.services.order_service import OrderStore, order_store
from pos_aggregator.services.pos.base import POSAdapter
from pos_aggregator.services.pos.errors import POSConfigurationError, POSError
from pos_aggregator.services.pos.factory import get_pos_adapter
from pos_aggregator.utils.config import settings
from pos_aggregator.utils.structured_logging import get_logger

logger = get_logger(__name__)


@dataclass
class SyncReport:
    checked: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    skipped: int = 0
    updated_ids: List[str] = field(default_factory=list)


class OrderSyncService:
    def __init__(
        self,
        orders: OrderStore = None,
        adapter_resolver: Callable[[Shop], POSAdapter] = get_pos_adapter,
        concurrency: int = None,
    ):
        self.orders = orders or order_store
        self.adapter_resolver = adapter_resolver
        self.concurrency = concurrency or settings.ORDER_SYNC_CONCURRENCY
        self._running = asyncio.Lock()

    async def _sync_one(self, order: Order, semaphore: asyncio.Semaphore, report: SyncReport):
        log = logger.bind(order_id=order.id, shop_id=order.shop.id, vendor=order.shop.pos_type)
        async with semaphore:
            try:
                adapter = self.adapter_resolver(order.shop)
                status = await adapter.fetch_order_status(order.vendor_order_id, order.shop.merchant_id)
            except POSConfigurationError as e:
                log.error(f"No adapter for order {order.id}: {e}")
                report.failed += 1
                return
            except POSError as e:
                log.warning(f"Status fetch failed for order {order.id}: {e}")
                report.failed += 1
                return
            except Exception as e:
                log.error(f"Unexpected error syncing order {order.id}: {e}", exc_info=True)
                report.failed += 1
                return

        if status == order.status:
            report.unchanged += 1
            return

        if await self.orders.update_status(order.id, status, expected=order.status) is None:
            # Removed, cancelled or otherwise changed while the fetch was in flight
            report.skipped += 1
            return
        log.info(f"Order {order.id} status {order.status.value} -> {status.value}")
        report.updated += 1
        report.updated_ids.append(order.id)

    async def sync_orders(self) -> SyncReport:
        """Run one reconciliation sweep. Overlapping sweeps wait for each other."""
        async with self._running:
            report = SyncReport()
            pending = []
            for order in await self.orders.list_orders():
                if order.is_terminal or not order.vendor_order_id:
                    report.skipped += 1
                    continue
                pending.append(order)

            report.checked = len(pending)
            semaphore = asyncio.Semaphore(self.concurrency)
            await asyncio.gather(*(self._sync_one(order, semaphore, report) for order in pending))

            logger.info(
                f"Order sync: checked={report.checked} updated={report.updated} "
                f"failed={report.failed} skipped={report.skipped}"
            )
            return report


order_sync_service = OrderSyncService()
