"""
Scheduler: periodic order status reconciliation.
"""
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pos_aggregator.services.order_sync_service import order_sync_service
from pos_aggregator.utils.config import settings
import logging

logger = logging.getLogger(__name__)
scheduler = AsyncIOScheduler()


async def order_sync_job():
    """Pull vendor statuses for every open order."""
    try:
        report = await order_sync_service.sync_orders()
        if report.updated:
            logger.info(f"Order sync updated {report.updated} orders: {report.updated_ids}")
    except Exception as e:
        logger.error(f"Order sync job failed: {e}", exc_info=True)


def configure_scheduler():
    """Configure all scheduled jobs. Call during startup."""
    if not settings.ORDER_SYNC_ENABLED:
        logger.info("Order sync disabled; scheduler has no jobs")
        return
    scheduler.add_job(
        order_sync_job,
        IntervalTrigger(minutes=settings.ORDER_SYNC_INTERVAL_MINUTES),
        id="order_sync",
        name="Order Status Sync",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"Scheduler configured: order_sync every {settings.ORDER_SYNC_INTERVAL_MINUTES} min")


def start_scheduler():
    """Start the scheduler."""
    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started.")


def shutdown_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler shutdown.")
