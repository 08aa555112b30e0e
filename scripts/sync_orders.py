"""
Run one order status sync sweep outside the scheduler.

Usage:
    python scripts/sync_orders.py
"""
import asyncio
from dataclasses import asdict

from pos_aggregator.services.cache_service import cache_service
from pos_aggregator.services.order_sync_service import order_sync_service
from pos_aggregator.utils.structured_logging import configure_logging


async def main():
    configure_logging()
    print("🔄 Syncing order statuses...\n")
    try:
        report = await order_sync_service.sync_orders()
    finally:
        await cache_service.close()

    for key, value in asdict(report).items():
        print(f"   {key}: {value}")
    print("\n✅ Sync complete")


if __name__ == "__main__":
    asyncio.run(main())
