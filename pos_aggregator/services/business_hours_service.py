"""
Business Hours Service: per-shop hours cache with single-flight loading.

Weekly schedules are cached for BUSINESS_HOURS_CACHE_TTL; open/closed is
always evaluated live against the cached schedule so a cached entry never
reports a stale "open now".
"""
import asyncio
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional
from pos_aggregator.models.shop_models import BusinessHoursInfo, BusinessHoursPeriod, Shop
from pos_aggregator.services.business_hours import (
    closing_time,
    day_code,
    is_open_at,
    local_now,
    opening_time,
)
from pos_aggregator.services.pos.base import POSAdapter
from pos_aggregator.services.pos.errors import POSError
from pos_aggregator.services.pos.factory import get_pos_adapter
from pos_aggregator.utils.config import settings
import logging

logger = logging.getLogger(__name__)


@dataclass
class _CachedHours:
    info: Optional[BusinessHoursInfo]
    fetched_at: float


@dataclass
class HoursSummary:
    shop_id: str
    is_open: Optional[bool]
    opens_at: Optional[str] = None
    closes_at: Optional[str] = None
    today: Optional[List[BusinessHoursPeriod]] = None


class BusinessHoursService:
    def __init__(
        self,
        adapter_resolver: Callable[[Shop], POSAdapter] = get_pos_adapter,
        ttl: int = None,
        max_concurrent: int = None,
        fetch_timeout: float = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.adapter_resolver = adapter_resolver
        self.ttl = ttl if ttl is not None else settings.BUSINESS_HOURS_CACHE_TTL
        self.max_concurrent = max_concurrent or settings.BUSINESS_HOURS_MAX_CONCURRENT
        self.fetch_timeout = fetch_timeout or settings.POS_HTTP_TIMEOUT
        self.clock = clock
        self.errors: Dict[str, str] = {}
        self._cache: Dict[str, _CachedHours] = {}
        self._inflight: Dict[str, asyncio.Task] = {}

    def is_loading(self, shop_id: str) -> bool:
        return shop_id in self._inflight

    def _is_fresh(self, entry: _CachedHours) -> bool:
        return self.clock() - entry.fetched_at < self.ttl

    def cached_hours(self, shop_id: str) -> Optional[BusinessHoursInfo]:
        """Fresh cached schedule for ``shop_id``, or None when absent or expired."""
        entry = self._cache.get(shop_id)
        if entry is None or not self._is_fresh(entry):
            return None
        return entry.info

    def clear_cache(self, shop_id: str = None):
        if shop_id is None:
            self._cache.clear()
        else:
            self._cache.pop(shop_id, None)

    async def _fetch(self, shop: Shop) -> Optional[BusinessHoursInfo]:
        try:
            adapter = self.adapter_resolver(shop)
            info = await asyncio.wait_for(adapter.fetch_business_hours(shop), timeout=self.fetch_timeout)
        except asyncio.TimeoutError:
            logger.error(f"Business hours fetch timed out for shop {shop.id}")
            self.errors[shop.id] = "Timed out fetching business hours"
            return None
        except POSError as e:
            logger.error(f"Business hours fetch failed for shop {shop.id}: {e}", exc_info=True)
            self.errors[shop.id] = str(e)
            return None

        self.errors.pop(shop.id, None)
        self._cache[shop.id] = _CachedHours(info=info, fetched_at=self.clock())
        return info

    def _release(self, shop_id: str, task: asyncio.Task):
        if self._inflight.get(shop_id) is task:
            del self._inflight[shop_id]

    async def get_business_hours(self, shop: Shop, force_refresh: bool = False) -> Optional[BusinessHoursInfo]:
        """Cached schedule, fetching once per shop no matter how many callers wait."""
        if not force_refresh:
            entry = self._cache.get(shop.id)
            if entry is not None and self._is_fresh(entry):
                return entry.info

        task = self._inflight.get(shop.id)
        if task is None:
            task = asyncio.create_task(self._fetch(shop))
            self._inflight[shop.id] = task
            task.add_done_callback(lambda t, key=shop.id: self._release(key, t))
        return await asyncio.shield(task)

    async def refresh_business_hours(self, shop: Shop) -> Optional[BusinessHoursInfo]:
        return await self.get_business_hours(shop, force_refresh=True)

    async def fetch_many(self, shops: Iterable[Shop]) -> Dict[str, Optional[BusinessHoursInfo]]:
        """Load hours for many shops, at most ``max_concurrent`` vendor calls at once."""
        semaphore = asyncio.Semaphore(self.max_concurrent)
        shops = list(shops)

        async def load(shop: Shop):
            async with semaphore:
                return await self.get_business_hours(shop)

        results = await asyncio.gather(*(load(shop) for shop in shops))
        return {shop.id: info for shop, info in zip(shops, results)}

    def is_shop_open(self, shop: Shop, now: Optional[datetime] = None) -> Optional[bool]:
        """Live open check from the cached schedule; None when hours are unknown."""
        info = self.cached_hours(shop.id)
        if info is None or not info.has_schedule:
            return None
        return is_open_at(info, local_now(shop.timezone, now))

    def partition_shops(self, shops: Iterable[Shop], now: Optional[datetime] = None) -> Dict[str, List[Shop]]:
        result = {"open": [], "closed": [], "unknown": []}
        for shop in shops:
            state = self.is_shop_open(shop, now)
            key = "unknown" if state is None else ("open" if state else "closed")
            result[key].append(shop)
        return result

    def summary(self, shop: Shop, now: Optional[datetime] = None) -> HoursSummary:
        info = self.cached_hours(shop.id)
        if info is None:
            return HoursSummary(shop_id=shop.id, is_open=None)
        local = local_now(shop.timezone, now)
        return HoursSummary(
            shop_id=shop.id,
            is_open=is_open_at(info, local) if info.has_schedule else None,
            opens_at=opening_time(info, local),
            closes_at=closing_time(info, local),
            today=info.periods_for(day_code(local)),
        )


business_hours_service = BusinessHoursService()
