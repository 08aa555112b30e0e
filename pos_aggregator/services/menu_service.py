"""
Menu Service: per-shop catalog cache.

Catalogs are cached in memory until an explicit refresh, and persisted to
Redis so a cold process can prime from the last known menu. A persisted menu
older than MENU_CACHE_TTL is served immediately and refreshed in the
background.
"""
import asyncio
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Set
from pydantic import ValidationError
from pos_aggregator.models.menu_models import MenuCategory
from pos_aggregator.models.shop_models import Shop
from pos_aggregator.services.cache_service import CacheService, cache_service
from pos_aggregator.services.pos.base import POSAdapter
from pos_aggregator.services.pos.errors import POSError
from pos_aggregator.services.pos.factory import get_pos_adapter
from pos_aggregator.utils.config import settings
import logging

logger = logging.getLogger(__name__)

# Persisted menus outlive their freshness window so they can still prime a cold start
PERSISTED_MENU_RETENTION = 7 * 24 * 3600


def menu_cache_key(shop_id: str) -> str:
    return f"menu:{shop_id}"


class MenuService:
    def __init__(
        self,
        adapter_resolver: Callable[[Shop], POSAdapter] = get_pos_adapter,
        store: CacheService = None,
        ttl: int = None,
    ):
        self.adapter_resolver = adapter_resolver
        self.store = store or cache_service
        self.ttl = ttl if ttl is not None else settings.MENU_CACHE_TTL
        self.errors: Dict[str, str] = {}
        self._menus: Dict[str, List[MenuCategory]] = {}
        self._inflight: Dict[str, asyncio.Task] = {}
        self._background: Set[asyncio.Task] = set()

    def is_loading(self, shop_id: str) -> bool:
        return shop_id in self._inflight

    def cached_menu(self, shop_id: str) -> Optional[List[MenuCategory]]:
        return self._menus.get(shop_id)

    async def _persist(self, shop_id: str, categories: List[MenuCategory]):
        await self.store.set_json(
            menu_cache_key(shop_id),
            {
                "fetched_at": datetime.now(timezone.utc).isoformat(),
                "categories": [c.model_dump(mode="json") for c in categories],
            },
            ttl=PERSISTED_MENU_RETENTION,
        )

    async def _fetch(self, shop: Shop) -> Optional[List[MenuCategory]]:
        try:
            adapter = self.adapter_resolver(shop)
            categories = await adapter.fetch_catalog(shop)
        except POSError as e:
            logger.error(f"Menu fetch failed for shop {shop.id}: {e}", exc_info=True)
            self.errors[shop.id] = str(e)
            return None

        self.errors.pop(shop.id, None)
        self._menus[shop.id] = categories
        await self._persist(shop.id, categories)
        logger.info(f"Loaded menu for shop {shop.id}: {len(categories)} categories")
        return categories

    def _release(self, shop_id: str, task: asyncio.Task):
        if self._inflight.get(shop_id) is task:
            del self._inflight[shop_id]

    async def _load(self, shop: Shop) -> Optional[List[MenuCategory]]:
        task = self._inflight.get(shop.id)
        if task is None:
            task = asyncio.create_task(self._fetch(shop))
            self._inflight[shop.id] = task
            task.add_done_callback(lambda t, key=shop.id: self._release(key, t))
        return await asyncio.shield(task)

    async def get_menu(self, shop: Shop) -> List[MenuCategory]:
        """Cached menu, or a single shared vendor fetch. Empty on failure (see ``errors``)."""
        cached = self._menus.get(shop.id)
        if cached is not None:
            return cached
        return await self._load(shop) or []

    async def refresh_menu(self, shop: Shop) -> List[MenuCategory]:
        """Refetch from the vendor; the previous menu stays cached if the refresh fails."""
        result = await self._load(shop)
        if result is None:
            return self._menus.get(shop.id, [])
        return result

    async def load_persisted_menu(self, shop_id: str) -> Optional[tuple]:
        """Return ``(categories, fetched_at)`` from Redis, or None."""
        data = await self.store.get_json(menu_cache_key(shop_id))
        if not data:
            return None
        try:
            categories = [MenuCategory.model_validate(c) for c in data.get("categories", [])]
            fetched_at = datetime.fromisoformat(data["fetched_at"])
        except (ValidationError, KeyError, ValueError) as e:
            logger.warning(f"Discarding unreadable persisted menu for shop {shop_id}: {e}")
            await self.store.delete(menu_cache_key(shop_id))
            return None
        return categories, fetched_at

    async def prime_menu(self, shop: Shop) -> List[MenuCategory]:
        """Serve the persisted menu right away; refresh silently if it is stale."""
        cached = self._menus.get(shop.id)
        if cached is not None:
            return cached

        persisted = await self.load_persisted_menu(shop.id)
        if persisted is None:
            return await self.get_menu(shop)

        categories, fetched_at = persisted
        self._menus[shop.id] = categories
        age = (datetime.now(timezone.utc) - fetched_at).total_seconds()
        if age >= self.ttl and not self.is_loading(shop.id):
            logger.info(f"Persisted menu for shop {shop.id} is {int(age)}s old, refreshing in background")
            task = asyncio.create_task(self._load(shop))
            self._background.add(task)
            task.add_done_callback(lambda t, key=shop.id: self._finish_background(key, t))
        return categories

    def _finish_background(self, shop_id: str, task: asyncio.Task):
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background menu refresh failed for shop {shop_id}: {error}", exc_info=error)
            self.errors[shop_id] = str(error)

    async def clear(self, shop_id: str = None):
        if shop_id is None:
            for key in list(self._menus):
                await self.store.delete(menu_cache_key(key))
            self._menus.clear()
        else:
            self._menus.pop(shop_id, None)
            await self.store.delete(menu_cache_key(shop_id))


menu_service = MenuService()
