"""
Clover adapter: v3 inventory, order and opening-hours endpoints.
"""
import asyncio
from typing import Any, List, Optional
from pos_aggregator.models.clover_schemas import (
    CloverCategoriesResponse,
    CloverErrorResponse,
    CloverItemsResponse,
    CloverModifierGroupsResponse,
    CloverOpeningHoursResponse,
    CloverOrder,
)
from pos_aggregator.models.menu_models import MenuCategory
from pos_aggregator.models.order_models import OrderStatus
from pos_aggregator.models.shop_models import BusinessHoursInfo, PosType, Shop
from pos_aggregator.services.business_hours import build_clover_hours, local_now
from pos_aggregator.services.catalog_normalizer import normalize_clover_catalog
from pos_aggregator.services.order_status_mapper import map_clover_order
from pos_aggregator.services.pos.base import POSAdapter
from pos_aggregator.services.pos.errors import DecodeError
from pos_aggregator.utils.config import settings
from pydantic import ValidationError
import logging

logger = logging.getLogger(__name__)


class CloverAdapter(POSAdapter):
    vendor = PosType.CLOVER.value

    def __init__(self, tokens=None, timeout: float = None, base_url: str = None):
        super().__init__(tokens=tokens, timeout=timeout)
        self.base_url = (base_url or settings.CLOVER_API_BASE_URL).rstrip("/")

    def _merchant_url(self, merchant_id: str, path: str) -> str:
        return f"{self.base_url}/v3/merchants/{merchant_id}/{path}"

    def _error_message(self, body: Any) -> Optional[str]:
        try:
            return CloverErrorResponse.model_validate(body).message
        except ValidationError:
            return None

    async def fetch_catalog(self, shop: Shop) -> List[MenuCategory]:
        credentials = await self.tokens.get_clover_credentials(shop.merchant_id)
        token, mid = credentials.access_token, credentials.merchant_id

        # All three listings must succeed; gather propagates the first failure
        categories, items, groups = await asyncio.gather(
            self._request("GET", self._merchant_url(mid, "categories"), token, CloverCategoriesResponse),
            self._request(
                "GET",
                self._merchant_url(mid, "items"),
                token,
                CloverItemsResponse,
                params={"expand": "categories,modifierGroups"},
            ),
            self._request(
                "GET",
                self._merchant_url(mid, "modifier_groups"),
                token,
                CloverModifierGroupsResponse,
                params={"expand": "modifiers"},
            ),
        )

        logger.info(
            f"Fetched Clover inventory for shop {shop.id}: "
            f"{len(categories.elements or [])} categories, {len(items.elements or [])} items, "
            f"{len(groups.elements or [])} modifier groups"
        )
        try:
            return normalize_clover_catalog(categories.elements or [], items.elements or [], groups.elements or [])
        except ValidationError as e:
            logger.error(f"Clover catalog for shop {shop.id} failed to normalize: {e.error_count()} errors")
            raise DecodeError(str(e)) from e

    async def fetch_order_status(self, order_id: str, merchant_id: str) -> OrderStatus:
        credentials = await self.tokens.get_clover_credentials(merchant_id)
        order = await self._request(
            "GET",
            self._merchant_url(credentials.merchant_id, f"orders/{order_id}"),
            credentials.access_token,
            CloverOrder,
        )
        return map_clover_order(order)

    async def fetch_business_hours(self, shop: Shop) -> Optional[BusinessHoursInfo]:
        credentials = await self.tokens.get_clover_credentials(shop.merchant_id)
        try:
            response = await self._request(
                "GET",
                self._merchant_url(credentials.merchant_id, "opening_hours"),
                credentials.access_token,
                CloverOpeningHoursResponse,
            )
        except DecodeError as e:
            logger.warning(f"Could not decode Clover opening hours for shop {shop.id}: {e}")
            return None

        return build_clover_hours(response.elements or [], local_now(shop.timezone))
