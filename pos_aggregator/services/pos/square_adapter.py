"""
Square adapter: catalog search, order lookup and location business hours
against the Square v2 REST API.
"""
from typing import Any, List, Optional
from pos_aggregator.models.menu_models import MenuCategory
from pos_aggregator.models.order_models import OrderStatus
from pos_aggregator.models.shop_models import BusinessHoursInfo, PosType, Shop
from pos_aggregator.models.square_schemas import (
    SquareCatalogObject,
    SquareCatalogSearchResponse,
    SquareErrorResponse,
    SquareLocationResponse,
    SquareLocationsResponse,
    SquareOrderResponse,
)
from pos_aggregator.services.business_hours import build_square_hours, local_now
from pos_aggregator.services.catalog_normalizer import normalize_square_catalog
from pos_aggregator.services.order_status_mapper import map_square_order
from pos_aggregator.services.pos.base import POSAdapter
from pos_aggregator.services.pos.errors import DecodeError
from pos_aggregator.utils.config import settings
from pydantic import ValidationError
import logging

logger = logging.getLogger(__name__)

CATALOG_OBJECT_TYPES = ["ITEM", "CATEGORY", "IMAGE", "MODIFIER_LIST"]
MAX_CATALOG_PAGES = 50


class SquareAdapter(POSAdapter):
    vendor = PosType.SQUARE.value

    def __init__(self, tokens=None, timeout: float = None, base_url: str = None):
        super().__init__(tokens=tokens, timeout=timeout)
        self.base_url = (base_url or settings.SQUARE_API_BASE_URL).rstrip("/")

    def _headers(self, access_token: str) -> dict:
        headers = super()._headers(access_token)
        headers["Square-Version"] = settings.SQUARE_API_VERSION
        return headers

    def _error_message(self, body: Any) -> Optional[str]:
        try:
            errors = SquareErrorResponse.model_validate(body).errors or []
        except ValidationError:
            return None
        if not errors:
            return None
        return errors[0].detail or "Unknown error"

    async def _fetch_catalog_objects(self, access_token: str) -> List[SquareCatalogObject]:
        objects: List[SquareCatalogObject] = []
        cursor = None

        for _ in range(MAX_CATALOG_PAGES):
            body = {"object_types": CATALOG_OBJECT_TYPES, "include_related_objects": True}
            if cursor:
                body["cursor"] = cursor
            page = await self._request(
                "POST", f"{self.base_url}/catalog/search", access_token, SquareCatalogSearchResponse, json=body
            )
            objects.extend(page.objects or [])
            objects.extend(page.related_objects or [])
            cursor = page.cursor
            if not cursor:
                break
        else:
            logger.warning(f"Square catalog search stopped after {MAX_CATALOG_PAGES} pages")

        return objects

    async def fetch_catalog(self, shop: Shop) -> List[MenuCategory]:
        credentials = await self.tokens.get_square_credentials(shop.merchant_id)
        objects = await self._fetch_catalog_objects(credentials.access_token)
        logger.info(f"Fetched {len(objects)} Square catalog objects for shop {shop.id}")
        try:
            return normalize_square_catalog(objects)
        except ValidationError as e:
            logger.error(f"Square catalog for shop {shop.id} failed to normalize: {e.error_count()} errors")
            raise DecodeError(str(e)) from e

    async def fetch_order_status(self, order_id: str, merchant_id: str) -> OrderStatus:
        credentials = await self.tokens.get_square_credentials(merchant_id)
        response = await self._request(
            "GET", f"{self.base_url}/orders/{order_id}", credentials.access_token, SquareOrderResponse
        )
        if response.order is None:
            raise DecodeError(f"Square order {order_id} missing from response")
        return map_square_order(response.order)

    async def fetch_business_hours(self, shop: Shop) -> Optional[BusinessHoursInfo]:
        credentials = await self.tokens.get_square_credentials(shop.merchant_id)
        try:
            locations = await self._request(
                "GET", f"{self.base_url}/locations", credentials.access_token, SquareLocationsResponse
            )
            if not locations.locations:
                logger.info(f"No Square locations for shop {shop.id}")
                return None

            location_id = locations.locations[0].id
            detail = await self._request(
                "GET", f"{self.base_url}/locations/{location_id}", credentials.access_token, SquareLocationResponse
            )
        except DecodeError as e:
            logger.warning(f"Could not decode Square business hours for shop {shop.id}: {e}")
            return None

        location = detail.location
        if location is None or location.business_hours is None:
            return None

        now = local_now(shop.timezone or location.timezone)
        return build_square_hours(location.business_hours.periods or [], now)
