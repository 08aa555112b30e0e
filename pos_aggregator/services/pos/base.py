"""
POS adapter contract and the shared HTTP plumbing behind it.
"""
import httpx
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Type, TypeVar
from pydantic import BaseModel, ValidationError
from pos_aggregator.models.menu_models import MenuCategory
from pos_aggregator.models.order_models import OrderStatus
from pos_aggregator.models.shop_models import BusinessHoursInfo, Shop
from pos_aggregator.services.pos.errors import (
    DecodeError,
    InvalidEndpointError,
    POSHTTPError,
    POSTransportError,
    VendorAPIError,
)
from pos_aggregator.services.token_service import TokenService, token_service
from pos_aggregator.utils.config import settings
import logging

logger = logging.getLogger(__name__)

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)


class POSAdapter(ABC):
    """Uniform catalog / order-status / business-hours access for one vendor."""

    vendor: str = ""

    def __init__(self, tokens: TokenService = None, timeout: float = None):
        self.tokens = tokens or token_service
        self.timeout = timeout or settings.POS_HTTP_TIMEOUT

    @abstractmethod
    async def fetch_catalog(self, shop: Shop) -> List[MenuCategory]:
        """Fetch and normalize the shop's full menu."""

    @abstractmethod
    async def fetch_order_status(self, order_id: str, merchant_id: str) -> OrderStatus:
        """Fetch a vendor order and map it to the unified status."""

    @abstractmethod
    async def fetch_business_hours(self, shop: Shop) -> Optional[BusinessHoursInfo]:
        """Fetch weekly hours. ``None`` means the vendor has no usable schedule."""

    def _headers(self, access_token: str) -> dict:
        return {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }

    @abstractmethod
    def _error_message(self, body: Any) -> Optional[str]:
        """Extract the vendor's error message from a non-2xx body, if any."""

    async def _request(
        self,
        method: str,
        url: str,
        access_token: str,
        response_model: Type[ResponseModel],
        **kwargs,
    ) -> ResponseModel:
        """Send one vendor request and decode the body into ``response_model``.

        Raises:
            InvalidEndpointError: URL unusable.
            POSTransportError: network or protocol failure.
            VendorAPIError: non-2xx with a vendor message.
            POSHTTPError: non-2xx without one.
            DecodeError: 2xx body does not match the schema.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, headers=self._headers(access_token), **kwargs)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise InvalidEndpointError(str(e)) from e
        except httpx.HTTPError as e:
            logger.error(f"{self.vendor} transport error on {method} {url}: {e}")
            raise POSTransportError(str(e)) from e

        if not response.is_success:
            try:
                message = self._error_message(response.json())
            except ValueError:
                message = None
            logger.warning(f"{self.vendor} {method} {url} returned {response.status_code}: {message}")
            if message:
                raise VendorAPIError(message, status_code=response.status_code)
            raise POSHTTPError(response.status_code)

        try:
            return response_model.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f"{self.vendor} response from {url} failed to decode: {e.error_count()} errors")
            raise DecodeError(str(e)) from e
