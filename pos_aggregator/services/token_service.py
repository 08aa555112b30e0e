"""
Token Service: exchanges a merchant id for vendor API credentials.

The exchange backend is opaque; it returns Square OAuth tokens from
``/getMerchantTokens`` and Clover access tokens from ``/getCloverCredentials``.
"""
import httpx
from dataclasses import dataclass
from typing import Any, Dict
from pos_aggregator.services.pos.errors import CredentialError
from pos_aggregator.utils.config import settings
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SquareCredentials:
    access_token: str
    merchant_id: str
    refresh_token: str


@dataclass(frozen=True)
class CloverCredentials:
    access_token: str
    merchant_id: str


class TokenService:
    """Fetches per-merchant credentials from the credential exchange."""

    def __init__(self, base_url: str = None, timeout: float = None):
        self.base_url = (base_url or settings.TOKEN_SERVICE_URL).rstrip("/")
        self.timeout = timeout or settings.POS_HTTP_TIMEOUT

    async def _exchange(self, path: str, merchant_id: str) -> Dict[str, Any]:
        url = f"{self.base_url}/{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json={"merchantId": merchant_id})
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Credential exchange {path} failed for merchant {merchant_id}: HTTP {e.response.status_code}")
            raise CredentialError(f"HTTP error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Credential exchange {path} network error for merchant {merchant_id}: {e}")
            raise CredentialError(f"Network error: {e}") from e
        except ValueError as e:
            raise CredentialError("Invalid response from server") from e

    async def get_square_credentials(self, merchant_id: str) -> SquareCredentials:
        data = await self._exchange("getMerchantTokens", merchant_id)
        tokens = data.get("tokens") if isinstance(data, dict) else None
        if not isinstance(tokens, dict):
            raise CredentialError("No 'tokens' key found in response")

        try:
            return SquareCredentials(
                access_token=tokens["oauth_token"],
                merchant_id=tokens["merchantId"],
                refresh_token=tokens["refreshToken"],
            )
        except KeyError as e:
            raise CredentialError(f"Missing required token field: {e.args[0]}") from e

    async def get_clover_credentials(self, merchant_id: str) -> CloverCredentials:
        data = await self._exchange("getCloverCredentials", merchant_id)
        credentials = data.get("credentials") if isinstance(data, dict) else None
        if not isinstance(credentials, dict):
            raise CredentialError("No 'credentials' key found in response")

        try:
            return CloverCredentials(
                access_token=credentials["accessToken"],
                merchant_id=credentials["merchantId"],
            )
        except KeyError as e:
            raise CredentialError(f"Missing required credential field: {e.args[0]}") from e


token_service = TokenService()
