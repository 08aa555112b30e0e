"""
POS error hierarchy.

Adapters raise these and let them propagate; callers that own a cache or a
sync loop decide whether to log and continue.
"""
from typing import Optional


class POSError(Exception):
    """Base class for all POS adapter failures."""


class InvalidEndpointError(POSError):
    """The request URL could not be built or is not usable."""


class POSTransportError(POSError):
    """Network-level failure (DNS, connect, timeout, reset)."""


class POSHTTPError(POSError):
    """Non-2xx response whose body carried no vendor error message."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message or f"HTTP error: {status_code}")


class VendorAPIError(POSError):
    """Non-2xx response with a vendor-provided error message."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class CredentialError(POSError):
    """Credential exchange failed or returned an unusable payload."""


class DecodeError(POSError):
    """Response body did not match the expected vendor schema."""


class POSConfigurationError(POSError):
    """No adapter exists for the shop's vendor tag. Never retried."""
