"""
Shared-secret authentication for internal endpoints.

The storefront plugin sends INTERNAL_API_KEY in an X-API-Key header.
The check runs as a FastAPI dependency, before the body is read, so a
rejected call never reaches Stripe.
"""
import hmac
import logging
from typing import Optional

from fastapi import Depends, Header, Request

from config import Settings
from deps import get_settings
from domain.errors import UnauthorizedError

logger = logging.getLogger(__name__)


def api_key_matches(provided: Optional[str], expected: str) -> bool:
    """Constant-time comparison; empty or missing keys never match."""
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


async def require_internal_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    settings: Settings = Depends(get_settings),
) -> None:
    if not api_key_matches(x_api_key, settings.internal_api_key):
        client_ip = request.client.host if request.client else "unknown"
        logger.warning(f"Rejected {request.url.path} from {client_ip}: bad or missing X-API-Key")
        raise UnauthorizedError()
