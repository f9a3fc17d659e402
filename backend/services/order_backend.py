"""
WooCommerce REST client — reads orders and moves their status.

Only two calls are needed by the bridge:
    GET /orders/{id}   — current order (status guard)
    PUT /orders/{id}   — {"status": ...}

Credentials go either into the query string (consumer_key/consumer_secret,
which WAFs in front of WordPress tend to let through) or into an HTTP Basic
header, depending on WC_AUTH_MODE. Every request has an explicit timeout;
a timeout aborts the call and surfaces as OrderBackendError.
"""
import logging
from typing import Optional

import httpx

from config import Settings
from domain.constants import USER_AGENT, WC_API_PREFIX
from exceptions import OrderBackendError

logger = logging.getLogger(__name__)


class WooCommerceClient:
    """Thin async client around the WooCommerce v3 orders endpoint."""

    def __init__(
        self,
        base_url: str,
        consumer_key: str,
        consumer_secret: str,
        auth_mode: str = "query",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if auth_mode not in ("query", "basic"):
            raise ValueError(f"Unsupported WooCommerce auth mode: {auth_mode}")

        client_kwargs = {
            "base_url": f"{base_url.rstrip('/')}{WC_API_PREFIX}",
            "headers": {
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
            "timeout": httpx.Timeout(timeout),
        }
        if auth_mode == "basic":
            client_kwargs["auth"] = httpx.BasicAuth(consumer_key, consumer_secret)
        else:
            client_kwargs["params"] = {
                "consumer_key": consumer_key,
                "consumer_secret": consumer_secret,
            }
        if transport is not None:
            client_kwargs["transport"] = transport

        self.auth_mode = auth_mode
        self._client = httpx.AsyncClient(**client_kwargs)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "WooCommerceClient":
        return cls(
            base_url=settings.wc_base_url,
            consumer_key=settings.wc_consumer_key,
            consumer_secret=settings.wc_consumer_secret,
            auth_mode=settings.wc_auth_mode,
            timeout=settings.wc_timeout_seconds,
            transport=transport,
        )

    async def _request(self, method: str, order_id: int, json: Optional[dict] = None) -> dict:
        try:
            response = await self._client.request(method, f"/orders/{order_id}", json=json)
        except httpx.TimeoutException as e:
            logger.error(f"WooCommerce {method} {order_id} timed out")
            raise OrderBackendError(method, order_id, body=f"timeout ({type(e).__name__})") from e
        except httpx.HTTPError as e:
            logger.error(f"WooCommerce {method} {order_id} transport error: {e}")
            raise OrderBackendError(method, order_id, body=str(e)) from e

        if not response.is_success:
            raise OrderBackendError(method, order_id, response.status_code, response.text)

        # WAF challenge / maintenance pages come back as 200 HTML
        try:
            data = response.json()
        except ValueError as e:
            raise OrderBackendError(method, order_id, response.status_code, response.text) from e
        if not isinstance(data, dict):
            raise OrderBackendError(method, order_id, response.status_code, response.text)
        return data

    async def get_order(self, order_id: int) -> dict:
        """Fetch an order by id."""
        return await self._request("GET", order_id)

    async def update_order_status(self, order_id: int, status: str) -> dict:
        """Set the order's status field (and nothing else)."""
        return await self._request("PUT", order_id, json={"status": status})

    async def aclose(self) -> None:
        await self._client.aclose()
