"""
Pytest configuration and shared fixtures for Checkout Bridge tests.

Provides settings, an ASGI test client, a fake Stripe gateway (real
signature verification, recorded session calls), and an in-memory
WooCommerce backend served through httpx.MockTransport.
"""
import hashlib
import hmac
import json
import time
from typing import Any, AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config import Settings, load_settings
from exceptions import PaymentProviderError
from main import create_app
from services.order_backend import WooCommerceClient
from services.payment_gateway import CheckoutSession, StripeGateway

WEBHOOK_SECRET = "whsec_test_secret_for_pytest"
INTERNAL_API_KEY = "internal-test-key"


# ── Settings ─────────────────────────────────────────────────────────


def make_settings(**overrides) -> Settings:
    values = {
        "stripe_secret_key": "sk_test_123",
        "stripe_webhook_secret": WEBHOOK_SECRET,
        "wc_base_url": "https://shop.example.com/",
        "wc_consumer_key": "ck_test",
        "wc_consumer_secret": "cs_secret",
        "internal_api_key": INTERNAL_API_KEY,
        "app_base_url": "https://pay.example.com",
        "_env_file": None,
    }
    values.update(overrides)
    return load_settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


# ── Stripe ───────────────────────────────────────────────────────────


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header the way Stripe does."""
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def make_event(
    event_type: str = "checkout.session.completed",
    event_id: str = "evt_test_1",
    **session_fields: Any,
) -> dict:
    session = {
        "id": "cs_test_abc",
        "object": "checkout.session",
        "client_reference_id": "123",
        "mode": "payment",
        "payment_status": "paid",
        "status": "complete",
    }
    session.update(session_fields)
    return {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "data": {"object": session},
    }


def signed_request(event: dict, secret: str = WEBHOOK_SECRET) -> tuple[bytes, dict]:
    """Serialize an event and return (body, headers) for POST /webhooks/stripe."""
    payload = json.dumps(event).encode("utf-8")
    headers = {
        "Content-Type": "application/json",
        "Stripe-Signature": sign_payload(payload, secret),
    }
    return payload, headers


class FakeGateway(StripeGateway):
    """
    StripeGateway with the network calls replaced.

    construct_event is inherited, so signatures are verified for real.
    """

    def __init__(self, webhook_secret: str = WEBHOOK_SECRET):
        super().__init__(api_key="sk_test_123", webhook_secret=webhook_secret)
        self.create_calls: list[tuple[dict, str]] = []
        self.retrieve_calls: list[str] = []
        self.sessions: dict[str, CheckoutSession] = {}
        self.error: str | None = None

    async def create_checkout_session(self, params, idempotency_key):
        self.create_calls.append((params, idempotency_key))
        if self.error:
            raise PaymentProviderError(self.error)
        # Same key, same session (what Stripe's idempotency layer does)
        session_id = f"cs_test_{idempotency_key}"
        session = self.sessions.get(session_id) or CheckoutSession(
            id=session_id,
            url=f"https://checkout.stripe.com/c/pay/{session_id}",
            client_reference_id=params["client_reference_id"],
            mode=params["mode"],
            payment_status="unpaid",
            status="open",
            amount_total=params["line_items"][0]["price_data"]["unit_amount"],
            currency=params["line_items"][0]["price_data"]["currency"],
        )
        self.sessions[session_id] = session
        return session

    async def retrieve_checkout_session(self, session_id):
        self.retrieve_calls.append(session_id)
        if self.error:
            raise PaymentProviderError(self.error)
        if session_id not in self.sessions:
            raise PaymentProviderError(f"No such checkout.session: '{session_id}'")
        return self.sessions[session_id]


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


# ── WooCommerce ──────────────────────────────────────────────────────


class FakeWooCommerce:
    """In-memory WooCommerce orders API behind an httpx.MockTransport."""

    def __init__(self):
        self.orders: dict[int, dict] = {}
        self.requests: list[httpx.Request] = []
        self.fail_with: tuple[int, str] | None = None
        self.raise_exc: Exception | None = None
        self.transport = httpx.MockTransport(self._handle)

    def add_order(self, order_id: int, status: str = "pending") -> None:
        self.orders[order_id] = {"id": order_id, "status": status}

    @property
    def puts(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "PUT"]

    @property
    def gets(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_exc is not None:
            raise self.raise_exc
        if self.fail_with is not None:
            code, body = self.fail_with
            return httpx.Response(code, text=body)

        order_id = int(request.url.path.rsplit("/", 1)[-1])
        order = self.orders.get(order_id)
        if order is None:
            return httpx.Response(
                404,
                json={"code": "woocommerce_rest_shop_order_invalid_id", "message": "Invalid ID."},
            )

        if request.method == "PUT":
            order.update(json.loads(request.content))
        return httpx.Response(200, json=order)


@pytest.fixture
def woo() -> FakeWooCommerce:
    return FakeWooCommerce()


@pytest_asyncio.fixture
async def order_backend(settings, woo) -> AsyncGenerator[WooCommerceClient, None]:
    client = WooCommerceClient.from_settings(settings, transport=woo.transport)
    yield client
    await client.aclose()


# ── App / HTTP client ────────────────────────────────────────────────


@pytest.fixture
def app(settings, gateway, order_backend):
    return create_app(settings=settings, gateway=gateway, order_backend=order_backend)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
