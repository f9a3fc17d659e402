"""
Checkout Service

Handles:
    1. Checkout Session creation for a WooCommerce order
    2. Status lookup for the storefront success page

The storefront (a WordPress mu-plugin) calls create-checkout with an order
id and a JPY amount, then redirects the shopper to the returned URL.
Stripe sends the shopper back to APP_BASE_URL/payment/success with the
session id substituted into the cs= parameter.
"""
import logging
import time

from config import Settings
from domain.constants import (
    CANCEL_PATH,
    IDEMPOTENCY_KEY_PREFIX,
    SESSION_ID_PLACEHOLDER,
    SUCCESS_PATH,
)
from domain.enums import CheckoutMode
from exceptions import PaymentProviderError
from services.payment_gateway import CheckoutSession, PaymentGateway

logger = logging.getLogger(__name__)


def idempotency_key_for(order_id: int) -> str:
    """Idempotency key for an order: `order-<id>`."""
    return f"{IDEMPOTENCY_KEY_PREFIX}{order_id}"


def build_session_params(
    order_id: int,
    amount: int,
    settings: Settings,
    now: float | None = None,
) -> dict:
    """
    Build Checkout Session parameters for a single-item, one-time payment.

    Args:
        order_id: WooCommerce order id (already validated > 0)
        amount: Amount in the smallest currency unit (already validated > 0)
        settings: App settings (base URL, currency, expiry horizon)
        now: Unix time override for tests

    Returns:
        dict ready for stripe.checkout.Session.create
    """
    base = settings.app_base_url
    created_at = int(now if now is not None else time.time())

    return {
        "mode": CheckoutMode.PAYMENT.value,
        "line_items": [
            {
                "price_data": {
                    "currency": settings.checkout_currency,
                    "product_data": {"name": f"Order #{order_id}"},
                    "unit_amount": amount,
                },
                "quantity": 1,
            }
        ],
        "success_url": f"{base}{SUCCESS_PATH}?order={order_id}&cs={SESSION_ID_PLACEHOLDER}",
        "cancel_url": f"{base}{CANCEL_PATH}?order={order_id}",
        "client_reference_id": str(order_id),
        "expires_at": created_at + settings.checkout_expires_hours * 60 * 60,
    }


async def create_checkout(
    order_id: int,
    amount: int,
    gateway: PaymentGateway,
    settings: Settings,
) -> CheckoutSession:
    """
    Create (or, on retry, re-fetch) the Checkout Session for an order.

    Raises:
        PaymentProviderError if Stripe rejects the request
    """
    params = build_session_params(order_id, amount, settings)
    key = idempotency_key_for(order_id)

    try:
        session = await gateway.create_checkout_session(params, key)
    except PaymentProviderError as e:
        logger.error(f"  ❌ [create-checkout] order={order_id} amount={amount}: {e}")
        raise

    logger.info(
        f"  💳 Checkout session {session.id} for order {order_id} "
        f"({amount} {settings.checkout_currency.upper()})"
    )
    return session


async def get_checkout_status(session_id: str, gateway: PaymentGateway) -> dict:
    """
    Look up a session for the success page.

    Returns:
        dict with orderId, amount, currency, payment_status, status
    """
    try:
        session = await gateway.retrieve_checkout_session(session_id)
    except PaymentProviderError as e:
        logger.error(f"  [checkout-status] {session_id}: {e}")
        raise

    return {
        "orderId": session.client_reference_id,
        "amount": session.amount_total,
        "currency": session.currency,
        "payment_status": session.payment_status,
        "status": session.status,
    }
