"""
Stripe Webhook Service

Handles:
    1. Duplicate delivery detection (event id cache)
    2. Dispatch on event type
    3. checkout.session.completed → WooCommerce order → processing

Signature verification happens before this module is reached (see
payment_gateway.StripeGateway.construct_event); everything here works on an
already-authenticated event dict.

Failure policy: once an event is authentic, the webhook is always
acknowledged. WooCommerce errors are logged with the order id for manual
reconciliation instead of being raised. The event id is released again on
such an error, so resending the event from the Stripe dashboard retries it.
"""
import logging

from domain.constants import SETTLED_ORDER_STATUSES
from domain.enums import CheckoutMode, OrderStatus, PaymentStatus, StripeEventType
from exceptions import OrderBackendError
from services.event_cache import ProcessedEventCache
from services.order_backend import WooCommerceClient
from utils.validators import parse_order_reference

logger = logging.getLogger(__name__)


async def process_event(
    event: dict,
    orders: WooCommerceClient,
    event_cache: ProcessedEventCache | None = None,
) -> dict:
    """
    Process a verified Stripe event.

    Returns:
        dict describing what happened, e.g. {"status": "updated", "orderId": 123}
    """
    event_id = event.get("id")
    event_type = event.get("type", "")

    if event_cache is not None and event_id and not event_cache.mark(event_id):
        logger.info(f"[Webhook] duplicate event {event_id} ({event_type}) ignored")
        return {"status": "duplicate"}

    obj = (event.get("data") or {}).get("object") or {}

    if event_type == StripeEventType.CHECKOUT_SESSION_COMPLETED:
        result = await handle_session_completed(obj, orders)
        if result["status"] == "backend_error" and event_cache is not None and event_id:
            # Let a dashboard resend of this event reach WooCommerce again
            event_cache.discard(event_id)
        return result

    if event_type == StripeEventType.CHECKOUT_SESSION_EXPIRED:
        logger.info(f"[Webhook] expired order: {obj.get('client_reference_id')}")
        return {"status": "expired", "orderId": obj.get("client_reference_id")}

    logger.debug(f"[Webhook] event type ignored: {event_type}")
    return {"status": "ignored", "reason": f"unhandled_type_{event_type}"}


async def handle_session_completed(session: dict, orders: WooCommerceClient) -> dict:
    """
    Move the session's order to processing, at most once.

    Guard (skip, not error): order id must be a positive integer, the
    session must be a one-time payment, and it must be paid.
    """
    order_id = parse_order_reference(session.get("client_reference_id"))
    mode = session.get("mode")
    payment_status = session.get("payment_status")

    if (
        order_id is None
        or mode != CheckoutMode.PAYMENT
        or payment_status != PaymentStatus.PAID
    ):
        logger.info(
            f"[Webhook] guard skipped: orderId={session.get('client_reference_id')!r} "
            f"mode={mode} pay={payment_status}"
        )
        return {"status": "skipped"}

    try:
        current = await orders.get_order(order_id)
        current_status = str(current.get("status") or "")
        if current_status in SETTLED_ORDER_STATUSES:
            logger.info(f"[Webhook] Woo order {order_id} already {current_status}")
            return {"status": "unchanged", "orderId": order_id, "orderStatus": current_status}

        # Not atomic with the read above: two workers handling a duplicate
        # delivery at the same moment can both PUT. Setting the same
        # status twice is harmless.
        await orders.update_order_status(order_id, OrderStatus.PROCESSING.value)
        logger.info(f"[Webhook] Woo order {order_id} -> processing (was {current_status or 'unknown'})")
        return {"status": "updated", "orderId": order_id}

    except OrderBackendError as e:
        logger.error(f"[Webhook Error] Woo update failed for order {order_id} ({e.operation}): {e}")
        return {"status": "backend_error", "orderId": order_id}
