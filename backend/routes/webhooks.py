"""
Stripe webhook receiver.

    POST /webhooks/stripe

The body is read as raw bytes: the signature covers the exact payload, so
it must not be parsed or re-serialized before verification.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from deps import get_event_cache, get_gateway, get_order_backend
from domain.responses import WebhookAck
from exceptions import WebhookSignatureError
from services import webhook_service
from services.event_cache import ProcessedEventCache
from services.order_backend import WooCommerceClient
from services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/stripe", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    gateway: PaymentGateway = Depends(get_gateway),
    orders: WooCommerceClient = Depends(get_order_backend),
    event_cache: ProcessedEventCache = Depends(get_event_cache),
):
    """
    Verify and handle a Stripe event.

    Returns 400 only when the event cannot be authenticated; every
    authentic event is acknowledged so Stripe stops retrying it.
    """
    payload = await request.body()
    signature = request.headers.get("stripe-signature")

    try:
        event = gateway.construct_event(payload, signature)
    except WebhookSignatureError as e:
        logger.error(f"[Webhook Error] {e}")
        return PlainTextResponse(f"Webhook Error: {e}", status_code=400)

    result = await webhook_service.process_event(event, orders, event_cache)
    logger.debug(f"[Webhook] {event.get('id')} {event.get('type')} -> {result['status']}")

    return WebhookAck()
