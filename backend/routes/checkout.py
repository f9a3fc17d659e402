"""
Checkout Routes

Endpoints:
    POST /api/create-checkout    — Create a Checkout Session (X-API-Key required)
    GET  /api/checkout-status    — Session status for the success page
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import ValidationError as PydanticValidationError

from config import Settings
from deps import get_gateway, get_settings
from domain.constants import ERR_BAD_INPUT, ERR_MISSING_CS
from domain.errors import DomainError, UpstreamError, ValidationError
from domain.responses import (
    CheckoutStatusResponse,
    CreateCheckoutRequest,
    CreateCheckoutResponse,
)
from exceptions import PaymentProviderError
from middleware.auth import require_internal_api_key
from services import checkout_service
from services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["checkout"])


async def _read_json_body(request: Request) -> dict:
    """Parse the body as a JSON object; anything else counts as empty."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


@router.post(
    "/create-checkout",
    response_model=CreateCheckoutResponse,
    dependencies=[Depends(require_internal_api_key)],
)
async def create_checkout(
    request: Request,
    gateway: PaymentGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    """
    Create a Checkout Session for a WooCommerce order.

    Body: {"orderId": int, "amountJpy": int}. Inputs are validated before
    anything is sent to Stripe.
    """
    body = await _read_json_body(request)
    try:
        req = CreateCheckoutRequest.model_validate(body)
    except PydanticValidationError as e:
        logger.info(f"[create-checkout] bad input: {e.error_count()} error(s)")
        raise ValidationError(ERR_BAD_INPUT)

    try:
        session = await checkout_service.create_checkout(
            order_id=req.order_id,
            amount=req.amount_jpy,
            gateway=gateway,
            settings=settings,
        )
    except PaymentProviderError as e:
        raise UpstreamError(str(e) or "FAILED")

    return CreateCheckoutResponse(url=session.url, sessionId=session.id)


@router.get("/checkout-status", response_model=CheckoutStatusResponse)
async def checkout_status(
    cs: Optional[str] = Query(None, description="Checkout Session id"),
    gateway: PaymentGateway = Depends(get_gateway),
):
    """Republish a session's payment state (read-only)."""
    if not cs:
        raise ValidationError(ERR_MISSING_CS)

    try:
        result = await checkout_service.get_checkout_status(cs, gateway)
    except PaymentProviderError as e:
        raise DomainError(str(e), status_code=status.HTTP_400_BAD_REQUEST)

    return CheckoutStatusResponse(**result)
