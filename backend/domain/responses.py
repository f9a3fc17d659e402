"""
API request/response models and helpers for consistent response formatting.

Envelopes:
- Success: { "ok": true, ... }
- Error: { "ok": false, "error": "<code or message>" }
- Webhook ack: { "received": true }
"""
from typing import Any

from pydantic import BaseModel, Field, field_validator

from utils.validators import parse_positive_int


class CreateCheckoutRequest(BaseModel):
    """Body of POST /api/create-checkout."""
    order_id: int = Field(..., alias="orderId")
    amount_jpy: int = Field(..., alias="amountJpy")

    model_config = {"populate_by_name": True}

    @field_validator("order_id", "amount_jpy", mode="before")
    @classmethod
    def _positive_int(cls, value: Any) -> int:
        return parse_positive_int(value)


class CreateCheckoutResponse(BaseModel):
    ok: bool = True
    url: str | None
    session_id: str = Field(..., alias="sessionId")

    model_config = {"populate_by_name": True}


class CheckoutStatusResponse(BaseModel):
    """Normalized subset of a Checkout Session for the success page."""
    ok: bool = True
    order_id: str | None = Field(None, alias="orderId")
    amount: int | None = None
    currency: str | None = None
    payment_status: str | None = None
    status: str | None = None

    model_config = {"populate_by_name": True}


class WebhookAck(BaseModel):
    received: bool = True


class ErrorResponse(BaseModel):
    ok: bool = Field(False, description="Always false for errors")
    error: str = Field(..., description="Error code or upstream message")


def error_response(message: str) -> dict[str, Any]:
    """
    Create a standardized error payload.

    Returns:
        dict: { "ok": false, "error": <message> }
    """
    return {"ok": False, "error": message}
