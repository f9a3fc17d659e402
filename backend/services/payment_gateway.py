"""
Payment gateway — the only module that talks to Stripe.

Exposes a narrow interface (verify webhook, create session, retrieve session)
so the webhook and checkout services can be exercised without network
calls. Results are translated into plain CheckoutSession dataclasses and
stripe errors into PaymentProviderError / WebhookSignatureError.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Protocol

import stripe

from config import Settings
from exceptions import PaymentProviderError, WebhookSignatureError
from services.async_executor import run_blocking

logger = logging.getLogger(__name__)


@dataclass
class CheckoutSession:
    """
    Subset of a Stripe Checkout Session used by the bridge.

    Attributes:
        id: Session ID (cs_xxx)
        url: Hosted payment page URL (None once the session is closed)
        client_reference_id: Order reference set at creation
        mode: payment / subscription / setup
        payment_status: paid / unpaid / no_payment_required
        status: open / complete / expired
        amount_total: Amount in smallest currency unit
        currency: ISO 4217 code, lowercase
    """

    id: str
    url: str | None = None
    client_reference_id: str | None = None
    mode: str | None = None
    payment_status: str | None = None
    status: str | None = None
    amount_total: int | None = None
    currency: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_stripe(cls, obj: Any) -> "CheckoutSession":
        return cls(
            id=getattr(obj, "id", None),
            url=getattr(obj, "url", None),
            client_reference_id=getattr(obj, "client_reference_id", None),
            mode=getattr(obj, "mode", None),
            payment_status=getattr(obj, "payment_status", None),
            status=getattr(obj, "status", None),
            amount_total=getattr(obj, "amount_total", None),
            currency=getattr(obj, "currency", None),
        )


class PaymentGateway(Protocol):
    def construct_event(self, payload: bytes, signature: str | None) -> dict[str, Any]: ...

    async def create_checkout_session(
        self, params: dict[str, Any], idempotency_key: str
    ) -> CheckoutSession: ...

    async def retrieve_checkout_session(self, session_id: str) -> CheckoutSession: ...


class StripeGateway:
    """PaymentGateway backed by the stripe SDK."""

    def __init__(
        self,
        api_key: str,
        webhook_secret: str,
        tolerance: int | None = None,
        executor: ThreadPoolExecutor | None = None,
    ):
        self._api_key = api_key
        self._executor = executor
        self._webhook_secret = webhook_secret
        self._tolerance = tolerance if tolerance is not None else stripe.Webhook.DEFAULT_TOLERANCE

    @classmethod
    def from_settings(
        cls, settings: Settings, executor: ThreadPoolExecutor | None = None
    ) -> "StripeGateway":
        return cls(
            api_key=settings.stripe_secret_key,
            webhook_secret=settings.stripe_webhook_secret,
            executor=executor,
        )

    # ── Webhooks ────────────────────────────────────────────────────

    def construct_event(self, payload: bytes, signature: str | None) -> dict[str, Any]:
        """
        Verify a webhook's Stripe-Signature header against the raw body.

        The body must be the exact bytes Stripe sent; it is decoded only
        after the signature checks out.

        Raises:
            WebhookSignatureError on a missing/invalid signature or a body
            that is not a JSON event object.
        """
        if not signature:
            raise WebhookSignatureError("No signatures found matching the expected signature for payload")

        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise WebhookSignatureError("Payload is not valid UTF-8") from e

        try:
            stripe.WebhookSignature.verify_header(
                text, signature, self._webhook_secret, self._tolerance
            )
        except stripe.SignatureVerificationError as e:
            raise WebhookSignatureError(str(e.user_message or e)) from e

        try:
            event = json.loads(text)
        except ValueError as e:
            raise WebhookSignatureError(f"Invalid payload: {e}") from e
        if not isinstance(event, dict) or "type" not in event:
            raise WebhookSignatureError("Invalid payload: not a Stripe event")
        return event

    # ── Checkout Sessions ───────────────────────────────────────────

    def _create(self, params: dict[str, Any], idempotency_key: str) -> Any:
        return stripe.checkout.Session.create(
            api_key=self._api_key,
            idempotency_key=idempotency_key,
            **params,
        )

    def _retrieve(self, session_id: str) -> Any:
        return stripe.checkout.Session.retrieve(
            session_id,
            api_key=self._api_key,
            expand=["payment_intent"],
        )

    async def create_checkout_session(
        self, params: dict[str, Any], idempotency_key: str
    ) -> CheckoutSession:
        try:
            session = await run_blocking(self._executor, self._create, params, idempotency_key)
        except stripe.StripeError as e:
            raise PaymentProviderError(e.user_message or str(e)) from e
        return CheckoutSession.from_stripe(session)

    async def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        try:
            session = await run_blocking(self._executor, self._retrieve, session_id)
        except stripe.StripeError as e:
            raise PaymentProviderError(e.user_message or str(e)) from e
        return CheckoutSession.from_stripe(session)
