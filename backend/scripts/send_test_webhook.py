"""
Send a signed checkout.session.completed event to a running bridge.

Run: python scripts/send_test_webhook.py <order_id> [base_url]
Requires: the same .env as the server (STRIPE_WEBHOOK_SECRET is used to sign)

The order is moved to processing unless it already is processing/completed,
so point this at a staging store.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import hashlib
import hmac
import json
import time
import uuid

import httpx

from config import load_settings


def sign(payload: bytes, secret: str, timestamp: int) -> str:
    """Build a Stripe-Signature header (t=...,v1=...) for the payload."""
    signed = f"{timestamp}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def main() -> int:
    if len(sys.argv) < 2:
        print(__doc__)
        return 2

    order_id = sys.argv[1]
    base = sys.argv[2] if len(sys.argv) > 2 else "http://127.0.0.1:3000"
    settings = load_settings()

    event = {
        "id": f"evt_test_{uuid.uuid4().hex[:16]}",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": f"cs_test_{uuid.uuid4().hex[:16]}",
                "object": "checkout.session",
                "client_reference_id": order_id,
                "mode": "payment",
                "payment_status": "paid",
                "status": "complete",
            }
        },
    }
    payload = json.dumps(event).encode("utf-8")
    header = sign(payload, settings.stripe_webhook_secret, int(time.time()))

    r = httpx.post(
        f"{base}/webhooks/stripe",
        content=payload,
        headers={"Content-Type": "application/json", "Stripe-Signature": header},
        timeout=15,
    )
    print(f"  [{r.status_code}] {r.text}")
    return 0 if r.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
