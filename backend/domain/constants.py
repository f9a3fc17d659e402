"""
Domain constants used across services/routers.
"""

# WooCommerce REST
WC_API_PREFIX = "/wp-json/wc/v3"
USER_AGENT = "checkout-bridge/1.1"

# Statuses that mean payment was already recorded on the order
SETTLED_ORDER_STATUSES = frozenset({"processing", "completed"})

# Stripe Checkout
IDEMPOTENCY_KEY_PREFIX = "order-"
SESSION_ID_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"
SUCCESS_PATH = "/payment/success"
CANCEL_PATH = "/payment/cancel"

# Error codes returned in { "ok": false, "error": ... }
ERR_UNAUTHORIZED = "UNAUTHORIZED"
ERR_BAD_INPUT = "BAD_INPUT"
ERR_MISSING_CS = "MISSING_CS"
ERR_INTERNAL = "INTERNAL_ERROR"
