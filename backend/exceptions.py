"""
Custom exception classes for configuration and upstream operations.
"""


class ConfigurationError(Exception):
    """Raised at startup when required settings are missing or unsafe."""
    pass


class OrderBackendError(Exception):
    """Raised when a WooCommerce REST call fails or times out."""

    def __init__(
        self,
        operation: str,
        order_id: int,
        status_code: int | None = None,
        body: str = "",
    ):
        self.operation = operation
        self.order_id = order_id
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"WooCommerce {operation} {order_id} failed: {body}"
        else:
            message = f"WooCommerce {operation} {order_id} failed: {status_code} {body}"
        super().__init__(message)


class PaymentProviderError(Exception):
    """Raised when a Stripe API call fails."""
    pass


class WebhookSignatureError(Exception):
    """Raised when a webhook payload cannot be authenticated or decoded."""
    pass
