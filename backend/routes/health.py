"""
Health check endpoint.
"""
from fastapi import APIRouter, status
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK, response_class=PlainTextResponse)
async def health_check():
    """Liveness probe for the load balancer; does not call Stripe or WooCommerce."""
    return "ok"
