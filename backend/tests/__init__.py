"""
pytest test suite for the Checkout Bridge backend.

Test categories:
- Unit tests: services with a fake Stripe gateway and mock WooCommerce transport
- API tests: full FastAPI app over httpx ASGITransport
- Edge case tests: duplicate webhooks, guard failures, backend outages
"""
