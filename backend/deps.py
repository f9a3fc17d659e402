"""
Shared FastAPI dependencies.

Components are built once in main.create_app() and stored on app.state;
these helpers hand them to routers without any module-level globals.
"""

from __future__ import annotations

from fastapi import Request

from config import Settings
from services.event_cache import ProcessedEventCache
from services.order_backend import WooCommerceClient
from services.payment_gateway import PaymentGateway


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.gateway


def get_order_backend(request: Request) -> WooCommerceClient:
    return request.app.state.order_backend


def get_event_cache(request: Request) -> ProcessedEventCache:
    return request.app.state.event_cache
