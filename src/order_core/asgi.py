from __future__ import annotations

from fastapi import FastAPI

from order_core.adapters.inbound.web.fastapi_app import create_app
from order_core.bootstrap import build_usecases
from order_core.config import Settings
from order_core.utils.logging import configure_logging


def create_asgi_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings)
    usecases = build_usecases(settings)
    return create_app(
        usecases.calculate_cart,
        usecases.create_order,
        usecases.get_order,
        usecases.change_order_status,
        usecases.apply_coupon,
    )
