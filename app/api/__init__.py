# app/api/__init__.py
from fastapi import FastAPI

from app.api.routers import admin, carts, catalog, health, orders, payments


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront Order Service",
        version="1.0.0",
    )

    app.include_router(health.router)
    app.include_router(catalog.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(payments.router)
    app.include_router(admin.router)

    return app
