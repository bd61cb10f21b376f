# marketplace/api/__init__.py
from fastapi import FastAPI
from marketplace.api.routers import health, users, products, carts, checkout, orders


def include_routers(app: FastAPI) -> FastAPI:
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(checkout.router)
    app.include_router(orders.router)
    return app
