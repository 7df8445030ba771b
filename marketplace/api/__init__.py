# marketplace/api/__init__.py
from fastapi import APIRouter

from marketplace.api.routers import health, orders, provider_sets, sets, settings, shop_sets

api_router = APIRouter(prefix="/api")
api_router.include_router(health.router)
api_router.include_router(orders.router)
api_router.include_router(provider_sets.router)
api_router.include_router(shop_sets.router)
api_router.include_router(sets.router)
api_router.include_router(settings.router)
