"""API v1 router composition."""

from fastapi import APIRouter

from dailyorders.api.v1.endpoints import menu, orders, stores

api_router: APIRouter = APIRouter()
api_router.include_router(stores.router, prefix="/stores", tags=["stores"])
api_router.include_router(menu.router, prefix="/daily-menus", tags=["daily-menus"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
