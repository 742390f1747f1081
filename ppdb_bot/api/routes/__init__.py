from fastapi import APIRouter

from ppdb_bot.api.routes.health import router as health_router
from ppdb_bot.api.routes.whatsapp import router as whatsapp_router
from ppdb_bot.api.routes.dashboard import router as dashboard_router

api_router = APIRouter()

# Public / health
api_router.include_router(health_router, tags=["health"])
api_router.include_router(whatsapp_router, tags=["whatsapp"])

# Operator dashboard
api_router.include_router(dashboard_router)
