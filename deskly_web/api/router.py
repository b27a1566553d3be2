from fastapi import APIRouter

from deskly_web.api.health import router as health_router
from deskly_web.api.users import router as users_router

api_router = APIRouter()

# Include sub-routers
api_router.include_router(health_router, tags=["health"])
api_router.include_router(users_router)
