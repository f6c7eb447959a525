from fastapi import APIRouter

from stageflow.api.routes import health, scheduling

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(scheduling.router)
