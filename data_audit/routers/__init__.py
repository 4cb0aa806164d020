from fastapi import APIRouter

from data_audit.routers import user

api_router = APIRouter()
api_router.include_router(user.router)

__all__ = ["api_router"]
