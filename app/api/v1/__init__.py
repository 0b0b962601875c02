"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import admin, offers

api_router = APIRouter()

# Include all route modules
api_router.include_router(offers.router, prefix="/offers", tags=["Offers"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
