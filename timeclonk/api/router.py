"""Top-level API router."""

from fastapi import APIRouter

from timeclonk.api.routes.auth import router as auth_router
from timeclonk.api.routes.health import router as health_router
from timeclonk.api.routes.invoice import router as invoice_router
from timeclonk.api.routes.public import router as public_router
from timeclonk.api.routes.user import router as user_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(user_router)
api_router.include_router(public_router)
api_router.include_router(auth_router)
api_router.include_router(invoice_router)
