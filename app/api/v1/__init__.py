"""
API v1 Router

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import auth, users, telegram, qr

router = APIRouter()

# Include authentication routes
router.include_router(auth.router)

# Include user routes
router.include_router(users.router)

# Include Telegram routes
router.include_router(telegram.router)

# Include QR routes
router.include_router(qr.router)
