"""
API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from restopos.api.endpoints import auth, qr, users

api_router = APIRouter()

# Login, logout, current session
api_router.include_router(auth.router)

# Staff account management
api_router.include_router(users.router)

# Order links / QR codes
api_router.include_router(qr.router)
