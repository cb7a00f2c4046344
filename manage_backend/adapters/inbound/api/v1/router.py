# manage_backend/adapters/inbound/api/v1/router.py

from fastapi import APIRouter

from manage_backend.adapters.inbound.api.v1.endpoints import auth_endpoint, public_endpoint, user_endpoint

api_router = APIRouter()

api_router.include_router(auth_endpoint.router, prefix="/auth", tags=["Auth"])
api_router.include_router(user_endpoint.router, prefix="/users", tags=["User"])
api_router.include_router(public_endpoint.router, prefix="/public", tags=["Public"])
