# manage_backend/adapters/inbound/api/v1/endpoints/public_endpoint.py

from fastapi import APIRouter, Depends, Path
from fastapi_pagination import Page, Params

from manage_backend.adapters.inbound.api.deps import get_user_service
from manage_backend.application.dtos.user_dto import PublicUserOutput
from manage_backend.application.use_cases.user_use_cases import AsyncUserService
from manage_backend.shared.utils.pagination import pagination_params

router = APIRouter()


@router.get(
    "/users",
    response_model=Page[PublicUserOutput],
    summary="Public Users - Paginated list without login",
    description="Page size is capped at 50.",
)
async def list_public_users(
        params: Params = Depends(pagination_params),
        service: AsyncUserService = Depends(get_user_service),
):
    return await service.list_public_users(params)


@router.get(
    "/users/{user_id}",
    response_model=PublicUserOutput,
    summary="Public User - Basic user data without login",
)
async def get_public_user(
        user_id: int = Path(..., ge=1, description="ID of the user"),
        service: AsyncUserService = Depends(get_user_service),
):
    return await service.get_public_user(user_id)
