"""
Admin area API endpoints.
Every route is gated by the admin-area authorization check.
"""

from fastapi import APIRouter, Depends, status
from typing import List
from uuid import UUID

from marketplace.services.admin import AdminService
from marketplace.schemas.admin import (
    DashboardResponse,
    UserDetailsResponse,
    RoleToggleRequest,
    StatisticsResponse
)
from marketplace.schemas.message import MessageResponse
from marketplace.schemas.property import PropertyResponse
from marketplace.schemas.request import RequestResponse
from marketplace.schemas.user import UserResponse
from marketplace.schemas.error import get_auth_error_responses, get_error_responses
from marketplace.utils.dependencies import get_admin_service, require_admin_area


router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin_area)],
    responses=get_auth_error_responses()
)


@router.get("/dashboard", response_model=DashboardResponse, summary="Admin dashboard")
async def dashboard(
    admin_service: AdminService = Depends(get_admin_service)
) -> DashboardResponse:
    return DashboardResponse.model_validate(await admin_service.get_dashboard())


@router.get("/users", response_model=List[UserResponse], summary="List users with roles")
async def list_users(
    admin_service: AdminService = Depends(get_admin_service)
) -> List[UserResponse]:
    return [UserResponse.model_validate(u.to_dict()) for u in await admin_service.list_users()]


@router.get(
    "/users/{user_id}",
    response_model=UserDetailsResponse,
    summary="User details",
    responses=get_error_responses(404)
)
async def user_details(
    user_id: UUID,
    admin_service: AdminService = Depends(get_admin_service)
) -> UserDetailsResponse:
    return UserDetailsResponse.model_validate(await admin_service.get_user_details(user_id))


@router.post(
    "/users/{user_id}/roles",
    response_model=UserResponse,
    summary="Toggle role",
    description="Grant the role if the user lacks it, revoke it otherwise",
    responses=get_error_responses(404, 422)
)
async def toggle_role(
    user_id: UUID,
    role_data: RoleToggleRequest,
    admin_service: AdminService = Depends(get_admin_service)
) -> UserResponse:
    user = await admin_service.toggle_user_role(user_id, role_data.role)
    return UserResponse.model_validate(user.to_dict())


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
    description="Delete a user with their properties, requests, messages and images",
    responses=get_error_responses(404)
)
async def delete_user(
    user_id: UUID,
    admin_service: AdminService = Depends(get_admin_service)
) -> None:
    await admin_service.delete_user(user_id)


@router.get("/properties", response_model=List[PropertyResponse], summary="All properties")
async def all_properties(
    admin_service: AdminService = Depends(get_admin_service)
) -> List[PropertyResponse]:
    properties = await admin_service.list_properties()
    return [PropertyResponse.model_validate(p.to_dict(include_owner=True, include_images=True)) for p in properties]


@router.get("/requests", response_model=List[RequestResponse], summary="All requests")
async def all_requests(
    admin_service: AdminService = Depends(get_admin_service)
) -> List[RequestResponse]:
    requests = await admin_service.list_requests()
    return [RequestResponse.model_validate(r.to_dict(include_property=True, include_user=True)) for r in requests]


@router.get("/messages", response_model=List[MessageResponse], summary="All messages")
async def all_messages(
    admin_service: AdminService = Depends(get_admin_service)
) -> List[MessageResponse]:
    return [MessageResponse.model_validate(m.to_dict()) for m in await admin_service.list_messages()]


@router.get("/statistics", response_model=StatisticsResponse, summary="Statistics")
async def statistics(
    admin_service: AdminService = Depends(get_admin_service)
) -> StatisticsResponse:
    return StatisticsResponse.model_validate(await admin_service.get_statistics())
