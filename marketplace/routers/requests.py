"""
Property request API endpoints.
Users file requests against listings; owners and admins move them through their statuses.
"""

from fastapi import APIRouter, Depends, status
from typing import List
from uuid import UUID

from marketplace.models.request import PropertyRequest
from marketplace.services.authorization import Actor
from marketplace.services.request import RequestService
from marketplace.schemas.request import RequestCreate, RequestStatusUpdate, RequestResponse
from marketplace.schemas.error import get_crud_error_responses, get_common_error_responses
from marketplace.utils.dependencies import get_actor, get_request_service


router = APIRouter(prefix="/requests", tags=["Requests"])


def to_response(request: PropertyRequest) -> RequestResponse:
    return RequestResponse.model_validate(request.to_dict(include_property=True))


@router.post(
    "",
    response_model=RequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="File a request",
    description="Express interest in a property. New requests start as Pending.",
    responses=get_crud_error_responses()
)
async def create_request(
    request_data: RequestCreate,
    actor: Actor = Depends(get_actor),
    request_service: RequestService = Depends(get_request_service)
) -> RequestResponse:
    request = await request_service.create_request(
        request_data.property_id,
        actor.id,
        request_data.notes
    )
    return to_response(request)


@router.get(
    "",
    response_model=List[RequestResponse],
    summary="My requests",
    description="Requests filed by the caller, newest first. Admins see every request.",
    responses=get_common_error_responses()
)
async def list_my_requests(
    actor: Actor = Depends(get_actor),
    request_service: RequestService = Depends(get_request_service)
) -> List[RequestResponse]:
    return [to_response(r) for r in await request_service.list_requests(actor)]


@router.get(
    "/received",
    response_model=List[RequestResponse],
    summary="Requests on my properties",
    responses=get_common_error_responses()
)
async def list_received_requests(
    actor: Actor = Depends(get_actor),
    request_service: RequestService = Depends(get_request_service)
) -> List[RequestResponse]:
    return [to_response(r) for r in await request_service.list_property_requests(actor)]


@router.get(
    "/{request_id}",
    response_model=RequestResponse,
    summary="Request details",
    responses=get_common_error_responses()
)
async def get_request(
    request_id: UUID,
    actor: Actor = Depends(get_actor),
    request_service: RequestService = Depends(get_request_service)
) -> RequestResponse:
    return to_response(await request_service.get_request(request_id, actor))


@router.patch(
    "/{request_id}/status",
    response_model=RequestResponse,
    summary="Update request status",
    description="Property owner or admin only",
    responses=get_crud_error_responses()
)
async def update_request_status(
    request_id: UUID,
    status_data: RequestStatusUpdate,
    actor: Actor = Depends(get_actor),
    request_service: RequestService = Depends(get_request_service)
) -> RequestResponse:
    request = await request_service.update_request_status(request_id, status_data.status, actor)
    return to_response(request)


@router.delete(
    "/{request_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete request",
    description="Requester or admin only",
    responses=get_crud_error_responses()
)
async def delete_request(
    request_id: UUID,
    actor: Actor = Depends(get_actor),
    request_service: RequestService = Depends(get_request_service)
) -> None:
    await request_service.delete_request(request_id, actor)
