"""
Property management API endpoints.
Listings are public to read; creating, editing and deleting require authentication.
"""

from fastapi import APIRouter, Depends, status, Query, Form, File, UploadFile
from typing import Optional, List
from uuid import UUID

from marketplace.models.property import Property
from marketplace.services.authorization import Actor
from marketplace.services.property import PropertyService
from marketplace.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    parse_property_form
)
from marketplace.schemas.error import (
    get_crud_error_responses,
    get_common_error_responses,
    get_error_responses
)
from marketplace.utils.dependencies import get_actor, get_property_service
from marketplace.utils.file_utils import FileValidator


router = APIRouter(prefix="/properties", tags=["Properties"])


def to_response(property_obj: Property) -> PropertyResponse:
    return PropertyResponse.model_validate(property_obj.to_dict(include_owner=True, include_images=True))


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Create a listing owned by the caller, optionally uploading images in the same request",
    responses=get_crud_error_responses()
)
async def create_property(
    title: str = Form(..., description="Property listing title"),
    description: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    bedrooms: Optional[str] = Form(None),
    bathrooms: Optional[str] = Form(None),
    area: Optional[str] = Form(None),
    property_status: Optional[str] = Form(None, alias="status"),
    images: Optional[List[UploadFile]] = File(None, description="Image files to attach"),
    actor: Actor = Depends(get_actor),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Create a new property listing.

    Raises:
        ValidationError: If property data or an image is invalid
    """
    property_data = parse_property_form(
        PropertyCreate,
        title=title,
        description=description,
        address=address,
        price=price,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        area=area,
        status=property_status
    )
    uploads = await FileValidator.validate_upload_files(images)

    property_obj = await property_service.create_property(
        property_data.model_dump(exclude_none=True),
        actor,
        images=uploads
    )
    return to_response(property_obj)


@router.get(
    "",
    response_model=List[PropertyResponse],
    summary="List properties",
    description="All listings, newest first"
)
async def list_properties(
    skip: int = Query(0, ge=0, description="Number of listings to skip"),
    limit: int = Query(100, ge=1, le=500, description="Maximum number of listings"),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    properties = await property_service.list_properties(skip=skip, limit=limit)
    return [to_response(p) for p in properties]


@router.get(
    "/featured",
    response_model=List[PropertyResponse],
    summary="Featured properties",
    description="Up to six newest available listings"
)
async def featured_properties(
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    return [to_response(p) for p in await property_service.get_featured_properties()]


@router.get(
    "/mine",
    response_model=List[PropertyResponse],
    summary="My properties",
    responses=get_common_error_responses()
)
async def my_properties(
    actor: Actor = Depends(get_actor),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    return [to_response(p) for p in await property_service.get_user_properties(actor)]


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get property details",
    responses=get_error_responses(404, 422)
)
async def get_property(
    property_id: UUID,
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    return to_response(await property_service.get_property(property_id))


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update property",
    description="Update listing fields and optionally attach more images",
    responses=get_crud_error_responses()
)
async def update_property(
    property_id: UUID,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    bedrooms: Optional[str] = Form(None),
    bathrooms: Optional[str] = Form(None),
    area: Optional[str] = Form(None),
    property_status: Optional[str] = Form(None, alias="status"),
    images: Optional[List[UploadFile]] = File(None, description="Additional image files"),
    actor: Actor = Depends(get_actor),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Update a property listing.

    Raises:
        PropertyNotFoundError: If the property does not exist
        InsufficientPermissionsError: If the caller may not edit it
        ValidationError: If property data or an image is invalid
    """
    property_data = parse_property_form(
        PropertyUpdate,
        title=title,
        description=description,
        address=address,
        price=price,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        area=area,
        status=property_status
    )
    uploads = await FileValidator.validate_upload_files(images)

    property_obj = await property_service.update_property(
        property_id,
        property_data.model_dump(exclude_none=True),
        actor,
        images=uploads
    )
    return to_response(property_obj)


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete property",
    description="Delete a listing together with its requests, images and image files",
    responses=get_crud_error_responses()
)
async def delete_property(
    property_id: UUID,
    actor: Actor = Depends(get_actor),
    property_service: PropertyService = Depends(get_property_service)
) -> None:
    await property_service.delete_property(property_id, actor)
