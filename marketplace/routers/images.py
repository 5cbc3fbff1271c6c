"""
Image management API endpoints.
Handles image upload, listing and deletion for a property.
"""

from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, File, UploadFile, status

from marketplace.services.authorization import Actor
from marketplace.services.image import ImageService
from marketplace.schemas.image import PropertyImageResponse, ImageUploadResponse
from marketplace.schemas.error import get_crud_error_responses, get_error_responses
from marketplace.utils.dependencies import get_actor, get_image_service
from marketplace.utils.file_utils import FileValidator

router = APIRouter(prefix="/properties/{property_id}/images", tags=["Images"])


@router.post(
    "",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload images for property",
    description="Upload one or more JPEG, PNG or WebP files. Allowed for whoever may edit the property.",
    responses=get_crud_error_responses()
)
async def upload_property_images(
    property_id: UUID,
    files: List[UploadFile] = File(..., description="Image files to upload"),
    actor: Actor = Depends(get_actor),
    image_service: ImageService = Depends(get_image_service)
) -> ImageUploadResponse:
    uploads = await FileValidator.validate_upload_files(files)
    images = await image_service.upload_images(property_id, uploads, actor)

    return ImageUploadResponse(
        success=True,
        message=f"Uploaded {len(images)} image(s)",
        images=[PropertyImageResponse.model_validate(image.to_dict()) for image in images]
    )


@router.get(
    "",
    response_model=List[PropertyImageResponse],
    summary="List property images",
    responses=get_error_responses(404)
)
async def list_property_images(
    property_id: UUID,
    image_service: ImageService = Depends(get_image_service)
) -> List[PropertyImageResponse]:
    images = await image_service.get_property_images(property_id)
    return [PropertyImageResponse.model_validate(image.to_dict()) for image in images]


@router.delete(
    "/{image_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete image",
    description="Remove one image of a property along with its stored file",
    responses=get_crud_error_responses()
)
async def delete_property_image(
    property_id: UUID,
    image_id: UUID,
    actor: Actor = Depends(get_actor),
    image_service: ImageService = Depends(get_image_service)
) -> None:
    await image_service.delete_image(image_id, property_id, actor)
