"""
CMS routes for the hero carousel.
"""
from fastapi import APIRouter, Depends, status
from typing import List
import logging

from studio_cms.models import HeroImage
from studio_cms.schemas import (
    HeroImageCreate,
    HeroImageResponse,
    HeroImageUpdate,
    ReorderRequest,
    ReorderResponse,
)
from studio_cms.services.cloudinary_service import MediaHost, get_media_host
from studio_cms.services.lifecycle import (
    HERO_IMAGE_ASSETS,
    delete_record_with_assets,
    update_record_with_assets,
)
from studio_cms.services.order_service import next_order, reorder_siblings
from studio_cms.services.row_store import RowStore, get_row_store
from studio_cms.utils.jwt_auth import verify_cms_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cms/hero-images", dependencies=[Depends(verify_cms_token)])


@router.get("", response_model=List[HeroImageResponse])
async def list_hero_images(store: RowStore = Depends(get_row_store)):
    """Get all hero images ordered by display order."""
    images = await store.select(HeroImage, order_by=HeroImage.order.asc())
    return [HeroImageResponse.model_validate(image) for image in images]


@router.get("/{image_id}", response_model=HeroImageResponse)
async def get_hero_image(image_id: str, store: RowStore = Depends(get_row_store)):
    return HeroImageResponse.model_validate(await store.require(HeroImage, image_id))


@router.post("", response_model=HeroImageResponse, status_code=status.HTTP_201_CREATED)
async def create_hero_image(payload: HeroImageCreate, store: RowStore = Depends(get_row_store)):
    """
    Register an uploaded image in the hero carousel.
    Without an explicit order the image is appended after the others.
    """
    values = payload.model_dump()
    if values["order"] is None:
        values["order"] = await next_order(store, HeroImage)

    image = await store.insert(HeroImage, values)
    return HeroImageResponse.model_validate(image)


@router.put("/reorder", response_model=ReorderResponse)
async def reorder_hero_images(request: ReorderRequest, store: RowStore = Depends(get_row_store)):
    """Move one hero image onto another's position and re-sequence the carousel."""
    updates, result = await reorder_siblings(store, HeroImage, request.moved_id, request.target_id)
    return ReorderResponse(
        updates=[update._asdict() for update in updates],
        applied=result.applied,
        failed_ids=result.failed_ids,
    )


@router.put("/{image_id}", response_model=HeroImageResponse)
async def update_hero_image(
    image_id: str,
    payload: HeroImageUpdate,
    store: RowStore = Depends(get_row_store),
    media: MediaHost = Depends(get_media_host),
):
    """Update a hero image; replaced image files are removed from Cloudinary."""
    image = await update_record_with_assets(
        store, media, HeroImage, image_id, payload.model_dump(exclude_unset=True), HERO_IMAGE_ASSETS
    )
    return HeroImageResponse.model_validate(image)


@router.delete("/{image_id}")
async def delete_hero_image(
    image_id: str,
    store: RowStore = Depends(get_row_store),
    media: MediaHost = Depends(get_media_host),
):
    """Delete a hero image and its Cloudinary assets."""
    assets_deleted = await delete_record_with_assets(store, media, HeroImage, image_id, HERO_IMAGE_ASSETS)
    logger.info(f"Deleted hero image {image_id}")
    return {"message": "Image deleted successfully", "image_id": image_id, "assets_deleted": assets_deleted}
