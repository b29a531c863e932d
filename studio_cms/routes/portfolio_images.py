"""
CMS routes for portfolio images.
Images may belong to a service (its gallery) and to a category.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
import logging

from studio_cms.models import ImageCategory, PortfolioImage, Service
from studio_cms.schemas import (
    PortfolioImageBulkCreate,
    PortfolioImageCreate,
    PortfolioImageResponse,
    PortfolioImageUpdate,
    ReorderRequest,
    ReorderResponse,
)
from studio_cms.services.cloudinary_service import MediaHost, get_media_host
from studio_cms.services.lifecycle import (
    PORTFOLIO_IMAGE_ASSETS,
    delete_record_with_assets,
    update_portfolio_image,
)
from studio_cms.services.order_service import next_order, reorder_siblings
from studio_cms.services.row_store import RowStore, get_row_store
from studio_cms.utils.jwt_auth import verify_cms_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cms/portfolio-images", dependencies=[Depends(verify_cms_token)])


def _sibling_criteria(service_id: Optional[str]) -> list:
    # Images of a service form their own sibling set; otherwise the whole portfolio does
    if service_id:
        return [PortfolioImage.service_id == service_id]
    return []


async def _check_references(store: RowStore, service_id: Optional[str], category_id: Optional[str]) -> None:
    if service_id and await store.get(Service, service_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Service not found", "detail": f"Service ID {service_id} does not exist"}
        )
    if category_id and await store.get(ImageCategory, category_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Category not found", "detail": f"Category ID {category_id} does not exist"}
        )


@router.get("", response_model=List[PortfolioImageResponse])
async def list_portfolio_images(
    service_id: Optional[str] = Query(None),
    category_id: Optional[str] = Query(None),
    store: RowStore = Depends(get_row_store),
):
    """
    Get portfolio images ordered by display order.

    Args:
        service_id: Only images attached to this service
        category_id: Only images in this category
    """
    criteria = _sibling_criteria(service_id)
    if category_id:
        criteria.append(PortfolioImage.category_id == category_id)

    images = await store.select(PortfolioImage, *criteria, order_by=PortfolioImage.order.asc())
    logger.info(f"Retrieved {len(images)} portfolio images (service: {service_id}, category: {category_id})")
    return [PortfolioImageResponse.model_validate(image) for image in images]


@router.get("/{image_id}", response_model=PortfolioImageResponse)
async def get_portfolio_image(image_id: str, store: RowStore = Depends(get_row_store)):
    return PortfolioImageResponse.model_validate(await store.require(PortfolioImage, image_id))


@router.post("", response_model=PortfolioImageResponse, status_code=status.HTTP_201_CREATED)
async def create_portfolio_image(payload: PortfolioImageCreate, store: RowStore = Depends(get_row_store)):
    """
    Add one image to the portfolio.
    Without an explicit order the image is appended after its siblings.
    """
    await _check_references(store, payload.service_id, payload.category_id)

    values = payload.model_dump()
    if values["order"] is None:
        values["order"] = await next_order(store, PortfolioImage, *_sibling_criteria(payload.service_id))

    image = await store.insert(PortfolioImage, values)
    return PortfolioImageResponse.model_validate(image)


@router.post("/bulk", response_model=List[PortfolioImageResponse], status_code=status.HTTP_201_CREATED)
async def create_portfolio_images_bulk(payload: PortfolioImageBulkCreate, store: RowStore = Depends(get_row_store)):
    """
    Add several images at once (e.g. a service gallery upload).

    Ordering follows the sibling set of the first image's service; images
    without an explicit order are appended in request order.
    """
    service_id = payload.images[0].service_id
    for image in payload.images:
        await _check_references(store, image.service_id, image.category_id)

    start = await next_order(store, PortfolioImage, *_sibling_criteria(service_id))
    rows = []
    for index, image in enumerate(payload.images):
        values = image.model_dump()
        if values["order"] is None:
            values["order"] = start + index
        rows.append(values)

    created = await store.insert_many(PortfolioImage, rows)
    return [PortfolioImageResponse.model_validate(image) for image in created]


@router.put("/reorder", response_model=ReorderResponse)
async def reorder_portfolio_images(
    request: ReorderRequest,
    service_id: Optional[str] = Query(None, description="Reorder only this service's images"),
    store: RowStore = Depends(get_row_store),
):
    """Move one image onto another's position and re-sequence its sibling set."""
    updates, result = await reorder_siblings(
        store, PortfolioImage, request.moved_id, request.target_id, *_sibling_criteria(service_id)
    )
    return ReorderResponse(
        updates=[update._asdict() for update in updates],
        applied=result.applied,
        failed_ids=result.failed_ids,
    )


@router.put("/{image_id}", response_model=PortfolioImageResponse)
async def update_cms_portfolio_image(
    image_id: str,
    payload: PortfolioImageUpdate,
    store: RowStore = Depends(get_row_store),
    media: MediaHost = Depends(get_media_host),
):
    """
    Update a portfolio image.
    A replaced image (and its thumbnail) is deleted from Cloudinary after the row is saved.
    """
    patch = payload.model_dump(exclude_unset=True)
    await _check_references(store, patch.get("service_id"), patch.get("category_id"))

    image = await update_portfolio_image(store, media, image_id, patch)
    return PortfolioImageResponse.model_validate(image)


@router.delete("/{image_id}")
async def delete_portfolio_image(
    image_id: str,
    store: RowStore = Depends(get_row_store),
    media: MediaHost = Depends(get_media_host),
):
    """Delete a portfolio image with its image and thumbnail assets."""
    assets_deleted = await delete_record_with_assets(
        store, media, PortfolioImage, image_id, PORTFOLIO_IMAGE_ASSETS
    )
    return {"message": "Image deleted successfully", "image_id": image_id, "assets_deleted": assets_deleted}
