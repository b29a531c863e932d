"""
CMS routes for the services catalog.
Deleting a service cascades to its portfolio images and Cloudinary assets.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
import logging

from studio_cms.errors import RowNotFoundError, RowStoreError
from studio_cms.models import Service
from studio_cms.schemas import (
    ReorderRequest,
    ReorderResponse,
    ServiceCreate,
    ServiceDeleteResponse,
    ServiceResponse,
    ServiceUpdate,
)
from studio_cms.services.cloudinary_service import MediaHost, get_media_host
from studio_cms.services.lifecycle import SERVICE_ASSETS, delete_service, update_record_with_assets
from studio_cms.services.order_service import next_order, reorder_siblings
from studio_cms.services.row_store import RowStore, get_row_store
from studio_cms.utils.jwt_auth import verify_cms_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cms/services", dependencies=[Depends(verify_cms_token)])


@router.get("", response_model=List[ServiceResponse])
async def list_services(store: RowStore = Depends(get_row_store)):
    """Get all services ordered by display order."""
    services = await store.select(Service, order_by=Service.order.asc())
    logger.info(f"Retrieved {len(services)} services for CMS")
    return [ServiceResponse.model_validate(service) for service in services]


@router.get("/slug/{slug}", response_model=ServiceResponse)
async def get_service_by_slug(slug: str, store: RowStore = Depends(get_row_store)):
    """Get a service by its URL slug."""
    services = await store.select(Service, Service.slug == slug, limit=1)
    if not services:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Service not found", "detail": f"No service with slug '{slug}'"}
        )
    return ServiceResponse.model_validate(services[0])


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(service_id: str, store: RowStore = Depends(get_row_store)):
    """Get a service by ID."""
    return ServiceResponse.model_validate(await store.require(Service, service_id))


@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(payload: ServiceCreate, store: RowStore = Depends(get_row_store)):
    """
    Create a new service.

    Raises:
        HTTPException: 409 if the slug is already taken
    """
    if await store.count(Service, Service.slug == payload.slug):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "Slug already in use", "detail": f"A service with slug '{payload.slug}' already exists"}
        )

    values = payload.model_dump()
    if values["order"] is None:
        values["order"] = await next_order(store, Service)

    service = await store.insert(Service, values)
    return ServiceResponse.model_validate(service)


@router.put("/reorder", response_model=ReorderResponse)
async def reorder_services(request: ReorderRequest, store: RowStore = Depends(get_row_store)):
    """
    Move one service onto another's position and re-sequence all services.

    Returns:
        ReorderResponse: Order updates computed, applied count and failed ids
    """
    updates, result = await reorder_siblings(store, Service, request.moved_id, request.target_id)
    return ReorderResponse(
        updates=[update._asdict() for update in updates],
        applied=result.applied,
        failed_ids=result.failed_ids,
    )


@router.put("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: str,
    payload: ServiceUpdate,
    store: RowStore = Depends(get_row_store),
    media: MediaHost = Depends(get_media_host),
):
    """
    Update a service.
    Images dropped from `image`, `gallery_images` or `page_gallery_images`
    are deleted from Cloudinary once the row is saved.

    Raises:
        HTTPException: 404 if the service does not exist, 409 on slug conflict
    """
    patch = payload.model_dump(exclude_unset=True)

    if "slug" in patch:
        clash = await store.count(Service, Service.slug == patch["slug"], Service.id != service_id)
        if clash:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"error": "Slug already in use", "detail": f"A service with slug '{patch['slug']}' already exists"}
            )

    service = await update_record_with_assets(store, media, Service, service_id, patch, SERVICE_ASSETS)
    logger.info(f"Updated service {service_id}: {sorted(patch)}")
    return ServiceResponse.model_validate(service)


@router.delete("/{service_id}", response_model=ServiceDeleteResponse)
async def delete_cms_service(
    service_id: str,
    store: RowStore = Depends(get_row_store),
    media: MediaHost = Depends(get_media_host),
):
    """
    Delete a service, its portfolio images and every Cloudinary asset they own.

    Cloudinary failures do not fail the request; row store failures do, and
    leave the service in place if its images could not be removed.

    Args:
        service_id: Service ID to delete
        store: Row store handle (injected by FastAPI dependency)
        media: Cloudinary handle (injected by FastAPI dependency)

    Returns:
        ServiceDeleteResponse: Summary of removed rows and assets

    Raises:
        HTTPException: 404 if the service does not exist, 500 if the row store fails
    """
    try:
        result = await delete_service(store, media, service_id)
    except RowNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Service not found", "detail": f"Service ID {service_id} does not exist"}
        )
    except RowStoreError as e:
        logger.error(f"Error deleting service {service_id}: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to delete service", "detail": e.message}
        )

    return ServiceDeleteResponse(
        message="Service deleted successfully",
        service_id=service_id,
        portfolio_images_deleted=result.children_deleted,
        assets_deleted=result.assets_deleted,
        assets_requested=result.assets_requested,
    )
