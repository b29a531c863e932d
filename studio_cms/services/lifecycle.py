"""
Media lifecycle for image-bearing records.

Cloudinary assets are only ever destroyed as a side effect of their owning row
being updated or deleted. The row store is authoritative: its failures abort
the operation and propagate, while asset cleanup is best-effort and only
logged.
"""
from dataclasses import dataclass
from typing import Dict, List, Sequence
import logging

from studio_cms.errors import RowStoreError
from studio_cms.models import ImageCategory, PortfolioImage, Service
from studio_cms.services.cloudinary_service import MediaHost, resource_keys
from studio_cms.services.row_store import RowStore

logger = logging.getLogger(__name__)

# Columns holding Cloudinary URLs, per table. List-valued columns hold URL arrays.
HERO_IMAGE_ASSETS = ("url", "thumbnail_url")
ABOUT_US_ASSETS = ("image_url",)
PORTFOLIO_IMAGE_ASSETS = ("image_url", "thumbnail_url")
SERVICE_ASSETS = ("image", "gallery_images", "page_gallery_images")


@dataclass
class CascadeResult:
    service_id: str
    children_deleted: int
    assets_requested: int
    assets_deleted: int


def asset_urls(row, fields: Sequence[str]) -> List[str]:
    """Collect every non-empty URL stored in the given columns of a row."""
    urls = []
    for field in fields:
        value = getattr(row, field, None)
        if not value:
            continue
        if isinstance(value, (list, tuple)):
            urls.extend(url for url in value if url)
        else:
            urls.append(value)
    return urls


def stale_asset_urls(current: Dict[str, object], patch: Dict[str, object]) -> List[str]:
    """
    URLs referenced by `current` that `patch` replaces or drops.

    Only fields present in the patch are considered. For URL lists, entries
    kept in the new list are not stale.
    """
    stale = []
    for field, old_value in current.items():
        if field not in patch or not old_value:
            continue
        new_value = patch[field]
        if isinstance(old_value, (list, tuple)):
            kept = set(new_value or [])
            stale.extend(url for url in old_value if url and url not in kept)
        elif old_value != new_value:
            stale.append(old_value)
    return stale


async def _cleanup(media: MediaHost, keys: Sequence[str], context: str) -> int:
    if not keys:
        return 0
    deleted = await media.delete_many_assets(keys)
    logger.info(f"Asset cleanup for {context}: {deleted} of {len(keys)} asset(s) deleted")
    return deleted


async def delete_record_with_assets(
    store: RowStore,
    media: MediaHost,
    model,
    row_id: str,
    asset_fields: Sequence[str],
) -> int:
    """
    Delete a row and, best-effort, the Cloudinary assets it references.

    URLs are captured before the row is removed; the assets are deleted
    first and the row afterwards, whatever the cleanup outcome.

    Returns:
        int: Number of assets deleted
    """
    row = await store.require(model, row_id)
    urls = asset_urls(row, asset_fields)

    deleted = await _cleanup(media, resource_keys(urls), f"{model.__tablename__} {row_id}")
    await store.delete(model, row_id)
    return deleted


async def update_record_with_assets(
    store: RowStore,
    media: MediaHost,
    model,
    row_id: str,
    patch: dict,
    asset_fields: Sequence[str],
):
    """
    Apply a patch to a row, then delete the assets it no longer references.

    The row write happens first so a failed update never leaves the row
    pointing at a destroyed asset.

    Returns:
        The updated row
    """
    row = await store.require(model, row_id)
    # Snapshot before the update; store.update mutates this same ORM instance
    current = {}
    for field in asset_fields:
        value = getattr(row, field)
        current[field] = list(value) if isinstance(value, list) else value

    updated = await store.update(model, row_id, patch)

    stale = stale_asset_urls(current, patch)
    await _cleanup(media, resource_keys(stale), f"{model.__tablename__} {row_id} update")
    return updated


async def update_portfolio_image(store: RowStore, media: MediaHost, image_id: str, patch: dict):
    """
    Update a portfolio image.

    Replacing image_url without saying anything about thumbnail_url makes
    the old thumbnail stale: it is cleared on the row and deleted as well.
    """
    patch = dict(patch)
    if "image_url" in patch and "thumbnail_url" not in patch:
        row = await store.require(PortfolioImage, image_id)
        if row.thumbnail_url and patch["image_url"] != row.image_url:
            patch["thumbnail_url"] = None

    return await update_record_with_assets(
        store, media, PortfolioImage, image_id, patch, PORTFOLIO_IMAGE_ASSETS
    )


async def delete_service(store: RowStore, media: MediaHost, service_id: str) -> CascadeResult:
    """
    Delete a service together with everything it owns.

    Steps, strictly in order:
        1. Load the service and its portfolio images
        2. Best-effort delete of every child's image and thumbnail
        3. Delete all child rows (then verify none remain)
        4. Best-effort delete of the service's own image and gallery lists
        5. Delete the service row

    Args:
        store: Row store handle
        media: Cloudinary handle
        service_id: Id of the service to delete

    Returns:
        CascadeResult: Counts of rows and assets removed

    Raises:
        RowNotFoundError: If the service does not exist
        RowStoreError: If any row read or delete fails. A failure at step 3
            leaves the service row in place.
    """
    service = await store.require(Service, service_id)
    service_urls = asset_urls(service, SERVICE_ASSETS)
    children = await store.select(PortfolioImage, PortfolioImage.service_id == service_id)

    child_urls = []
    for child in children:
        child_urls.extend(asset_urls(child, PORTFOLIO_IMAGE_ASSETS))
    child_keys = resource_keys(child_urls)
    # A URL shared with a child is only requested once
    service_keys = [key for key in resource_keys(service_urls) if key not in child_keys]
    assets_requested = len(child_keys) + len(service_keys)

    assets_deleted = await _cleanup(media, child_keys, f"portfolio images of service {service_id}")

    children_deleted = await store.delete_where(PortfolioImage, PortfolioImage.service_id == service_id)
    remaining = await store.count(PortfolioImage, PortfolioImage.service_id == service_id)
    if remaining:
        raise RowStoreError(
            f"{remaining} portfolio image(s) of service {service_id} still exist; service not deleted",
            code="cascade_incomplete",
        )

    assets_deleted += await _cleanup(media, service_keys, f"service {service_id}")

    await store.delete(Service, service_id)

    logger.info(
        f"Deleted service {service_id} with {children_deleted} portfolio image(s); "
        f"{assets_deleted} of {assets_requested} asset(s) removed from Cloudinary"
    )
    return CascadeResult(
        service_id=service_id,
        children_deleted=children_deleted,
        assets_requested=assets_requested,
        assets_deleted=assets_deleted,
    )


async def delete_category(store: RowStore, category_id: str) -> int:
    """
    Delete a category after detaching its portfolio images.

    Images are kept; their category_id is cleared.

    Returns:
        int: Number of images detached
    """
    await store.require(ImageCategory, category_id)
    detached = await store.update_where(
        PortfolioImage, {"category_id": None}, PortfolioImage.category_id == category_id
    )
    await store.delete(ImageCategory, category_id)
    logger.info(f"Deleted category {category_id}, detached {detached} image(s)")
    return detached
