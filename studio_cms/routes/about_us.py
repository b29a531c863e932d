"""
CMS routes for the "about us" block.
"""
from fastapi import APIRouter, Depends, status
from typing import List, Optional

from studio_cms.models import AboutUs
from studio_cms.schemas import AboutUsCreate, AboutUsResponse, AboutUsUpdate
from studio_cms.services.cloudinary_service import MediaHost, get_media_host
from studio_cms.services.lifecycle import (
    ABOUT_US_ASSETS,
    delete_record_with_assets,
    update_record_with_assets,
)
from studio_cms.services.order_service import next_order
from studio_cms.services.row_store import RowStore, get_row_store
from studio_cms.utils.jwt_auth import verify_cms_token

router = APIRouter(prefix="/cms/about-us", dependencies=[Depends(verify_cms_token)])


@router.get("", response_model=List[AboutUsResponse])
async def list_about_us(store: RowStore = Depends(get_row_store)):
    rows = await store.select(AboutUs, order_by=AboutUs.order.asc())
    return [AboutUsResponse.model_validate(row) for row in rows]


@router.get("/active", response_model=Optional[AboutUsResponse])
async def get_active_about_us(store: RowStore = Depends(get_row_store)):
    """First active block in display order, or null when none is active."""
    rows = await store.select(AboutUs, AboutUs.is_active.is_(True), order_by=AboutUs.order.asc(), limit=1)
    return AboutUsResponse.model_validate(rows[0]) if rows else None


@router.get("/{row_id}", response_model=AboutUsResponse)
async def get_about_us(row_id: str, store: RowStore = Depends(get_row_store)):
    return AboutUsResponse.model_validate(await store.require(AboutUs, row_id))


@router.post("", response_model=AboutUsResponse, status_code=status.HTTP_201_CREATED)
async def create_about_us(payload: AboutUsCreate, store: RowStore = Depends(get_row_store)):
    values = payload.model_dump()
    if values["order"] is None:
        values["order"] = await next_order(store, AboutUs)

    row = await store.insert(AboutUs, values)
    return AboutUsResponse.model_validate(row)


@router.put("/{row_id}", response_model=AboutUsResponse)
async def update_about_us(
    row_id: str,
    payload: AboutUsUpdate,
    store: RowStore = Depends(get_row_store),
    media: MediaHost = Depends(get_media_host),
):
    row = await update_record_with_assets(
        store, media, AboutUs, row_id, payload.model_dump(exclude_unset=True), ABOUT_US_ASSETS
    )
    return AboutUsResponse.model_validate(row)


@router.delete("/{row_id}")
async def delete_about_us(
    row_id: str,
    store: RowStore = Depends(get_row_store),
    media: MediaHost = Depends(get_media_host),
):
    await delete_record_with_assets(store, media, AboutUs, row_id, ABOUT_US_ASSETS)
    return {"message": "About us entry deleted successfully", "id": row_id}
