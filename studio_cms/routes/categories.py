"""
CMS routes for portfolio categories.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from studio_cms.models import ImageCategory
from studio_cms.schemas import ImageCategoryCreate, ImageCategoryResponse
from studio_cms.services.lifecycle import delete_category
from studio_cms.services.row_store import RowStore, get_row_store
from studio_cms.utils.jwt_auth import verify_cms_token

router = APIRouter(prefix="/cms/categories", dependencies=[Depends(verify_cms_token)])


@router.get("", response_model=List[ImageCategoryResponse])
async def list_categories(store: RowStore = Depends(get_row_store)):
    categories = await store.select(ImageCategory, order_by=ImageCategory.name.asc())
    return [ImageCategoryResponse.model_validate(category) for category in categories]


@router.post("", response_model=ImageCategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(payload: ImageCategoryCreate, store: RowStore = Depends(get_row_store)):
    if await store.count(ImageCategory, ImageCategory.name == payload.name):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "Category already exists", "detail": f"Category '{payload.name}' already exists"}
        )
    category = await store.insert(ImageCategory, payload.model_dump())
    return ImageCategoryResponse.model_validate(category)


@router.delete("/{category_id}")
async def delete_cms_category(category_id: str, store: RowStore = Depends(get_row_store)):
    """Delete a category. Its images stay in the portfolio, uncategorised."""
    detached = await delete_category(store, category_id)
    return {"message": "Category deleted successfully", "category_id": category_id, "images_detached": detached}
