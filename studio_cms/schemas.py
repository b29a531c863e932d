"""
Pydantic schemas for request and response data validation.
Defines data structures for API endpoints with automatic validation and serialization.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
import re


SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

MessageStatus = Literal["pending", "read", "responded", "archived"]


def _check_http_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not value.startswith(("http://", "https://")):
        raise ValueError("Must be a valid URL")
    return value


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


# Auth

class LoginRequest(BaseModel):
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


# Ordering

class ReorderRequest(BaseModel):
    """
    Drag-and-drop reorder request.
    The record `moved_id` is dropped onto the position of `target_id`.
    """
    moved_id: str
    target_id: str


class OrderUpdateResponse(BaseModel):
    id: str
    order: int


class ReorderResponse(BaseModel):
    updates: List[OrderUpdateResponse]
    applied: int
    failed_ids: List[str] = []


# Hero images

class HeroImageCreate(BaseModel):
    url: str = Field(min_length=1)
    thumbnail_url: Optional[str] = None
    title: Optional[str] = Field(default=None, max_length=200)
    alt: Optional[str] = Field(default=None, min_length=3, max_length=200)
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)
    order: Optional[int] = Field(default=None, ge=0)
    is_visible: bool = True

    validate_urls = field_validator("url", "thumbnail_url")(_check_http_url)


class HeroImageUpdate(BaseModel):
    url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    title: Optional[str] = Field(default=None, max_length=200)
    alt: Optional[str] = Field(default=None, min_length=3, max_length=200)
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)
    order: Optional[int] = Field(default=None, ge=0)
    is_visible: Optional[bool] = None

    validate_urls = field_validator("url", "thumbnail_url")(_check_http_url)


class HeroImageResponse(BaseModel):
    id: str
    url: str
    thumbnail_url: Optional[str] = None
    title: Optional[str] = None
    alt: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    order: int
    is_visible: bool
    uploaded_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# About us

class AboutUsCreate(BaseModel):
    title: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10, max_length=2000)
    image_url: Optional[str] = None
    image_alt: Optional[str] = Field(default=None, max_length=200)
    is_active: bool = True
    order: Optional[int] = Field(default=None, ge=0)


class AboutUsUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, min_length=10, max_length=2000)
    image_url: Optional[str] = None
    image_alt: Optional[str] = Field(default=None, max_length=200)
    is_active: Optional[bool] = None
    order: Optional[int] = Field(default=None, ge=0)


class AboutUsResponse(BaseModel):
    id: str
    image_url: Optional[str] = None
    image_alt: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    order: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Services

class ServiceBase(BaseModel):
    @field_validator("slug", check_fields=False)
    @classmethod
    def validate_slug(cls, v):
        if v is not None and not SLUG_PATTERN.match(v):
            raise ValueError("Slug may only contain lowercase letters, digits and single hyphens, e.g. wedding-photography")
        return v

    @field_validator("image", check_fields=False)
    @classmethod
    def validate_image(cls, v):
        # An empty string clears the image
        if v == "":
            return None
        return _check_http_url(v)


class ServiceCreate(ServiceBase):
    title: str = Field(min_length=3, max_length=200)
    slug: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=20, max_length=2000)
    detailed_description: Optional[str] = Field(default=None, max_length=5000)
    image: Optional[str] = None
    gallery_images: Optional[List[str]] = None
    cta_text: str = Field(default="SOLICITAR →", min_length=2, max_length=50)
    cta_link: Optional[str] = Field(default=None, max_length=200)
    features: Optional[Dict[str, Any]] = None
    pricing: Optional[Dict[str, Any]] = None
    is_active: bool = True
    order: Optional[int] = Field(default=None, ge=0)


class ServiceUpdate(ServiceBase):
    title: Optional[str] = Field(default=None, min_length=3, max_length=200)
    slug: Optional[str] = Field(default=None, min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, min_length=20, max_length=2000)
    detailed_description: Optional[str] = Field(default=None, max_length=5000)
    image: Optional[str] = None
    gallery_images: Optional[List[str]] = None
    cta_text: Optional[str] = Field(default=None, min_length=2, max_length=50)
    cta_link: Optional[str] = Field(default=None, max_length=200)
    features: Optional[Dict[str, Any]] = None
    pricing: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None
    order: Optional[int] = Field(default=None, ge=0)
    page_title: Optional[str] = Field(default=None, max_length=100)
    page_description: Optional[str] = Field(default=None, max_length=200)
    page_gallery_images: Optional[List[str]] = None


class ServiceResponse(BaseModel):
    id: str
    title: str
    slug: str
    description: str
    detailed_description: Optional[str] = None
    image: Optional[str] = None
    gallery_images: Optional[List[str]] = None
    cta_text: str
    cta_link: Optional[str] = None
    features: Optional[Dict[str, Any]] = None
    pricing: Optional[Dict[str, Any]] = None
    is_active: bool
    order: int
    page_title: Optional[str] = None
    page_description: Optional[str] = None
    page_gallery_images: Optional[List[str]] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ServiceDeleteResponse(BaseModel):
    message: str
    service_id: str
    portfolio_images_deleted: int
    assets_deleted: int
    assets_requested: int


# Portfolio images

class PortfolioImageCreate(BaseModel):
    image_url: str = Field(min_length=1)
    thumbnail_url: Optional[str] = None
    title: Optional[str] = Field(default=None, max_length=200)
    alt: Optional[str] = Field(default=None, max_length=200)
    is_featured: bool = False
    featured_order: int = Field(default=0, ge=0)
    order: Optional[int] = Field(default=None, ge=0)
    is_visible: bool = True
    link_url: Optional[str] = None
    category_id: Optional[str] = None
    service_id: Optional[str] = None

    validate_urls = field_validator("image_url", "thumbnail_url")(_check_http_url)


class PortfolioImageBulkCreate(BaseModel):
    images: List[PortfolioImageCreate] = Field(min_length=1)


class PortfolioImageUpdate(BaseModel):
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    title: Optional[str] = Field(default=None, max_length=200)
    alt: Optional[str] = Field(default=None, max_length=200)
    is_featured: Optional[bool] = None
    featured_order: Optional[int] = Field(default=None, ge=0)
    order: Optional[int] = Field(default=None, ge=0)
    is_visible: Optional[bool] = None
    link_url: Optional[str] = None
    category_id: Optional[str] = None
    service_id: Optional[str] = None

    validate_urls = field_validator("image_url", "thumbnail_url")(_check_http_url)


class PortfolioImageResponse(BaseModel):
    id: str
    image_url: str
    thumbnail_url: Optional[str] = None
    title: Optional[str] = None
    alt: Optional[str] = None
    is_featured: bool
    featured_order: int
    order: int
    is_visible: bool
    link_url: Optional[str] = None
    category_id: Optional[str] = None
    service_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Image categories

class ImageCategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Category name cannot be blank")
        return v


class ImageCategoryResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Contact messages

class ContactMessageResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    status: MessageStatus
    responded_at: Optional[datetime] = None
    response: Optional[str] = None
    notes: Optional[str] = None
    service_type: Optional[str] = None
    event_date: Optional[str] = None
    how_found_us: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageStatusUpdate(BaseModel):
    status: MessageStatus
    response: Optional[str] = None
    notes: Optional[str] = None

    strip_text = field_validator("response", "notes")(_blank_to_none)


# Dashboard & uploads

class DashboardStats(BaseModel):
    total_services: int
    total_images: int
    pending_messages: int
    recent_messages: List[ContactMessageResponse]


class UploadResponse(BaseModel):
    url: str
    resource_key: str
    width: Optional[int] = None
    height: Optional[int] = None
