"""
SQLAlchemy models for the application.
All database models inherit from Base (declarative base).

Rows mirror the tables of the hosted Supabase project. Image-bearing columns
store absolute Cloudinary URLs; the resource key is derived from the URL when
an asset has to be deleted.
"""
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.sql import func

from studio_cms.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class HeroImage(Base):
    """Hero carousel image shown on the landing page."""
    __tablename__ = "hero_images"

    id = Column(String(36), primary_key=True, default=_new_id)
    url = Column(String, nullable=False)
    thumbnail_url = Column(String, nullable=True)
    title = Column(String(200), nullable=True)
    alt = Column(String(200), nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    order = Column(Integer, nullable=False, default=0, index=True)
    is_visible = Column(Boolean, nullable=False, default=True)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class AboutUs(Base):
    """About-us block. Only the first active row is shown publicly."""
    __tablename__ = "about_us"

    id = Column(String(36), primary_key=True, default=_new_id)
    image_url = Column(String, nullable=True)
    image_alt = Column(String(200), nullable=True)
    title = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class Service(Base):
    """
    Service offered by the studio.
    Owns a primary image, two URL lists and, by foreign key, portfolio images.
    """
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=False)
    detailed_description = Column(Text, nullable=True)
    image = Column(String, nullable=True)
    gallery_images = Column(JSON, nullable=True)
    cta_text = Column(String(50), nullable=False, default="SOLICITAR →")
    cta_link = Column(String(200), nullable=True)
    features = Column(JSON, nullable=True)
    pricing = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    order = Column(Integer, nullable=False, default=0, index=True)
    page_title = Column(String(100), nullable=True)
    page_description = Column(String(200), nullable=True)
    page_gallery_images = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class ImageCategory(Base):
    """Portfolio category."""
    __tablename__ = "image_categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class PortfolioImage(Base):
    """Portfolio image, optionally linked to a service and a category."""
    __tablename__ = "portfolio_images"

    id = Column(String(36), primary_key=True, default=_new_id)
    image_url = Column(String, nullable=False)
    thumbnail_url = Column(String, nullable=True)
    title = Column(String(200), nullable=True)
    alt = Column(String(200), nullable=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    featured_order = Column(Integer, nullable=False, default=0)
    order = Column(Integer, nullable=False, default=0, index=True)
    is_visible = Column(Boolean, nullable=False, default=True)
    link_url = Column(String, nullable=True)
    # Deletion of the parent rows is coordinated in services/lifecycle.py
    category_id = Column(String(36), ForeignKey("image_categories.id"), nullable=True, index=True)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class ContactMessage(Base):
    """Message submitted through the public contact form."""
    __tablename__ = "contact_messages"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False)
    phone = Column(String(50), nullable=True)
    message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    response = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    service_type = Column(String(200), nullable=True)
    event_date = Column(String(50), nullable=True)
    how_found_us = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
