"""create_content_tables

Revision ID: 3c9a1e7b52d4
Revises:
Create Date: 2026-10-17 09:12:41.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c9a1e7b52d4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(*names):
    return [
        sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
        for name in names
    ]


def upgrade() -> None:
    op.create_table(
        'hero_images',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('thumbnail_url', sa.String(), nullable=True),
        sa.Column('title', sa.String(200), nullable=True),
        sa.Column('alt', sa.String(200), nullable=True),
        sa.Column('width', sa.Integer(), nullable=True),
        sa.Column('height', sa.Integer(), nullable=True),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_visible', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps('uploaded_at', 'updated_at'),
    )
    op.create_index(op.f('ix_hero_images_order'), 'hero_images', ['order'])

    op.create_table(
        'about_us',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('image_alt', sa.String(200), nullable=True),
        sa.Column('title', sa.String(200), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps('created_at', 'updated_at'),
    )

    op.create_table(
        'services',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('detailed_description', sa.Text(), nullable=True),
        sa.Column('image', sa.String(), nullable=True),
        sa.Column('gallery_images', sa.JSON(), nullable=True),
        sa.Column('cta_text', sa.String(50), nullable=False, server_default='SOLICITAR →'),
        sa.Column('cta_link', sa.String(200), nullable=True),
        sa.Column('features', sa.JSON(), nullable=True),
        sa.Column('pricing', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('page_title', sa.String(100), nullable=True),
        sa.Column('page_description', sa.String(200), nullable=True),
        sa.Column('page_gallery_images', sa.JSON(), nullable=True),
        *_timestamps('created_at', 'updated_at'),
    )
    op.create_index(op.f('ix_services_slug'), 'services', ['slug'], unique=True)
    op.create_index(op.f('ix_services_order'), 'services', ['order'])

    op.create_table(
        'image_categories',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.String(500), nullable=True),
        *_timestamps('created_at'),
    )

    # No ON DELETE rules: deletions are coordinated by the application so
    # that Cloudinary assets can be cleaned up before rows disappear.
    op.create_table(
        'portfolio_images',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('image_url', sa.String(), nullable=False),
        sa.Column('thumbnail_url', sa.String(), nullable=True),
        sa.Column('title', sa.String(200), nullable=True),
        sa.Column('alt', sa.String(200), nullable=True),
        sa.Column('is_featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('featured_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_visible', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('link_url', sa.String(), nullable=True),
        sa.Column('category_id', sa.String(36), sa.ForeignKey('image_categories.id'), nullable=True),
        sa.Column('service_id', sa.String(36), sa.ForeignKey('services.id'), nullable=True),
        *_timestamps('created_at', 'updated_at'),
    )
    op.create_index(op.f('ix_portfolio_images_order'), 'portfolio_images', ['order'])
    op.create_index(op.f('ix_portfolio_images_category_id'), 'portfolio_images', ['category_id'])
    op.create_index(op.f('ix_portfolio_images_service_id'), 'portfolio_images', ['service_id'])

    op.create_table(
        'contact_messages',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('response', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('service_type', sa.String(200), nullable=True),
        sa.Column('event_date', sa.String(50), nullable=True),
        sa.Column('how_found_us', sa.String(200), nullable=True),
        *_timestamps('created_at', 'updated_at'),
    )
    op.create_index(op.f('ix_contact_messages_status'), 'contact_messages', ['status'])
    op.create_index(op.f('ix_contact_messages_created_at'), 'contact_messages', ['created_at'])


def downgrade() -> None:
    op.drop_table('contact_messages')
    op.drop_table('portfolio_images')
    op.drop_table('image_categories')
    op.drop_table('services')
    op.drop_table('about_us')
    op.drop_table('hero_images')
