"""
CMS dashboard summary.
"""
from fastapi import APIRouter, Depends

from studio_cms.models import ContactMessage, PortfolioImage, Service
from studio_cms.schemas import ContactMessageResponse, DashboardStats
from studio_cms.services.row_store import RowStore, get_row_store
from studio_cms.utils.jwt_auth import verify_cms_token

RECENT_MESSAGES = 5

router = APIRouter(prefix="/cms/dashboard", dependencies=[Depends(verify_cms_token)])


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(store: RowStore = Depends(get_row_store)):
    """Counts shown on the dashboard landing page plus the latest messages."""
    recent = await store.select(
        ContactMessage, order_by=ContactMessage.created_at.desc(), limit=RECENT_MESSAGES
    )
    return DashboardStats(
        total_services=await store.count(Service),
        total_images=await store.count(PortfolioImage),
        pending_messages=await store.count(ContactMessage, ContactMessage.status == "pending"),
        recent_messages=[ContactMessageResponse.model_validate(message) for message in recent],
    )
