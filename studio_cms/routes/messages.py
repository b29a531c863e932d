"""
CMS routes for contact-form messages.
"""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
import logging

from studio_cms.models import ContactMessage
from studio_cms.schemas import ContactMessageResponse, MessageStatus, MessageStatusUpdate
from studio_cms.services.row_store import RowStore, get_row_store
from studio_cms.utils.jwt_auth import verify_cms_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cms/messages", dependencies=[Depends(verify_cms_token)])


@router.get("", response_model=List[ContactMessageResponse])
async def list_messages(
    status: Optional[MessageStatus] = Query(None),
    store: RowStore = Depends(get_row_store),
):
    """Get contact messages, newest first."""
    criteria = [ContactMessage.status == status] if status else []
    messages = await store.select(ContactMessage, *criteria, order_by=ContactMessage.created_at.desc())
    return [ContactMessageResponse.model_validate(message) for message in messages]


@router.get("/{message_id}", response_model=ContactMessageResponse)
async def get_message(message_id: str, store: RowStore = Depends(get_row_store)):
    return ContactMessageResponse.model_validate(await store.require(ContactMessage, message_id))


@router.put("/{message_id}/status", response_model=ContactMessageResponse)
async def update_message_status(
    message_id: str,
    payload: MessageStatusUpdate,
    store: RowStore = Depends(get_row_store),
):
    """
    Change a message's status, optionally recording a response and notes.

    Moving a message out of "pending" without a response stamps responded_at.
    """
    patch = {"status": payload.status}
    fields_set = payload.model_fields_set
    if "response" in fields_set:
        patch["response"] = payload.response
    if "notes" in fields_set:
        patch["notes"] = payload.notes
    if payload.status != "pending" and not payload.response:
        patch["responded_at"] = datetime.now(timezone.utc)

    message = await store.update(ContactMessage, message_id, patch)
    logger.info(f"Message {message_id} marked as {payload.status}")
    return ContactMessageResponse.model_validate(message)


@router.delete("/{message_id}")
async def delete_message(message_id: str, store: RowStore = Depends(get_row_store)):
    await store.delete(ContactMessage, message_id)
    return {"message": "Message deleted successfully", "message_id": message_id}
