# app/routes/messages.py

from fastapi import APIRouter, Depends
from typing import Optional

from app.core.dependencies import get_deletion_service, get_dispatch_service
from app.models import DeleteAllSentRequest, DeleteMessageRequest, SendRequest
from app.services.deletion_service import BulkDeletionService
from app.services.dispatch_service import DispatchService

router = APIRouter(tags=["messages"])


@router.post("/send")
async def send_message(
    body: Optional[SendRequest] = None,
    dispatch: DispatchService = Depends(get_dispatch_service),
):
    """Send a WhatsApp text message"""
    body = body or SendRequest()
    return await dispatch.send(body.to, body.text)


@router.post("/delete-message")
async def delete_message(
    body: Optional[DeleteMessageRequest] = None,
    dispatch: DispatchService = Depends(get_dispatch_service),
):
    """Delete one message previously sent by the bot"""
    body = body or DeleteMessageRequest()
    return await dispatch.delete_message(body.chat_id, body.message_id)


@router.get("/sent-messages/{chat_id}")
def list_sent_messages(
    chat_id: str, dispatch: DispatchService = Depends(get_dispatch_service)
):
    """List messages the bot sent to a chat during this session"""
    return dispatch.list_sent(chat_id)


@router.post("/delete-all-sent")
async def delete_all_sent(
    body: Optional[DeleteAllSentRequest] = None,
    deletion: BulkDeletionService = Depends(get_deletion_service),
):
    """Delete every tracked message in one chat"""
    body = body or DeleteAllSentRequest()
    return await deletion.delete_all_in_chat(body.chat_id)


@router.post("/delete-all-sent-everywhere")
async def delete_all_sent_everywhere(
    deletion: BulkDeletionService = Depends(get_deletion_service),
):
    """Delete every tracked message in every chat"""
    return await deletion.delete_all_everywhere()
