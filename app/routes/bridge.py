# app/routes/bridge.py

from fastapi import APIRouter, Depends, Header, HTTPException
from typing import Optional
import logging

from app.core.config import Settings
from app.core.connection import ConnectionManager
from app.core.dependencies import get_connection, get_forwarder, get_settings
from app.models import BridgeEvent
from app.services.webhook_service import WebhookForwarder, extract_inbound

router = APIRouter(prefix="/bridge", tags=["bridge"])
logger = logging.getLogger(__name__)


def verify_bridge_token(
    x_bridge_token: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
):
    if settings.BRIDGE_TOKEN and x_bridge_token != settings.BRIDGE_TOKEN:
        raise HTTPException(status_code=403, detail="Invalid bridge token")
    return True


@router.post("/events", dependencies=[Depends(verify_bridge_token)])
async def bridge_events(
    event: BridgeEvent,
    connection: ConnectionManager = Depends(get_connection),
    forwarder: WebhookForwarder = Depends(get_forwarder),
):
    """Receive session events pushed by the WhatsApp bridge"""
    if event.event == "messages.upsert":
        forwarded = 0
        for message in event.data.get("messages") or []:
            payload = extract_inbound(message) if isinstance(message, dict) else None
            if payload:
                forwarder.submit(payload)
                forwarded += 1
        return {"status": "ok", "forwarded": forwarded}

    if event.event == "connection.update":
        last_disconnect = event.data.get("lastDisconnect") or {}
        connection.handle_update(
            connection=event.data.get("connection"),
            status_code=last_disconnect.get("statusCode"),
            qr=event.data.get("qr"),
        )
        return {"status": "ok", "connection": connection.state.value}

    logger.debug(f"Ignoring bridge event {event.event}")
    return {"status": "ignored"}
