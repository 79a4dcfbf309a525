# app/services/webhook_service.py

import asyncio
import contextlib
import logging
from typing import Any, Dict, Optional

import httpx

from app.core.exceptions import ForwardFailure

logger = logging.getLogger(__name__)


def extract_inbound(message: Dict[str, Any]) -> Optional[Dict[str, str]]:
    """Pull sender and text out of a bridge messages.upsert item"""
    try:
        sender = (message.get("key") or {}).get("remoteJid")
        content = message.get("message") or {}
        text = content.get("conversation") or (
            content.get("extendedTextMessage") or {}
        ).get("text")
    except AttributeError:
        return None

    if not text or not sender:
        return None
    return {"from": sender, "text": text}


class WebhookForwarder:
    """Relays inbound WhatsApp text messages to the n8n webhook"""

    def __init__(
        self,
        webhook_url: Optional[str],
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self._transport = transport
        self.queue: "asyncio.Queue[Dict[str, str]]" = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None

    def submit(self, payload: Dict[str, str]) -> None:
        logger.info(f"[RECEIVED] {payload['from']}: {payload['text']}")
        self.queue.put_nowait(payload)

    async def _post(self, payload: Dict[str, str]) -> None:
        if not self.webhook_url:
            raise ForwardFailure("no webhook URL configured")
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(self.webhook_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise ForwardFailure(str(e)) from e

    async def forward(self, payload: Dict[str, str]) -> bool:
        """POST one message to n8n; failures are logged, never raised"""
        try:
            await self._post(payload)
        except ForwardFailure as e:
            logger.error(f"Failed to call n8n webhook: {e}")
            return False
        return True

    async def run(self) -> None:
        while True:
            payload = await self.queue.get()
            try:
                await self.forward(payload)
            finally:
                self.queue.task_done()

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
