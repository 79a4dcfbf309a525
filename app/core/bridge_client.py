# app/core/bridge_client.py

from typing import Dict, Any, Optional
import httpx
import logging

from app.core.exceptions import BridgeError, AuthenticationRejected

logger = logging.getLogger(__name__)


class BridgeClient:
    """Client for the WhatsApp Web bridge that holds the live session"""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize bridge client with its address and optional shared secret"""
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        self._transport = transport

    @staticmethod
    def build_self_key(chat_id: str, message_id: str) -> Dict[str, Any]:
        """Key marking the target message as sent by this account"""
        return {"remoteJid": chat_id, "fromMe": True, "id": message_id}

    def _parse_body(self, response: httpx.Response) -> Dict[str, Any]:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {"raw_response": response.text}
        return data if isinstance(data, dict) else {"data": data}

    async def _request(
        self, method: str, path: str, payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method, url, headers=self.headers, json=payload
                )
        except httpx.TimeoutException as e:
            logger.error(f"Timeout calling bridge {method} {path}")
            raise BridgeError(f"Request timed out: {str(e)}", status_code=408)
        except httpx.HTTPError as e:
            logger.error(f"Bridge {method} {path} failed: {str(e)}")
            raise BridgeError(f"Bridge unreachable: {str(e)}")

        if response.status_code == 401:
            raise AuthenticationRejected(f"Bridge rejected credentials: {response.text}")

        if response.status_code >= 400:
            body = self._parse_body(response)
            detail = body.get("error") or response.text
            raise BridgeError(
                f"Bridge error ({response.status_code}): {detail}",
                status_code=response.status_code,
            )

        return self._parse_body(response)

    async def send_text(self, to: str, text: str) -> Dict[str, Any]:
        """Send a text message, returns the provider message id and timestamp"""
        data = await self._request("POST", "/api/send", {"to": to, "text": text})
        if not data.get("id"):
            raise BridgeError(f"Bridge did not return a message id: {data}")
        return data

    async def delete_message(self, chat_id: str, key: Dict[str, Any]) -> Dict[str, Any]:
        """Revoke a message for everyone in the chat"""
        data = await self._request(
            "POST", "/api/delete", {"chatId": chat_id, "key": key}
        )
        if data.get("success") is False:
            raise BridgeError(data.get("error") or "Bridge reported deletion failure")
        return data

    async def status(self) -> Dict[str, Any]:
        return await self._request("GET", "/api/status")

    async def reconnect(self) -> Dict[str, Any]:
        return await self._request("POST", "/api/reconnect")
