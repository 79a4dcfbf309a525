# app/core/exceptions.py

from typing import Optional


class BridgeError(Exception):
    """Base error surfaced to HTTP callers as a JSON body"""

    status_code = 500
    code = "bridge_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class NotConnectedError(BridgeError):
    code = "not_connected"

    def __init__(self, message: str = "WhatsApp is not connected"):
        super().__init__(message)


class MissingFieldError(BridgeError):
    status_code = 400
    code = "validation_error"

    def __init__(self, *fields: str):
        self.fields = list(fields)
        super().__init__(f"Missing required field(s): {', '.join(fields)}")


class SendFailure(BridgeError):
    code = "send_failed"


class DeletionFailure(BridgeError):
    code = "delete_failed"


class AuthenticationRejected(BridgeError):
    status_code = 401
    code = "auth_rejected"


class ForwardFailure(Exception):
    """Webhook relay error, only ever logged"""
