
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.bridge_client import BridgeClient
from app.core.config import Settings, configure_logging
from app.core.connection import ConnectionManager
from app.core.exceptions import BridgeError
from app.core.ledger import MessageLedger
from app.core.pacing import Pacer
from app.routes.bridge import router as bridge_router
from app.routes.messages import router as messages_router
from app.services.deletion_service import BulkDeletionService
from app.services.dispatch_service import DispatchService
from app.services.webhook_service import WebhookForwarder

APP_NAME = "WhatsApp Bot API"

ENDPOINTS = {
    "POST /send": {
        "description": "Send a WhatsApp message",
        "body": {
            "to": "Chat ID with country code (e.g., 1234567890@s.whatsapp.net)",
            "text": "Message to send",
        },
    },
    "POST /delete-message": {
        "description": "Delete one message sent by the bot",
        "body": {
            "chatId": "Chat ID (e.g., 1234567890@s.whatsapp.net)",
            "messageId": "Message ID returned by POST /send",
        },
    },
    "GET /sent-messages/{chatId}": {
        "description": "List messages sent by the bot to a chat in this session",
    },
    "POST /delete-all-sent": {
        "description": "Delete every message the bot sent to a chat in this session",
        "body": {"chatId": "Chat ID (e.g., 1234567890@s.whatsapp.net)"},
    },
    "POST /delete-all-sent-everywhere": {
        "description": "Delete every message the bot sent in this session, in all chats",
        "body": {},
    },
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup code
    app.state.forwarder.start()
    await app.state.connection.start()

    yield

    # Shutdown code
    await app.state.connection.stop()
    await app.state.forwarder.stop()


def create_app(
    settings: Settings = None,
    connection: ConnectionManager = None,
    ledger: MessageLedger = None,
    pacer: Pacer = None,
    forwarder: WebhookForwarder = None,
):
    settings = settings or Settings()

    # Initialize FastAPI app
    app = FastAPI(title=APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)

    # Configure logging
    configure_logging()
    logging.info(f"Environment: {settings.ENVIRONMENT.upper()}")
    logging.info(f"Webhook URL: {settings.WEBHOOK_URL}")

    # Initialize services
    if connection is None:
        bridge = BridgeClient(
            settings.BRIDGE_URL,
            token=settings.BRIDGE_TOKEN,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        connection = ConnectionManager(
            bridge, reconnect_delay=settings.RECONNECT_DELAY_SECONDS
        )
    ledger = ledger if ledger is not None else MessageLedger()
    pacer = pacer or Pacer(settings.DELETE_PACING_SECONDS)
    forwarder = forwarder or WebhookForwarder(
        settings.WEBHOOK_URL, timeout=settings.HTTP_TIMEOUT_SECONDS
    )

    app.state.settings = settings
    app.state.connection = connection
    app.state.ledger = ledger
    app.state.forwarder = forwarder
    app.state.dispatch_service = DispatchService(connection, ledger)
    app.state.deletion_service = BulkDeletionService(connection, ledger, pacer)

    @app.exception_handler(BridgeError)
    async def bridge_error_handler(request: Request, exc: BridgeError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # Register routes
    app.include_router(messages_router)
    app.include_router(bridge_router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "connection": connection.state.value}

    @app.get("/")
    def read_root():
        return {
            "name": APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "environment": settings.ENVIRONMENT,
            "webhookUrl": settings.WEBHOOK_URL,
            "connection": connection.state.value,
            "endpoints": ENDPOINTS,
            "example": {
                "url": f"POST http://localhost:{settings.PORT}/send",
                "body": {
                    "to": "1234567890@s.whatsapp.net",
                    "text": "Hello from the bot!",
                },
            },
        }

    return app
