# app/core/dependencies.py

from fastapi import Request

from app.core.config import Settings
from app.core.connection import ConnectionManager
from app.core.ledger import MessageLedger
from app.services.deletion_service import BulkDeletionService
from app.services.dispatch_service import DispatchService
from app.services.webhook_service import WebhookForwarder


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_connection(request: Request) -> ConnectionManager:
    return request.app.state.connection


def get_ledger(request: Request) -> MessageLedger:
    return request.app.state.ledger


def get_dispatch_service(request: Request) -> DispatchService:
    return request.app.state.dispatch_service


def get_deletion_service(request: Request) -> BulkDeletionService:
    return request.app.state.deletion_service


def get_forwarder(request: Request) -> WebhookForwarder:
    return request.app.state.forwarder
