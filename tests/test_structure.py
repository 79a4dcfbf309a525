# tests/test_structure.py

import importlib
from app import create_app


def test_imports():
    """Test that all necessary modules can be imported"""
    # Test core imports
    assert importlib.import_module("app.core.bridge_client")
    assert importlib.import_module("app.core.connection")
    assert importlib.import_module("app.core.ledger")
    assert importlib.import_module("app.core.pacing")

    # Test service imports
    assert importlib.import_module("app.services.dispatch_service")
    assert importlib.import_module("app.services.deletion_service")
    assert importlib.import_module("app.services.webhook_service")

    # Test that models are accessible through __init__
    from app.data_schemas import SentMessageRecord, ChatSweepResult
    assert SentMessageRecord
    assert ChatSweepResult


def test_routes_registered(test_settings):
    app = create_app(settings=test_settings)
    paths = {route.path for route in app.routes}
    for path in [
        "/",
        "/health",
        "/send",
        "/delete-message",
        "/sent-messages/{chat_id}",
        "/delete-all-sent",
        "/delete-all-sent-everywhere",
        "/bridge/events",
    ]:
        assert path in paths
