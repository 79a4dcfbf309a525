# app/core/config.py

import logging
import sys
import os

# Check if running in cloud environment (like Azure)
# If not, assume local development and try to load .env
if os.getenv("WEBSITE_SITE_NAME") is None:
    try:
        from dotenv import load_dotenv

        # Load environment variables from .env file in the project root
        dotenv_path = os.path.join(
            os.path.dirname(__file__), "..", "..", ".env"
        )  # Assumes .env is in project root
        load_dotenv(dotenv_path=dotenv_path)
    except Exception as e:
        print(f"Error loading .env file: {e}")


def _get_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        logging.warning(f"{key}={value!r} is not a number, using {default}")
        return default


class Settings:
    """Simple settings object to hold configuration values"""

    def __init__(self):
        self.APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
        self.ENVIRONMENT = os.getenv("APP_ENV", "test").lower()
        self.WEBHOOK_URLS = {
            "test": os.getenv("WEBHOOK_URL_TEST"),
            "prod": os.getenv("WEBHOOK_URL_PROD"),
        }

        self.BRIDGE_URL = os.getenv("BRIDGE_URL", "http://localhost:3001")
        self.BRIDGE_TOKEN = os.getenv("BRIDGE_TOKEN") or None

        self.HOST = os.getenv("HOST", "0.0.0.0")
        self.PORT = int(_get_float("PORT", 3000))

        # Pause between consecutive deletions, WhatsApp throttles bursts
        self.DELETE_PACING_SECONDS = _get_float("DELETE_PACING_SECONDS", 0.2)
        self.RECONNECT_DELAY_SECONDS = _get_float("RECONNECT_DELAY_SECONDS", 1.0)
        self.HTTP_TIMEOUT_SECONDS = _get_float("HTTP_TIMEOUT_SECONDS", 30.0)

        if not self.WEBHOOK_URL:
            logging.warning(
                f"No webhook URL configured for environment '{self.ENVIRONMENT}'. "
                "Inbound messages will not be forwarded."
            )

    @property
    def WEBHOOK_URL(self):
        return self.WEBHOOK_URLS.get(self.ENVIRONMENT)


def configure_logging():
    """Configure application logging"""
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )


# Create global settings instance
settings = Settings()
