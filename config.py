"""
Configuration module for the Stripe Failed Payment Monitor.

Loads settings from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass
class StripeConfig:
    """Stripe account configuration."""
    secret_key: str


@dataclass
class GmailConfig:
    """Gmail API credentials used to send alert emails."""
    refresh_token: str
    client_id: str
    client_secret: str
    user_id: str = "me"
    timeout: int = 30


@dataclass
class AlertConfig:
    """Alert delivery configuration."""
    recipient: str


@dataclass
class APIConfig:
    """API server configuration."""
    host: str
    port: int


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str
    file: Optional[str]


@dataclass
class ServiceConfig:
    """Service-level configuration."""
    name: str
    log_capacity: int


class Config:
    """
    Main configuration class that aggregates all config sections.

    Usage:
        from config import config

        print(config.api.port)
        print(config.alert.recipient)
    """

    def __init__(self):
        self._load_config()

    def _load_config(self):
        """Load all configuration from environment variables."""

        # Stripe configuration
        self.stripe = StripeConfig(
            secret_key=os.getenv('STRIPE_SECRET_KEY', '')
        )

        # Gmail configuration
        self.gmail = GmailConfig(
            refresh_token=os.getenv('GMAIL_REFRESH_TOKEN', ''),
            client_id=os.getenv('GMAIL_CLIENT_ID', ''),
            client_secret=os.getenv('GMAIL_CLIENT_SECRET', ''),
            user_id=os.getenv('GMAIL_USER_ID', 'me'),
            timeout=int(os.getenv('GMAIL_TIMEOUT', '30'))
        )

        # Alert configuration
        self.alert = AlertConfig(
            recipient=os.getenv('ALERT_RECIPIENT', 'alerts@example.com')
        )

        # API configuration
        self.api = APIConfig(
            host=os.getenv('API_HOST', '0.0.0.0'),
            port=int(os.getenv('PORT', '3000'))
        )

        # Logging configuration
        self.logging = LoggingConfig(
            level=os.getenv('LOG_LEVEL', 'INFO'),
            file=os.getenv('LOG_FILE')
        )

        # Service configuration
        self.service = ServiceConfig(
            name=os.getenv('SERVICE_NAME', 'Stripe Failed Payment Monitor'),
            log_capacity=int(os.getenv('LOG_BUFFER_SIZE', '50'))
        )

    def validate(self) -> List[str]:
        """
        Validate required configuration values.

        Returns:
            List of validation error messages (empty if all valid)
        """
        errors = []

        if not self.gmail.refresh_token:
            errors.append("GMAIL_REFRESH_TOKEN is required")

        if not self.gmail.client_id:
            errors.append("GMAIL_CLIENT_ID is required")

        if not self.gmail.client_secret:
            errors.append("GMAIL_CLIENT_SECRET is required")

        return errors


# Global configuration instance
config = Config()
