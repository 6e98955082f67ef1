#!/usr/bin/env python3
"""
Stripe Failed Payment Monitor.

Main entry point that wires together:
- Gmail delivery service
- Failure notifier
- Webhook and diagnostic API

Usage:
    python main.py

Environment variables:
    STRIPE_SECRET_KEY, GMAIL_REFRESH_TOKEN, GMAIL_CLIENT_ID,
    GMAIL_CLIENT_SECRET, ALERT_RECIPIENT, PORT (default 3000),
    LOG_LEVEL, LOG_FILE. See config.py for the full list.
"""

import asyncio
import logging
import os
import signal
import sys
from typing import Optional

from aiohttp import web

from config import config
from services.gmail_service import GmailService
from services.log_buffer import LogBuffer
from services.notifier import FailureNotifier
from api.monitor_api import create_app


# Configure logging
def setup_logging():
    """Configure logging based on config."""
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    log_level = getattr(logging, config.logging.level.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]

    if config.logging.file:
        # Ensure log directory exists
        log_dir = os.path.dirname(config.logging.file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(config.logging.file))

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=handlers
    )

    # Reduce noise from third-party libraries
    logging.getLogger('aiohttp').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


class PaymentMonitorService:
    """
    Main service orchestrator.

    Owns the log buffer and the Gmail session, and runs the
    HTTP server that receives Stripe webhooks.
    """

    def __init__(self):
        self.log_buffer = LogBuffer(capacity=config.service.log_capacity)
        self.gmail_service: Optional[GmailService] = None
        self.notifier: Optional[FailureNotifier] = None
        self.api_app: Optional[web.Application] = None
        self.api_runner: Optional[web.AppRunner] = None
        self._shutdown_event = asyncio.Event()

    async def start(self) -> None:
        """Start all services."""
        logger.info("=" * 60)
        logger.info(f"Starting {config.service.name}")
        logger.info("=" * 60)

        # Missing credentials only break sending; webhooks are still acknowledged
        for error in config.validate():
            logger.warning(f"Configuration warning: {error}")

        self.gmail_service = GmailService()
        await self.gmail_service.start()

        self.notifier = FailureNotifier(
            gmail_service=self.gmail_service,
            log_buffer=self.log_buffer,
            recipient=config.alert.recipient
        )

        # Start API server
        logger.info("Starting API server...")
        self.api_app = create_app(
            notifier=self.notifier,
            log_buffer=self.log_buffer
        )

        self.api_runner = web.AppRunner(self.api_app)
        await self.api_runner.setup()

        site = web.TCPSite(
            self.api_runner,
            config.api.host,
            config.api.port
        )
        await site.start()

        self.log_buffer.record(
            f"🚀 Stripe payment monitor started on port {config.api.port}"
        )
        logger.info(f"Alerts will be sent to {config.alert.recipient}")

    async def stop(self) -> None:
        """Stop all services gracefully."""
        logger.info("Initiating graceful shutdown...")

        # Stop accepting new requests
        if self.api_runner:
            await self.api_runner.cleanup()

        if self.gmail_service:
            await self.gmail_service.stop()

        logger.info("Shutdown complete")
        self._shutdown_event.set()

    async def run(self) -> None:
        """Run the service until shutdown signal."""
        await self.start()

        # Wait for shutdown signal
        await self._shutdown_event.wait()

    def request_shutdown(self) -> None:
        """Request service shutdown."""
        asyncio.create_task(self.stop())


def handle_signal(service: PaymentMonitorService, sig: signal.Signals) -> None:
    """Handle shutdown signals."""
    logger.info(f"Received signal {sig.name}, initiating shutdown...")
    service.request_shutdown()


async def main() -> None:
    """Main entry point."""
    setup_logging()

    service = PaymentMonitorService()

    # Set up signal handlers
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda s=sig: handle_signal(service, s)
        )

    try:
        await service.run()
    except Exception as e:
        logger.error(f"Service error: {e}", exc_info=True)
        await service.stop()
        sys.exit(1)


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == '__main__':
    run()
