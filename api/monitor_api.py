"""
Payment Monitor API.

Receives Stripe webhook events and exposes status and diagnostic
endpoints.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from aiohttp import web

from config import config
from models.charge import CHARGE_FAILED, ChargeFailureEvent
from services.log_buffer import LogBuffer
from services.notifier import FailureNotifier

logger = logging.getLogger(__name__)

# Number of entries returned by GET /logs
RECENT_LOG_COUNT = 20


def _error_message(error: Exception) -> str:
    return str(error) or type(error).__name__


class MonitorAPI:
    """
    REST API for the payment monitor.

    Endpoints:
    - GET / - Service status
    - GET /health - Health check
    - GET /logs - Recent log entries
    - POST /test - Send a test notification
    - POST /webhook - Stripe webhook endpoint
    """

    ENDPOINTS = [
        'GET / - Service status',
        'GET /health - Health check',
        'GET /logs - View recent logs',
        'POST /test - Test notification',
        'POST /webhook - Stripe webhook endpoint'
    ]

    def __init__(
        self,
        notifier: FailureNotifier,
        log_buffer: LogBuffer,
        service_name: Optional[str] = None
    ):
        """
        Initialize the API.

        Args:
            notifier: Notifier used for failed charges and tests
            log_buffer: Buffer backing the /logs endpoint
            service_name: Name reported by the status endpoint
        """
        self.notifier = notifier
        self.log_buffer = log_buffer
        self.service_name = service_name or config.service.name
        self._started_at = time.monotonic()

    def setup_routes(self, app: web.Application) -> None:
        """
        Set up API routes.

        Args:
            app: aiohttp web application
        """
        app.router.add_get('/', self.status)
        app.router.add_get('/health', self.health_check)
        app.router.add_get('/logs', self.get_logs)
        app.router.add_post('/test', self.test_notification)
        app.router.add_post('/webhook', self.handle_webhook)

    async def handle_webhook(self, request: web.Request) -> web.Response:
        """
        Handle a Stripe webhook event.

        Only charge.failed events trigger an alert. Every event that can
        be processed is acknowledged, whether or not the alert was sent.
        """
        try:
            # Bodies that are empty or not sent as JSON are treated as {}
            if request.can_read_body and request.content_type == 'application/json':
                event = await request.json()
            else:
                event = {}
            event_type = event.get('type')

            self.log_buffer.record(f"📨 Received webhook: {event_type}")

            if event_type == CHARGE_FAILED:
                charge = event['data']['object']
                self.log_buffer.record(
                    f"💳 Processing failed charge: {charge.get('id')}"
                )

                await self.notifier.notify(ChargeFailureEvent.from_charge(charge))

        except Exception as e:
            message = _error_message(e)
            logger.warning(f"Webhook processing failed: {message}")
            self.log_buffer.record(f"❌ Webhook error: {message}")
            return web.json_response({"error": message}, status=400)

        return web.json_response({"received": True})

    async def status(self, request: web.Request) -> web.Response:
        """Service status endpoint."""
        return web.json_response({
            "status": "active",
            "service": self.service_name,
            "endpoints": self.ENDPOINTS,
            "monitoring": self.notifier.recipient
        })

    async def health_check(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        return web.json_response({
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": time.monotonic() - self._started_at
        })

    async def get_logs(self, request: web.Request) -> web.Response:
        """Return recent log entries and the total logged count."""
        return web.json_response({
            "logs": self.log_buffer.recent(RECENT_LOG_COUNT),
            "total": self.log_buffer.total
        })

    async def test_notification(self, request: web.Request) -> web.Response:
        """Send a notification for a canned failed charge."""
        try:
            self.log_buffer.record("🧪 Manual test triggered")

            result = await self.notifier.notify(ChargeFailureEvent.test_event())

            if result.success:
                message = f"Test notification sent to {self.notifier.recipient}"
            else:
                message = "Failed to send test notification"

            return web.json_response({
                "success": result.success,
                "message": message
            })

        except Exception as e:
            message = _error_message(e)
            logger.error(f"Test notification error: {message}", exc_info=True)
            self.log_buffer.record(f"❌ Test error: {message}")
            return web.json_response({"error": message}, status=500)


def create_app(
    notifier: FailureNotifier,
    log_buffer: LogBuffer,
    service_name: Optional[str] = None
) -> web.Application:
    """
    Create and configure the aiohttp web application.

    Args:
        notifier: Failure notifier
        log_buffer: Shared log buffer
        service_name: Optional service name override

    Returns:
        Configured aiohttp Application
    """
    app = web.Application()

    # Create API handler
    api = MonitorAPI(
        notifier=notifier,
        log_buffer=log_buffer,
        service_name=service_name
    )

    # Setup routes
    api.setup_routes(app)

    # Error handling middleware
    @web.middleware
    async def error_middleware(request, handler):
        try:
            return await handler(request)
        except web.HTTPException:
            raise
        except Exception as e:
            logger.error(f"Unhandled error: {e}", exc_info=True)
            return web.json_response(
                {"error": "Internal server error"},
                status=500
            )

    app.middlewares.append(error_middleware)

    return app
