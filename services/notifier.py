"""
Failure Notifier.

Turns failed charges into alert emails and hands them to the Gmail
service. Send failures are reported as a NotificationResult, never
raised.
"""

import logging

from models.charge import ChargeFailureEvent
from models.notification import EmailEnvelope, FailureAlert, NotificationResult
from services.gmail_service import GmailService
from services.log_buffer import LogBuffer

logger = logging.getLogger(__name__)


class FailureNotifier:
    """
    Sends one alert email per failed charge to a fixed recipient.

    No retries: each call makes a single send attempt.
    """

    def __init__(
        self,
        gmail_service: GmailService,
        log_buffer: LogBuffer,
        recipient: str
    ):
        """
        Initialize the notifier.

        Args:
            gmail_service: Transport used to send the email
            log_buffer: Buffer that records the outcome
            recipient: Address that receives every alert
        """
        self.gmail_service = gmail_service
        self.log_buffer = log_buffer
        self.recipient = recipient

    async def notify(self, event: ChargeFailureEvent) -> NotificationResult:
        """
        Send an alert for a failed charge.

        Args:
            event: The failed charge

        Returns:
            NotificationResult with success flag and error message
        """
        try:
            alert = FailureAlert(event)
            envelope = EmailEnvelope.from_alert(alert, to=self.recipient)

            await self.gmail_service.send_raw(envelope.to_raw())
        except Exception as e:
            logger.warning(f"Alert for charge {event.charge_id} failed: {e}")
            self.log_buffer.record(f"❌ Failed to send notification: {e}")
            return NotificationResult(success=False, error=str(e))

        self.log_buffer.record(
            f"✅ Failure notification sent for customer: {event.customer}"
        )
        return NotificationResult(success=True)
