"""
Notification data models.

Formats failed charges into alert emails and encodes them for the
Gmail API.
"""

import base64
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

from .charge import UNAVAILABLE, ChargeFailureEvent


@dataclass(frozen=True)
class NotificationResult:
    """Outcome of a single notification attempt."""

    success: bool
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.success


@dataclass
class FailureAlert:
    """
    Formatted alert for a failed charge.

    Renders the subject line and plain-text body of the email sent
    for each ChargeFailureEvent.
    """

    event: ChargeFailureEvent

    def formatted_amount(self) -> str:
        """
        Amount in major units with two decimals and upper-case currency.

        A missing or non-numeric amount renders as a placeholder, and a
        missing currency is left out.
        """
        amount = UNAVAILABLE
        if self.event.amount is not None:
            try:
                amount = f"{Decimal(str(self.event.amount)) / Decimal(100):.2f}"
            except (InvalidOperation, ValueError):
                pass

        currency = self.event.currency
        if isinstance(currency, str) and currency:
            return f"{amount} {currency.upper()}"
        return amount

    def formatted_time(self) -> str:
        try:
            created = datetime.fromtimestamp(float(self.event.created), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError, OSError):
            return UNAVAILABLE
        return created.strftime('%Y-%m-%d %H:%M:%S') + ' UTC'

    @property
    def subject(self) -> str:
        return f"⚠️ Stripe Payment Failed - {self.event.customer}"

    @property
    def body(self) -> str:
        event = self.event

        return f"""
Payment Failure Alert

Customer: {event.customer}
Amount: {self.formatted_amount()}
Date & Time: {self.formatted_time()}
Failure Reason: {event.failure_reason}

Charge ID: {event.charge_id or UNAVAILABLE}

This is an automated alert from your Stripe payment monitor.
"""

    def format(self) -> Dict[str, str]:
        """
        Format the alert.

        Returns:
            Dictionary with subject and body
        """
        return {
            'subject': self.subject,
            'body': self.body
        }


@dataclass
class EmailEnvelope:
    """
    Minimal plain-text RFC 822 message for the Gmail send API.
    """

    to: str
    subject: str
    body: str

    def to_message(self) -> str:
        """Render headers and body as a single message string."""
        return '\n'.join([
            'Content-Type: text/plain; charset="UTF-8"',
            'MIME-Version: 1.0',
            f'To: {self.to}',
            f'Subject: {self.subject}',
            '',
            self.body
        ])

    def to_raw(self) -> str:
        """
        Encode the message for the ``raw`` field of messages.send.

        Returns:
            URL-safe base64 of the UTF-8 message with padding removed
        """
        encoded = base64.urlsafe_b64encode(self.to_message().encode('utf-8'))
        return encoded.decode('ascii').rstrip('=')

    @classmethod
    def from_alert(cls, alert: FailureAlert, to: str) -> 'EmailEnvelope':
        """Create an envelope addressed to a recipient from an alert."""
        return cls(to=to, subject=alert.subject, body=alert.body)
