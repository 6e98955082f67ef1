"""
Charge data models.

Represents failed Stripe charges extracted from webhook events.
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

UNKNOWN_CUSTOMER = "Unknown Customer"
NOT_SPECIFIED = "Not specified"
UNAVAILABLE = "Unavailable"

# Event type that triggers an alert
CHARGE_FAILED = "charge.failed"


def resolve_first(*candidates: Any, default: str) -> str:
    """
    Return the first candidate that is present and non-empty.

    None and empty strings are skipped. Candidates are checked in
    the order given, so the argument order is the precedence rule.

    Args:
        candidates: Values to check, highest precedence first
        default: Value returned when no candidate is usable

    Returns:
        The first usable candidate as a string, or the default
    """
    for candidate in candidates:
        if candidate is None:
            continue
        if isinstance(candidate, str) and not candidate:
            continue
        return str(candidate)

    return default


@dataclass(frozen=True)
class ChargeFailureEvent:
    """
    A failed charge that should be reported by email.

    Built from the charge object of a ``charge.failed`` webhook event,
    or synthesized for a manual test. Fields are kept as Stripe sent
    them; a missing one is None and is rendered as a placeholder.
    """

    # Stripe charge ID (ch_...)
    charge_id: Optional[str]

    # Amount in the currency's minor unit (e.g., cents)
    amount: Any

    # Three-letter ISO currency code as sent by Stripe (lowercase)
    currency: Optional[str]

    # Charge creation time, Unix epoch seconds
    created: Any

    # Customer email, customer ID or name, whichever is present first
    customer: str = UNKNOWN_CUSTOMER

    # Seller-facing outcome message or failure message
    failure_reason: str = NOT_SPECIFIED

    @classmethod
    def from_charge(cls, charge: Dict[str, Any]) -> 'ChargeFailureEvent':
        """
        Create ChargeFailureEvent from a Stripe charge object.

        Args:
            charge: The ``data.object`` of a charge event

        Returns:
            ChargeFailureEvent instance
        """
        billing_details = charge.get('billing_details') or {}
        outcome = charge.get('outcome') or {}

        customer = resolve_first(
            billing_details.get('email'),
            charge.get('customer'),
            billing_details.get('name'),
            default=UNKNOWN_CUSTOMER
        )

        failure_reason = resolve_first(
            outcome.get('seller_message'),
            charge.get('failure_message'),
            default=NOT_SPECIFIED
        )

        return cls(
            charge_id=charge.get('id'),
            amount=charge.get('amount'),
            currency=charge.get('currency'),
            created=charge.get('created'),
            customer=customer,
            failure_reason=failure_reason
        )

    @classmethod
    def test_event(cls, now: Optional[float] = None) -> 'ChargeFailureEvent':
        """
        Build a canned failed charge for the manual test endpoint.

        The charge ID is derived from the current time in milliseconds
        so repeated tests produce distinct IDs.

        Args:
            now: Current Unix time in seconds (defaults to time.time())

        Returns:
            ChargeFailureEvent with placeholder data
        """
        if now is None:
            now = time.time()

        return cls.from_charge({
            'id': f"ch_test_{int(now * 1000)}",
            'amount': 2500,  # $25.00
            'currency': 'usd',
            'created': int(now),
            'billing_details': {
                'email': 'test@example.com',
                'name': 'Test Customer'
            },
            'failure_message': 'Your card was declined.',
            'outcome': {
                'seller_message': 'The bank declined the payment.'
            }
        })
