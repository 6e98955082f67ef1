"""Data models for the Stripe Failed Payment Monitor."""

from .charge import ChargeFailureEvent, resolve_first
from .notification import EmailEnvelope, FailureAlert, NotificationResult

__all__ = [
    'ChargeFailureEvent',
    'resolve_first',
    'EmailEnvelope',
    'FailureAlert',
    'NotificationResult'
]
