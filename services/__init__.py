"""Services module for the Stripe Failed Payment Monitor."""

from .log_buffer import LogBuffer
from .gmail_service import GmailService, GmailError
from .notifier import FailureNotifier

__all__ = [
    'LogBuffer',
    'GmailService',
    'GmailError',
    'FailureNotifier'
]
