"""API module for the Stripe Failed Payment Monitor."""

from .monitor_api import create_app, MonitorAPI

__all__ = ['create_app', 'MonitorAPI']
