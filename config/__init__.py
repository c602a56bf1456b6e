"""
Configuration package for the simulated market maker.

Provides centralized, type-safe configuration management.

Usage:
    from config.settings import settings

    # Access configuration
    num_orders = settings.quoting.num_orders
    url = settings.market_data.url
"""

from .settings import settings, Settings

__all__ = ['settings', 'Settings']
