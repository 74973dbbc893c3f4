"""Route group exports."""

from . import customers, deliveries, health, tracking

__all__ = ["deliveries", "tracking", "health", "customers"]
