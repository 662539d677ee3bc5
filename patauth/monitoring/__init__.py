"""
Monitoring module initialization
"""

from .metrics import MetricsRegistry, get_registry

__all__ = ["MetricsRegistry", "get_registry"]
