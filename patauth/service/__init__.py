"""
Service module initialization
"""

from .service import TokenService, create_token_service

__all__ = [
    "TokenService",
    "create_token_service",
]
