"""
Superficie HTTP del sistema.
"""

from brokerdesk.api.server import create_app, cors_middleware

__all__ = [
    "create_app",
    "cors_middleware",
]
