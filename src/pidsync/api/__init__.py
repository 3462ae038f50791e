"""
P&ID Sync API Gateway.

REST access to the drawing catalog and diagram persistence.
"""

from .app import create_app
from .models import APIResponse, ErrorResponse

__all__ = [
    "create_app",
    "APIResponse",
    "ErrorResponse",
]
