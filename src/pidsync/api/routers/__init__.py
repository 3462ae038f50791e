"""
API routers.
"""

from . import drawings, health

__all__ = ["drawings", "health"]
