"""
Drawing Catalog Service.
"""

from .models import Drawing
from .repository import DrawingRepository
from .service import DrawingCatalogService, RECOVERED_PREFIX

__all__ = [
    "Drawing",
    "DrawingRepository",
    "DrawingCatalogService",
    "RECOVERED_PREFIX",
]
