"""
Service providers for the API routers.

Each provider builds its service once; tests replace them through
``app.dependency_overrides``.
"""

from functools import lru_cache

from ..services.drawing_catalog import DrawingCatalogService
from ..services.persistence import GraphPersistenceService
from ..services.shape_catalog import ShapeCatalog, load_shape_catalog
from ..shared import get_settings


@lru_cache()
def get_shape_catalog() -> ShapeCatalog:
    return load_shape_catalog(get_settings())


@lru_cache()
def get_drawing_service() -> DrawingCatalogService:
    return DrawingCatalogService()


@lru_cache()
def get_persistence_service() -> GraphPersistenceService:
    return GraphPersistenceService(get_shape_catalog())
