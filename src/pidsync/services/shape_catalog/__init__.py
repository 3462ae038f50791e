"""
Shape Catalog Service.

Registry of shape kinds and the node factory built on it.
"""

from .catalog import (
    BUILTIN_SHAPES_DIR,
    ShapeCatalog,
    ShapeDefinition,
    load_shape_catalog,
    parse_shape_definitions,
)

__all__ = [
    "BUILTIN_SHAPES_DIR",
    "ShapeCatalog",
    "ShapeDefinition",
    "load_shape_catalog",
    "parse_shape_definitions",
]
