"""
Shape catalog.

Immutable registry of shape kinds: size, ports and semantic type per kind,
read from JSON definition files. The catalog is loaded once and handed to
the canvas, the engines and the persistence mapper by reference.
"""

import json
import uuid
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from pydantic import Field

from ...shared import (
    BaseModel,
    CatalogError,
    ConfigurationError,
    DiagramNode,
    Point,
    Port,
    Settings,
    Size,
    build_node_attributes,
    get_logger,
)

BUILTIN_SHAPES_DIR = Path(__file__).parent / "shapes"


class ShapeDefinition(BaseModel):
    """One shape kind."""

    name: str = Field(..., description="Shape kind, e.g. 'p-cv-manual'")
    type: str = Field(..., description="Semantic type of nodes using this shape")
    width: float = Field(default=40.0, gt=0)
    height: float = Field(default=40.0, gt=0)
    ports: List[Port] = Field(default_factory=list)
    data: Dict[str, Any] = Field(default_factory=dict, description="Default attribute values")
    background: bool = Field(default=False, description="Shape is a non-connectable backdrop")

    @property
    def size(self) -> Size:
        return Size(width=self.width, height=self.height)


class ShapeCatalog:
    """
    Read-only mapping of shape kind to definition.

    Also the factory for new diagram nodes, so every node built from a kind
    gets that kind's size, ports and default attributes.
    """

    def __init__(self, definitions: Iterable[ShapeDefinition]):
        shapes = {}
        for definition in definitions:
            shapes[definition.name] = definition
        self._shapes: Mapping[str, ShapeDefinition] = MappingProxyType(shapes)

    def __contains__(self, name: object) -> bool:
        return name in self._shapes

    def __iter__(self) -> Iterator[str]:
        return iter(self._shapes)

    def __len__(self) -> int:
        return len(self._shapes)

    def names(self) -> List[str]:
        return sorted(self._shapes)

    def find(self, name: Optional[str]) -> Optional[ShapeDefinition]:
        if not name:
            return None
        return self._shapes.get(name)

    def get(self, name: str) -> ShapeDefinition:
        """
        Definition of a shape kind.

        Raises:
            CatalogError: If the kind is not registered
        """
        definition = self.find(name)
        if definition is None:
            raise CatalogError(f"Unknown shape kind '{name}'")
        return definition

    def ports_for(self, name: Optional[str]) -> List[Port]:
        """Fresh copies of a kind's ports; unknown kinds have none."""
        definition = self.find(name)
        if definition is None:
            return []
        return [port.model_copy() for port in definition.ports]

    def create_node(self,
                    shape: str,
                    x: float = 0.0,
                    y: float = 0.0,
                    node_id: Optional[str] = None,
                    rotation: float = 0.0,
                    **attributes: Any) -> DiagramNode:
        """
        Build a diagram node of a registered shape kind.

        Args:
            shape: Shape kind
            x: Left edge of the unrotated node
            y: Top edge of the unrotated node
            node_id: Node id; a new uuid when omitted
            rotation: Rotation in degrees
            **attributes: Attribute overrides by field name or persisted alias

        Returns:
            The new node, not yet placed on any canvas
        """
        definition = self.get(shape)
        fields = dict(definition.data)
        fields.update(attributes)
        node_type = fields.pop('type', None) or definition.type
        return DiagramNode(
            id=node_id or str(uuid.uuid4()),
            shape=definition.name,
            position=Point(x=x, y=y),
            size=definition.size,
            rotation=rotation,
            ports=self.ports_for(definition.name),
            attributes=build_node_attributes(node_type, **fields),
            is_background=definition.background,
            z_index=0 if definition.background else 2,
        )


def _drop_duplicate_ports(shape_name: str, raw_ports: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    logger = get_logger(__name__)
    seen = set()
    kept = []
    for raw in raw_ports:
        port_id = raw.get('id')
        if port_id in seen:
            logger.warning(f"Shape '{shape_name}' declares port '{port_id}' more than once; keeping the first")
            continue
        seen.add(port_id)
        kept.append(raw)
    return kept


def parse_shape_definitions(payload: Any, source: str = "<memory>") -> List[ShapeDefinition]:
    """
    Parse shape definitions from decoded JSON.

    Args:
        payload: A single definition object or a list of them
        source: Where the payload came from, for messages

    Returns:
        Parsed definitions in file order

    Raises:
        ConfigurationError: If a definition is malformed
    """
    items = payload if isinstance(payload, list) else [payload]
    definitions = []
    for item in items:
        if not isinstance(item, dict) or 'name' not in item:
            raise ConfigurationError(f"Malformed shape definition in {source}: {item!r}")
        raw = dict(item)
        raw['ports'] = _drop_duplicate_ports(raw['name'], list(raw.get('ports') or []))
        try:
            definitions.append(ShapeDefinition(**raw))
        except ValueError as e:
            raise ConfigurationError(f"Invalid shape '{raw['name']}' in {source}: {e}")
    return definitions


def load_shape_catalog(settings: Optional[Settings] = None,
                       directories: Optional[Iterable[Path]] = None) -> ShapeCatalog:
    """
    Load the built-in shape library plus any configured extra directory.

    Later files override earlier definitions of the same kind.

    Args:
        settings: Settings providing ``shape_library_dir``
        directories: Explicit directories, replacing the built-in one

    Returns:
        The loaded catalog
    """
    logger = get_logger(__name__)

    if directories is None:
        directories = [BUILTIN_SHAPES_DIR]
        if settings is not None and settings.shape_library_dir:
            directories.append(settings.shape_library_dir)

    definitions: List[ShapeDefinition] = []
    for directory in directories:
        directory = Path(directory)
        if not directory.is_dir():
            raise ConfigurationError(f"Shape library directory not found: {directory}")
        for path in sorted(directory.glob("*.json")):
            try:
                payload = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Shape library file {path} is not valid JSON: {e}")
            definitions.extend(parse_shape_definitions(payload, source=str(path)))

    catalog = ShapeCatalog(definitions)
    logger.info(f"Loaded {len(catalog)} shape kinds")
    return catalog
