"""
Drawing Catalog Service implementation.
"""

import uuid
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from ...shared import CatalogError, Settings, ValidationError, get_logger, get_settings
from .models import Drawing
from .repository import DrawingRepository

RECOVERED_PREFIX = "Recovered-"


class DrawingCatalogService:
    """
    Lists and manages the drawings of the plant model.

    Listing also repairs the catalog: drawing ids that only survive on assets
    are registered again, and duplicate drawing records are removed.
    """

    def __init__(self, repository: Optional[DrawingRepository] = None, settings: Settings = None):
        """
        Initialize the Drawing Catalog service.

        Args:
            repository: Drawing repository; a Neo4j-backed one when omitted
            settings: Settings providing the default drawing name
        """
        self.logger = get_logger(__name__)
        self.repository = repository or DrawingRepository()
        self.settings = settings or get_settings()

    def list_drawings(self) -> List[Drawing]:
        for drawing_id in self.repository.orphan_drawing_ids():
            self.repository.register_drawing(drawing_id, f"{RECOVERED_PREFIX}{drawing_id}")
            self.logger.warning(f"Recovered unregistered drawing {drawing_id}")

        removed = self.repository.remove_duplicates()
        if removed:
            self.logger.warning(f"Removed {removed} duplicate drawing records")

        return [Drawing.from_record(record) for record in self.repository.list_drawings()]

    def get_drawing(self, drawing_id: str) -> Drawing:
        record = self.repository.get_drawing(drawing_id)
        if record is None:
            raise CatalogError(f"Drawing '{drawing_id}' not found")
        return Drawing.from_record(record)

    def create_drawing(self, name: str) -> Drawing:
        """
        Register a new, empty drawing.

        Raises:
            ValidationError: If the name is blank
        """
        name = self._checked_name(name)
        record = self.repository.create_drawing(str(uuid.uuid4()), name)
        drawing = Drawing.from_record(record)
        self.logger.info(f"Created drawing {drawing.id} '{drawing.name}'")
        return drawing

    def rename_drawing(self, drawing_id: str, name: str) -> Drawing:
        name = self._checked_name(name)
        record = self.repository.rename_drawing(drawing_id, name)
        if record is None:
            raise CatalogError(f"Drawing '{drawing_id}' not found")
        return Drawing.from_record(record)

    def delete_drawing(self, drawing_id: str) -> None:
        if not self.repository.delete_drawing(drawing_id):
            raise CatalogError(f"Drawing '{drawing_id}' not found")
        self.logger.info(f"Deleted drawing {drawing_id}")

    def ensure_default_drawing(self) -> List[Drawing]:
        """List drawings, creating the default one when the catalog is empty."""
        drawings = self.list_drawings()
        if not drawings:
            drawings = [self.create_drawing(self.settings.default_drawing_name)]
        return drawings

    @staticmethod
    def _checked_name(name: str) -> str:
        try:
            return Drawing(id="-", name=name or "").name
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid drawing name: {e.errors()[0]['msg']}")
