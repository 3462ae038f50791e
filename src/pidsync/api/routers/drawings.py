"""
Drawing catalog and diagram endpoints.
"""

from fastapi import APIRouter, Depends

from ...services.canvas import InMemoryCanvas
from ...services.drawing_catalog import DrawingCatalogService
from ...services.persistence import GraphPersistenceService
from ...services.shape_catalog import ShapeCatalog
from ...services.topology import TopologyService
from ...shared import DiagramDocument, get_logger
from ...shared.models.base import utcnow
from ..dependencies import get_drawing_service, get_persistence_service, get_shape_catalog
from ..models import APIResponse, DrawingNameRequest

router = APIRouter()
logger = get_logger(__name__)


def _timestamp() -> str:
    return utcnow().isoformat().replace("+00:00", "Z")


@router.get("/drawings", response_model=APIResponse)
def list_drawings(drawings: DrawingCatalogService = Depends(get_drawing_service)):
    """List all drawings, repairing the catalog on the way."""
    items = drawings.list_drawings()
    return APIResponse(
        success=True,
        data=[d.model_dump(mode="json") for d in items],
        timestamp=_timestamp(),
    )


@router.post("/drawings", response_model=APIResponse, status_code=201)
def create_drawing(request: DrawingNameRequest,
                   drawings: DrawingCatalogService = Depends(get_drawing_service)):
    drawing = drawings.create_drawing(request.name)
    return APIResponse(
        success=True,
        data=drawing.model_dump(mode="json"),
        message="Drawing created",
        timestamp=_timestamp(),
    )


@router.patch("/drawings/{drawing_id}", response_model=APIResponse)
def rename_drawing(drawing_id: str, request: DrawingNameRequest,
                   drawings: DrawingCatalogService = Depends(get_drawing_service)):
    drawing = drawings.rename_drawing(drawing_id, request.name)
    return APIResponse(
        success=True,
        data=drawing.model_dump(mode="json"),
        message="Drawing renamed",
        timestamp=_timestamp(),
    )


@router.delete("/drawings/{drawing_id}", response_model=APIResponse)
def delete_drawing(drawing_id: str,
                   drawings: DrawingCatalogService = Depends(get_drawing_service)):
    drawings.delete_drawing(drawing_id)
    return APIResponse(success=True, message="Drawing deleted", timestamp=_timestamp())


@router.get("/drawings/{drawing_id}/diagram", response_model=APIResponse)
def load_diagram(drawing_id: str,
                 persistence: GraphPersistenceService = Depends(get_persistence_service),
                 shapes: ShapeCatalog = Depends(get_shape_catalog)):
    """
    Load a drawing.

    Routing exclusions and label anchors are recomputed before the diagram is
    returned.
    """
    result = persistence.load(drawing_id)

    canvas = InMemoryCanvas()
    canvas.load(result.document)
    topology = TopologyService(canvas, shapes)
    topology.refresh_routing()
    topology.refresh_label_anchors()

    return APIResponse(
        success=True,
        data={
            "drawing_id": drawing_id,
            "diagram": canvas.to_document().model_dump(mode="json"),
            "warnings": result.warnings,
        },
        timestamp=_timestamp(),
    )


@router.put("/drawings/{drawing_id}/diagram", response_model=APIResponse)
def save_diagram(drawing_id: str, document: DiagramDocument,
                 persistence: GraphPersistenceService = Depends(get_persistence_service)):
    """
    Save a drawing.

    Every edge is checked against the connection rules before anything is
    written.
    """
    canvas = InMemoryCanvas()
    for node in document.nodes:
        canvas.add_node(node)
    for edge in document.edges:
        canvas.add_edge(edge)

    result = persistence.save(drawing_id, canvas.to_document())
    logger.info(f"Saved drawing {drawing_id} through the API")
    return APIResponse(
        success=True,
        data=result.model_dump(mode="json"),
        message="Drawing saved",
        timestamp=_timestamp(),
    )
