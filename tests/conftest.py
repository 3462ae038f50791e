"""Shared test fixtures for the pidsync test suite."""

from __future__ import annotations

import pytest

from fakes import InMemoryDrawingRepository, InMemoryGraphRepository
from scenes import build_pump_line

from pidsync.services.canvas import InMemoryCanvas
from pidsync.services.drawing_catalog import DrawingCatalogService
from pidsync.services.persistence import GraphPersistenceService
from pidsync.services.shape_catalog import load_shape_catalog
from pidsync.services.topology import TopologyService
from pidsync.shared import DiagramEdge, NotificationInbox, Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(grid_size=10, geometry_tolerance=5.0, orientation_tolerance_deg=10.0)


@pytest.fixture(scope="session")
def shapes():
    """The built-in shape library."""
    return load_shape_catalog()


@pytest.fixture
def canvas() -> InMemoryCanvas:
    return InMemoryCanvas()


@pytest.fixture
def inbox() -> NotificationInbox:
    return NotificationInbox()


@pytest.fixture
def topology(canvas, shapes, settings, inbox) -> TopologyService:
    """Topology engine attached to the canvas."""
    service = TopologyService(canvas, shapes, settings, inbox)
    service.attach()
    yield service
    service.detach()


@pytest.fixture
def pump_line(canvas, shapes, topology) -> DiagramEdge:
    """The pump line on a canvas watched by the topology engine."""
    return build_pump_line(canvas, shapes)


@pytest.fixture
def graph_repository() -> InMemoryGraphRepository:
    return InMemoryGraphRepository()


@pytest.fixture
def persistence(shapes, graph_repository) -> GraphPersistenceService:
    return GraphPersistenceService(shapes, graph_repository)


@pytest.fixture
def drawing_repository(graph_repository) -> InMemoryDrawingRepository:
    return InMemoryDrawingRepository(graph_repository)


@pytest.fixture
def drawings(drawing_repository, settings) -> DrawingCatalogService:
    return DrawingCatalogService(drawing_repository, settings)
