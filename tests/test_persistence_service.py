"""Tests for saving and loading drawings through the graph repository."""

from __future__ import annotations

import pytest
from fakes import InMemoryGraphRepository
from scenes import LINE_ID, build_pump_line, place

from pidsync.services.persistence import GraphPersistenceService
from pidsync.shared import PersistenceError

DRAWING = "D-200"


@pytest.fixture
def document(canvas, shapes):
    build_pump_line(canvas, shapes)
    place(canvas, shapes, "p-opc", 400, 85, "OPC-A", tag="OPC-7")
    return canvas.to_document()


def test_save_reports_counts(persistence, document, graph_repository):
    result = persistence.save(DRAWING, document)

    assert result.drawing_id == DRAWING
    assert result.asset_count == 3
    assert result.relationship_count == 1
    assert result.link_count == 0
    assert result.skipped_edge_ids == []
    assert DRAWING in graph_repository.drawings
    assert graph_repository.commits == 1


def test_save_replaces_previous_contents(persistence, document, graph_repository, canvas):
    persistence.save(DRAWING, document)

    canvas.remove_node("OPC-A")
    canvas.remove_edge(LINE_ID)
    persistence.save(DRAWING, canvas.to_document())

    assert graph_repository.uids() == ["P-101", "P-102"]
    assert graph_repository.relationships == []


def test_save_leaves_other_drawings_alone(persistence, document, graph_repository, canvas):
    persistence.save(DRAWING, document)
    other = canvas.to_document().model_copy(update={"edges": []})

    persistence.save("D-201", other)

    assert len(graph_repository.assets) == 6
    assert len(graph_repository.relationships) == 1
    assert graph_repository.uids("D-201") == graph_repository.uids(DRAWING)


def test_failed_save_rolls_back(shapes, document):
    repository = InMemoryGraphRepository()
    service = GraphPersistenceService(shapes, repository)
    service.save(DRAWING, document)
    before = (dict(repository.assets), list(repository.relationships))

    repository.fail_on = "create_relationships"
    with pytest.raises(PersistenceError):
        service.save(DRAWING, document.model_copy(update={"nodes": document.nodes[:2]}))

    assert (repository.assets, repository.relationships) == before
    assert repository.rollbacks == 1


def test_load_returns_document(persistence, document):
    persistence.save(DRAWING, document)

    result = persistence.load(DRAWING)

    assert result.drawing_id == DRAWING
    assert sorted(n.id for n in result.document.nodes) == ["OPC-A", "P-101", "P-102"]
    assert len(result.document.edges) == 1


def test_load_unknown_drawing_is_empty(persistence):
    result = persistence.load("never-saved")
    assert result.document.nodes == []
    assert result.document.edges == []


def test_failed_load_raises(shapes):
    service = GraphPersistenceService(shapes, InMemoryGraphRepository(fail_on="fetch_assets"))
    with pytest.raises(PersistenceError):
        service.load(DRAWING)
