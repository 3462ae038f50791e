"""Tests for the Cypher repositories against a mocked Neo4j session."""

from __future__ import annotations

import pytest

from pidsync.services.drawing_catalog import DrawingRepository
from pidsync.services.persistence import GraphRepository
from pidsync.shared import DatabaseError


@pytest.fixture
def db(mocker):
    """A database manager whose session hands out one mocked transaction."""
    db = mocker.MagicMock()
    db.session.return_value.__enter__.return_value.begin_transaction.return_value = mocker.MagicMock()
    return db


@pytest.fixture
def tx(db):
    return db.session.return_value.__enter__.return_value.begin_transaction.return_value


def _records(mocker, *rows):
    records = []
    for row in rows:
        record = mocker.Mock()
        record.data.return_value = row
        records.append(record)
    return records


def test_transaction_commits(db, tx):
    with GraphRepository(db).transaction() as active:
        assert active is tx

    tx.commit.assert_called_once()
    tx.rollback.assert_not_called()


def test_transaction_rolls_back_on_error(db, tx):
    with pytest.raises(DatabaseError):
        with GraphRepository(db).transaction():
            raise RuntimeError("constraint violated")

    tx.rollback.assert_called_once()
    tx.commit.assert_not_called()


def test_create_assets_spells_out_labels(mocker):
    tx = mocker.Mock()
    tx.run.return_value = _records(mocker, {"created": 1})

    created = GraphRepository(mocker.Mock()).create_assets(tx, ["Asset", "Equipment", "Valve"], [{"uid": "V-1"}])

    assert created == 1
    query, parameters = tx.run.call_args[0]
    assert "CREATE (n:Asset:Equipment:Valve)" in query
    assert parameters == {"rows": [{"uid": "V-1"}]}


def test_empty_batches_do_not_hit_the_database(mocker):
    tx = mocker.Mock()
    repository = GraphRepository(mocker.Mock())

    assert repository.create_assets(tx, ["Asset"], []) == 0
    assert repository.create_relationships(tx, "D-1", "PIPE", []) == 0
    tx.run.assert_not_called()


@pytest.mark.parametrize("labels", [["Asset", "Valve) DETACH DELETE (x"], ["1Asset"]])
def test_unsafe_labels_are_refused(mocker, labels):
    with pytest.raises(ValueError):
        GraphRepository(mocker.Mock()).create_assets(mocker.Mock(), labels, [{"uid": "V-1"}])


def test_relationship_kind_must_be_known(mocker):
    with pytest.raises(ValueError):
        GraphRepository(mocker.Mock()).create_relationships(mocker.Mock(), "D-1", "FLOWS", [{"source": "a"}])


def test_relationships_are_typed_by_kind(mocker):
    tx = mocker.Mock()
    tx.run.return_value = _records(mocker, {"created": 1})

    GraphRepository(mocker.Mock()).create_relationships(
        tx, "D-1", "MEASURES", [{"source": "PT-1", "target": "T-1", "properties": {}}],
    )

    assert "-[r:MEASURES]->" in tx.run.call_args[0][0]


def test_delete_drawing_reports_missing(db, tx, mocker):
    tx.run.side_effect = [_records(mocker, {"deleted": 0}), []]

    assert DrawingRepository(db).delete_drawing("missing") is False
    tx.commit.assert_called_once()


def test_catalog_queries_go_through_the_manager(db):
    db.run.return_value = [{"id": "D-1", "name": "PID-001", "created_at": None, "updated_at": None}]

    assert DrawingRepository(db).get_drawing("D-1")["name"] == "PID-001"
    assert db.run.call_args[0][1] == {"drawing_id": "D-1"}


def test_connector_peers_carry_their_drawing(mocker):
    tx = mocker.Mock()
    tx.run.return_value = _records(mocker, {"drawing_id": "D-2", "uid": "OPC"})

    peers = GraphRepository(mocker.Mock()).find_connector_peers(tx, "D-1", "OPC-1")

    assert peers == [("D-2", "OPC")]
    assert tx.run.call_args[0][1] == {"tag": "OPC-1", "drawing_id": "D-1"}


def test_links_match_connectors_within_their_drawing(mocker):
    tx = mocker.Mock()
    tx.run.return_value = []

    GraphRepository(mocker.Mock()).merge_link(tx, ("D-1", "OPC"), ("D-2", "OPC"))

    query, parameters = tx.run.call_args[0]
    assert "{drawingId: $source_drawing_id, uid: $source_uid}" in query
    assert "-[:LINKS_TO]-" in query
    assert parameters == {"source_drawing_id": "D-1", "source_uid": "OPC",
                          "target_drawing_id": "D-2", "target_uid": "OPC"}
