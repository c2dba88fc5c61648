from __future__ import annotations

import pytest

from records_backend.domain.errors import NotFoundError, StorageError
from records_backend.domain.records import PostRecordInput, UpdateRecordInput
from records_backend.repository import record_repo


def _new(repo, title="Kind of Blue", artist="Miles Davis", price=40):
    return repo.create(PostRecordInput(title=title, artist=artist, price=price))


def test_create_then_read_one_round_trip(repo):
    rec = _new(repo)
    assert rec.id
    assert (rec.title, rec.artist, rec.price) == ("Kind of Blue", "Miles Davis", 40)
    assert repo.read_one(rec.id) == rec


def test_read_empty_and_ordered(repo):
    assert repo.read() == []
    a = _new(repo, title="A")
    b = _new(repo, title="B")
    assert repo.read() == [a, b]


def test_read_one_missing_raises_not_found(repo):
    with pytest.raises(NotFoundError) as ei:
        repo.read_one("42")
    assert ei.value.record_id == "42"
    assert str(ei.value) == "record not found"


def test_update_only_touches_present_fields(repo):
    rec = _new(repo)
    out = repo.update(rec.id, UpdateRecordInput(price=12))
    assert out.price == 12
    assert (out.title, out.artist) == (rec.title, rec.artist)


def test_update_without_changes_still_checks_existence(repo):
    rec = _new(repo)
    assert repo.update(rec.id, UpdateRecordInput()) == rec
    with pytest.raises(NotFoundError):
        repo.update("999", UpdateRecordInput())


def test_update_missing_raises_not_found(repo):
    with pytest.raises(NotFoundError):
        repo.update("999", UpdateRecordInput(title="X"))


def test_delete_returns_id_then_not_found(repo):
    rec = _new(repo)
    assert repo.delete(rec.id) == rec.id
    with pytest.raises(NotFoundError):
        repo.read_one(rec.id)
    with pytest.raises(NotFoundError):
        repo.delete(rec.id)


def test_closed_connection_surfaces_storage_error(repo):
    repo.conn.close()
    with pytest.raises(StorageError):
        repo.read()
    with pytest.raises(StorageError):
        _new(repo)


def test_update_fields_returns_updated_row(repo):
    rec = _new(repo)
    row = record_repo.update_fields(repo.conn, rec.id, {"title": "T", "artist": "A"})
    assert (row["title"], row["artist"], row["price"]) == ("T", "A", rec.price)
    assert record_repo.update_fields(repo.conn, "999", {"title": "T"}) is None
    assert repo.read_one(rec.id).title == "T"


def test_create_and_update_issue_one_statement_each(repo):
    statements = []
    repo.conn.set_trace_callback(statements.append)
    try:
        rec = _new(repo)
        repo.update(rec.id, UpdateRecordInput(title="Sketches of Spain"))
    finally:
        repo.conn.set_trace_callback(None)
    assert len(statements) == 2
    assert statements[0].startswith("INSERT INTO records")
    assert statements[1].startswith("UPDATE records SET title=")
