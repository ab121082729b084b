from __future__ import annotations

import json

import pytest

from formfill.model.field import FieldType, TextField, new_field
from formfill.state.session import DocumentSession, JsonFieldStore


def _session() -> DocumentSession:
    session = DocumentSession(document_id="doc")
    first = new_field(FieldType.TEXT, 1, 10.0, 10.0, slug="name")
    second = new_field(FieldType.ICON, 1, 50.0, 50.0, slug="agree")
    third = new_field(FieldType.TEXT, 2, 10.0, 10.0, slug="date")
    second.z_index = -1
    for item in (first, second, third):
        session.add(item)
    return session


def test_add_selects_the_new_field():
    session = _session()
    assert session.selected_id == session.fields[-1].id


def test_page_fields_orders_by_z_index_then_list_order():
    session = _session()
    assert [item.slug for item in session.page_fields(1)] == ["agree", "name"]
    assert [item.slug for item in session.page_fields(2)] == ["date"]
    assert session.page_fields(3) == []


def test_update_replaces_the_field():
    session = _session()
    target = session.fields[0]
    updated = session.update(target.id, x=99.0)
    assert isinstance(updated, TextField)
    assert session.get(target.id).x == 99.0
    with pytest.raises(KeyError):
        session.update("missing", x=1.0)


def test_remove_clears_selection():
    session = _session()
    selected = session.selected_id
    assert session.remove(selected)
    assert session.selected_id is None
    assert not session.remove(selected)


def test_duplicate_slugs():
    session = _session()
    session.add(new_field(FieldType.TEXT, 1, 0.0, 0.0, slug="name"))
    assert session.duplicate_slugs() == {"name"}


def test_store_replaces_the_whole_list(tmp_path):
    store = JsonFieldStore(tmp_path / "fields")
    session = _session()
    assert store.list_fields("doc") == []

    assert store.replace_fields("doc", session.all_fields()) == 3
    assert store.list_fields("doc") == session.all_fields()

    assert store.replace_fields("doc", session.all_fields()[:1]) == 1
    records = json.loads((tmp_path / "fields" / "doc.json").read_text(encoding="utf-8"))
    assert [record["slug"] for record in records] == ["name"]
    assert not (tmp_path / "fields" / "doc.json.tmp").exists()
