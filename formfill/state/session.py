"""In-memory editor state and the field store collaborator."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, replace
import json
import logging
from pathlib import Path
from typing import Any, Protocol

from formfill.model.field import Field, field_from_record, field_to_record

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DocumentSession:
    """Authoritative field list for one document, in logical coordinates.

    The list order is the stacking order handed to the fill engine.
    """

    document_id: str = ""
    fields: list[Field] = field(default_factory=list)
    selected_id: str | None = None

    def get(self, field_id: str) -> Field | None:
        for item in self.fields:
            if item.id == field_id:
                return item
        return None

    def add(self, new_field: Field) -> Field:
        self.fields.append(new_field)
        self.selected_id = new_field.id
        return new_field

    def update(self, field_id: str, **changes: Any) -> Field:
        for index, item in enumerate(self.fields):
            if item.id == field_id:
                updated = replace(item, **changes)
                self.fields[index] = updated
                return updated
        raise KeyError(field_id)

    def remove(self, field_id: str) -> bool:
        before = len(self.fields)
        self.fields = [item for item in self.fields if item.id != field_id]
        if self.selected_id == field_id:
            self.selected_id = None
        return len(self.fields) != before

    def select(self, field_id: str | None) -> Field | None:
        self.selected_id = field_id
        return self.get(field_id) if field_id is not None else None

    def page_fields(self, page_number: int) -> list[Field]:
        """Fields on a page, back to front by z-index, list order breaking ties."""
        on_page = [item for item in self.fields if item.page_number == page_number]
        return sorted(on_page, key=lambda item: item.z_index)

    def replace_all(self, fields: list[Field]) -> None:
        self.fields = list(fields)
        if self.selected_id is not None and self.get(self.selected_id) is None:
            self.selected_id = None

    def all_fields(self) -> list[Field]:
        return list(self.fields)

    def duplicate_slugs(self) -> set[str]:
        counts = Counter(item.slug for item in self.fields)
        return {slug for slug, count in counts.items() if count > 1}


class FieldStore(Protocol):
    def list_fields(self, document_id: str) -> list[Field]: ...

    def replace_fields(self, document_id: str, fields: list[Field]) -> int: ...


class JsonFieldStore:
    """One JSON file per document; saving replaces the whole field list."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    def _path(self, document_id: str) -> Path:
        return self._directory / f"{document_id}.json"

    def list_fields(self, document_id: str) -> list[Field]:
        path = self._path(document_id)
        if not path.exists():
            return []
        records = json.loads(path.read_text(encoding="utf-8"))
        return [field_from_record(record) for record in records]

    def replace_fields(self, document_id: str, fields: list[Field]) -> int:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._path(document_id)
        temp_path = path.with_suffix(".json.tmp")
        temp_path.write_text(
            json.dumps([field_to_record(item) for item in fields], indent=2),
            encoding="utf-8",
        )
        temp_path.replace(path)
        logger.info("Saved %d field(s) for document %s", len(fields), document_id)
        return len(fields)
