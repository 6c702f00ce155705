from __future__ import annotations

import copy
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from app import create_app
from src.db import slide_dal


class FakeCollection:
    """Enough of a pymongo collection for the slide_state accessors."""

    def __init__(self) -> None:
        self.docs: Dict[str, Dict[str, Any]] = {}
        self.updates: List[Dict[str, Any]] = []

    @staticmethod
    def _set_path(doc: Dict[str, Any], dotted: str, value: Any) -> None:
        parts = dotted.split(".")
        target = doc
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        target[parts[-1]] = copy.deepcopy(value)

    def update_one(self, flt: Dict[str, Any], update: Dict[str, Any], upsert: bool = False):
        self.updates.append(copy.deepcopy(update))
        key = flt["presentationId"]
        doc = self.docs.get(key)
        inserted = doc is None
        if inserted:
            if not upsert:
                return SimpleNamespace(matched_count=0)
            doc = {"presentationId": key}
            self.docs[key] = doc
            for path, value in update.get("$setOnInsert", {}).items():
                self._set_path(doc, path, value)
        for path, value in update.get("$set", {}).items():
            self._set_path(doc, path, value)
        return SimpleNamespace(matched_count=0 if inserted else 1)

    def find_one(self, flt: Dict[str, Any], projection: Dict[str, Any] | None = None):
        doc = self.docs.get(flt["presentationId"])
        return copy.deepcopy(doc) if doc is not None else None

    def delete_one(self, flt: Dict[str, Any]):
        removed = self.docs.pop(flt["presentationId"], None)
        return SimpleNamespace(deleted_count=1 if removed is not None else 0)


@pytest.fixture
def fake_slides(monkeypatch) -> FakeCollection:
    coll = FakeCollection()
    monkeypatch.setattr(slide_dal, "get_slides_coll", lambda: coll)
    return coll


@pytest.fixture
def app(tmp_path, fake_slides):
    return create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "EDITOR_UPLOAD_FOLDER": str(tmp_path / "uploads"),
        }
    )


@pytest.fixture
def client(app):
    return app.test_client()
