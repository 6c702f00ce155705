"""Editor blueprint package."""

from __future__ import annotations

from importlib import import_module
from typing import Any


def get_blueprint() -> Any:
    """Import lazily so the Mongo wiring is only touched once Flask boots."""
    routes = import_module("src.editor.routes")
    return routes.editor_bp


__all__ = ["get_blueprint"]
