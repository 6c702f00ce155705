"""Flask blueprint exposing the asset editing engine as JSON endpoints."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, List, Optional
from uuid import uuid4

from flask import Blueprint, current_app, jsonify, request, session
from werkzeug.datastructures import FileStorage

from src.asset_engine import (
    AttachmentFile,
    ContainerRect,
    EditingSession,
    InvalidFitModeError,
    PlacementState,
    ReorderInProgressError,
    SessionRegistry,
    UnknownItemError,
    format_file_size,
    normalize,
    state_from_properties,
    state_to_properties,
    user_message,
)
from src.asset_engine.collaborators import AssetGateway, LocalUploadStore
from src.db import slide_dal

logger = logging.getLogger(__name__)

editor_bp = Blueprint("editor", __name__, url_prefix="/editor")

_REGISTRY_KEY = "asset_engine.sessions"
_SESSION_COOKIE_KEY = "editor_session_id"


def _error(message: str, status: int, **extra: Any):
    payload = {"error": message}
    payload.update(extra)
    return jsonify(payload), status


def _resolve_upload_dir() -> Path:
    upload_root = current_app.config.setdefault(
        "EDITOR_UPLOAD_FOLDER",
        str(Path(current_app.instance_path) / "uploads"),
    )
    path = Path(upload_root)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _gateway() -> AssetGateway:
    return AssetGateway(uploads=LocalUploadStore(_resolve_upload_dir()))


def _persist_placement(key: str, state: PlacementState) -> None:
    presentation_id, asset_key = key.split("/", 1)
    slide_dal.save_placement(presentation_id, asset_key, state_to_properties(state))


def _new_session(session_id: str) -> EditingSession:
    window = float(current_app.config.get("EDITOR_CLICK_QUIESCENCE_MS", 300))
    return EditingSession(session_id=session_id, placement_sink=_persist_placement, quiescence_window=window)


def _registry() -> SessionRegistry:
    registry = current_app.extensions.get(_REGISTRY_KEY)
    if registry is None:
        idle = current_app.config.get("EDITOR_SESSION_IDLE_SECONDS")
        registry = current_app.extensions[_REGISTRY_KEY] = SessionRegistry(
            _new_session,
            idle_timeout=float(idle) if idle else None,
        )
    return registry


def _editor_session() -> EditingSession:
    session_id = session.get(_SESSION_COOKIE_KEY)
    if not session_id:
        session_id = uuid4().hex
        session[_SESSION_COOKIE_KEY] = session_id
    return _registry().get_or_create(session_id)


def _file_size(file: FileStorage) -> int:
    stream = file.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def _attachment_from_upload(file: FileStorage, last_modified: Optional[str]) -> AttachmentFile:
    try:
        stamp = int(last_modified) if last_modified else 0
    except ValueError:
        stamp = 0
    return AttachmentFile(
        name=file.filename or "",
        size_bytes=_file_size(file),
        mime_type=file.mimetype or "",
        last_modified=stamp,
    )


def _attachment_json(file: AttachmentFile) -> dict:
    return {
        "identity": file.identity,
        "name": file.name,
        "size_bytes": file.size_bytes,
        "size": format_file_size(file.size_bytes),
        "mime_type": file.mime_type,
    }


def _placement_json(key: str, editing: EditingSession) -> dict:
    mapper = editing.placements[key]
    return {
        "focus_mode": mapper.focus_mode,
        "object_position": mapper.object_position(),
        **mapper.to_properties(),
    }


def _load_placement(presentation_id: str, asset_key: str, editing: EditingSession):
    key = f"{presentation_id}/{asset_key}"
    if key in editing.placements:
        return key, editing.placements[key]
    seed = None
    try:
        seed = state_from_properties(slide_dal.get_placement(presentation_id, asset_key))
    except (ValueError, TypeError) as exc:
        logger.warning("Ignoring stored placement for %s: %s", key, exc)
    except Exception as exc:  # pragma: no cover - persistence best effort
        logger.warning("Could not load stored placement for %s: %s", key, exc)
    return key, editing.placement_for(key, seed=seed)


def _rect_from_json(data: Any) -> Optional[ContainerRect]:
    if not isinstance(data, dict):
        return None
    try:
        return ContainerRect(
            left=float(data["left"]),
            top=float(data["top"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )
    except (KeyError, TypeError, ValueError):
        return None


@editor_bp.route("/session", methods=["DELETE"])
def close_session():
    session_id = session.pop(_SESSION_COOKIE_KEY, None)
    closed = _registry().close(session_id) if session_id else False
    return jsonify({"closed": closed})


@editor_bp.route("/assets/normalize", methods=["POST"])
def normalize_references():
    data = request.get_json(silent=True) or {}
    raws: List[Optional[str]] = data["raws"] if isinstance(data.get("raws"), list) else [data.get("raw")]
    results = []
    for raw in raws:
        result = normalize(raw if isinstance(raw, str) else None)
        results.append({"raw": raw, "path": result.path.path or None, "outcome": result.outcome.value})
    return jsonify({"results": results})


@editor_bp.route("/attachments", methods=["GET"])
def list_attachments():
    editing = _editor_session()
    return jsonify({"files": [_attachment_json(f) for f in editing.attachments.files]})


@editor_bp.route("/attachments", methods=["POST"])
def add_attachments():
    files = [f for f in request.files.getlist("files") if f and f.filename]
    if not files:
        return _error("Please choose at least one file.", 400)
    stamps = request.form.getlist("last_modified")
    candidates = [
        _attachment_from_upload(f, stamps[i] if i < len(stamps) else None) for i, f in enumerate(files)
    ]

    editing = _editor_session()
    result = editing.attachments.add(candidates)
    title, description = user_message(result)
    payload = {
        "accepted": [_attachment_json(f) for f in result.accepted],
        "rejected": [_attachment_json(f) for f in result.rejected],
        "reason": result.reason.value if result.reason else None,
        "message": {"title": title, "description": description},
        "files": [_attachment_json(f) for f in editing.attachments.files],
    }
    status = 400 if result.reason is not None and not result.accepted else 200
    return jsonify(payload), status


@editor_bp.route("/attachments/<path:identity>", methods=["DELETE"])
def remove_attachment(identity: str):
    editing = _editor_session()
    removed = editing.attachments.remove(identity)
    return jsonify({"removed": removed, "files": [_attachment_json(f) for f in editing.attachments.files]})


@editor_bp.route("/attachments/reset", methods=["POST"])
def reset_attachments():
    _editor_session().attachments.reset()
    return jsonify({"files": []})


@editor_bp.route("/images", methods=["POST"])
def upload_image():
    file: Optional[FileStorage] = request.files.get("file")
    if not file or not file.filename:
        return _error("Please choose an image to upload.", 400)
    outcome = _gateway().upload_asset(file.read(), file.mimetype or "", file.filename)
    if outcome.error or outcome.asset is None:
        return _error(outcome.error or "Failed to upload image. Please try again.", 400)
    return jsonify(outcome.asset.model_dump()), 201


@editor_bp.route("/images", methods=["GET"])
def list_images():
    return jsonify({"images": [a.model_dump() for a in _gateway().list_uploaded()]})


@editor_bp.route("/images/<asset_id>", methods=["DELETE"])
def delete_image(asset_id: str):
    result = _gateway().delete_asset(asset_id)
    return jsonify(result.model_dump()), 200 if result.ok else 404


@editor_bp.route("/presentations/<presentation_id>/placements/<asset_key>", methods=["GET"])
def get_placement(presentation_id: str, asset_key: str):
    if not slide_dal.is_valid_key(asset_key):
        return _error("asset_key may only contain letters, digits, '_' and '-'.", 400)
    editing = _editor_session()
    key, _ = _load_placement(presentation_id, asset_key, editing)
    return jsonify(_placement_json(key, editing))


@editor_bp.route("/presentations/<presentation_id>/placements/<asset_key>/pointer", methods=["POST"])
def placement_pointer(presentation_id: str, asset_key: str):
    if not slide_dal.is_valid_key(asset_key):
        return _error("asset_key may only contain letters, digits, '_' and '-'.", 400)
    data = request.get_json(silent=True) or {}
    try:
        pointer_x = float(data["x"])
        pointer_y = float(data["y"])
    except (KeyError, TypeError, ValueError):
        return _error("x and y are required numbers.", 400)

    editing = _editor_session()
    key, mapper = _load_placement(presentation_id, asset_key, editing)
    try:
        route = mapper.handle_click(pointer_x, pointer_y, _rect_from_json(data.get("rect")))
    except Exception as exc:  # pragma: no cover - persistence dependent
        logger.exception("Saving placement for %s failed", key)
        return _error(f"Failed to save image properties: {exc}", 502)
    return jsonify({"route": route.value, **_placement_json(key, editing)})


@editor_bp.route("/presentations/<presentation_id>/placements/<asset_key>/fit", methods=["POST"])
def placement_fit(presentation_id: str, asset_key: str):
    if not slide_dal.is_valid_key(asset_key):
        return _error("asset_key may only contain letters, digits, '_' and '-'.", 400)
    data = request.get_json(silent=True) or {}
    editing = _editor_session()
    key, mapper = _load_placement(presentation_id, asset_key, editing)
    try:
        mapper.set_fit(data.get("fit"))
    except InvalidFitModeError as exc:
        return _error(str(exc), 400)
    except Exception as exc:  # pragma: no cover - persistence dependent
        logger.exception("Saving placement for %s failed", key)
        return _error(f"Failed to save image properties: {exc}", 502)
    return jsonify(_placement_json(key, editing))


@editor_bp.route("/presentations/<presentation_id>/placements/<asset_key>/focus-mode", methods=["POST"])
def placement_focus_mode(presentation_id: str, asset_key: str):
    if not slide_dal.is_valid_key(asset_key):
        return _error("asset_key may only contain letters, digits, '_' and '-'.", 400)
    editing = _editor_session()
    key, mapper = _load_placement(presentation_id, asset_key, editing)
    try:
        mapper.toggle_focus_mode()
    except Exception as exc:  # pragma: no cover - persistence dependent
        logger.exception("Saving placement for %s failed", key)
        return _error(f"Failed to save image properties: {exc}", 502)
    return jsonify(_placement_json(key, editing))


@editor_bp.route("/presentations/<presentation_id>/slides/order", methods=["POST"])
def reorder_slides(presentation_id: str):
    data = request.get_json(silent=True) or {}
    slide_ids = data.get("slide_ids")
    item_id = data.get("item_id")
    drop_index = data.get("drop_index")
    if not isinstance(slide_ids, list) or not isinstance(item_id, str) or not isinstance(drop_index, int):
        return _error("slide_ids (list), item_id (str) and drop_index (int) are required.", 400)

    editing = _editor_session()
    try:
        controller = editing.order_for(slide_ids)
        items = controller.drop(item_id, drop_index)
    except UnknownItemError as exc:
        return _error(str(exc), 400)
    except ReorderInProgressError as exc:
        return _error(str(exc), 409)
    except ValueError as exc:
        return _error(str(exc), 400)

    ordered = [item.id for item in items]
    try:
        slide_dal.save_slide_order(presentation_id, ordered)
    except Exception as exc:  # pragma: no cover - persistence dependent
        logger.exception("Saving slide order for %s failed", presentation_id)
        return _error(f"Failed to save slide order: {exc}", 502, slides=ordered)
    return jsonify({"slides": [{"id": i.id, "position": i.position} for i in items]})


__all__ = ["editor_bp"]
