import re
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Sequence

from .mongo import get_collection

# keys become part of a dotted update path, so "." and "$" are not allowed
_KEY_RE = re.compile(r"^[A-Za-z0-9_\-]+$")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def is_valid_key(value: str) -> bool:
    return bool(value) and bool(_KEY_RE.match(value))


def _check_key(name: str, value: str) -> None:
    if not is_valid_key(value):
        raise ValueError(f"{name} must match {_KEY_RE.pattern}, got {value!r}")


def get_slides_coll():
    return get_collection("slide_state")


def get_placement(presentation_id: str, asset_key: str) -> Optional[Dict[str, Any]]:
    """Return the stored ``initialObjectFit``/``initialFocusPoint`` payload, if any."""
    _check_key("asset_key", asset_key)
    doc = get_slides_coll().find_one(
        {"presentationId": presentation_id},
        {f"placements.{asset_key}": 1, "_id": 0},
    )
    if not doc:
        return None
    return (doc.get("placements") or {}).get(asset_key)


def save_placement(presentation_id: str, asset_key: str, properties: Dict[str, Any]) -> None:
    """Persist fit and focus point for one asset.

    Both values are written under a single key in one update so a reader never
    sees a focus point paired with another fit mode.
    """
    if not presentation_id:
        raise ValueError("presentation_id is required")
    _check_key("asset_key", asset_key)
    if "initialObjectFit" not in properties or "initialFocusPoint" not in properties:
        raise ValueError("properties must carry both initialObjectFit and initialFocusPoint")

    now = _now_iso()
    get_slides_coll().update_one(
        {"presentationId": presentation_id},
        {
            "$set": {f"placements.{asset_key}": dict(properties), "updated_at": now},
            "$setOnInsert": {"created_at": now},
        },
        upsert=True,
    )


def save_slide_order(presentation_id: str, ordered_ids: Sequence[str]) -> None:
    if not presentation_id:
        raise ValueError("presentation_id is required")
    ids = list(ordered_ids)
    if len(set(ids)) != len(ids):
        raise ValueError("slide order contains duplicate ids")
    now = _now_iso()
    get_slides_coll().update_one(
        {"presentationId": presentation_id},
        {
            "$set": {"slideOrder": ids, "updated_at": now},
            "$setOnInsert": {"created_at": now},
        },
        upsert=True,
    )


def get_slide_order(presentation_id: str) -> List[str]:
    doc = get_slides_coll().find_one({"presentationId": presentation_id}, {"slideOrder": 1, "_id": 0})
    return list((doc or {}).get("slideOrder") or [])


def delete_slide_state(presentation_id: str) -> bool:
    if not presentation_id:
        return False
    res = get_slides_coll().delete_one({"presentationId": presentation_id})
    return res.deleted_count > 0
