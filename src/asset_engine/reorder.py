"""Click-versus-drag disambiguation for a reorderable list.

A gesture moves through ``IDLE -> POINTER_DOWN -> (DRAGGING | CLICK_PENDING) -> IDLE``.
A click is accepted only from ``CLICK_PENDING`` and only once the item's
quiescence window has elapsed since its previous accepted click. Reorder
commits pass through ``SETTLING``; no gesture may start while a commit settles.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from .errors import ReorderInProgressError, UnknownItemError
from .models import ClickEvent, OrderableItem

logger = logging.getLogger(__name__)

DEFAULT_QUIESCENCE_WINDOW = 300

CommitListener = Callable[[List[OrderableItem]], None]


class GestureState(str, Enum):
    IDLE = "idle"
    POINTER_DOWN = "pointer_down"
    DRAGGING = "dragging"
    CLICK_PENDING = "click_pending"
    SETTLING = "settling"


def reorder_ids(ids: List[str], item_id: str, drop_index: int) -> List[str]:
    """Move ``item_id`` to ``drop_index``; the index is clamped to the list bounds."""
    if item_id not in ids:
        raise UnknownItemError(f"Unknown item '{item_id}'")
    remaining = [i for i in ids if i != item_id]
    index = max(0, min(drop_index, len(remaining)))
    remaining.insert(index, item_id)
    return remaining


class ReorderInteractionController:
    def __init__(
        self,
        item_ids: Iterable[str],
        *,
        quiescence_window: float = DEFAULT_QUIESCENCE_WINDOW,
        on_commit: Optional[CommitListener] = None,
    ) -> None:
        self._ids = self._validated(item_ids)
        self.quiescence_window = quiescence_window
        self._listeners: List[CommitListener] = [on_commit] if on_commit else []
        self._state = GestureState.IDLE
        self._gesture_item: Optional[str] = None
        self._pressed_at: Optional[float] = None
        self._last_accepted: Dict[str, float] = {}
        self.selected_id: Optional[str] = None

    @staticmethod
    def _validated(item_ids: Iterable[str]) -> List[str]:
        ids = list(item_ids)
        if len(set(ids)) != len(ids):
            raise ValueError("item ids must be unique")
        return ids

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def items(self) -> List[OrderableItem]:
        return [OrderableItem(id=item_id, position=pos) for pos, item_id in enumerate(self._ids)]

    def add_listener(self, listener: CommitListener) -> None:
        self._listeners.append(listener)

    def replace_items(self, item_ids: Iterable[str]) -> None:
        self._ensure_settled()
        self._ids = self._validated(item_ids)
        self._last_accepted = {k: v for k, v in self._last_accepted.items() if k in self._ids}
        if self.selected_id not in self._ids:
            self.selected_id = None
        self._reset_gesture()

    def pointer_down(self, item_id: str, now: float) -> None:
        self._ensure_settled()
        self._require_known(item_id)
        if self._state is not GestureState.IDLE:
            logger.debug("Discarding unfinished gesture on '%s'", self._gesture_item)
        self._gesture_item = item_id
        self._state = GestureState.POINTER_DOWN
        self._pressed_at = now

    def drag_start(self, item_id: Optional[str] = None) -> None:
        self._ensure_settled()
        target = item_id or self._gesture_item
        if target is None:
            raise UnknownItemError("drag started without an item")
        self._require_known(target)
        self._gesture_item = target
        self._state = GestureState.DRAGGING

    def pointer_up(self, item_id: str, now: float) -> Optional[ClickEvent]:
        if self._state is GestureState.SETTLING:
            return None
        if self._state is GestureState.DRAGGING:
            logger.debug("Click on '%s' suppressed by active drag (held %s)", item_id, self._held_for(now))
            self._reset_gesture()
            return None
        if self._state is not GestureState.POINTER_DOWN or self._gesture_item != item_id:
            # release without a matching press, e.g. the click trailing a drop
            self._reset_gesture()
            return None

        self._state = GestureState.CLICK_PENDING
        previous = self._last_accepted.get(item_id)
        self._reset_gesture()
        if previous is not None and now - previous < self.quiescence_window:
            logger.debug("Click on '%s' within quiescence window (%.0f since last)", item_id, now - previous)
            return None
        self._last_accepted[item_id] = now
        self.selected_id = item_id
        return ClickEvent(item_id=item_id, timestamp=now)

    def cancel(self) -> None:
        if self._state is not GestureState.SETTLING:
            self._reset_gesture()

    def drop(self, item_id: str, drop_index: int) -> List[OrderableItem]:
        """Commit ``item_id`` at ``drop_index`` and return the settled sequence.

        This is also the entry point for moves decided elsewhere (a client that
        tracked the drag itself), so no prior ``pointer_down``/``drag_start`` is
        required. Any gesture in flight ends here; a release that follows is not
        a click.
        """
        self._ensure_settled()
        new_ids = reorder_ids(self._ids, item_id, drop_index)
        self._state = GestureState.SETTLING
        try:
            self._ids = new_ids
            settled = self.items
            for listener in list(self._listeners):
                listener(settled)
        finally:
            self._reset_gesture()
        return self.items

    def _ensure_settled(self) -> None:
        if self._state is GestureState.SETTLING:
            raise ReorderInProgressError("previous reorder has not settled yet")

    def _require_known(self, item_id: str) -> None:
        if item_id not in self._ids:
            raise UnknownItemError(f"Unknown item '{item_id}'")

    def _held_for(self, now: float) -> Optional[float]:
        if self._pressed_at is None:
            return None
        return now - self._pressed_at

    def _reset_gesture(self) -> None:
        self._state = GestureState.IDLE
        self._gesture_item = None
        self._pressed_at = None


__all__ = [
    "DEFAULT_QUIESCENCE_WINDOW",
    "GestureState",
    "ReorderInteractionController",
    "reorder_ids",
]
