from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional
from uuid import uuid4

from .attachments import AttachmentWorkingSet
from .models import PlacementState
from .placement import PlacementMapper
from .reorder import DEFAULT_QUIESCENCE_WINDOW, ReorderInteractionController

logger = logging.getLogger(__name__)

PlacementSink = Callable[[str, PlacementState], None]


@dataclass
class EditingSession:
    """State owned by one editing session, handed explicitly to each component."""

    session_id: str = field(default_factory=lambda: uuid4().hex)
    placement_sink: Optional[PlacementSink] = None
    quiescence_window: float = DEFAULT_QUIESCENCE_WINDOW
    placements: Dict[str, PlacementMapper] = field(default_factory=dict)
    attachments: AttachmentWorkingSet = field(default_factory=AttachmentWorkingSet)
    slide_order: Optional[ReorderInteractionController] = None

    def placement_for(self, asset_key: str, seed: Optional[PlacementState] = None) -> PlacementMapper:
        mapper = self.placements.get(asset_key)
        if mapper is None:
            mapper = PlacementMapper(state=seed, on_commit=self._commit_for(asset_key))
            self.placements[asset_key] = mapper
        return mapper

    def order_for(self, item_ids: Iterable[str]) -> ReorderInteractionController:
        """Return the slide-order controller, creating or resyncing it to ``item_ids``."""
        ids = list(item_ids)
        if self.slide_order is None:
            self.slide_order = ReorderInteractionController(ids, quiescence_window=self.quiescence_window)
        elif [item.id for item in self.slide_order.items] != ids:
            self.slide_order.replace_items(ids)
        return self.slide_order

    def close(self) -> None:
        self.placements.clear()
        self.attachments.reset()
        self.slide_order = None

    def _commit_for(self, asset_key: str) -> Callable[[PlacementState], None]:
        def commit(state: PlacementState) -> None:
            if self.placement_sink is not None:
                self.placement_sink(asset_key, state)

        return commit


class SessionRegistry:
    """Live editing sessions keyed by id.

    With ``idle_timeout`` set, sessions untouched for longer than that many
    seconds are closed the next time the registry is consulted.
    """

    def __init__(
        self,
        factory: Optional[Callable[[str], EditingSession]] = None,
        *,
        idle_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sessions: Dict[str, EditingSession] = {}
        self._last_seen: Dict[str, float] = {}
        self._factory = factory or (lambda session_id: EditingSession(session_id=session_id))
        self._idle_timeout = idle_timeout
        self._clock = clock

    def get_or_create(self, session_id: str) -> EditingSession:
        now = self._clock()
        self.evict_idle(now)
        session = self._sessions.get(session_id)
        if session is None:
            session = self._factory(session_id)
            self._sessions[session_id] = session
        self._last_seen[session_id] = now
        return session

    def get(self, session_id: str) -> Optional[EditingSession]:
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        self._last_seen.pop(session_id, None)
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        return True

    def evict_idle(self, now: Optional[float] = None) -> int:
        if self._idle_timeout is None:
            return 0
        now = self._clock() if now is None else now
        stale = [sid for sid, seen in self._last_seen.items() if now - seen > self._idle_timeout]
        for session_id in stale:
            logger.debug("Closing idle editing session %s", session_id)
            self.close(session_id)
        return len(stale)

    def __len__(self) -> int:
        return len(self._sessions)


__all__ = ["EditingSession", "PlacementSink", "SessionRegistry"]
