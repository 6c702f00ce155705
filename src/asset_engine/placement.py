"""Pointer-driven focus point and fit-mode editing for one asset instance."""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from enum import Enum
from typing import Any, Callable, Optional

from .errors import ErrorKind, InvalidFitModeError
from .models import ContainerRect, FitMode, FocusPoint, PlacementState

logger = logging.getLogger(__name__)

PlacementCommit = Callable[[PlacementState], None]


class ClickRoute(str, Enum):
    ACTIVATE = "activate"
    FOCUS_UPDATED = "focus_updated"
    FOCUS_SKIPPED = "focus_skipped"


def _clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


def _usable_rect(rect: ContainerRect) -> bool:
    values = (rect.left, rect.top, rect.width, rect.height)
    if not all(math.isfinite(v) for v in values):
        return False
    return rect.width > 0 and rect.height > 0


def coerce_fit(mode: FitMode | str) -> FitMode:
    if isinstance(mode, FitMode):
        return mode
    if isinstance(mode, str):
        try:
            return FitMode(mode)
        except ValueError:
            pass
    raise InvalidFitModeError(f"Unsupported fit mode {mode!r}; expected one of {[m.value for m in FitMode]}")


def _focus_from_raw(focus_raw: Any) -> Optional[FocusPoint]:
    if not isinstance(focus_raw, dict):
        return None
    try:
        x = float(focus_raw.get("x", 50.0))
        y = float(focus_raw.get("y", 50.0))
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return FocusPoint(_clamp_percent(x), _clamp_percent(y))


def state_from_properties(properties: Optional[dict]) -> PlacementState:
    """Seed a placement from a persisted ``initialFocusPoint``/``initialObjectFit`` payload.

    Missing or malformed entries fall back to the defaults; out-of-range focus
    values are clamped.
    """
    state = PlacementState()
    if not isinstance(properties, dict):
        return state
    fit_raw = properties.get("initialObjectFit")
    if fit_raw:
        try:
            state = replace(state, fit=coerce_fit(fit_raw))
        except InvalidFitModeError:
            logger.warning("Ignoring stored fit %r", fit_raw)
    focus_raw = properties.get("initialFocusPoint")
    if focus_raw:
        point = _focus_from_raw(focus_raw)
        if point is None:
            logger.warning("Ignoring stored focus point %r", focus_raw)
        else:
            state = replace(state, focus_point=point)
    return state


def state_to_properties(state: PlacementState) -> dict:
    return {
        "initialObjectFit": state.fit.value,
        "initialFocusPoint": {"x": state.focus_point.x, "y": state.focus_point.y},
    }


class PlacementMapper:
    def __init__(
        self,
        state: Optional[PlacementState] = None,
        on_commit: Optional[PlacementCommit] = None,
    ) -> None:
        self._state = state or PlacementState()
        self._on_commit = on_commit
        self._focus_mode = False

    @property
    def state(self) -> PlacementState:
        return self._state

    @property
    def focus_mode(self) -> bool:
        return self._focus_mode

    def object_position(self) -> str:
        return f"{self._state.focus_point.x}% {self._state.focus_point.y}%"

    def to_properties(self) -> dict:
        return state_to_properties(self._state)

    def update_focus_from_pointer(
        self,
        pointer_x: float,
        pointer_y: float,
        rect: Optional[ContainerRect],
    ) -> Optional[FocusPoint]:
        """Map a pointer position inside ``rect`` to a percentage focus point.

        Returns ``None`` and keeps the previous state when the container is
        missing, has no area, or the pointer coordinates are not finite.
        """
        if rect is None or not _usable_rect(rect) or not (math.isfinite(pointer_x) and math.isfinite(pointer_y)):
            logger.debug(
                "%s: skipping focus update (rect=%s, pointer=(%s, %s))",
                ErrorKind.STALE_OR_MISSING_CONTAINER.value,
                rect,
                pointer_x,
                pointer_y,
            )
            return None
        raw_x = (pointer_x - rect.left) / rect.width * 100
        raw_y = (pointer_y - rect.top) / rect.height * 100
        point = FocusPoint(_clamp_percent(raw_x), _clamp_percent(raw_y))
        if (point.x, point.y) != (raw_x, raw_y):
            logger.debug(
                "%s: focus (%.2f, %.2f) clamped to (%.2f, %.2f)",
                ErrorKind.OUT_OF_RANGE_CLAMPED.value,
                raw_x,
                raw_y,
                point.x,
                point.y,
            )
        self._state = replace(self._state, focus_point=point)
        return point

    def set_fit(self, mode: FitMode | str) -> PlacementState:
        self._state = replace(self._state, fit=coerce_fit(mode))
        self._commit()
        return self._state

    def toggle_focus_mode(self) -> bool:
        if self._focus_mode:
            self._commit()
        self._focus_mode = not self._focus_mode
        return self._focus_mode

    def handle_click(
        self,
        pointer_x: float,
        pointer_y: float,
        rect: Optional[ContainerRect],
    ) -> ClickRoute:
        if not self._focus_mode:
            return ClickRoute.ACTIVATE
        if self.update_focus_from_pointer(pointer_x, pointer_y, rect) is None:
            return ClickRoute.FOCUS_SKIPPED
        self._commit()
        return ClickRoute.FOCUS_UPDATED

    def _commit(self) -> None:
        # focus and fit are only ever persisted together
        if self._on_commit is not None:
            self._on_commit(self._state)


__all__ = [
    "ClickRoute",
    "PlacementCommit",
    "PlacementMapper",
    "coerce_fit",
    "state_from_properties",
    "state_to_properties",
]
