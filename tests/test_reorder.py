from __future__ import annotations

import random

import pytest

from src.asset_engine import (
    ClickEvent,
    GestureState,
    ReorderInProgressError,
    ReorderInteractionController,
    UnknownItemError,
    reorder_ids,
)


def _click(controller: ReorderInteractionController, item_id: str, at: float):
    controller.pointer_down(item_id, at)
    return controller.pointer_up(item_id, at + 20)


def test_plain_click_is_accepted_and_selects() -> None:
    controller = ReorderInteractionController(["a", "b", "c"])
    event = _click(controller, "b", 1000)
    assert event == ClickEvent(item_id="b", timestamp=1020)
    assert controller.selected_id == "b"
    assert controller.state is GestureState.IDLE


def test_two_clicks_within_quiescence_window_yield_one_event() -> None:
    controller = ReorderInteractionController(["a", "b"])
    events = [_click(controller, "a", 1000), _click(controller, "a", 1200)]
    assert [e for e in events if e is not None] == [ClickEvent("a", 1020)]


def test_click_after_window_is_accepted_again() -> None:
    controller = ReorderInteractionController(["a"])
    assert _click(controller, "a", 1000) is not None
    assert _click(controller, "a", 1300) is not None


def test_quiescence_is_tracked_per_item() -> None:
    controller = ReorderInteractionController(["a", "b"])
    assert _click(controller, "a", 1000) is not None
    assert _click(controller, "b", 1050) is not None


def test_rejected_click_does_not_extend_the_window() -> None:
    controller = ReorderInteractionController(["a"])
    _click(controller, "a", 1000)
    assert _click(controller, "a", 1200) is None
    # window is measured from the last *accepted* click at 1020
    assert _click(controller, "a", 1310) is not None


@pytest.mark.parametrize("held_for", [5, 50, 5000])
def test_drag_suppresses_click_regardless_of_timing(held_for) -> None:
    controller = ReorderInteractionController(["a", "b"])
    controller.pointer_down("a", 10_000)
    controller.drag_start("a")
    assert controller.state is GestureState.DRAGGING
    assert controller.pointer_up("a", 10_000 + held_for) is None
    assert controller.selected_id is None


def test_trailing_click_after_drop_is_ignored() -> None:
    controller = ReorderInteractionController(["a", "b", "c"])
    controller.pointer_down("a", 0)
    controller.drag_start()
    controller.drop("a", 2)
    assert controller.pointer_up("a", 5000) is None
    assert controller.selected_id is None


def test_drop_reinserts_and_renumbers() -> None:
    controller = ReorderInteractionController(["a", "b", "c", "d"])
    controller.pointer_down("a", 0)
    controller.drag_start("a")
    items = controller.drop("a", 2)
    assert [(i.id, i.position) for i in items] == [("b", 0), ("c", 1), ("a", 2), ("d", 3)]


def test_drop_commits_without_a_tracked_gesture() -> None:
    controller = ReorderInteractionController(["a", "b", "c"])
    assert controller.state is GestureState.IDLE
    items = controller.drop("c", 0)
    assert [i.id for i in items] == ["c", "a", "b"]
    assert controller.state is GestureState.IDLE


def test_drop_ends_a_pending_press() -> None:
    controller = ReorderInteractionController(["a", "b"])
    controller.pointer_down("a", 0)
    controller.drop("a", 1)
    assert controller.state is GestureState.IDLE
    assert controller.pointer_up("a", 5000) is None
    assert controller.selected_id is None


def test_drop_index_is_clamped() -> None:
    assert reorder_ids(["a", "b", "c"], "a", 99) == ["b", "c", "a"]
    assert reorder_ids(["a", "b", "c"], "c", -4) == ["c", "a", "b"]


def test_positions_stay_contiguous_after_many_commits() -> None:
    ids = [f"slide-{n}" for n in range(9)]
    controller = ReorderInteractionController(ids)
    rng = random.Random(7)
    for _ in range(200):
        item = rng.choice(ids)
        controller.pointer_down(item, 0)
        controller.drag_start(item)
        items = controller.drop(item, rng.randint(-2, 12))
        assert sorted(i.position for i in items) == list(range(len(ids)))
        assert sorted(i.id for i in items) == sorted(ids)


def test_unknown_items_are_rejected() -> None:
    controller = ReorderInteractionController(["a"])
    with pytest.raises(UnknownItemError):
        controller.pointer_down("zzz", 0)
    with pytest.raises(UnknownItemError):
        controller.drop("zzz", 0)


def test_duplicate_ids_are_rejected() -> None:
    with pytest.raises(ValueError):
        ReorderInteractionController(["a", "a"])


def test_gesture_cannot_start_while_commit_settles() -> None:
    seen = []

    def listener(items):
        seen.append([i.id for i in items])
        with pytest.raises(ReorderInProgressError):
            controller.pointer_down("a", 0)
        with pytest.raises(ReorderInProgressError):
            controller.drop("b", 0)

    controller = ReorderInteractionController(["a", "b", "c"], on_commit=listener)
    controller.drop("c", 0)
    assert seen == [["c", "a", "b"]]
    assert controller.state is GestureState.IDLE
    # settled: next gesture is allowed
    controller.pointer_down("a", 0)


def test_listener_failure_still_settles_sequence() -> None:
    def boom(items):
        raise RuntimeError("store down")

    controller = ReorderInteractionController(["a", "b"], on_commit=boom)
    with pytest.raises(RuntimeError):
        controller.drop("b", 0)
    assert [i.id for i in controller.items] == ["b", "a"]
    assert controller.state is GestureState.IDLE


def test_replace_items_keeps_known_selection() -> None:
    controller = ReorderInteractionController(["a", "b"])
    _click(controller, "b", 0)
    controller.replace_items(["b", "c"])
    assert controller.selected_id == "b"
    controller.replace_items(["c"])
    assert controller.selected_id is None
