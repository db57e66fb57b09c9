import pytest

from flowmap.config import ViewportConfig
from flowmap.layout.viewport import Gesture, Viewport, ViewportState
from flowmap.models import Position
from flowmap.session import Session


def test_initial_and_reset_state() -> None:
    vp = Viewport()
    assert vp.state == ViewportState(pan_x=0.0, pan_y=0.0, zoom=0.5)

    vp.pan = Position(30, 40)
    vp.zoom_in()
    vp.reset()
    assert vp.state == ViewportState(pan_x=0.0, pan_y=0.0, zoom=0.5)


def test_zoom_steps_by_tenth() -> None:
    vp = Viewport()
    assert vp.zoom_in() == 0.6
    assert vp.zoom_out() == 0.5
    assert vp.zoom_out() == 0.4


@pytest.mark.parametrize("start", [0.2, 0.35, 1.0, 1.95, 2.0])
def test_zoom_is_always_clamped(start: float) -> None:
    vp = Viewport()
    vp.set_zoom(start)
    for _ in range(40):
        vp.zoom_in()
        assert vp.zoom <= 2.0
    assert vp.zoom == 2.0

    for _ in range(40):
        vp.zoom_out()
        assert vp.zoom >= 0.2
    assert vp.zoom == 0.2


def test_set_zoom_clamps_silently() -> None:
    vp = Viewport(ViewportConfig(min_zoom=0.5, max_zoom=1.5, reset_zoom=1.0))
    assert vp.set_zoom(10) == 1.5
    assert vp.set_zoom(0) == 0.5


def test_background_press_pans_from_gesture_start(wide_session: Session) -> None:
    g = wide_session.gestures
    g.pointer_down(10, 10)
    assert g.active is not None and g.active.kind == "pan"

    g.pointer_move(60, 30)
    g.pointer_move(60, 30)
    assert wide_session.viewport.pan == Position(50, 20)

    g.pointer_up()
    g.pointer_down(0, 0)
    g.pointer_move(-5, 5)
    assert wide_session.viewport.pan == Position(45, 25)


def test_panning_does_not_move_nodes(wide_session: Session) -> None:
    before = wide_session.engine.snapshot()
    g = wide_session.gestures
    g.pointer_down(0, 0)
    g.pointer_move(300, 300)
    g.pointer_up()
    assert wide_session.engine.snapshot() == before


def test_node_press_drags_only_that_node(wide_session: Session) -> None:
    g = wide_session.gestures
    start = wide_session.engine.position("hub-1")
    gesture = g.pointer_down(100, 100, target="hub-1")
    assert gesture.kind == "drag" and gesture.key == "hub-1"

    g.pointer_move(110, 120)
    # zoom 0.5 doubles screen deltas in diagram space
    assert wide_session.engine.position("hub-1") == start.offset(20, 40)
    assert wide_session.viewport.pan == Position(0, 0)
    assert wide_session.engine.position("hub-2") == Position(100.0, 270.0)


def test_gesture_classification_is_fixed_for_the_gesture(wide_session: Session) -> None:
    g = wide_session.gestures
    g.pointer_down(0, 0, target="hub-2")
    g.pointer_move(50, 0)
    g.pointer_move(100, 0)
    assert g.active is not None and g.active.kind == "drag"
    assert wide_session.viewport.pan == Position(0, 0)


def test_release_always_ends_gesture(wide_session: Session) -> None:
    g = wide_session.gestures
    g.pointer_up()  # nothing active
    g.pointer_down(0, 0)
    g.pointer_up()
    assert g.active is None

    g.pointer_move(500, 500)
    assert wide_session.viewport.pan == Position(0, 0)


def test_press_on_unknown_node_raises(wide_session: Session) -> None:
    with pytest.raises(KeyError):
        wide_session.gestures.pointer_down(0, 0, target="node-9-0")


def test_drag_without_node_key_moves_nothing(wide_session: Session) -> None:
    g = wide_session.gestures
    before = wide_session.engine.snapshot()
    g.active = Gesture(kind="drag", origin_x=0, origin_y=0, start=Position(0, 0))

    g.pointer_move(40, 40)
    assert wide_session.engine.snapshot() == before
    assert wide_session.viewport.pan == Position(0, 0)
    assert g.has_dragged
