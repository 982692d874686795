import pytest

from bubblechart.config import ViewportConfig
from bubblechart.controller.scene import SceneController
from bubblechart.model.body import BubbleRecord, DatasetError, Point, Size
from bubblechart.model.truncation import LabelBox


@pytest.fixture
def scene(qapp, focal_records, viewport):
    controller = SceneController()
    controller.set_viewport_size(*viewport)
    controller.set_dataset(focal_records)
    yield controller
    controller.shutdown()


def _record(signal):
    received = []
    signal.connect(lambda *args: received.append(args))
    return received


def test_dataset_and_viewport_seed_a_running_simulation(scene, focal_records):
    assert scene.state is not None
    assert [b.id for b in scene.state.bodies] == [r.id for r in focal_records]
    assert scene.state.viewport == Size(800, 600)
    assert scene.runner.is_active


def test_resize_reseeds_and_replaces_loop(scene):
    old_state = scene.state
    resets = _record(scene.simulation_reset)
    requests = _record(scene.truncation_requested)

    scene.set_viewport_size(400, 300)

    assert scene.state is not old_state
    assert scene.runner.solver.state is scene.state
    assert scene.state.body("center").radius < old_state.body("center").radius
    assert len(resets) == 1
    assert len(requests) == 1


def test_same_size_does_not_reseed(scene):
    state = scene.state
    scene.set_viewport_size(800, 600)
    assert scene.state is state


def test_bad_dataset_is_rejected(qapp):
    controller = SceneController()
    with pytest.raises(DatasetError):
        controller.set_dataset([BubbleRecord("a", "A", 1), BubbleRecord("a", "B", 2)])
    assert controller.state is None


def test_body_press_starts_drag_not_pan(scene):
    origin = (scene.transform.offset_x, scene.transform.offset_y)

    assert scene.pointer_pressed("3", Point(100, 100))
    scene.pointer_moved(Point(200, 150))

    assert not scene.is_panning
    assert scene.drag.active_body_id == "3"
    assert scene.state.body("3").pinned_position == (200, 150)
    assert (scene.transform.offset_x, scene.transform.offset_y) == origin

    scene.pointer_released()
    assert not scene.state.body("3").is_pinned


def test_drag_pins_in_scene_coordinates(scene):
    scene.transform.zoom_by(2.0, Point(0, 0))
    scene.transform.pan_by(50, 50)

    scene.pointer_pressed("1", Point(250, 250))

    assert scene.state.body("1").pinned_position == pytest.approx((100, 100))


def test_press_on_unknown_body_does_nothing(scene):
    assert not scene.pointer_pressed("ghost", Point(10, 10))
    scene.pointer_moved(Point(50, 50))

    assert not scene.is_panning
    assert scene.transform.is_identity


def test_background_pan_moves_offset_only(scene):
    changes = _record(scene.transform_changed)
    requests = _record(scene.truncation_requested)

    assert scene.pointer_pressed(None, Point(10, 10))
    scene.pointer_moved(Point(30, 5))
    scene.pointer_moved(Point(40, 15))
    scene.pointer_released()

    assert (scene.transform.offset_x, scene.transform.offset_y) == (30, 5)
    assert scene.transform.scale == 1.0
    assert len(changes) == 2
    assert requests == []
    assert not scene.is_panning


def test_wheel_zoom_requests_truncation(scene):
    requests = _record(scene.truncation_requested)
    anchor = Point(300, 200)
    under_anchor = scene.transform.to_scene(anchor)

    scene.wheel(120, anchor)

    assert scene.transform.scale == pytest.approx(2 ** (120 * ViewportConfig.wheel_sensitivity))
    assert scene.transform.to_screen(under_anchor) == pytest.approx(anchor)
    assert len(requests) == 1


def test_zoom_buttons_anchor_on_viewport_center(scene):
    center = Point(400, 300)
    scene.zoom_in()
    assert scene.transform.scale == pytest.approx(ViewportConfig.zoom_step)
    assert scene.transform.to_screen(center) == pytest.approx(center)

    scene.zoom_out()
    assert scene.transform.scale == pytest.approx(1.0)


def test_saturated_zoom_emits_nothing(scene):
    for _ in range(50):
        scene.zoom_in()
    requests = _record(scene.truncation_requested)

    scene.zoom_in()

    assert scene.transform.scale == ViewportConfig.max_zoom
    assert requests == []


def test_reset_view_without_animation(scene):
    scene.zoom_in()
    scene.transform.pan_by(40, 40)
    requests = _record(scene.truncation_requested)

    scene.reset_view(animated=False)

    assert scene.transform.is_identity
    assert len(requests) == 1


def test_animated_reset_reaches_identity(scene):
    for _ in range(3):
        scene.zoom_in()
    scene.transform.pan_by(40, -20)

    scene.reset_view()
    assert scene.is_resetting
    requests = _record(scene.truncation_requested)

    animation = scene._reset_animation
    animation.setCurrentTime(animation.duration())

    assert scene.transform.is_identity
    assert not scene.is_resetting
    assert len(requests) == 1


def test_interrupted_reset_rechecks_truncation(scene):
    zoomed = ViewportConfig.zoom_step ** 5
    for _ in range(5):
        scene.zoom_in()

    scene.reset_view()
    scene._reset_animation.setCurrentTime(ViewportConfig.reset_duration_ms // 2)
    requests = _record(scene.truncation_requested)

    assert scene.pointer_pressed(None, Point(10, 10))

    assert 1.0 < scene.transform.scale < zoomed
    assert not scene.is_resetting
    assert len(requests) == 1


def test_zoom_interrupting_reset_rechecks_truncation(scene):
    for _ in range(50):
        scene.zoom_in()
    scene.reset_view()
    scene._reset_animation.setCurrentTime(ViewportConfig.reset_duration_ms // 2)
    requests = _record(scene.truncation_requested)
    scale = scene.transform.scale

    scene.wheel(120, Point(100, 100))

    assert scene.transform.scale > scale
    assert not scene.is_resetting
    assert len(requests) >= 1


def test_truncation_updates_drive_tooltip(scene):
    tooltips = _record(scene.tooltip_changed)
    boxes = [
        LabelBox("1", Size(400, 20), Size(100, 60)),
        LabelBox("2", Size(400, 20), Size(450, 60)),
    ]

    assert scene.update_truncation(boxes) == {"1"}

    scene.hover_entered("2", Point(5, 5))
    assert tooltips[-1] == (None,)

    scene.hover_entered("1", Point(5, 5))
    tip = tooltips[-1][0]
    assert tip.body_id == "1"
    assert tip.text == "Fondazione Italia Nostra"

    scene.hover_moved(Point(8, 9))
    assert tooltips[-1][0].position == (8, 9)

    scene.hover_left()
    assert tooltips[-1] == (None,)


def test_hover_on_unknown_body_is_ignored(scene, caplog):
    with caplog.at_level("WARNING"):
        scene.hover_entered("ghost", Point(0, 0))
    assert "ghost" in caplog.text
    assert scene.tooltips.hovered_id is None


def test_reseed_clears_tooltip_state(scene):
    scene.update_truncation([LabelBox("1", Size(400, 20), Size(100, 60))])
    scene.hover_entered("1", Point(5, 5))

    scene.set_viewport_size(640, 480)

    assert scene.tooltips.current is None
    assert scene.tooltips.truncated == frozenset()


def test_runner_step_settles_and_stops(scene):
    settled = _record(scene.settled)
    for _ in range(2000):
        if not scene.runner.is_active:
            break
        scene.runner.step()

    assert not scene.runner.is_active
    assert not scene.state.running
    assert len(settled) == 1


def test_shutdown_stops_loop(scene):
    scene.zoom_in()
    scene.reset_view()
    requests = _record(scene.truncation_requested)

    scene.shutdown()

    assert not scene.runner.is_active
    assert not scene.is_resetting
    assert requests == []
