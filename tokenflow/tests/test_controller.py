"""
Tests for the replay controller.

Critical: Every operation either applies fully or leaves the previous
state in place with its error surfaced in the view.
"""

import pytest

from tokenflow.config import ALL_CASES, EngineConfig
from tokenflow.controller import MODE_EDIT, MODE_VISUALIZE, ReplayController
from tokenflow.core.errors import (
    ArcEndpointError,
    EmptyTraceError,
    FileFormatError,
    IntegrityError,
    ModelStructureError,
    TransitionNotEnabledError,
)
from tokenflow.replay.scheduler import ManualScheduler

LOG = (
    "activity,timestamp,case_id\n"
    "Split,2024-01-01T09:00:00,c1\n"
    "Split,2024-01-01T09:01:00,c2\n"
    "Action 1,2024-01-01T09:02:00,c1\n"
    "Action 2,2024-01-01T09:03:00,c1\n"
    "Join,2024-01-01T09:04:00,c1\n"
    "Split,2024-01-01T09:05:00,c3\n"
)


def _controller():
    scheduler = ManualScheduler()
    return ReplayController(config=EngineConfig(interval_ms=100), scheduler=scheduler), scheduler


def test_defaults_to_sample_net():
    ctl, _ = _controller()
    view = ctl.view()

    assert view.tokens["p1"] == 1
    assert view.trace_loaded is False
    assert view.trace_length == 0
    assert view.mode == MODE_VISUALIZE
    assert view.interval_ms == 100


def test_load_trace_seeds_start_per_case():
    ctl, _ = _controller()
    view = ctl.load_trace(LOG)

    assert view.trace_loaded
    assert view.case_ids == ("c1", "c2", "c3")
    assert view.selected_case == ALL_CASES
    assert view.trace_length == 6
    assert view.tokens["p1"] == 3
    assert view.active_transition_id == "t1"


def test_select_case_replays_single_case():
    ctl, _ = _controller()
    ctl.load_trace(LOG)

    view = ctl.select_case("c1")
    assert view.tokens["p1"] == 1
    assert [e.step for e in view.trace] == [0, 2, 3, 4]

    for _ in range(4):
        view = ctl.step_forward()
    assert view.current_step == 4
    assert view.tokens["p6"] == 1
    assert view.error is None


def test_select_unknown_case_gives_empty_trace():
    ctl, _ = _controller()
    ctl.load_trace(LOG)
    view = ctl.select_case("nope")
    assert view.trace_length == 0
    assert view.active_transition_id is None


def test_empty_trace_is_reported():
    ctl, _ = _controller()
    ctl.load_trace(LOG)

    with pytest.raises(EmptyTraceError):
        ctl.load_trace("\n  \n")

    view = ctl.view()
    assert view.error == "The file is empty or in an unsupported format"
    assert view.trace_loaded is False
    assert view.tokens["p1"] == 1


def test_malformed_trace_unloads_previous():
    ctl, _ = _controller()
    ctl.load_trace(LOG)

    with pytest.raises(FileFormatError):
        ctl.load_trace("activity,case_id\nSplit,c1\n")

    view = ctl.view()
    assert "timestamp" in view.error
    assert view.trace_loaded is False


def test_step_error_surfaces_in_view():
    ctl, _ = _controller()
    ctl.load_trace("activity,timestamp\nJoin,2024-01-01T09:00:00\n")

    with pytest.raises(TransitionNotEnabledError):
        ctl.step_forward()

    view = ctl.view()
    assert view.current_step == 0
    assert "Join" in view.error

    assert ctl.clear_error().error is None


def test_step_backward_restores_tokens():
    ctl, _ = _controller()
    ctl.load_trace(LOG)
    start = ctl.view().tokens

    ctl.step_forward()
    ctl.step_forward()
    ctl.step_backward()
    view = ctl.step_backward()

    assert view.current_step == 0
    assert view.tokens == start


def test_failed_import_keeps_current_net():
    ctl, _ = _controller()
    before = ctl.export_model()

    with pytest.raises(ModelStructureError):
        ctl.import_model('{"places": [], "transitions": []}')

    assert ctl.export_model() == before
    assert "arcs" in ctl.view().error


def test_import_with_dangling_arc_keeps_current_net():
    ctl, _ = _controller()
    before = ctl.export_model()
    doc = '{"places": [{"id": "p1"}], "transitions": [], "arcs": [{"id": "a1", "sourceId": "p1", "targetId": "t9"}]}'

    with pytest.raises(IntegrityError):
        ctl.import_model(doc)

    assert ctl.export_model() == before
    assert ctl.view().error is not None


def test_import_export_roundtrip():
    ctl, _ = _controller()
    ctl.add_place(label="Extra", position=(5, 5), initial_tokens=2)
    text = ctl.export_model()

    other, _ = _controller()
    view = other.import_model(text)

    assert other.export_model() == text
    assert view.tokens["p7"] == 2


def test_edit_reinitializes_replay():
    ctl, scheduler = _controller()
    ctl.load_trace(LOG)
    ctl.step_forward()
    ctl.play()

    place = ctl.add_place()
    view = ctl.view()

    assert view.current_step == 0
    assert view.playing is False
    assert view.tokens[place.id] == 0
    assert view.tokens["p1"] == 3
    assert scheduler.pending == 0


def test_edit_error_keeps_net():
    ctl, _ = _controller()
    with pytest.raises(ArcEndpointError):
        ctl.add_arc("p1", "p2")
    assert len(ctl.net.arcs) == 10
    assert ctl.view().error is not None


def test_delete_node_rebuilds_index():
    ctl, _ = _controller()
    ctl.load_trace(LOG)
    removed = ctl.delete_node("t1")

    assert len(removed) == 3
    assert "t1" not in ctl.index.transitions
    assert ctl.view().active_transition_id is None


def test_update_node_changes_initial_tokens():
    ctl, _ = _controller()
    ctl.update_node("p2", initial_tokens=3)
    assert ctl.view().tokens["p2"] == 3


def test_playback_runs_through_scheduler():
    ctl, scheduler = _controller()
    ctl.load_trace(LOG)
    ctl.select_case("c1")

    assert ctl.play().playing
    scheduler.advance(1000)

    view = ctl.view()
    assert view.current_step == 4
    assert view.playing is False
    assert view.error is None


def test_playback_error_surfaces_in_view():
    ctl, scheduler = _controller()
    ctl.load_trace("activity,timestamp\nSplit,2024-01-01T09:00:00\nJoin,2024-01-01T09:01:00\n")
    ctl.play()

    scheduler.advance(1000)

    view = ctl.view()
    assert view.current_step == 1
    assert view.playing is False
    assert "Join" in view.error


def test_set_speed():
    ctl, _ = _controller()
    assert ctl.set_speed("4x").interval_ms == 125
    with pytest.raises(ValueError):
        ctl.set_speed("10x")
    assert ctl.view().interval_ms == 125


def test_edit_mode_blocks_play_and_highlight():
    ctl, scheduler = _controller()
    ctl.load_trace(LOG)
    ctl.step_forward()

    view = ctl.set_mode(MODE_EDIT)
    assert view.current_step == 0
    assert view.active_transition_id is None

    assert ctl.play().playing is False
    assert scheduler.pending == 0

    with pytest.raises(ValueError):
        ctl.set_mode("draw")


def test_reset_and_clear_trace():
    ctl, _ = _controller()
    ctl.load_trace(LOG)
    ctl.step_forward()

    assert ctl.reset().current_step == 0

    view = ctl.clear_trace()
    assert view.trace_loaded is False
    assert view.tokens["p1"] == 1


def test_import_with_duplicate_arc_ids_keeps_current_net():
    ctl, _ = _controller()
    before = ctl.export_model()
    doc = (
        '{"places": [{"id": "p1"}], "transitions": [{"id": "t1"}], "arcs": ['
        '{"id": "a1", "sourceId": "p1", "targetId": "t1"}, '
        '{"id": "a1", "sourceId": "p1", "targetId": "t1"}]}'
    )

    with pytest.raises(IntegrityError, match="a1"):
        ctl.import_model(doc)

    assert ctl.export_model() == before
    assert "a1" in ctl.view().error


def test_edit_clears_previous_step_error():
    ctl, _ = _controller()
    ctl.load_trace("activity,timestamp\nJoin,2024-01-01T09:00:00\n")
    with pytest.raises(TransitionNotEnabledError):
        ctl.step_forward()
    assert ctl.view().error is not None

    ctl.add_place(label="X")

    view = ctl.view()
    assert view.current_step == 0
    assert view.error is None
