from unittest.mock import MagicMock
from graph.nodes.timer_sync_node import timer_sync_node


def _make_state(**overrides):
    base = {
        "today": "2026-10-19",
        "punch_in_time": "2026-10-19T09:00:00",
        "punch_out_time": None,
        "break_start_time": None,
        "is_on_break": False,
        "break_reason": None,
        "action": "punch_in",
        "action_taken": "punch_in",
        "error_message": None,
        "extra": {},
    }
    base.update(overrides)
    return base


def test_sync_on_success():
    """成功時はタイマーを状態に合わせる"""
    timers = MagicMock()
    state = _make_state()
    result = timer_sync_node(state, timers=timers)

    timers.sync.assert_called_once_with(state)
    assert result == {}


def test_no_sync_on_error():
    """失敗時はタイマーに触れない"""
    timers = MagicMock()
    timer_sync_node(_make_state(action_taken="error"), timers=timers)
    timer_sync_node(_make_state(action_taken="rejected"), timers=timers)

    timers.sync.assert_not_called()


def test_without_timers():
    assert timer_sync_node(_make_state(), timers=None) == {}
