from unittest.mock import MagicMock, patch
from graph.nodes.notify_node import notify_node


def _make_state(**overrides):
    base = {
        "today": "2026-10-19",
        "punch_in_time": None,
        "punch_out_time": None,
        "break_start_time": None,
        "is_on_break": False,
        "break_reason": None,
        "action": None,
        "action_taken": None,
        "error_message": None,
        "extra": {},
    }
    base.update(overrides)
    return base


def test_notify_punch_in():
    """出勤打刻成功の通知"""
    mock_notifier = MagicMock()

    state = _make_state(action_taken="punch_in", punch_in_time="2026-10-19T09:12:00")
    notify_node(state, notifier=mock_notifier)

    mock_notifier.send.assert_called_once()
    call_msg = mock_notifier.send.call_args[0][0]
    assert "Punched in" in call_msg
    assert "09:12" in call_msg


def test_notify_break_with_reason():
    """休憩開始の通知に理由を含める"""
    mock_notifier = MagicMock()

    state = _make_state(
        action_taken="start_break",
        punch_in_time="2026-10-19T09:00:00",
        break_start_time="2026-10-19T12:30:00",
        is_on_break=True,
        break_reason="lunch",
    )
    notify_node(state, notifier=mock_notifier)

    call_msg = mock_notifier.send.call_args[0][0]
    assert "12:30" in call_msg
    assert "lunch" in call_msg


def test_notify_punch_out():
    """退勤打刻成功の通知"""
    mock_notifier = MagicMock()

    state = _make_state(
        action_taken="punch_out",
        punch_in_time="2026-10-19T09:00:00",
        punch_out_time="2026-10-19T18:00:00",
    )
    notify_node(state, notifier=mock_notifier)

    call_msg = mock_notifier.send.call_args[0][0]
    assert "Punched out" in call_msg
    assert "18:00" in call_msg


def test_notify_error():
    """エラー通知"""
    mock_notifier = MagicMock()

    state = _make_state(action_taken="error", error_message="Error punching in")
    notify_node(state, notifier=mock_notifier)

    mock_notifier.send_error.assert_called_once_with("Error punching in")
    mock_notifier.send.assert_not_called()


def test_notify_rejected_same_as_error():
    """ローカルで弾いた場合もエラーと同じ経路で通知する"""
    mock_notifier = MagicMock()

    state = _make_state(action_taken="rejected", error_message="Please punch in first")
    notify_node(state, notifier=mock_notifier)

    mock_notifier.send_error.assert_called_once_with("Please punch in first")


def test_notify_sync_idle():
    mock_notifier = MagicMock()

    notify_node(_make_state(action_taken="sync"), notifier=mock_notifier)

    assert "Not punched in" in mock_notifier.send.call_args[0][0]


def test_notify_unparsable_time_shown_as_is():
    """解釈できない時刻はそのまま表示する"""
    mock_notifier = MagicMock()

    notify_node(
        _make_state(action_taken="punch_in", punch_in_time="nine o'clock"),
        notifier=mock_notifier,
    )

    assert "nine o'clock" in mock_notifier.send.call_args[0][0]


def test_notifier_failure_does_not_raise():
    """通知が失敗してもノードは例外を出さないこと"""
    mock_notifier = MagicMock()
    mock_notifier.send.side_effect = ConnectionError("slack down")
    mock_notifier.send_error.side_effect = ConnectionError("slack down")

    with patch("builtins.print"):
        assert notify_node(
            _make_state(action_taken="punch_in", punch_in_time="2026-10-19T09:00:00"),
            notifier=mock_notifier,
        ) == {}
        assert notify_node(
            _make_state(action_taken="error", error_message="Error punching in"),
            notifier=mock_notifier,
        ) == {}

    mock_notifier.send.assert_called_once()
