import sys

from graph.state import PunchState
from schedulers.ticker import parse_timestamp


MESSAGES = {
    "punch_in": "✅ Punched in ({time})",
    "start_break": "☕ Break started ({time})",
    "start_break_reason": "☕ Break started ({time}): {reason}",
    "end_break": "▶️ Back to work",
    "punch_out": "🕐 Punched out ({time})",
    "sync_working": "🔄 Session resumed: working since {time}",
    "sync_on_break": "🔄 Session resumed: on break since {time}",
    "sync_punched_out": "🔄 Session resumed: punched out at {time}",
    "sync_idle": "🔄 Not punched in yet today",
}


def _hhmm(value: str) -> str:
    """表示用に HH:MM に整形（解釈できなければそのまま）"""
    try:
        return parse_timestamp(value).strftime("%H:%M")
    except (TypeError, ValueError):
        return str(value)


def notify_node(state: PunchState, notifier=None) -> dict:
    """打刻結果をユーザーに通知するノード"""
    action = state["action_taken"]

    if action in ("error", "rejected"):
        _deliver(notifier.send_error, state["error_message"])
        return {}

    if action == "punch_in":
        msg = MESSAGES["punch_in"].format(time=_hhmm(state["punch_in_time"]))
    elif action == "start_break":
        started = _hhmm(state["break_start_time"])
        if state["break_reason"]:
            msg = MESSAGES["start_break_reason"].format(
                time=started, reason=state["break_reason"]
            )
        else:
            msg = MESSAGES["start_break"].format(time=started)
    elif action == "end_break":
        msg = MESSAGES["end_break"]
    elif action == "punch_out":
        msg = MESSAGES["punch_out"].format(time=_hhmm(state["punch_out_time"]))
    elif action == "sync":
        msg = _sync_message(state)
    else:
        return {}

    _deliver(notifier.send, msg)
    return {}


def _sync_message(state: PunchState) -> str:
    if not state["punch_in_time"]:
        return MESSAGES["sync_idle"]
    if state["punch_out_time"]:
        return MESSAGES["sync_punched_out"].format(time=_hhmm(state["punch_out_time"]))
    if state["is_on_break"]:
        return MESSAGES["sync_on_break"].format(time=_hhmm(state["break_start_time"]))
    return MESSAGES["sync_working"].format(time=_hhmm(state["punch_in_time"]))


def _deliver(send, message: str):
    """通知失敗で確定済みの打刻結果を失わないよう、例外はここで止める"""
    try:
        send(message)
    except Exception as e:
        print(f"[HireConnect] 通知に失敗: {e} ({message})", file=sys.stderr)
