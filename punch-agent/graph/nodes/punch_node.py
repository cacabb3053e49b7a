from graph.state import PunchState
from services.attendance_interface import AttendanceServiceInterface

FALLBACK_MESSAGES = {
    "punch_in": "Error punching in",
    "punch_out": "Error punching out",
    "start_break": "Error starting break",
    "end_break": "Error ending break",
    "sync": "Error fetching attendance data",
}


def _error(action: str, message=None) -> dict:
    return {
        "action_taken": "error",
        "error_message": message or FALLBACK_MESSAGES[action],
    }


async def punch_node(
    state: PunchState, client: AttendanceServiceInterface = None
) -> dict:
    """勤怠サービスを1回だけ呼び出し、応答の値で状態を更新するノード"""
    action = state["action"]

    if action == "punch_in":
        result = await client.punch_in()
        if not result.success:
            return _error(action, result.error)
        punch_in_time = (result.data or {}).get("punchInTime")
        if not punch_in_time:
            return _error(action)
        return {
            "punch_in_time": punch_in_time,
            "punch_out_time": None,
            "action_taken": "punch_in",
            "error_message": None,
        }

    elif action == "start_break":
        reason = state["extra"].get("reason") or ""
        result = await client.start_break(reason)
        if not result.success:
            return _error(action, result.error)
        break_start_time = (result.data or {}).get("breakStartTime")
        if not break_start_time:
            return _error(action)
        return {
            "break_start_time": break_start_time,
            "is_on_break": True,
            "break_reason": reason or None,
            "action_taken": "start_break",
            "error_message": None,
        }

    elif action == "end_break":
        result = await client.end_break()
        if not result.success:
            return _error(action, result.error)
        return {
            "break_start_time": None,
            "is_on_break": False,
            "break_reason": None,
            "action_taken": "end_break",
            "error_message": None,
        }

    elif action == "punch_out":
        result = await client.punch_out()
        if not result.success:
            return _error(action, result.error)
        punch_out_time = (result.data or {}).get("punchOutTime")
        if not punch_out_time:
            return _error(action)
        return {
            "punch_out_time": punch_out_time,
            "action_taken": "punch_out",
            "error_message": None,
        }

    elif action == "sync":
        result = await client.get_today()
        if not result.success:
            return _error(action, result.error)
        return _hydrate(result.data or {})

    return {"action_taken": "skipped"}


def _hydrate(data: dict) -> dict:
    """本日の勤怠状況から状態を復元する

    breakStartTime はサービスが返した場合のみ使用し、無ければ休憩中とみなさない。
    """
    punch_in_time = data.get("punchInTime")
    punch_out_time = data.get("punchOutTime") if punch_in_time else None
    break_start_time = None
    if punch_in_time and not punch_out_time:
        break_start_time = data.get("breakStartTime")

    return {
        "punch_in_time": punch_in_time,
        "punch_out_time": punch_out_time,
        "break_start_time": break_start_time,
        "is_on_break": bool(break_start_time),
        "break_reason": data.get("breakReason") if break_start_time else None,
        "action_taken": "sync",
        "error_message": None,
        "extra": {"today": data},
    }
