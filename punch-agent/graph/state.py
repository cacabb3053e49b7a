from typing import TypedDict, Optional

NOT_PUNCHED_IN = "NOT_PUNCHED_IN"
WORKING = "WORKING"
ON_BREAK = "ON_BREAK"
PUNCHED_OUT = "PUNCHED_OUT"


class PunchState(TypedDict):
    today: str                          # YYYY-MM-DD
    punch_in_time: Optional[str]        # 出勤打刻時刻（サーバー返却のISO文字列）
    punch_out_time: Optional[str]       # 退勤打刻時刻（設定後は終端状態）
    break_start_time: Optional[str]     # 休憩開始時刻
    is_on_break: bool                   # 休憩中か
    break_reason: Optional[str]         # 休憩理由（任意）
    action: Optional[str]               # 要求アクション "punch_in" / "start_break" / "end_break" / "punch_out" / "sync"
    action_taken: Optional[str]         # 結果 要求アクション名 / "rejected" / "error"
    error_message: Optional[str]        # 画面に出すエラー文言
    extra: dict                         # 一時的なUI合図（shake など）


def derive_status(state: PunchState) -> str:
    """セッション項目から現在の状態を導出する"""
    if not state.get("punch_in_time"):
        return NOT_PUNCHED_IN
    if state.get("punch_out_time"):
        return PUNCHED_OUT
    if state.get("is_on_break"):
        return ON_BREAK
    return WORKING


def initial_state(today: str) -> PunchState:
    return {
        "today": today,
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
