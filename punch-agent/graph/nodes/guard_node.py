# graph/nodes/guard_node.py
from graph.state import (
    PunchState,
    derive_status,
    NOT_PUNCHED_IN,
    WORKING,
    ON_BREAK,
    PUNCHED_OUT,
)

# アクションごとの実行可能な状態
ALLOWED_FROM = {
    "punch_in": {NOT_PUNCHED_IN},
    "start_break": {WORKING},
    "end_break": {ON_BREAK},
    "punch_out": {WORKING},
}

REJECT_MESSAGES = {
    "not_punched_in": "Please punch in first",
    "punched_out": "You have already punched out for today",
    "on_break": "End your break before punching out",
    "already_punched_in": "You have already punched in",
    "already_on_break": "You are already on a break",
    "not_on_break": "You are not on a break",
}


def _reject(reason: str, **extra) -> dict:
    return {
        "action_taken": "rejected",
        "error_message": REJECT_MESSAGES[reason],
        "extra": extra,
    }


def guard_node(state: PunchState) -> dict:
    """通信前に状態遷移の可否を判定するノード（不可ならネットワーク呼び出しなし）"""
    action = state["action"]

    # 状態の再取得はどの状態からでも可能
    if action == "sync":
        return {"action_taken": None, "error_message": None}

    if action not in ALLOWED_FROM:
        raise ValueError(f"unknown punch action: {action}")

    status = derive_status(state)
    if status in ALLOWED_FROM[action]:
        return {"action_taken": None, "error_message": None}

    if status == PUNCHED_OUT:
        return _reject("punched_out")

    if action == "punch_out":
        if status == NOT_PUNCHED_IN:
            # 出勤前の退勤ボタンは揺らして知らせる
            return _reject("not_punched_in", shake=True)
        return _reject("on_break")

    if action == "punch_in":
        return _reject("already_punched_in")

    if action == "start_break":
        if status == ON_BREAK:
            return _reject("already_on_break")
        return _reject("not_punched_in")

    # end_break
    if status == NOT_PUNCHED_IN:
        return _reject("not_punched_in")
    return _reject("not_on_break")
