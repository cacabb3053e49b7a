from graph.state import (
    PunchState,
    derive_status,
    initial_state,
    NOT_PUNCHED_IN,
    WORKING,
    ON_BREAK,
    PUNCHED_OUT,
)


def test_initial_state():
    """初期状態は未出勤であること"""
    state = initial_state("2026-10-19")
    assert state["today"] == "2026-10-19"
    assert state["punch_in_time"] is None
    assert state["is_on_break"] is False
    assert state["extra"] == {}
    assert derive_status(state) == NOT_PUNCHED_IN


def test_derive_status_working():
    """出勤済み・休憩なし → WORKING"""
    state = initial_state("2026-10-19")
    state["punch_in_time"] = "2026-10-19T09:00:00"
    assert derive_status(state) == WORKING


def test_derive_status_on_break():
    """休憩中 → ON_BREAK"""
    state: PunchState = initial_state("2026-10-19")
    state.update(
        punch_in_time="2026-10-19T09:00:00",
        break_start_time="2026-10-19T12:00:00",
        is_on_break=True,
    )
    assert derive_status(state) == ON_BREAK


def test_derive_status_punched_out():
    """退勤済みは終端状態"""
    state = initial_state("2026-10-19")
    state.update(
        punch_in_time="2026-10-19T09:00:00",
        punch_out_time="2026-10-19T18:00:00",
    )
    assert derive_status(state) == PUNCHED_OUT


def test_punch_out_without_punch_in_is_not_punched_out():
    """出勤時刻が無ければ退勤時刻があっても未出勤扱い"""
    state = initial_state("2026-10-19")
    state["punch_out_time"] = "2026-10-19T18:00:00"
    assert derive_status(state) == NOT_PUNCHED_IN
