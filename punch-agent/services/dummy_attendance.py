from datetime import datetime, timezone
from typing import Optional

from services.attendance_interface import AttendanceServiceInterface, ApiResult


def _now_iso() -> str:
    """テスト時にモック可能"""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class DummyAttendanceService(AttendanceServiceInterface):
    """ダミー勤怠サービス（メモリ上のみ）。オフライン動作確認用。"""

    def __init__(self):
        self._punch_in_time: Optional[str] = None
        self._punch_out_time: Optional[str] = None
        self._break_start_time: Optional[str] = None
        self._break_count = 0

    async def punch_in(self) -> ApiResult:
        if self._punch_out_time:
            return _fail("Already punched out for today")
        if self._punch_in_time:
            return _fail("Already punched in")
        self._punch_in_time = _now_iso()
        print(f"[DummyAttendance] 出勤打刻（シミュレーション）: {self._punch_in_time}")
        return ApiResult(success=True, data={"punchInTime": self._punch_in_time})

    async def punch_out(self) -> ApiResult:
        if not self._punch_in_time:
            return _fail("Not punched in")
        if self._punch_out_time:
            return _fail("Already punched out for today")
        if self._break_start_time:
            return _fail("End your break before punching out")
        self._punch_out_time = _now_iso()
        print(f"[DummyAttendance] 退勤打刻（シミュレーション）: {self._punch_out_time}")
        return ApiResult(success=True, data={"punchOutTime": self._punch_out_time})

    async def start_break(self, reason: str = "") -> ApiResult:
        if not self._punch_in_time or self._punch_out_time:
            return _fail("Not punched in")
        if self._break_start_time:
            return _fail("Already on break")
        self._break_start_time = _now_iso()
        self._break_count += 1
        print(f"[DummyAttendance] 休憩開始（シミュレーション）: {reason or '-'}")
        return ApiResult(success=True, data={"breakStartTime": self._break_start_time})

    async def end_break(self) -> ApiResult:
        if not self._break_start_time:
            return _fail("Not on break")
        self._break_start_time = None
        print("[DummyAttendance] 休憩終了（シミュレーション）")
        return ApiResult(success=True, data={})

    async def get_today(self) -> ApiResult:
        if not self._punch_in_time:
            status = "Absent"
        else:
            status = "Present"
        return ApiResult(
            success=True,
            data={
                "punchInTime": self._punch_in_time,
                "punchOutTime": self._punch_out_time,
                "breakStartTime": self._break_start_time,
                "breakCount": self._break_count,
                "status": status,
            },
        )

    async def get_live_attendance(self) -> ApiResult:
        if not self._punch_in_time or self._punch_out_time:
            status = "not_punched"
        elif self._break_start_time:
            status = "on_break"
        else:
            status = "working"
        return ApiResult(
            success=True,
            data=[
                {
                    "id": 1,
                    "name": "Demo Employee",
                    "status": status,
                    "punchInTime": self._punch_in_time,
                    "breakStartTime": self._break_start_time,
                }
            ],
        )

    async def override_punch(self, employee_id: int, action: str) -> ApiResult:
        if action == "punch_in":
            return await self.punch_in()
        if action == "punch_out":
            return await self.punch_out()
        return _fail(f"Unknown action: {action}")

    async def close(self) -> None:
        pass


def _fail(message: str) -> ApiResult:
    return ApiResult(success=False, error=message, status_code=400)
