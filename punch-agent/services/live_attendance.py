import asyncio
import sys
import threading
from collections import Counter
from datetime import datetime
from typing import Optional

from services.attendance_interface import AttendanceServiceInterface, ApiResult

LIVE_STATUSES = ("working", "on_break", "absent", "not_punched")
OVERRIDE_ACTIONS = ("punch_in", "punch_out")


def _now() -> datetime:
    """テスト時にモック可能"""
    return datetime.now()


def format_hours(hours: Optional[float]) -> str:
    """小数の時間を "Xh Ym" 形式にする（値が無ければ --）"""
    if not hours:
        return "--"
    h = int(hours)
    m = round((hours - h) * 60)
    return f"{h}h {m}m"


class LiveAttendanceTracker:
    """全従業員の勤怠状況を定期取得する（管理者用ライブ表示）"""

    def __init__(self, client: AttendanceServiceInterface):
        self._client = client
        self._employees: list[dict] = []
        self._last_update: Optional[datetime] = None
        self._loading = True
        self._lock = threading.Lock()

    @property
    def employees(self) -> list[dict]:
        with self._lock:
            return list(self._employees)

    @property
    def last_update(self) -> Optional[datetime]:
        return self._last_update

    @property
    def loading(self) -> bool:
        return self._loading

    async def refresh(self) -> bool:
        """ライブ一覧を取り直す。失敗時は前回の一覧を維持する"""
        try:
            result = await self._client.get_live_attendance()
        finally:
            self._loading = False

        if not result.success or not isinstance(result.data, list):
            print(
                f"[HireConnect] ライブ勤怠の取得に失敗: {result.error or 'unknown error'}",
                file=sys.stderr,
            )
            return False

        with self._lock:
            self._employees = result.data
        self._last_update = _now()
        return True

    def poll(self):
        """スケジューラ（別スレッド）から呼ばれる同期版"""
        asyncio.run(self.refresh())

    def status_counts(self) -> dict:
        counts = Counter(e.get("status", "not_punched") for e in self.employees)
        return {status: counts.get(status, 0) for status in LIVE_STATUSES}

    async def override_punch(self, employee_id: int, action: str) -> ApiResult:
        """管理者による代理打刻。成功したら一覧を取り直す"""
        if action not in OVERRIDE_ACTIONS:
            raise ValueError(f"unknown override action: {action}")

        result = await self._client.override_punch(employee_id, action)
        if result.success:
            await self.refresh()
        elif not result.error:
            result.error = "Override failed"
        return result
