from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ApiResult:
    success: bool
    data: Any = field(default_factory=dict)
    error: Optional[str] = None         # サーバーの message。無ければ None
    status_code: Optional[int] = None


class AttendanceServiceInterface(ABC):
    """勤怠サービス（外部）の抽象インターフェース"""

    @abstractmethod
    async def punch_in(self) -> ApiResult:
        """出勤打刻 → {punchInTime}"""
        ...

    @abstractmethod
    async def punch_out(self) -> ApiResult:
        """退勤打刻 → {punchOutTime}"""
        ...

    @abstractmethod
    async def start_break(self, reason: str = "") -> ApiResult:
        """休憩開始 → {breakStartTime}"""
        ...

    @abstractmethod
    async def end_break(self) -> ApiResult:
        """休憩終了 → {}"""
        ...

    @abstractmethod
    async def get_today(self) -> ApiResult:
        """本日の勤怠状況を取得"""
        ...

    @abstractmethod
    async def get_live_attendance(self) -> ApiResult:
        """全従業員のライブ勤怠状況を取得（管理者用）"""
        ...

    @abstractmethod
    async def override_punch(self, employee_id: int, action: str) -> ApiResult:
        """管理者による打刻の代理実行"""
        ...

    @abstractmethod
    async def close(self) -> None:
        """リソース解放"""
        ...
