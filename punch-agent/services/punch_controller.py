from datetime import date
from typing import Optional

from graph.graph import build_graph
from graph.state import PunchState, derive_status, initial_state
from schedulers.ticker import TimerManager
from services.attendance_interface import AttendanceServiceInterface
from services.session_context import SessionContext

BUSY_MESSAGE = "Please wait for the previous action to finish"


def _today_str() -> str:
    """テスト時にモック可能"""
    return date.today().isoformat()


class PunchController:
    """出勤・休憩・退勤の打刻状態を保持し、1操作ずつ勤怠サービスに反映する

    状態の値は必ずサーバー応答から設定し、ローカルで予測しない。
    失敗時は直前の確定状態のまま error_message だけを更新する。
    """

    def __init__(
        self,
        client: AttendanceServiceInterface,
        session: SessionContext,
        notifier,
        timers: Optional[TimerManager] = None,
    ):
        self._client = client
        self._session = session
        self._notifier = notifier
        self._timers = timers or TimerManager()
        self._graph = build_graph(
            client=client, timers=self._timers, notifier=notifier
        )
        self._state: PunchState = initial_state(_today_str())
        self._busy = False

    @property
    def session(self) -> SessionContext:
        return self._session

    @property
    def state(self) -> PunchState:
        return dict(self._state)

    @property
    def status(self) -> str:
        return derive_status(self._state)

    @property
    def error_message(self) -> Optional[str]:
        return self._state["error_message"]

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def work_display(self) -> str:
        return self._timers.work.display

    @property
    def break_display(self) -> str:
        return self._timers.brk.display

    def start(self):
        """表示タイマー用のスケジューラを開始"""
        self._timers.start()

    async def close(self):
        """タイマー破棄と接続のクローズ"""
        self._timers.shutdown()
        await self._client.close()

    async def punch_in(self) -> PunchState:
        return await self._dispatch("punch_in")

    async def start_break(self, reason: str = "") -> PunchState:
        return await self._dispatch("start_break", reason=reason)

    async def end_break(self) -> PunchState:
        return await self._dispatch("end_break")

    async def punch_out(self) -> PunchState:
        return await self._dispatch("punch_out")

    async def resume_session(self) -> PunchState:
        """起動時に勤怠サービスから本日の状態を取り直す"""
        return await self._dispatch("sync")

    def dismiss_error(self):
        """表示中のエラーを閉じる"""
        self._state["error_message"] = None
        self._state["extra"] = {}

    async def _dispatch(self, action: str, reason: Optional[str] = None) -> PunchState:
        # 同時に走らせる変更操作は1つだけ
        if self._busy:
            self._state["error_message"] = BUSY_MESSAGE
            self._notifier.send_error(BUSY_MESSAGE)
            return self.state

        self._busy = True
        try:
            state = dict(self._state)
            state.update(
                action=action,
                action_taken=None,
                error_message=None,
                extra={"reason": reason} if reason else {},
            )
            if action == "sync":
                state["today"] = _today_str()

            result = await self._graph.ainvoke(state)

            extra = {k: v for k, v in result.get("extra", {}).items() if k != "reason"}
            self._state = {**result, "extra": extra}
        finally:
            self._busy = False

        return self.state
