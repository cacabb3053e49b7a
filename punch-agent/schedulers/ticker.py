# schedulers/ticker.py
import math
import sys
import threading
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from graph.state import PunchState, derive_status, WORKING, ON_BREAK


def _now(tz=None) -> datetime:
    """テスト時にモック可能な現在時刻取得"""
    return datetime.now(tz)


def parse_timestamp(value) -> datetime:
    """サーバー返却の時刻をdatetimeに変換する

    ISO 8601（末尾Z可）、RFC 1123 形式、エポックミリ秒を受け付ける。
    解釈できない場合は ValueError。
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError) as e:
            raise ValueError(f"invalid timestamp: {value!r}") from e
    if not isinstance(value, str):
        raise ValueError(f"invalid timestamp: {value!r}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError) as e:
        raise ValueError(f"invalid timestamp: {value!r}") from e


def format_duration(seconds: int) -> str:
    """秒数を HH:MM:SS 形式にする"""
    hrs, rem = divmod(max(0, int(seconds)), 3600)
    mins, secs = divmod(rem, 60)
    return f"{hrs:02d}:{mins:02d}:{secs:02d}"


class ElapsedTicker:
    """基準時刻からの経過秒数を一定間隔で再計算する表示用タイマー

    表示専用で権威は持たない。基準時刻が変わったら start() で作り直す。
    """

    def __init__(
        self,
        name: str,
        scheduler,
        interval_seconds: int = 1,
        on_tick: Optional[Callable[[str, int], None]] = None,
    ):
        self._name = name
        self._scheduler = scheduler
        self._interval = interval_seconds
        self._on_tick = on_tick
        self._lock = threading.Lock()
        self._start: Optional[datetime] = None
        self._baseline: Optional[str] = None
        self._elapsed = 0
        self._running = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def baseline(self) -> Optional[str]:
        return self._baseline

    @property
    def running(self) -> bool:
        return self._running

    @property
    def elapsed_seconds(self) -> int:
        with self._lock:
            return self._elapsed

    @property
    def display(self) -> str:
        return format_duration(self.elapsed_seconds)

    def start(self, start_time: str):
        """基準時刻を設定して計測開始（既存ジョブは破棄して作り直す）

        基準時刻を解釈できない場合は表示をゼロのまま計測しない。
        """
        self._cancel_job()
        try:
            start = parse_timestamp(start_time)
        except ValueError as e:
            self.stop()
            print(f"[HireConnect] {self._name} を開始できません: {e}", file=sys.stderr)
            return
        with self._lock:
            self._baseline = start_time
            self._start = start
        self.tick()
        self._scheduler.add_job(
            self.tick,
            trigger=IntervalTrigger(seconds=self._interval),
            id=self._name,
            replace_existing=True,
        )
        self._running = True

    def pause(self):
        """ジョブだけ止めて表示値は保持する"""
        self._cancel_job()

    def freeze(self, start_time: str, at: str):
        """ジョブを動かさず、start_time から at までの経過で表示を固定する"""
        self._cancel_job()
        try:
            start = parse_timestamp(start_time)
            seconds = _elapsed_between(start, parse_timestamp(at))
        except (TypeError, ValueError) as e:
            # naive と aware の混在も含む
            self.stop()
            print(f"[HireConnect] {self._name} を固定できません: {e}", file=sys.stderr)
            return
        with self._lock:
            self._baseline = start_time
            self._start = start
            self._elapsed = seconds

    def stop(self):
        """停止して表示をゼロに戻す"""
        self._cancel_job()
        with self._lock:
            self._baseline = None
            self._start = None
            self._elapsed = 0

    def tick(self):
        """現在時刻から経過秒数を再計算する（スケジューラから1秒ごとに呼ばれる）"""
        with self._lock:
            if self._start is None:
                return
            seconds = _elapsed_between(self._start, _now(self._start.tzinfo))
            self._elapsed = seconds
        if self._on_tick:
            self._on_tick(self._name, seconds)

    def _cancel_job(self):
        if not self._running:
            return
        try:
            self._scheduler.remove_job(self._name)
        except JobLookupError:
            pass
        self._running = False


def _elapsed_between(start: datetime, end: datetime) -> int:
    # 時計のずれで負になる場合は0
    return max(0, math.floor((end - start).total_seconds()))


class TimerManager:
    """勤務タイマーと休憩タイマーを打刻状態に合わせて管理する"""

    def __init__(
        self,
        interval_seconds: int = 1,
        scheduler=None,
        on_tick: Optional[Callable[[str, int], None]] = None,
    ):
        self._scheduler = scheduler or BackgroundScheduler()
        self.work = ElapsedTicker(
            "work_timer", self._scheduler, interval_seconds, on_tick
        )
        self.brk = ElapsedTicker(
            "break_timer", self._scheduler, interval_seconds, on_tick
        )

    def start(self):
        """スケジューラ開始"""
        if not self._scheduler.running:
            self._scheduler.start()

    def shutdown(self):
        """全タイマーを破棄してスケジューラ停止"""
        self.work.stop()
        self.brk.stop()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    def sync(self, state: PunchState):
        """状態に応じてタイマーの開始・一時停止・破棄を行う"""
        status = derive_status(state)
        punch_in_time = state["punch_in_time"]
        break_start_time = state["break_start_time"]

        if status == WORKING:
            self.brk.stop()
            if not (self.work.running and self.work.baseline == punch_in_time):
                self.work.start(punch_in_time)
            return

        if status == ON_BREAK:
            if self.work.baseline == punch_in_time:
                self.work.pause()
            elif break_start_time:
                # 再読込直後など勤務タイマー未起動の場合は休憩開始時点で固定
                self.work.freeze(punch_in_time, at=break_start_time)
            else:
                self.work.stop()

            if not break_start_time:
                self.brk.stop()
            elif not (self.brk.running and self.brk.baseline == break_start_time):
                self.brk.start(break_start_time)
            return

        # 未出勤・退勤済み
        self.work.stop()
        self.brk.stop()
