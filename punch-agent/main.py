"""HireConnect 打刻エージェント - エントリーポイント"""
import argparse
import asyncio
import os
import signal
import sys

from dotenv import load_dotenv

from graph.state import ON_BREAK, WORKING
from schedulers.scheduler import PollingScheduler
from schedulers.ticker import TimerManager
from services.config_loader import load_config
from services.live_attendance import LiveAttendanceTracker, format_hours
from services.punch_controller import PunchController
from services.session_context import SessionContext
from services.slack_client import SlackNotifier, ConsoleNotifier

HELP_TEXT = """commands:
  in               punch in
  break [reason]   start a break
  resume           end the break
  out              punch out
  status           show current status
  dismiss          dismiss the error message
  quit             exit"""


def create_services(config: dict):
    """設定に基づいてサービスインスタンスを生成"""
    load_dotenv()

    session = SessionContext(
        base_url=os.getenv("HIRECONNECT_API_URL", config["api"]["base_url"]),
        token=os.getenv("HIRECONNECT_TOKEN") or None,
        employee_id=os.getenv("HIRECONNECT_EMPLOYEE_ID") or None,
    )

    # 通知
    slack_config = config["slack"]
    slack_token = os.getenv("SLACK_BOT_TOKEN", "")
    slack_channel = os.getenv("SLACK_NOTIFY_CHANNEL", slack_config.get("notify_channel", ""))
    if slack_config["enabled"] and slack_token:
        notifier = SlackNotifier(token=slack_token, channel=slack_channel)
    else:
        notifier = ConsoleNotifier()

    # 勤怠サービス
    if config["api"].get("backend", "http") == "dummy":
        from services.dummy_attendance import DummyAttendanceService
        client = DummyAttendanceService()
    else:
        from services.attendance_api import AttendanceApiClient
        client = AttendanceApiClient(session=session, config=config)

    return session, notifier, client


def render_status(controller: PunchController) -> str:
    status = controller.status
    line = f"[{status}]"
    if status in (WORKING, ON_BREAK):
        line += f" work {controller.work_display}"
    if status == ON_BREAK:
        line += f" / break {controller.break_display}"
    if controller.error_message:
        line += f"\n  ! {controller.error_message}"
    return line


async def handle_command(controller: PunchController, line: str) -> bool:
    """1行分のコマンドを処理する。終了時はFalse"""
    command, _, arg = line.strip().partition(" ")
    command = command.lower()

    if command in ("quit", "exit", "q"):
        return False
    if command == "in":
        await controller.punch_in()
    elif command == "break":
        await controller.start_break(arg.strip())
    elif command == "resume":
        await controller.end_break()
    elif command == "out":
        await controller.punch_out()
    elif command == "status":
        print(render_status(controller))
    elif command == "dismiss":
        controller.dismiss_error()
    elif command in ("help", "?"):
        print(HELP_TEXT)
    elif command:
        print(f"unknown command: {command}")
    return True


async def run_punch(config: dict):
    """打刻コンソールを起動する"""
    session, notifier, client = create_services(config)
    timers = TimerManager(interval_seconds=config["ticker"]["interval_seconds"])
    controller = PunchController(client, session, notifier, timers=timers)
    controller.start()

    # 起動時に本日の状態を取り直す
    await controller.resume_session()
    print(render_status(controller))
    print(HELP_TEXT)

    try:
        while True:
            try:
                line = input("> ")
            except EOFError:
                break
            try:
                if not await handle_command(controller, line):
                    break
            except Exception as e:
                print(f"[HireConnect] コマンド処理中にエラー: {e}", file=sys.stderr)
                notifier.send_error(str(e))
    finally:
        await controller.close()
        print("[HireConnect] 停止しました")


LIVE_HELP_TEXT = """commands:
  refresh                  reload the live board now
  override <id> in|out     punch in / punch out on behalf of an employee
  quit                     exit"""

OVERRIDE_ALIASES = {"in": "punch_in", "out": "punch_out"}


def format_board_row(employee: dict) -> str:
    return (
        f"  {employee.get('id')}\t{employee.get('name', '')}"
        f"\t{employee.get('department') or '-'}\t{employee.get('status', '')}"
        f"\t{format_hours(employee.get('totalHours'))}"
    )


async def handle_live_command(tracker: LiveAttendanceTracker, line: str) -> bool:
    """ライブ表示の1行分のコマンドを処理する。終了時はFalse"""
    command, *args = line.split() or [""]
    command = command.lower()

    if command in ("quit", "exit", "q"):
        return False
    if command == "refresh":
        await tracker.refresh()
        print_board(tracker)
    elif command == "override":
        if len(args) != 2 or not args[0].isdigit() or args[1].lower() not in OVERRIDE_ALIASES:
            print("usage: override <id> in|out")
            return True
        employee_id = int(args[0])
        result = await tracker.override_punch(employee_id, OVERRIDE_ALIASES[args[1].lower()])
        if result.success:
            print(f"[HireConnect] Punch override successful ({employee_id})")
            print_board(tracker)
        else:
            print(f"[HireConnect エラー] {result.error}", file=sys.stderr)
    elif command in ("help", "?"):
        print(LIVE_HELP_TEXT)
    elif command:
        print(f"unknown command: {command}")
    return True


def print_board(tracker: LiveAttendanceTracker):
    updated = tracker.last_update.strftime("%H:%M:%S") if tracker.last_update else "--"
    print(f"\n[HireConnect] ライブ勤怠 (updated {updated}) {tracker.status_counts()}")
    for e in tracker.employees:
        print(format_board_row(e))


def run_live(config: dict):
    """ライブ勤怠表示を起動する（30秒ごとに更新）"""
    session, notifier, client = create_services(config)
    tracker = LiveAttendanceTracker(client)

    def poll_job():
        try:
            tracker.poll()
            print_board(tracker)
        except Exception as e:
            print(f"[HireConnect] ライブ勤怠の更新中にエラー: {e}", file=sys.stderr)
            notifier.send_error(str(e))

    poll_job()
    interval = config["live_tracker"]["poll_interval_seconds"]
    scheduler = PollingScheduler(interval_seconds=interval, job_func=poll_job)
    scheduler.start()
    print(f"[HireConnect] {interval}秒間隔で更新します")
    print(LIVE_HELP_TEXT)

    # シグナルハンドリング
    def shutdown(signum, frame):
        print("\n[HireConnect] 停止中...")
        scheduler.stop()
        asyncio.run(client.close())
        print("[HireConnect] 停止しました")
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    print("[HireConnect] Ctrl+Cで停止します")
    while True:
        try:
            line = input("> ")
        except (EOFError, KeyboardInterrupt):
            break
        try:
            if not asyncio.run(handle_live_command(tracker, line)):
                break
        except Exception as e:
            print(f"[HireConnect] コマンド処理中にエラー: {e}", file=sys.stderr)
            notifier.send_error(str(e))
    shutdown(None, None)


def main():
    """メイン起動処理"""
    parser = argparse.ArgumentParser(description="HireConnect attendance punch agent.")
    parser.add_argument(
        "mode",
        nargs="?",
        choices=("punch", "live"),
        default="punch",
        help="punch: interactive punch console, live: admin live attendance board",
    )
    parser.add_argument("--config", default="config.yaml", help="Path to the YAML config.")
    args = parser.parse_args()

    config = load_config(args.config)

    if args.mode == "live":
        run_live(config)
    else:
        try:
            asyncio.run(run_punch(config))
        except KeyboardInterrupt:
            print("\n[HireConnect] 停止しました")


if __name__ == "__main__":
    main()
