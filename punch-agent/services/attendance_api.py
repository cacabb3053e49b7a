import asyncio
import sys
from typing import Optional

import requests

from services.attendance_interface import AttendanceServiceInterface, ApiResult
from services.session_context import SessionContext


class AttendanceApiClient(AttendanceServiceInterface):
    """HireConnect勤怠サービスのREST APIを呼び出す"""

    def __init__(self, session: SessionContext, config: dict):
        self._session = session
        self._config = config["api"]
        self._http = requests.Session()
        self._http.headers.update({"Content-Type": "application/json"})

    async def punch_in(self) -> ApiResult:
        return await self._request("POST", "/api/attendance/punch-in", json={})

    async def punch_out(self) -> ApiResult:
        return await self._request("POST", "/api/attendance/punch-out", json={})

    async def start_break(self, reason: str = "") -> ApiResult:
        return await self._request(
            "POST", "/api/attendance/break/start", json={"reason": reason}
        )

    async def end_break(self) -> ApiResult:
        return await self._request("POST", "/api/attendance/break/end", json={})

    async def get_today(self) -> ApiResult:
        return await self._request("GET", "/api/attendance/today")

    async def get_live_attendance(self) -> ApiResult:
        return await self._request("GET", "/api/admin/attendance/live")

    async def override_punch(self, employee_id: int, action: str) -> ApiResult:
        return await self._request(
            "POST",
            f"/api/admin/attendance/override/{employee_id}",
            json={"action": action},
        )

    async def _request(
        self, method: str, path: str, json: Optional[dict] = None
    ) -> ApiResult:
        """ブロッキングなHTTP呼び出しをワーカースレッドで実行する"""
        return await asyncio.to_thread(self._send, method, path, json)

    def _send(self, method: str, path: str, json: Optional[dict]) -> ApiResult:
        url = self._session.base_url.rstrip("/") + path
        try:
            resp = self._http.request(
                method,
                url,
                json=json,
                headers=self._session.auth_headers(),
                timeout=self._config["timeout_seconds"],
            )
        except requests.RequestException as e:
            # 通信失敗はサーバー文言なし。呼び出し側で既定文言にする
            print(f"[HireConnect] 通信エラー {method} {path}: {e}", file=sys.stderr)
            return ApiResult(success=False, error=None)

        payload = _parse_body(resp)

        if resp.status_code == 401:
            self._session.invalidate()

        if not resp.ok:
            message = payload.get("message") if isinstance(payload, dict) else None
            return ApiResult(
                success=False,
                data=payload,
                error=str(message) if message else None,
                status_code=resp.status_code,
            )

        return ApiResult(success=True, data=payload, status_code=resp.status_code)

    async def close(self) -> None:
        self._http.close()


def _parse_body(resp: requests.Response):
    """JSONボディを取り出す（空・非JSONは空dict）"""
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        return {}
