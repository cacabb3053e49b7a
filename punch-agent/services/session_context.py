from dataclasses import dataclass
from typing import Optional


@dataclass
class SessionContext:
    """API接続先と認証トークンをまとめて各コンポーネントに注入する"""

    base_url: str
    token: Optional[str] = None
    employee_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def auth_headers(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def invalidate(self) -> None:
        """401受信時にトークンを破棄する"""
        self.token = None
