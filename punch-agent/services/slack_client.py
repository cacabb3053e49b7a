import sys


class ConsoleNotifier:
    """コンソール出力による通知（フォールバック用）"""

    def send(self, message: str) -> bool:
        print(f"[HireConnect] {message}", file=sys.stdout)
        return True

    def send_error(self, error: str) -> bool:
        print(f"[HireConnect エラー] {error}", file=sys.stderr)
        return True


class SlackNotifier:
    """Slack APIによる通知サービス"""

    def __init__(self, token: str, channel: str):
        self._channel = channel
        self._client = None
        self._fallback = ConsoleNotifier()

        if token:
            from slack_sdk import WebClient
            self._client = WebClient(token=token)

    def send(self, message: str) -> bool:
        """メッセージ送信（未設定時・送信失敗時はコンソールへ）"""
        if self._client is None:
            return self._fallback.send(message)

        try:
            self._client.chat_postMessage(channel=self._channel, text=message)
            return True
        except Exception as e:
            # SlackApiError 以外に通信失敗（URLError など）も来る
            print(f"[HireConnect] Slack送信失敗: {e}", file=sys.stderr)
            self._fallback.send(message)
            return False

    def send_error(self, error: str) -> bool:
        """エラー通知"""
        message = f"❌ {error}"
        return self.send(message)
