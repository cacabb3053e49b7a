from unittest.mock import MagicMock, patch
from slack_sdk.errors import SlackApiError
from services.slack_client import SlackNotifier, ConsoleNotifier


def test_console_notifier_send():
    """ConsoleNotifierがメッセージを出力すること"""
    notifier = ConsoleNotifier()
    with patch("builtins.print") as mock_print:
        result = notifier.send("Punched in (09:00)")
    assert result is True
    mock_print.assert_called_once()


def test_console_notifier_send_error():
    """ConsoleNotifierがエラーメッセージを出力すること"""
    notifier = ConsoleNotifier()
    with patch("builtins.print") as mock_print:
        result = notifier.send_error("Error punching in")
    assert result is True
    assert "Error punching in" in mock_print.call_args[0][0]


def test_slack_notifier_send_success():
    """SlackNotifierがメッセージ送信に成功すること"""
    mock_client = MagicMock()
    mock_client.chat_postMessage.return_value = {"ok": True}

    notifier = SlackNotifier(token="xoxb-test", channel="C12345")
    notifier._client = mock_client

    result = notifier.send("テスト通知")
    assert result is True
    mock_client.chat_postMessage.assert_called_once_with(
        channel="C12345", text="テスト通知"
    )


def test_slack_notifier_send_failure():
    """Slack API失敗時にFalseを返すこと"""
    mock_client = MagicMock()
    mock_client.chat_postMessage.side_effect = SlackApiError(
        "channel_not_found", {"ok": False, "error": "channel_not_found"}
    )

    notifier = SlackNotifier(token="xoxb-test", channel="C12345")
    notifier._client = mock_client

    with patch("builtins.print"):
        result = notifier.send("テスト通知")
    assert result is False


def test_slack_notifier_send_error_prefix():
    mock_client = MagicMock()
    notifier = SlackNotifier(token="xoxb-test", channel="C12345")
    notifier._client = mock_client

    notifier.send_error("Error punching out")

    assert "Error punching out" in mock_client.chat_postMessage.call_args.kwargs["text"]


def test_slack_notifier_fallback():
    """トークン未設定時はコンソールにフォールバックすること"""
    notifier = SlackNotifier(token="", channel="")
    with patch("builtins.print") as mock_print:
        result = notifier.send("フォールバックテスト")
    assert result is True
    mock_print.assert_called_once()


def test_slack_notifier_network_failure_falls_back_to_console():
    """通信失敗（URLError）でも例外を出さずコンソールへ出力すること"""
    from urllib.error import URLError

    mock_client = MagicMock()
    mock_client.chat_postMessage.side_effect = URLError("connection refused")

    notifier = SlackNotifier(token="xoxb-test", channel="C12345")
    notifier._client = mock_client

    with patch("builtins.print") as mock_print:
        result = notifier.send("Punched in (09:00)")

    assert result is False
    printed = [c.args[0] for c in mock_print.call_args_list]
    assert any("Punched in (09:00)" in p for p in printed)
