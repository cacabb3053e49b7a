import copy

import yaml
from pathlib import Path

DEFAULT_CONFIG = {
    "api": {
        "backend": "http",
        "base_url": "http://localhost:3000",
        "timeout_seconds": 10,
    },
    "ticker": {
        "interval_seconds": 1,
    },
    "live_tracker": {
        "poll_interval_seconds": 30,
    },
    "slack": {
        "enabled": False,
        "notify_channel": "",
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """ベース設定にオーバーライドをマージする"""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str = "config.yaml") -> dict:
    """YAML設定ファイルをロードし、デフォルト設定とマージして返す"""
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
        return _deep_merge(copy.deepcopy(DEFAULT_CONFIG), user_config)
    return copy.deepcopy(DEFAULT_CONFIG)
