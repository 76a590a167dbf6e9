"""Settings loader for the barcode wallet (JSON file plus env overrides)."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from barcode_wallet.position_store import DEFAULT_POSITION_KEY

SETTINGS_FILENAME = "settings.json"
DATA_FILENAME = "barcode_wallet.json"
DATA_PATH_ENV_VAR = "BARCODE_WALLET_DATA_PATH"
DEBUG_ENV_VAR = "BARCODE_WALLET_DEBUG"
LOG_RETENTION_ENV_VAR = "BARCODE_WALLET_LOG_RETENTION"
LOG_RETENTION_MIN = 1
LOG_RETENTION_MAX = 20
LOG_RETENTION_DEFAULT = 5


@dataclass(frozen=True)
class WalletSettings:
    data_path: Path
    key_prefix: str = ""
    position_key: str = DEFAULT_POSITION_KEY
    debug: bool = False
    log_retention: int = LOG_RETENTION_DEFAULT

    @property
    def settings_path(self) -> Path:
        return self.data_path.parent / SETTINGS_FILENAME


def parse_bool_token(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    token = value.strip().lower()
    if token in {"1", "true", "yes", "on"}:
        return True
    if token in {"0", "false", "no", "off"}:
        return False
    return None


def _coerce_debug_flag(value: Any) -> bool:
    if isinstance(value, str):
        return bool(parse_bool_token(value))
    if isinstance(value, (bool, int)):
        return bool(value)
    return False


def _coerce_log_retention(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        return None
    if numeric <= 0:
        return LOG_RETENTION_MIN
    if numeric > LOG_RETENTION_MAX:
        return LOG_RETENTION_MAX
    return numeric


def default_data_path() -> Path:
    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    return state_home / "barcode_wallet" / DATA_FILENAME


def _read_settings_file(path: Path) -> Mapping[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def load_settings(
    data_path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> WalletSettings:
    """Resolve settings: defaults, then ``settings.json`` beside the data file, then env."""

    env = os.environ if environ is None else environ
    if data_path is None:
        env_path = env.get(DATA_PATH_ENV_VAR)
        data_path = Path(env_path).expanduser() if env_path else default_data_path()
    data_path = Path(data_path)

    data = _read_settings_file(data_path.parent / SETTINGS_FILENAME)

    key_prefix = data.get("key_prefix", "")
    if not isinstance(key_prefix, str):
        key_prefix = ""
    position_key = data.get("position_key", DEFAULT_POSITION_KEY)
    if not isinstance(position_key, str) or not position_key.strip():
        position_key = DEFAULT_POSITION_KEY

    debug = _coerce_debug_flag(data.get("debug"))
    env_debug = parse_bool_token(env.get(DEBUG_ENV_VAR))
    if env_debug is not None:
        debug = env_debug

    log_retention = _coerce_log_retention(data.get("log_retention")) or LOG_RETENTION_DEFAULT
    env_retention = _coerce_log_retention(env.get(LOG_RETENTION_ENV_VAR))
    if env_retention is not None:
        log_retention = env_retention

    return WalletSettings(
        data_path=data_path,
        key_prefix=key_prefix,
        position_key=position_key.strip(),
        debug=debug,
        log_retention=log_retention,
    )
