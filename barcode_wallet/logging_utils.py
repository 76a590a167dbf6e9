from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator, Optional

from barcode_wallet.settings import parse_bool_token

ROOT_LOGGER_NAME = "BarcodeWallet"
LOG_FILENAME = "barcode_wallet.log"
LOG_DIR_ENV_VAR = "BARCODE_WALLET_LOG_DIR"
PROPAGATE_ENV_VAR = "BARCODE_WALLET_PROPAGATE_LOGS"
LOG_MAX_BYTES = 512 * 1024
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _log_dir_candidates() -> Iterator[Path]:
    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        yield Path(env_override).expanduser()
    yield Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state")) / "logs"
    yield Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache")) / "logs"
    yield Path.cwd() / "logs"
    yield Path(tempfile.gettempdir())


def resolve_logs_dir(log_dir_name: str = "barcode_wallet") -> Path:
    """First writable ``<base>/<log_dir_name>``: $BARCODE_WALLET_LOG_DIR, XDG state, XDG cache, ./logs, tempdir."""
    last_error: Optional[OSError] = None
    for base in _log_dir_candidates():
        target = base / log_dir_name
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            last_error = exc
            continue
        return target
    assert last_error is not None
    raise last_error


def _wallet_handler(logger: logging.Logger) -> Optional[RotatingFileHandler]:
    for existing in logger.handlers:
        if getattr(existing, "_barcode_wallet_handler", False):
            return existing  # type: ignore[return-value]
    return None


def configure_logging(
    *,
    debug: bool = False,
    retention: int = 5,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Route the ``BarcodeWallet`` logger tree into one rotating file.

    ``retention`` counts the live file, so ``retention=3`` keeps two backups.
    Calling again adjusts level and retention of the handler already attached
    instead of adding a second one.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = bool(parse_bool_token(os.environ.get(PROPAGATE_ENV_VAR)))

    backup_count = max(1, retention) - 1
    handler = _wallet_handler(logger)
    if handler is not None:
        handler.backupCount = backup_count
        return logger

    target_dir = log_dir if log_dir is not None else resolve_logs_dir()
    target_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        target_dir / LOG_FILENAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._barcode_wallet_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
