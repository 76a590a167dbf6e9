"""String-keyed persistent stores backing the wallet core."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

_STORE_LOGGER = logging.getLogger("BarcodeWallet.Store")


class StorageError(RuntimeError):
    """Raised when a value cannot be written back to the backing store."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryKeyValueStore:
    """Process-local store; mostly useful for tests and previews."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})
        self.write_count = 0

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = str(value)
        self.write_count += 1

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        return dict(self._values)


class JsonFileKeyValueStore:
    """Single JSON object file; every write replaces the file atomically.

    The file is re-read on each ``get`` so separate instances pointed at the
    same path observe each other's writes (last writer wins).
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as exc:
            _STORE_LOGGER.debug("Ignoring unreadable store %s: %s", self._path, exc)
            return {}
        if not isinstance(raw, dict):
            _STORE_LOGGER.debug("Ignoring non-object store %s", self._path)
            return {}
        return {str(key): value for key, value in raw.items() if isinstance(value, str)}

    def _write_all(self, values: Dict[str, str]) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(values, indent=2, sort_keys=True), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as exc:
            _STORE_LOGGER.warning("Failed to write store %s: %s", self._path, exc)
            raise StorageError(f"failed to write {self._path}") from exc

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._read_all()
        values[key] = str(value)
        self._write_all(values)

    def remove(self, key: str) -> None:
        values = self._read_all()
        if values.pop(key, None) is not None:
            self._write_all(values)


class QSettingsKeyValueStore:
    """Store backed by the platform's native per-user ``QSettings``."""

    def __init__(self, settings: Any = None, *, organization: str = "BarcodeWallet", application: str = "barcode_wallet") -> None:
        if settings is None:
            from PyQt6.QtCore import QSettings

            settings = QSettings(organization, application)
        self._settings = settings

    def get(self, key: str) -> Optional[str]:
        value = self._settings.value(key)
        if value is None:
            return None
        return str(value)

    def set(self, key: str, value: str) -> None:
        self._settings.setValue(key, str(value))
        self._settings.sync()
        status = self._settings.status()
        if status != type(status).NoError:
            _STORE_LOGGER.warning("QSettings write for %s reported %s", key, status)
            raise StorageError(f"failed to write setting {key}")

    def remove(self, key: str) -> None:
        self._settings.remove(key)


class NamespacedKeyValueStore:
    """Prefixes every key before delegating to another store."""

    def __init__(self, inner: KeyValueStore, prefix: str) -> None:
        self._inner = inner
        self._prefix = prefix or ""

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        return self._inner.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        self._inner.set(self._key(key), value)

    def remove(self, key: str) -> None:
        self._inner.remove(self._key(key))
