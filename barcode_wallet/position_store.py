from __future__ import annotations

import json
import logging
import math
from typing import Optional

from barcode_wallet.bounds import Position
from barcode_wallet.kv_store import KeyValueStore

DEFAULT_POSITION_KEY = "floating_action_position"

_DRAG_LOGGER = logging.getLogger("BarcodeWallet.Drag")


def _coerce_coordinate(value: object) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    numeric = float(value)
    if not math.isfinite(numeric):
        return None
    return numeric


class PositionPersistence:
    """Reads and writes one ``{"x", "y"}`` pair under a caller-chosen key."""

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_POSITION_KEY) -> None:
        self._store = store
        self._key = key

    def save(self, position: Optional[Position]) -> None:
        if position is None:
            return
        self._store.set(self._key, json.dumps(position.to_dict()))

    def restore(self) -> Optional[Position]:
        raw = self._store.get(self._key)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            _DRAG_LOGGER.debug("Ignoring malformed stored position under %s", self._key)
            return None
        if not isinstance(data, dict):
            return None
        x = _coerce_coordinate(data.get("x"))
        y = _coerce_coordinate(data.get("y"))
        if x is None or y is None:
            _DRAG_LOGGER.debug("Stored position under %s lacks numeric x/y", self._key)
            return None
        return Position(x, y)
