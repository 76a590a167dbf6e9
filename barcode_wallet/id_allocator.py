"""Persisted monotonic identifier source for wallet entries."""
from __future__ import annotations

import logging

from barcode_wallet.kv_store import KeyValueStore

ID_KEY = "barcode_next_id"

_STORE_LOGGER = logging.getLogger("BarcodeWallet.Store")


class IdentifierAllocator:
    """Owns the single persisted counter key.

    The counter is created lazily on the first request and written back
    synchronously after every increment, so an issued id is never handed out
    again by this store (single writer). Instances are cheap; the persisted
    value is the shared state, not the object.
    """

    def __init__(self, store: KeyValueStore, key: str = ID_KEY) -> None:
        self._store = store
        self._key = key

    def current(self) -> int:
        raw = self._store.get(self._key)
        if raw is None:
            return 0
        try:
            value = int(str(raw).strip())
        except (TypeError, ValueError):
            _STORE_LOGGER.debug("Counter %s holds non-numeric %r; restarting from 0", self._key, raw)
            return 0
        return max(value, 0)

    def next_id(self) -> str:
        next_value = self.current() + 1
        self._store.set(self._key, str(next_value))
        return str(next_value)
