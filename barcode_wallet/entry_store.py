"""Ordered, persisted list of scanned barcode entries."""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, List, Mapping, Optional

from barcode_wallet.id_allocator import IdentifierAllocator
from barcode_wallet.kv_store import KeyValueStore

STORAGE_KEY = "barcodes"

_STORE_LOGGER = logging.getLogger("BarcodeWallet.Store")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class Entry:
    id: str
    name: str
    code: str
    format: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Optional["Entry"]:
        entry_id = data.get("id")
        if entry_id is None or str(entry_id) == "":
            return None
        return cls(
            id=str(entry_id),
            name=_text(data.get("name")),
            code=_text(data.get("code")),
            format=_text(data.get("format")),
        )


class OrderedEntityStore:
    """Entry list persisted as one JSON array under ``STORAGE_KEY``.

    Every operation reloads the list from the backing store before touching
    it; nothing is cached between calls. Boolean mutators write back only
    when they report ``True``.
    """

    def __init__(
        self,
        store: KeyValueStore,
        allocator: IdentifierAllocator,
        *,
        key: str = STORAGE_KEY,
    ) -> None:
        self._store = store
        self._allocator = allocator
        self._key = key

    # Persistence ---------------------------------------------------------

    def load(self) -> List[Entry]:
        raw = self._store.get(self._key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as exc:
            _STORE_LOGGER.debug("Stored entry list is malformed; treating as empty: %s", exc)
            return []
        if not isinstance(data, list):
            _STORE_LOGGER.debug("Stored entry list is %s, not a list; treating as empty", type(data).__name__)
            return []
        entries: List[Entry] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            entry = Entry.from_mapping(item)
            if entry is not None:
                entries.append(entry)
        return entries

    def _save(self, entries: List[Entry]) -> None:
        payload = json.dumps([entry.to_dict() for entry in entries], ensure_ascii=False)
        self._store.set(self._key, payload)

    # Mutations -----------------------------------------------------------

    def create(self, name: str, code: str, format: str) -> Entry:
        entries = self.load()
        entry = Entry(id=self._allocator.next_id(), name=name, code=code, format=format)
        entries.append(entry)
        self._save(entries)
        _STORE_LOGGER.debug("Created entry id=%s format=%s", entry.id, entry.format)
        return entry

    def delete(self, entry_id: str) -> bool:
        entries = self.load()
        remaining = [entry for entry in entries if entry.id != entry_id]
        if len(remaining) == len(entries):
            return False
        self._save(remaining)
        _STORE_LOGGER.debug("Deleted entry id=%s", entry_id)
        return True

    def edit(self, entry_id: str, name: str) -> bool:
        entries = self.load()
        index = self._index_of(entries, entry_id)
        if index is None:
            return False
        entries[index].name = name
        self._save(entries)
        return True

    def move_up(self, entry_id: str) -> bool:
        entries = self.load()
        index = self._index_of(entries, entry_id)
        if index is None or index == 0:
            return False
        entries[index - 1], entries[index] = entries[index], entries[index - 1]
        self._save(entries)
        return True

    def move_down(self, entry_id: str) -> bool:
        entries = self.load()
        index = self._index_of(entries, entry_id)
        if index is None or index >= len(entries) - 1:
            return False
        entries[index], entries[index + 1] = entries[index + 1], entries[index]
        self._save(entries)
        return True

    # Queries -------------------------------------------------------------

    def find_by_id(self, entry_id: str) -> Optional[Entry]:
        for entry in self.load():
            if entry.id == entry_id:
                return entry
        return None

    @staticmethod
    def _index_of(entries: List[Entry], entry_id: str) -> Optional[int]:
        for index, entry in enumerate(entries):
            if entry.id == entry_id:
                return index
        return None
