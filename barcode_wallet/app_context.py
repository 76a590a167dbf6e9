from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from barcode_wallet.entry_store import OrderedEntityStore
from barcode_wallet.id_allocator import IdentifierAllocator
from barcode_wallet.kv_store import JsonFileKeyValueStore, KeyValueStore, NamespacedKeyValueStore
from barcode_wallet.position_store import PositionPersistence
from barcode_wallet.settings import WalletSettings


@dataclass
class WalletContext:
    settings: WalletSettings
    store: KeyValueStore
    allocator: IdentifierAllocator
    entries: OrderedEntityStore
    position: PositionPersistence


def build_wallet_context(
    settings: WalletSettings,
    *,
    store: Optional[KeyValueStore] = None,
) -> WalletContext:
    """Wire one store, one counter owner and the components that share them."""
    backing: KeyValueStore = store if store is not None else JsonFileKeyValueStore(settings.data_path)
    if settings.key_prefix:
        backing = NamespacedKeyValueStore(backing, settings.key_prefix)
    allocator = IdentifierAllocator(backing)
    return WalletContext(
        settings=settings,
        store=backing,
        allocator=allocator,
        entries=OrderedEntityStore(backing, allocator),
        position=PositionPersistence(backing, settings.position_key),
    )
