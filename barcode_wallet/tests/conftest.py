import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from barcode_wallet.id_allocator import IdentifierAllocator
from barcode_wallet.entry_store import OrderedEntityStore
from barcode_wallet.kv_store import MemoryKeyValueStore


def pytest_runtest_setup(item):
    if item.get_closest_marker("pyqt_required"):
        if not os.getenv("PYQT_TESTS"):
            pytest.skip("PYQT_TESTS not set; skipping PyQt-dependent test")


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def entries(kv):
    return OrderedEntityStore(kv, IdentifierAllocator(kv))
