import os
import sys
import pytest

# Ensure project root is on sys.path for imports like `core.*`
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from core.cache import DEFAULT_CAPACITY, PARTITION_CAPACITIES, _partitions, clear_caches  # noqa: E402
from models.import_map import ImportMap  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_caches():
    """Each test starts with empty caches at their default capacities."""
    clear_caches()
    yield
    clear_caches()
    for name, cache in list(_partitions.items()):
        cache.resize(PARTITION_CAPACITIES.get(name, DEFAULT_CAPACITY))


@pytest.fixture
def empty_map():
    return ImportMap()


@pytest.fixture
def controller_map():
    import_map = ImportMap()
    import_map.add_import("HelloController", "hello_controller.js")
    import_map.add_import("ModalController", "modal_controller.js")
    return import_map
