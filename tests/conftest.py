import os
import sys

import pytest


def pytest_configure():
    # Ensure `src/` is importable as top-level for `common.*`, `state.*` and `reducer.*` imports
    root = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    src_path = os.path.join(root, "src")
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


@pytest.fixture
def storage():
    from state.storage import MemoryStorage

    return MemoryStorage()


@pytest.fixture
def warnings_hook():
    """(collected, hook) pair for asserting on reported warnings."""
    from common.reporting import collect_warnings

    return collect_warnings()
