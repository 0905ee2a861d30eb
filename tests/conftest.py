import os
import sys

import pytest

# Make the repo root (for pods.*) and libs/ (mncore, mnmelody, mnscore) importable
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
LIBS = os.path.join(ROOT, "libs")
for p in (ROOT, LIBS):
    if p not in sys.path:
        sys.path.insert(0, p)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are memoized per process; reload them around each test."""
    from mncore.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
