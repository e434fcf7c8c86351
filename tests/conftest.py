import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]

# Prefer this workspace over any installed copy of the package
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from rootcause.config.settings import clear_settings_cache  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached per process; start every test from the environment"""
    clear_settings_cache()
    yield
    clear_settings_cache()
