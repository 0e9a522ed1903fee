# tests/conftest.py

from __future__ import annotations

import sys
from pathlib import Path

# Ensure src/ is on sys.path for test imports like `import env`, `import spec`.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"

if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


import pytest

from envelope.adapter import _reset_issue_clock_for_tests


@pytest.fixture(autouse=True)
def _fresh_issue_clock():
    # issuedAt is monotone per process; start each test from a clean counter.
    _reset_issue_clock_for_tests()
    yield
    _reset_issue_clock_for_tests()
