"""Pytest configuration for test environment setup.

- Forces ``DISABLE_FILE_LOGS=1`` to avoid writing log files during tests.
- Ensures the project root is available on ``sys.path`` for imports.
- Clears ``MDPAGES_*`` variables so the developer's environment does not
  leak into option loading.
"""

import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("DISABLE_FILE_LOGS", "1")  # Avoid creating log files during tests

# Ensure project root is on sys.path
ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)


@pytest.fixture(autouse=True)
def _clean_mdpages_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith("MDPAGES_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def write_doc():
    """Return a helper writing a UTF-8 document under a root directory."""

    def _write(root: Path, relative: str, text: str) -> Path:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
