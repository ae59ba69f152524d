from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

QUILL_ENV_VARS = ("QUILL_RECURSION_LIMIT", "QUILL_ECHO_OUTPUT")


@pytest.fixture(autouse=True)
def isolated_quill_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep interpreter settings from leaking in from the developer's shell."""
    for name in QUILL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def printed() -> List[str]:
    """Collects lines emitted by `print` when passed as an `out` callback."""
    return []


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Fail fast if two scenarios ever share an id."""
    del session
    del config

    seen: Dict[str, int] = {}
    duplicates: List[str] = []
    for item in items:
        if item.nodeid in seen:
            duplicates.append(item.nodeid)
            continue
        seen[item.nodeid] = 1

    if duplicates:
        lines = "\n".join(f"- {nodeid}" for nodeid in sorted(set(duplicates)))
        raise pytest.UsageError(f"Duplicate pytest nodeids detected during collection:\n{lines}")
