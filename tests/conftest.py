from __future__ import annotations

import stat
import sys
from pathlib import Path
from typing import Callable

import pytest

# Ensure `import stress` works when running `pytest` from the repo root.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def stub_runtime(tmp_path: Path) -> Callable[[str], Path]:
    """Write an executable shell script standing in for the runtime binary."""
    if sys.platform == "win32":
        pytest.skip("stub runtime scripts need a POSIX shell")

    def _make(body: str, name: str = "fake-runtime") -> Path:
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make
