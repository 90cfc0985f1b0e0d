"""
Test Configuration and Fixtures
=============================

Shared fixtures for the rulesync tests.
"""

from pathlib import Path

import pytest


def write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    """Create ``files`` (relative path -> content) under ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
    return root


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """A plugin rules directory with a few language guides."""
    return write_tree(
        tmp_path / "plugin" / "rules",
        {
            "languages/python.md": "# Python\n\n- Use type hints\n",
            "languages/go.md": "A",
            "security.md": "# Security\n\n- No secrets in code\n",
        },
    )


@pytest.fixture
def dest_dir(tmp_path: Path) -> Path:
    """The user's rules directory, not created yet."""
    return tmp_path / "home" / ".claude" / "rules"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep RULESYNC_* variables from the developer's shell out of the tests."""
    for name in (
        "RULESYNC_SOURCE_DIR",
        "RULESYNC_DEST_DIR",
        "RULESYNC_LAYOUT",
        "RULESYNC_CACHE_DIR",
        "RULESYNC_PLUGIN_ID",
        "RULESYNC_ENTRY",
        "RULESYNC_LOG_LEVEL",
        "RULESYNC_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
