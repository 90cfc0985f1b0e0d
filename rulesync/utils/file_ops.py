"""File operation utilities."""
import contextlib
import os
import tempfile
from pathlib import Path


def safe_write_bytes(file_path: Path, content: bytes) -> None:
    """Write ``content`` to ``file_path`` so readers see either the old or the new file.

    The bytes go to a hidden sibling first, which then replaces the target.
    Missing parent directories are created.
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)
    temp_fd, temp_path = tempfile.mkstemp(dir=str(file_path.parent), prefix=f".{file_path.name}.")
    try:
        with os.fdopen(temp_fd, "wb") as f:
            f.write(content)
        Path(temp_path).replace(file_path)
    except Exception:
        with contextlib.suppress(OSError):
            Path(temp_path).unlink()
        raise


def is_within(path: Path, root: Path) -> bool:
    """Return True when ``path`` resolves to ``root`` or somewhere beneath it."""
    try:
        path.resolve().relative_to(root.resolve())
    except ValueError:
        return False
    return True
