"""
Locating and removing the cached copy of the invoking entry file.
"""

from pathlib import Path

from loguru import logger

from rulesync.errors import CacheEntryNotFoundError
from rulesync.utils.file_ops import is_within


def locate_cache_root(search_root: Path, plugin_id: str) -> Path | None:
    """Find the cache directory of a plugin by its identifier.

    Args:
        search_root: Directory holding plugin caches
        plugin_id: Directory name identifying the plugin

    Returns:
        Path | None: The single matching directory, or None when there are zero or several
    """
    if not search_root.is_dir():
        logger.debug(f"Cache search root {search_root} does not exist")
        return None

    matches = sorted(path for path in search_root.rglob(plugin_id) if path.is_dir())
    if not matches:
        logger.debug(f"No cache directory named {plugin_id} under {search_root}")
        return None
    if len(matches) > 1:
        logger.warning(f"Found {len(matches)} cache directories named {plugin_id}; not choosing one")
        return None
    return matches[0]


def find_cache_entry(cache_root: Path, entry_relative_path: str, protected: Path | None = None) -> Path:
    """Find the one cached file whose path ends with ``entry_relative_path``.

    Files inside ``protected`` never match.

    Raises:
        CacheEntryNotFoundError: If there is no unambiguous match
    """
    suffix = tuple(part for part in entry_relative_path.replace("\\", "/").split("/") if part)
    if not suffix:
        raise CacheEntryNotFoundError("Entry path is empty")
    if not cache_root.is_dir():
        raise CacheEntryNotFoundError(f"Cache root {cache_root} does not exist")

    candidates = []
    for path in cache_root.rglob(suffix[-1]):
        if not path.is_file() or path.parts[-len(suffix):] != suffix:
            continue
        if protected is not None and is_within(path, protected):
            logger.debug(f"Ignoring {path}: inside the source directory")
            continue
        candidates.append(path)

    if not candidates:
        raise CacheEntryNotFoundError(f"No cached copy of {entry_relative_path} under {cache_root}")
    if len(candidates) > 1:
        raise CacheEntryNotFoundError(
            f"{len(candidates)} cached copies of {entry_relative_path} under {cache_root}; refusing to guess"
        )
    return candidates[0]


def self_destruct(cache_root: Path | None, entry_relative_path: str, source_dir: Path | None = None) -> bool:
    """Delete the cached copy of the entry file.

    Never touches anything inside ``source_dir``. Missing entries are not an error.

    Returns:
        bool: True if a file was deleted
    """
    if cache_root is None:
        logger.info("No plugin cache found; skipping self-removal")
        return False
    if source_dir is not None and is_within(cache_root, source_dir):
        # The whole cache root sits inside the source tree, so nothing in it may go.
        logger.warning(f"Cache root {cache_root} is inside the source directory; skipping self-removal")
        return False

    try:
        entry = find_cache_entry(cache_root, entry_relative_path, protected=source_dir)
    except CacheEntryNotFoundError as error:
        logger.info(f"Skipping self-removal: {error.message}")
        return False

    try:
        entry.unlink()
    except FileNotFoundError:
        return False
    logger.info(f"Removed cached entry file {entry}")
    return True
