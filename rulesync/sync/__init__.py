"""
Rule synchronization package: scan, decide, apply and clean up.
"""

from .aliases import ALIAS_TABLE, detect_alias_conflicts
from .cache import locate_cache_root, self_destruct
from .merge import merge_sections
from .synchronizer import RuleSynchronizer

__all__ = [
    "ALIAS_TABLE",
    "RuleSynchronizer",
    "detect_alias_conflicts",
    "locate_cache_root",
    "merge_sections",
    "self_destruct",
]
