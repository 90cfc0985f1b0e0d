"""
rulesync - reconcile a set of reference rule files with a rules directory
"""

from rulesync.errors import RuleSyncError, SourceUnreadableError
from rulesync.models import Classification, InstallDecision, InstallReport, RuleFile
from rulesync.sync import RuleSynchronizer

__version__ = "0.1.0"
__all__ = [
    "Classification",
    "InstallDecision",
    "InstallReport",
    "RuleFile",
    "RuleSyncError",
    "RuleSynchronizer",
    "SourceUnreadableError",
]
