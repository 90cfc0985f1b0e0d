"""
Data types shared by the synchronizer and the CLI.
"""

from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, Field

from rulesync.errors import FailureKind


class Classification(str, Enum):
    """Status of a source rule file relative to the destination."""

    new = "new"
    unchanged = "unchanged"
    conflict = "conflict"


class InstallDecision(str, Enum):
    """What to do with a rule file that will be applied."""

    overwrite = "overwrite"
    skip = "skip"
    merge = "merge"


class RuleState(str, Enum):
    scanned = "scanned"
    classified = "classified"
    decided = "decided"
    applied = "applied"
    skipped = "skipped"
    failed = "failed"


class AliasPair(NamedTuple):
    """Two relative paths holding the same logical rule; ``old`` is superseded by ``new``."""

    old: str
    new: str


class RuleFile(BaseModel):
    """A reference document tracked by its relative path."""

    relative_path: str
    content: bytes

    def __eq__(self, other):
        if not isinstance(other, RuleFile):
            return False
        return self.relative_path == other.relative_path and self.content == other.content

    def __hash__(self):
        return hash(self.relative_path)

    def __repr__(self) -> str:
        return f"RuleFile(relative_path='{self.relative_path}', size={len(self.content)})"


class ClassifiedRule(BaseModel):
    """A scanned rule file together with its destination path and classification."""

    rule: RuleFile
    target_path: str
    classification: Classification
    state: RuleState = RuleState.classified


class PlannedRule(BaseModel):
    """A classified rule with the decision that will drive ``apply``."""

    item: ClassifiedRule
    decision: InstallDecision | None = None

    @property
    def relative_path(self) -> str:
        return self.item.rule.relative_path

    @property
    def target_path(self) -> str:
        return self.item.target_path

    @property
    def classification(self) -> Classification:
        return self.item.classification


class FileFailure(BaseModel):
    path: str
    kind: FailureKind
    message: str


class InstallReport(BaseModel):
    """Summary of one synchronization run. Shown to the user, never persisted."""

    installed: list[str] = Field(default_factory=list)
    unchanged: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    merged: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    failures: list[FileFailure] = Field(default_factory=list)
    self_destructed: bool = False

    def add_failure(self, path: str, kind: FailureKind, message: str) -> None:
        self.failures.append(FileFailure(path=path, kind=kind, message=message))

    @property
    def writes(self) -> int:
        """Number of files written to the destination."""
        return len(self.installed) + len(self.merged)

    @property
    def ok(self) -> bool:
        return not self.failures

    def counts(self) -> dict[str, int]:
        return {
            "installed": len(self.installed),
            "unchanged": len(self.unchanged),
            "skipped": len(self.skipped),
            "merged": len(self.merged),
            "removed": len(self.removed),
            "failed": len(self.failures),
        }
