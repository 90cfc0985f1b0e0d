"""
Rule Synchronization Module
===========================

Reconciles a source directory of rule files with a destination rules
directory. A run goes scan -> classify -> decide -> apply -> report, strictly
in that order; conflicts are resolved by an external decision provider.
"""

import os
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from loguru import logger

from rulesync.errors import (
    DecisionMissingError,
    DestinationWriteError,
    FailureKind,
    SourceUnreadableError,
)
from rulesync.models import (
    AliasPair,
    Classification,
    ClassifiedRule,
    FileFailure,
    InstallDecision,
    InstallReport,
    PlannedRule,
    RuleFile,
    RuleState,
)
from rulesync.sync import cache
from rulesync.sync.aliases import ALIAS_TABLE, detect_alias_conflicts, map_alias_table
from rulesync.sync.merge import merge_bytes
from rulesync.utils.file_ops import is_within, safe_write_bytes
from rulesync.utils.settings import DEFAULT_LAYOUT, LayoutMode, SyncSettings

# choose(prompt, options) -> one of options, or None when the user gave no answer
DecisionProvider = Callable[[str, list[str]], str | None]
AliasApprover = Callable[[AliasPair], bool]

SKIP_ALL = "skip-all"
CONFLICT_OPTIONS = [
    InstallDecision.overwrite.value,
    InstallDecision.skip.value,
    InstallDecision.merge.value,
    SKIP_ALL,
]


def _is_hidden(relative: Path) -> bool:
    return any(part.startswith(".") for part in relative.parts)


def list_files(root: Path) -> list[str]:
    """List visible files under ``root`` as sorted POSIX relative paths."""
    if not root.is_dir():
        return []
    files = []
    for path in root.rglob("*"):
        relative = path.relative_to(root)
        if path.is_file() and not _is_hidden(relative):
            files.append(relative.as_posix())
    return sorted(files)


class RuleSynchronizer:
    """Synchronizes a source rule set into a destination rules directory."""

    def __init__(
        self,
        source_dir: Path,
        dest_dir: Path,
        layout_mode: LayoutMode = DEFAULT_LAYOUT,
        alias_table: Iterable[AliasPair] = ALIAS_TABLE,
    ):
        """Initialize the RuleSynchronizer.

        Args:
            source_dir: Root of the incoming rule files
            dest_dir: Root of the user's rules directory; may not exist yet
            layout_mode: Mirror source subdirectories or flatten to the root
            alias_table: Known duplicate names
        """
        self.source_dir = Path(source_dir)
        self.dest_dir = Path(dest_dir)
        self.layout_mode = LayoutMode(layout_mode)
        self.alias_table = tuple(alias_table)
        self._scan_errors: list[FileFailure] = []
        self._decide_errors: list[FileFailure] = []

    @classmethod
    def from_settings(cls, settings: SyncSettings) -> "RuleSynchronizer":
        return cls(settings.source_dir, settings.dest_dir, settings.layout_mode)

    @property
    def errors(self) -> list[FileFailure]:
        """Non-fatal failures recorded by the last ``scan`` and ``decide``."""
        return self._scan_errors + self._decide_errors

    @staticmethod
    def _record(errors: list[FileFailure], path: str, kind: FailureKind, message: str) -> None:
        logger.warning(f"{path}: {message}")
        errors.append(FileFailure(path=path, kind=kind, message=message))

    def scan(self) -> list[ClassifiedRule]:
        """Read every source file and classify it against the destination.

        Returns:
            list[ClassifiedRule]: One entry per readable source file, in path order

        Raises:
            SourceUnreadableError: If the source directory can't be listed
        """
        self._scan_errors = []
        self._decide_errors = []
        if not self.source_dir.is_dir():
            raise SourceUnreadableError(f"Source directory {self.source_dir} does not exist or is not a directory")
        paths = self._walk_source()

        classified: list[ClassifiedRule] = []
        claimed: dict[str, str] = {}
        for path in paths:
            if not path.is_file():
                continue
            relative = path.relative_to(self.source_dir).as_posix()
            try:
                content = path.read_bytes()
            except OSError as error:
                self._record(self._scan_errors, relative, FailureKind.source_unreadable, f"Cannot read source file: {error}")
                continue

            target = self.layout_mode.target(relative)
            if target in claimed:
                self._record(
                    self._scan_errors,
                    relative,
                    FailureKind.layout_collision,
                    f"Flattens to {target}, already taken by {claimed[target]}",
                )
                continue
            claimed[target] = relative

            rule = RuleFile(relative_path=relative, content=content)
            classification = self.classify(content, self.dest_dir / target)
            logger.debug(f"{relative} -> {target}: {classification.value}")
            classified.append(ClassifiedRule(rule=rule, target_path=target, classification=classification))
        return classified

    def _walk_source(self) -> list[Path]:
        """Visible paths under the source directory, in sorted order.

        Subdirectories that can't be listed are recorded as ``source_unreadable``;
        an unlistable source root is fatal.
        """
        walk_errors: list[OSError] = []
        paths: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(self.source_dir, onerror=walk_errors.append):
            dirnames[:] = sorted(name for name in dirnames if not name.startswith("."))
            paths.extend(Path(dirpath) / name for name in filenames if not name.startswith("."))

        for error in walk_errors:
            failed = Path(error.filename) if error.filename else self.source_dir
            if failed == self.source_dir:
                raise SourceUnreadableError(f"Cannot list source directory {self.source_dir}: {error}") from error
            relative = failed.relative_to(self.source_dir).as_posix()
            self._record(self._scan_errors, relative, FailureKind.source_unreadable, f"Cannot list source directory: {error}")
        return sorted(paths)

    @staticmethod
    def classify(content: bytes, destination: Path) -> Classification:
        """Classify source content against a destination path."""
        if not destination.is_file():
            return Classification.new
        try:
            existing = destination.read_bytes()
        except OSError:
            # An unreadable destination can't be proven equal, so the user decides.
            return Classification.conflict
        return Classification.unchanged if existing == content else Classification.conflict

    def alias_conflicts(self, classified: Sequence[ClassifiedRule]) -> list[AliasPair]:
        """Alias pairs whose old name sits in the destination while the new name is incoming."""
        table = map_alias_table(self.alias_table, self.layout_mode)
        incoming = [item.target_path for item in classified]
        return detect_alias_conflicts(incoming, list_files(self.dest_dir), table)

    def decide(self, classified: Sequence[ClassifiedRule], choose: DecisionProvider) -> list[PlannedRule]:
        """Attach a decision to each classified rule.

        New files are always installed, unchanged files need nothing, and every
        conflict is put to ``choose``. A missing or unknown answer skips that
        file only.
        """
        self._decide_errors = []
        planned: list[PlannedRule] = []
        skip_rest = False
        for item in classified:
            plan = PlannedRule(item=item)
            if item.classification is Classification.new:
                plan.decision = InstallDecision.overwrite
            elif item.classification is Classification.conflict:
                if skip_rest:
                    plan.decision = InstallDecision.skip
                else:
                    try:
                        answer = self._ask(item, choose)
                    except DecisionMissingError as error:
                        self._record(self._decide_errors, item.rule.relative_path, FailureKind.decision_missing, error.message)
                        answer = InstallDecision.skip.value
                    if answer == SKIP_ALL:
                        skip_rest = True
                        answer = InstallDecision.skip.value
                    plan.decision = InstallDecision(answer)
            if plan.decision is not None:
                item.state = RuleState.decided
            planned.append(plan)
        return planned

    def _ask(self, item: ClassifiedRule, choose: DecisionProvider) -> str:
        prompt = f"{item.target_path} differs from the incoming version. What should happen?"
        answer = choose(prompt, list(CONFLICT_OPTIONS))
        if answer is None:
            raise DecisionMissingError("No decision given; leaving the file as it is")
        answer = str(getattr(answer, "value", answer)).strip().lower()
        if answer not in CONFLICT_OPTIONS:
            raise DecisionMissingError(f"Unknown decision {answer!r}; leaving the file as it is")
        return answer

    def _merge(self, item: ClassifiedRule) -> bytes:
        """Union of the destination file and the incoming version, by section."""
        path = self.dest_dir / item.target_path
        try:
            destination = path.read_bytes()
        except OSError as error:
            raise DestinationWriteError(item.target_path, f"Cannot read {path} for merging: {error}") from error
        return merge_bytes(destination, item.rule.content)

    def apply(self, planned: Sequence[PlannedRule], alias_removals: Iterable[AliasPair] = ()) -> InstallReport:
        """Write the decided files and remove approved aliases.

        Write failures are recorded per file and never stop the batch.

        Returns:
            InstallReport: What happened, including failures recorded during scan and decide
        """
        report = InstallReport(failures=self.errors)
        failed_targets: set[str] = set()
        for plan in planned:
            path = plan.relative_path
            item = plan.item
            if plan.classification is Classification.unchanged:
                report.unchanged.append(path)
                continue
            if plan.decision is None or plan.decision is InstallDecision.skip:
                item.state = RuleState.skipped
                report.skipped.append(path)
                continue

            try:
                if plan.decision is InstallDecision.merge:
                    content = self._merge(item)
                else:
                    content = item.rule.content
                self._write(plan.target_path, content)
            except DestinationWriteError as error:
                item.state = RuleState.failed
                failed_targets.add(plan.target_path)
                report.add_failure(path, FailureKind.destination_write_failed, error.message)
                logger.error(error.message)
                continue

            item.state = RuleState.applied
            if plan.decision is InstallDecision.merge:
                report.merged.append(path)
            else:
                report.installed.append(path)

        for pair in alias_removals:
            if pair.new in failed_targets or not (self.dest_dir / pair.new).is_file():
                message = f"Kept {pair.old}: {pair.new} was not installed"
                report.add_failure(pair.old, FailureKind.destination_write_failed, message)
                logger.warning(message)
                continue
            self._remove_alias(pair, report)
        return report

    def _write(self, target: str, content: bytes) -> None:
        destination = self.dest_dir / target
        try:
            safe_write_bytes(destination, content)
        except OSError as error:
            raise DestinationWriteError(target, f"Cannot write {destination}: {error}") from error
        logger.debug(f"Wrote {destination}")

    def _remove_alias(self, pair: AliasPair, report: InstallReport) -> None:
        old = self.dest_dir / pair.old
        if not is_within(old, self.dest_dir) or is_within(old, self.source_dir):
            report.add_failure(pair.old, FailureKind.destination_write_failed, "Refusing to remove a file outside the destination")
            return
        try:
            old.unlink()
        except FileNotFoundError:
            return
        except OSError as error:
            report.add_failure(pair.old, FailureKind.destination_write_failed, f"Cannot remove {old}: {error}")
            logger.error(f"Cannot remove {old}: {error}")
            return
        logger.info(f"Removed {pair.old}, superseded by {pair.new}")
        report.removed.append(pair.old)

    def self_destruct(self, cache_root: Path | None, entry_relative_path: str) -> bool:
        """Remove the cached entry file, never touching the source directory."""
        return cache.self_destruct(cache_root, entry_relative_path, source_dir=self.source_dir)

    def run(
        self,
        choose: DecisionProvider,
        approve_alias: AliasApprover | None = None,
        cache_root: Path | None = None,
        entry_relative_path: str | None = None,
    ) -> InstallReport:
        """Run scan, alias detection, decisions and apply, then the optional self-removal.

        Raises:
            SourceUnreadableError: Before any write happens
        """
        classified = self.scan()
        logger.info(f"Scanned {len(classified)} rule files from {self.source_dir}")
        findings = self.alias_conflicts(classified)
        planned = self.decide(classified, choose)
        approved = [pair for pair in findings if approve_alias is not None and approve_alias(pair)]
        report = self.apply(planned, approved)
        if entry_relative_path:
            report.self_destructed = self.self_destruct(cache_root, entry_relative_path)
        return report
