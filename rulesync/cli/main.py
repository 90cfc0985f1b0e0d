"""
Main CLI entry point for rulesync.
"""

import importlib.metadata
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from rulesync.cli.prompts import ASK, make_alias_approver, make_decision_provider
from rulesync.errors import RuleSyncError
from rulesync.models import InstallReport
from rulesync.sync.aliases import ALIAS_TABLE
from rulesync.sync.cache import locate_cache_root
from rulesync.sync.synchronizer import RuleSynchronizer
from rulesync.utils.rich_console import configure_logging, print_panel, print_table
from rulesync.utils.settings import LayoutMode, SyncSettings, load_settings


app = typer.Typer(
    help="rulesync - install reference rule files into your rules directory, resolving conflicts as you go."
)


class ConflictPolicy(str, Enum):
    ask = ASK
    overwrite = "overwrite"
    skip = "skip"
    merge = "merge"


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override RULESYNC_LOG_LEVEL"),
):
    """
    rulesync - rule file synchronizer
    """
    configure_logging(log_level)


def _settings(**overrides) -> SyncSettings:
    try:
        return load_settings(**overrides)
    except RuleSyncError as error:
        print_panel(error.message, title="Configuration Error", style="bold red")
        raise typer.Exit(1)


def print_report(report: InstallReport) -> None:
    rows = []
    for action, paths in (
        ("installed", report.installed),
        ("merged", report.merged),
        ("unchanged", report.unchanged),
        ("skipped", report.skipped),
        ("removed", report.removed),
    ):
        rows.extend([action, path] for path in paths)
    if rows:
        print_table(["Action", "File"], rows, title="Install Report")
    if report.failures:
        print_table(
            ["File", "Error", "Details"],
            [[failure.path, failure.kind.value, failure.message] for failure in report.failures],
            title="Problems",
        )
    summary = ", ".join(f"{count} {name}" for name, count in report.counts().items())
    if report.self_destructed:
        summary += "\nInstaller entry removed from the plugin cache."
    style = "bold green" if report.ok else "bold yellow"
    print_panel(summary, title="Done", style=style)


@app.command()
def install(
    source: Optional[Path] = typer.Option(None, "--source", "-s", help="Directory holding the incoming rule files"),
    dest: Optional[Path] = typer.Option(None, "--dest", "-d", help="Rules directory to install into"),
    layout: Optional[LayoutMode] = typer.Option(None, "--layout", help="Mirror subdirectories or flatten to the root"),
    on_conflict: ConflictPolicy = typer.Option(ConflictPolicy.ask, "--on-conflict", help="How to resolve conflicts"),
    clean_aliases: Optional[bool] = typer.Option(
        None, "--clean-aliases/--keep-aliases", help="Remove superseded alias files without asking"
    ),
    remove_entry: bool = typer.Option(
        True, "--self-destruct/--no-self-destruct", help="Remove the installer entry from the plugin cache"
    ),
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", help="Where plugin caches live"),
    plugin_id: Optional[str] = typer.Option(None, "--plugin-id", help="Plugin cache directory name"),
    entry: Optional[str] = typer.Option(None, "--entry", help="Entry file path relative to the plugin cache"),
):
    """Install rule files, asking how to resolve each conflict."""
    settings = _settings(
        source_dir=source,
        dest_dir=dest,
        layout_mode=layout,
        cache_search_root=cache_dir,
        plugin_id=plugin_id,
        entry_relative_path=entry,
    )
    synchronizer = RuleSynchronizer.from_settings(settings)

    cache_root = None
    entry_path = None
    if remove_entry:
        cache_root = locate_cache_root(settings.cache_search_root, settings.plugin_id)
        entry_path = settings.entry_relative_path

    try:
        report = synchronizer.run(
            make_decision_provider(on_conflict.value),
            approve_alias=make_alias_approver(clean_aliases),
            cache_root=cache_root,
            entry_relative_path=entry_path,
        )
    except RuleSyncError as error:
        logger.debug(f"Run aborted: {error.message}")
        print_panel(error.message, title="Install Failed", style="bold red")
        raise typer.Exit(1)

    print_report(report)


@app.command()
def status(
    source: Optional[Path] = typer.Option(None, "--source", "-s", help="Directory holding the incoming rule files"),
    dest: Optional[Path] = typer.Option(None, "--dest", "-d", help="Rules directory to compare against"),
    layout: Optional[LayoutMode] = typer.Option(None, "--layout", help="Mirror subdirectories or flatten to the root"),
):
    """Show how each incoming rule file compares to the rules directory. Writes nothing."""
    settings = _settings(source_dir=source, dest_dir=dest, layout_mode=layout)
    synchronizer = RuleSynchronizer.from_settings(settings)
    try:
        classified = synchronizer.scan()
    except RuleSyncError as error:
        print_panel(error.message, title="Scan Failed", style="bold red")
        raise typer.Exit(1)

    print_table(
        ["File", "Destination", "Status"],
        [[item.rule.relative_path, item.target_path, item.classification.value] for item in classified],
        title=f"{settings.source_dir} -> {settings.dest_dir} ({settings.layout_mode.value})",
    )
    findings = synchronizer.alias_conflicts(classified)
    if findings:
        print_table(["Existing", "Superseded by"], [[pair.old, pair.new] for pair in findings], title="Aliases")
    for failure in synchronizer.errors:
        print_panel(f"{failure.path}: {failure.message}", title=failure.kind.value, style="bold yellow")


@app.command()
def aliases():
    """List the known duplicate rule file names."""
    print_table(["Old name", "New name"], [[pair.old, pair.new] for pair in ALIAS_TABLE], title="Alias Table")


@app.command()
def version():
    """Show the rulesync version."""
    typer.echo(f"rulesync version: {importlib.metadata.version('rulesync')}")


if __name__ == "__main__":
    app()
