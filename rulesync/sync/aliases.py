"""Known pairs of rule files that hold the same logical rule under different names."""

from typing import Final, Iterable

from rulesync.models import AliasPair
from rulesync.utils.settings import LayoutMode

ALIAS_TABLE: Final[tuple[AliasPair, ...]] = (
    AliasPair(old="languages/golang.md", new="languages/go.md"),
    AliasPair(old="languages/js.md", new="languages/javascript.md"),
    AliasPair(old="languages/ts.md", new="languages/typescript.md"),
    AliasPair(old="languages/c++.md", new="languages/cpp.md"),
    AliasPair(old="languages/csharp.md", new="languages/c-sharp.md"),
)


def detect_alias_conflicts(
    source_files: Iterable[str],
    dest_files: Iterable[str],
    alias_table: Iterable[AliasPair] = ALIAS_TABLE,
) -> list[AliasPair]:
    """Report alias pairs whose old name is in the destination and new name is incoming.

    Args:
        source_files: Relative paths present in the incoming source set
        dest_files: Relative paths present in the destination
        alias_table: Known alias pairs

    Returns:
        list[AliasPair]: Matching pairs, in table order
    """
    incoming = set(source_files)
    existing = set(dest_files)
    return [pair for pair in alias_table if pair.old in existing and pair.new in incoming]


def map_alias_table(alias_table: Iterable[AliasPair], layout: LayoutMode) -> list[AliasPair]:
    """Translate alias pairs into destination paths for the given layout."""
    mapped = []
    for pair in alias_table:
        old, new = layout.target(pair.old), layout.target(pair.new)
        if old != new:
            mapped.append(AliasPair(old=old, new=new))
    return mapped
