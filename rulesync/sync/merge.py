"""
Section-level merging of two versions of a rule file.

A section is a Markdown heading line plus everything up to the next heading.
Text before the first heading forms its own section. Headings inside fenced
code blocks don't start a section.
"""

import re

HEADING_RE = re.compile(r"^ {0,3}#{1,6}(\s|$)")
FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")


def split_sections(text: str) -> list[str]:
    """Split text into sections without losing any characters.

    Joining the returned list gives back ``text`` exactly.
    """
    sections: list[str] = []
    current: list[str] = []
    fence: str | None = None

    for line in text.splitlines(keepends=True):
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker
            elif marker[0] == fence[0] and len(marker) >= len(fence) and not line.strip().lstrip(marker[0]):
                # A closing fence is at least as long as the opening one and carries no info string.
                fence = None
        elif fence is None and HEADING_RE.match(line) and current:
            sections.append("".join(current))
            current = []
        current.append(line)

    if current:
        sections.append("".join(current))
    return sections


def _section_lines(section: str) -> list[str]:
    return [line.rstrip() for line in section.strip().splitlines()]


def _contains_block(lines: list[str], block: list[str]) -> bool:
    """True if ``block`` appears in ``lines`` as a contiguous run."""
    size = len(block)
    return any(lines[start:start + size] == block for start in range(len(lines) - size + 1))


def merge_sections(destination: str, source: str) -> str:
    """Merge ``source`` into ``destination`` at section granularity.

    Every destination section is kept in its original order, followed by the
    source sections whose lines don't already appear as a contiguous block
    in the result. A section without a heading folds into the one before it
    when the result is split again, so membership is checked against the
    whole merged text rather than against section boundaries. Whitespace-only
    sections in the source are dropped. Merging the result with the same
    source again returns it unchanged.
    """
    merged = destination
    for section in split_sections(source):
        block = _section_lines(section)
        if not block or _contains_block([line.rstrip() for line in merged.splitlines()], block):
            continue
        if merged and not merged.endswith("\n"):
            merged += "\n"
        if merged and not merged.endswith("\n\n"):
            merged += "\n"
        merged += section
    return merged


def merge_bytes(destination: bytes, source: bytes, encoding: str = "utf-8") -> bytes:
    """Merge two encoded documents. Undecodable bytes survive the round trip."""
    merged = merge_sections(
        destination.decode(encoding, errors="surrogateescape"),
        source.decode(encoding, errors="surrogateescape"),
    )
    return merged.encode(encoding, errors="surrogateescape")
