"""Utilities for diffing an original file against its reconstructed version."""

import difflib
from collections import Counter

from repo_unifier.models import ChangeType, DiffFile, DiffHunk, split_lines

DEFAULT_CONTEXT_LINES = 3


def generate_unified_diff(
    file_path: str,
    original_content: str,
    modified_content: str,
) -> str:
    """Generate a git-compatible unified diff.

    Args:
        file_path: Relative path from the project root (e.g. "src/app.tsx").
        original_content: File content before the change.
        modified_content: File content after the change.

    Returns:
        Unified diff string with a/ b/ prefixes. Empty string if no line
        changed, including when only the trailing newline differs.
    """
    if original_content == modified_content:
        return ""

    diff_lines = list(difflib.unified_diff(
        split_lines(original_content),
        split_lines(modified_content),
        fromfile=f"a/{file_path}",
        tofile=f"b/{file_path}",
        lineterm="",
    ))
    # Texts that differ only in the final newline have no line-level hunks
    if not diff_lines:
        return ""
    return "\n".join(diff_lines) + "\n"


def build_diff_file(
    file_path: str,
    original_content: str,
    modified_content: str,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> DiffFile:
    """Build a DiffFile straight from difflib opcodes.

    The hunks match what ``generate_unified_diff`` would print, but no patch
    text is produced or parsed along the way.

    Args:
        file_path: Relative path used for both sides.
        original_content: File content before the change.
        modified_content: File content after the change.
        context_lines: Unchanged lines kept around each change.

    Returns:
        A ``modify`` DiffFile; it has no hunks when the texts are equal.
    """
    old_lines = split_lines(original_content)
    new_lines = split_lines(modified_content)
    matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)

    hunks: list[DiffHunk] = []
    for group in matcher.get_grouped_opcodes(context_lines):
        first, last = group[0], group[-1]
        old_count = last[2] - first[1]
        new_count = last[4] - first[3]

        lines: list[str] = []
        additions = deletions = 0
        for tag, i1, i2, j1, j2 in group:
            if tag == "equal":
                lines.extend(f" {line}" for line in old_lines[i1:i2])
                continue
            if tag in ("replace", "delete"):
                lines.extend(f"-{line}" for line in old_lines[i1:i2])
                deletions += i2 - i1
            if tag in ("replace", "insert"):
                lines.extend(f"+{line}" for line in new_lines[j1:j2])
                additions += j2 - j1

        # Unified-diff convention: an empty range starts at the line before it
        hunks.append(DiffHunk(
            old_start=first[1] + 1 if old_count else first[1],
            old_lines=old_count,
            new_start=first[3] + 1 if new_count else first[3],
            new_lines=new_count,
            lines=tuple(lines),
            additions=additions,
            deletions=deletions,
        ))

    return DiffFile(
        old_path=file_path,
        new_path=file_path,
        change_type=ChangeType.MODIFY,
        hunks=tuple(hunks),
        additions=sum(h.additions for h in hunks),
        deletions=sum(h.deletions for h in hunks),
    )


def detect_code_style(source_code: str) -> dict[str, str]:
    """Detect indentation and quote conventions from source code.

    Returns:
        Dict with keys:
            "indent": e.g. "2 spaces", "4 spaces", "tabs"
            "quotes": "single" or "double"
    """
    indent_counts: Counter[int] = Counter()
    for line in source_code.splitlines():
        if line.startswith("\t"):
            return {"indent": "tabs", "quotes": _quote_style(source_code)}
        stripped = line.lstrip(" ")
        spaces = len(line) - len(stripped)
        if spaces and stripped:
            indent_counts[spaces] += 1

    # Smallest indent level is the base unit
    indent = f"{min(indent_counts)} spaces" if indent_counts else "4 spaces"
    return {"indent": indent, "quotes": _quote_style(source_code)}


def _quote_style(source_code: str) -> str:
    if source_code.count("'") > source_code.count('"'):
        return "single"
    return "double"
