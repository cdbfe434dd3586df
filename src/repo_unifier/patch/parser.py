"""Parse raw unified-diff text into per-file hunks.

Only the ``--- old`` / ``+++ new`` header pair and ``@@`` hunks matter;
git preamble lines (``diff --git``, ``index``, mode lines) are skipped.
Hunk bodies are read by the counts in their header, so a removed line that
itself starts with ``--`` is never mistaken for a new file header.
"""

import logging
import re

from repo_unifier.models import NULL_DEVICE, ChangeType, DiffFile, DiffHunk, split_lines
from repo_unifier.patch.exceptions import PatchParseError

logger = logging.getLogger(__name__)

_HUNK_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_OLD_HEADER = "--- "
_NEW_HEADER = "+++ "
_NO_NEWLINE_MARKER = "\\"


def parse_patch(text: str) -> list[DiffFile]:
    """Parse patch text, returning an empty list when it is malformed.

    Failures are logged rather than raised so callers can treat an empty
    result as "no diff loaded".
    """
    try:
        return parse_patch_strict(text)
    except PatchParseError as e:
        logger.warning("Could not parse patch: %s", e)
        return []


def parse_patch_strict(text: str) -> list[DiffFile]:
    """Parse patch text into one DiffFile per file header pair.

    Raises:
        PatchParseError: On a malformed hunk header, a hunk outside a file
            section, a hunk whose body disagrees with its header counts, or
            non-empty input with no file sections at all.
    """
    lines = split_lines(text)
    files: list[DiffFile] = []
    index = 0

    while index < len(lines):
        line = lines[index]

        if (
            line.startswith(_OLD_HEADER)
            and index + 1 < len(lines)
            and lines[index + 1].startswith(_NEW_HEADER)
        ):
            old_path = _header_path(line[len(_OLD_HEADER):], "a/")
            new_path = _header_path(lines[index + 1][len(_NEW_HEADER):], "b/")
            index += 2

            hunks: list[DiffHunk] = []
            while index < len(lines) and lines[index].startswith("@@"):
                hunk, index = _parse_hunk(lines, index)
                hunks.append(hunk)

            files.append(_build_file(old_path, new_path, hunks))
            continue

        if line.startswith("@@"):
            raise PatchParseError(index + 1, "hunk found before any file header")
        index += 1

    if not files and text.strip():
        raise PatchParseError(1, "no '---'/'+++' file header found")
    return files


def _header_path(raw: str, prefix: str) -> str:
    # Drop the optional tab-separated timestamp
    path = raw.split("\t", 1)[0].strip()
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        path = path[1:-1]
    if path != NULL_DEVICE and path.startswith(prefix):
        path = path[len(prefix):]
    return path


def _parse_hunk(lines: list[str], index: int) -> tuple[DiffHunk, int]:
    header = lines[index]
    match = _HUNK_RE.match(header)
    if not match:
        raise PatchParseError(index + 1, f"malformed hunk header {header!r}")

    old_start = int(match.group(1))
    old_lines = int(match.group(2)) if match.group(2) is not None else 1
    new_start = int(match.group(3))
    new_lines = int(match.group(4)) if match.group(4) is not None else 1
    index += 1

    body: list[str] = []
    old_seen = new_seen = additions = deletions = 0

    while index < len(lines) and (
        old_seen < old_lines
        or new_seen < new_lines
        or lines[index].startswith(_NO_NEWLINE_MARKER)
    ):
        line = lines[index]
        index += 1

        if line.startswith(_NO_NEWLINE_MARKER):
            continue
        if line == "":
            # Blank context line whose leading space was stripped in transit
            line = " "

        marker = line[0]
        if marker == "+":
            new_seen += 1
            additions += 1
        elif marker == "-":
            old_seen += 1
            deletions += 1
        elif marker == " ":
            old_seen += 1
            new_seen += 1
        else:
            raise PatchParseError(index, f"unexpected line in hunk {line!r}")

        if old_seen > old_lines or new_seen > new_lines:
            raise PatchParseError(
                index, f"hunk body longer than its header {header!r}"
            )
        body.append(line)

    if old_seen != old_lines or new_seen != new_lines:
        raise PatchParseError(
            index,
            f"hunk {header!r} ended early "
            f"(old {old_seen}/{old_lines}, new {new_seen}/{new_lines})",
        )

    hunk = DiffHunk(
        old_start=old_start,
        old_lines=old_lines,
        new_start=new_start,
        new_lines=new_lines,
        lines=tuple(body),
        additions=additions,
        deletions=deletions,
    )
    return hunk, index


def _build_file(old_path: str, new_path: str, hunks: list[DiffHunk]) -> DiffFile:
    if old_path == NULL_DEVICE:
        change_type = ChangeType.ADD
    elif new_path == NULL_DEVICE:
        change_type = ChangeType.DELETE
    else:
        change_type = ChangeType.MODIFY

    return DiffFile(
        old_path=old_path,
        new_path=new_path,
        change_type=change_type,
        hunks=tuple(hunks),
        additions=sum(h.additions for h in hunks),
        deletions=sum(h.deletions for h in hunks),
    )
