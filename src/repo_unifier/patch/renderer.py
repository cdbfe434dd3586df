"""Turn parsed hunks into unified or two-column rows.

Line counters are local to each call, seeded from the hunk header, so the
same DiffFile can be rendered any number of times in either mode.
"""

import difflib

from repo_unifier.models import DiffFile, LineType, SplitRow, UnifiedRow, split_lines

DEFAULT_WIDTH = 160
_NUMBER_WIDTH = 5


def classify_line(line: str) -> LineType:
    if line.startswith("+"):
        return LineType.ADDITION
    if line.startswith("-"):
        return LineType.DELETION
    return LineType.CONTEXT


def render_unified(diff_file: DiffFile) -> list[UnifiedRow]:
    """One row per hunk line with old/new numbers where they apply.

    Context lines advance and show both counters, deletions only the old
    counter and additions only the new one.
    """
    rows: list[UnifiedRow] = []
    for hunk_index, hunk in enumerate(diff_file.hunks):
        old_number = hunk.old_start
        new_number = hunk.new_start
        for line in hunk.lines:
            line_type = classify_line(line)
            content = line[1:]
            if line_type is LineType.CONTEXT:
                rows.append(UnifiedRow(
                    hunk_index=hunk_index,
                    line_type=line_type,
                    old_number=old_number,
                    new_number=new_number,
                    content=content,
                ))
                old_number += 1
                new_number += 1
            elif line_type is LineType.DELETION:
                rows.append(UnifiedRow(
                    hunk_index=hunk_index,
                    line_type=line_type,
                    old_number=old_number,
                    content=content,
                ))
                old_number += 1
            else:
                rows.append(UnifiedRow(
                    hunk_index=hunk_index,
                    line_type=line_type,
                    new_number=new_number,
                    content=content,
                ))
                new_number += 1
    return rows


def render_split(diff_file: DiffFile) -> list[SplitRow]:
    """Two-column rows, one per source line.

    The left column holds context and deleted lines, the right column context
    and added lines. Adjacent delete/add runs are not paired up, so a
    modified line shows as a left-only row followed by a right-only row.
    """
    rows: list[SplitRow] = []
    for row in render_unified(diff_file):
        left = row.line_type is not LineType.ADDITION
        right = row.line_type is not LineType.DELETION
        rows.append(SplitRow(
            hunk_index=row.hunk_index,
            line_type=row.line_type,
            left_number=row.old_number if left else None,
            left_content=row.content if left else "",
            right_number=row.new_number if right else None,
            right_content=row.content if right else "",
        ))
    return rows


def render_line_diff(original: str, modified: str) -> list[UnifiedRow]:
    """Full-file line diff of two texts, numbered from 1 on both sides.

    Used to preview a reconstructed file before it is committed. Every line
    of both versions appears exactly once; replaced regions list the removed
    lines before the added ones.
    """
    old_lines = split_lines(original)
    new_lines = split_lines(modified)
    matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)

    rows: list[UnifiedRow] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            for offset in range(i2 - i1):
                rows.append(UnifiedRow(
                    hunk_index=0,
                    line_type=LineType.CONTEXT,
                    old_number=i1 + offset + 1,
                    new_number=j1 + offset + 1,
                    content=old_lines[i1 + offset],
                ))
            continue
        for i in range(i1, i2):
            rows.append(UnifiedRow(
                hunk_index=0,
                line_type=LineType.DELETION,
                old_number=i + 1,
                content=old_lines[i],
            ))
        for j in range(j1, j2):
            rows.append(UnifiedRow(
                hunk_index=0,
                line_type=LineType.ADDITION,
                new_number=j + 1,
                content=new_lines[j],
            ))
    return rows


def _number(value: int | None) -> str:
    return str(value).rjust(_NUMBER_WIDTH) if value is not None else " " * _NUMBER_WIDTH


def format_rows(rows: list[UnifiedRow]) -> str:
    """Plain-text listing of unified rows: old, new, marker, content."""
    return "\n".join(
        f"{_number(row.old_number)} {_number(row.new_number)} "
        f"{row.line_type.marker} {row.content}"
        for row in rows
    )


def format_unified(diff_file: DiffFile) -> str:
    """Plain-text unified view with a header line per hunk."""
    rows = render_unified(diff_file)
    out: list[str] = [
        f"{diff_file.change_type.value.upper()} {diff_file.display_path} "
        f"(+{diff_file.additions} -{diff_file.deletions})"
    ]
    for hunk_index, hunk in enumerate(diff_file.hunks):
        out.append(hunk.header)
        hunk_rows = [row for row in rows if row.hunk_index == hunk_index]
        if hunk_rows:
            out.append(format_rows(hunk_rows))
    return "\n".join(out)


def format_split(diff_file: DiffFile, width: int = DEFAULT_WIDTH) -> str:
    """Plain-text two-column view sized to ``width`` characters."""
    # number, space, content, " | " on the left; number, space, content on the right
    column = max(10, (width - 2 * (_NUMBER_WIDTH + 1) - 3) // 2)
    rows = render_split(diff_file)
    out: list[str] = [
        f"{diff_file.change_type.value.upper()} {diff_file.display_path} "
        f"(+{diff_file.additions} -{diff_file.deletions})"
    ]
    for hunk_index, hunk in enumerate(diff_file.hunks):
        out.append(hunk.header)
        for row in rows:
            if row.hunk_index != hunk_index:
                continue
            left = row.left_content[:column].ljust(column)
            right = row.right_content[:column]
            out.append(
                f"{_number(row.left_number)} {left} | "
                f"{_number(row.right_number)} {right}".rstrip()
            )
    return "\n".join(out)
