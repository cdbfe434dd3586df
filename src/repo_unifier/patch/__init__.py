"""Unified-diff parsing and rendering."""

from repo_unifier.patch.exceptions import PatchError, PatchParseError
from repo_unifier.patch.parser import parse_patch, parse_patch_strict
from repo_unifier.patch.renderer import (
    classify_line,
    format_rows,
    format_split,
    format_unified,
    render_line_diff,
    render_split,
    render_unified,
)

__all__ = [
    "PatchError",
    "PatchParseError",
    "classify_line",
    "format_rows",
    "format_split",
    "format_unified",
    "parse_patch",
    "parse_patch_strict",
    "render_line_diff",
    "render_split",
    "render_unified",
]
