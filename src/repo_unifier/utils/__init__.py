"""Utilities for the repo unifier."""

from repo_unifier.utils.artifacts import write_artifact
from repo_unifier.utils.diff_generator import (
    build_diff_file,
    detect_code_style,
    generate_unified_diff,
)

__all__ = [
    "build_diff_file",
    "detect_code_style",
    "generate_unified_diff",
    "write_artifact",
]
