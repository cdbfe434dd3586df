"""Context serialization for AI prompts and exports."""

from repo_unifier.context.serializer import (
    CHARS_PER_TOKEN,
    build_export_artifact,
    estimate_tokens,
    select_for_context,
    serialize_context,
)

__all__ = [
    "CHARS_PER_TOKEN",
    "build_export_artifact",
    "estimate_tokens",
    "select_for_context",
    "serialize_context",
]
