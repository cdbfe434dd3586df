"""Project the selected part of the catalog into one flat context document."""

import json
import math
from collections.abc import Iterable
from datetime import datetime, timezone
from xml.sax.saxutils import quoteattr

from repo_unifier.models import ExportArtifact, FileRecord, OutputFormat

CHARS_PER_TOKEN = 4

_MEDIA_TYPES = {
    OutputFormat.MARKDOWN: "text/markdown",
    OutputFormat.JSON: "application/json",
    OutputFormat.XML: "application/xml",
}


def estimate_tokens(text: str) -> int:
    """Rough token estimate: one token per four characters, rounded up.

    This is a budget hint, not a tokenizer; it ignores the content language.
    """
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def select_for_context(records: Iterable[FileRecord]) -> list[FileRecord]:
    """Selected text records, in the order given."""
    return [r for r in records if r.is_text and r.selected]


def serialize_context(
    project_name: str,
    records: Iterable[FileRecord],
    output_format: OutputFormat | str,
    timestamp: datetime | None = None,
) -> str:
    """Serialize the selected records of a catalog.

    Args:
        project_name: Name written into the document header.
        records: Catalog records in catalog order; unselected and non-text
            records are skipped.
        output_format: markdown, json or xml.
        timestamp: Value of the json ``timestamp`` field (now, UTC, if None).
            Ignored by the other formats.

    Returns:
        The serialized document. Output for markdown and xml depends only on
        the inputs.
    """
    output_format = OutputFormat(output_format)
    selected = select_for_context(records)

    if output_format is OutputFormat.MARKDOWN:
        return _to_markdown(project_name, selected)
    if output_format is OutputFormat.JSON:
        return _to_json(project_name, selected, timestamp)
    return _to_xml(project_name, selected)


def _to_markdown(project_name: str, records: list[FileRecord]) -> str:
    parts = [f"# Project: {project_name}\n\n"]
    for record in records:
        parts.append(
            f"## File: {record.path}\n"
            f"```{record.language}\n"
            f"{record.content}\n"
            "```\n\n"
        )
    return "".join(parts)


def _to_json(
    project_name: str,
    records: list[FileRecord],
    timestamp: datetime | None,
) -> str:
    stamp = timestamp or datetime.now(timezone.utc)
    payload = {
        "project_name": project_name,
        "files": [record.model_dump(mode="json") for record in records],
        "timestamp": stamp.isoformat(),
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _to_xml(project_name: str, records: list[FileRecord]) -> str:
    # Content goes into CDATA verbatim; a literal "]]>" in a file is not guarded
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>\n',
        f"<project name={quoteattr(project_name)}>\n",
    ]
    for record in records:
        parts.append(
            f"  <file path={quoteattr(record.path)}>\n"
            f"    <![CDATA[{record.content}]]>\n"
            "  </file>\n"
        )
    parts.append("</project>")
    return "".join(parts)


def build_export_artifact(
    project_name: str,
    records: Iterable[FileRecord],
    output_format: OutputFormat | str,
    timestamp: datetime | None = None,
) -> ExportArtifact:
    """Wrap the serialized context as a downloadable file.

    The file name is ``<project>_context.<ext>`` with ``md``, ``json`` or
    ``xml`` matching the format.
    """
    output_format = OutputFormat(output_format)
    content = serialize_context(project_name, records, output_format, timestamp)
    stem = project_name.strip() or "project"
    return ExportArtifact(
        file_name=f"{stem}_context.{output_format.extension}",
        content=content,
        media_type=_MEDIA_TYPES[output_format],
    )
