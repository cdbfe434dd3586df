"""Write downloadable artifacts to a local directory."""

from pathlib import Path

from repo_unifier.models import ExportArtifact


def write_artifact(artifact: ExportArtifact, directory: str | Path) -> Path:
    """Write ``artifact`` into ``directory`` without clobbering existing files.

    A name that is already taken gets a " (n)" suffix before the extension.

    Returns:
        The path that was written.
    """
    target_dir = Path(directory).expanduser().resolve()
    target_dir.mkdir(parents=True, exist_ok=True)

    # Only the last segment is used; artifact names never carry directories
    name = Path(artifact.file_name).name or "artifact.txt"
    target = target_dir / name
    stem, suffix = target.stem, target.suffix
    counter = 1
    while target.exists():
        target = target_dir / f"{stem} ({counter}){suffix}"
        counter += 1

    target.write_text(artifact.content, encoding="utf-8")
    return target
