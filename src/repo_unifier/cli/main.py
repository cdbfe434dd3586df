"""CLI entry point for the repo unifier."""
import argparse
from dotenv import load_dotenv
import json
import sys
import traceback
from pathlib import Path

from repo_unifier.agents.exceptions import AgentError
from repo_unifier.catalog.exceptions import CatalogError
from repo_unifier.collection import FileCollector
from repo_unifier.config import ConfigError, Settings, load_settings
from repo_unifier.controller import ChangeError, DirectoryDownloadSink, WriteError
from repo_unifier.logging_config import setup_logging
from repo_unifier.models import FileKind, OutputFormat, SelectionStatus
from repo_unifier.patch import (
    PatchParseError,
    format_rows,
    format_split,
    format_unified,
    parse_patch,
    parse_patch_strict,
)
from repo_unifier.storage import SessionStore, StorageError
from repo_unifier.utils.artifacts import write_artifact
from repo_unifier.workspace import ProjectWorkspace

load_dotenv()

# Exit codes
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1
EXIT_AGENT_ERROR = 2
EXIT_WRITE_ERROR = 3
EXIT_PATCH_PARSE_ERROR = 4
EXIT_UNEXPECTED = 5
EXIT_KEYBOARD_INTERRUPT = 130

DEFAULT_SPLIT_WIDTH = 160

_STATUS_MARKERS = {
    SelectionStatus.CHECKED: "[x]",
    SelectionStatus.UNCHECKED: "[ ]",
    SelectionStatus.PARTIAL: "[~]",
}


def _add_collection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("root", type=str, help="Project directory")
    parser.add_argument(
        "--ignore",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Ignore paths containing PATTERN (repeatable; replaces the defaults)",
    )
    parser.add_argument(
        "--max-size-kb",
        type=int,
        default=None,
        help="Files above this size are listed without content (default: 500)",
    )
    parser.add_argument("--search", type=str, default="", help="Path substring filter")
    parser.add_argument(
        "--language",
        type=str,
        default=None,
        help="Language filter, e.g. ts or py ('all' disables it)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", action="store_true", help="Enable verbose output")

    parser = argparse.ArgumentParser(
        prog="repo-unifier",
        description="Pack a source tree into one AI context document and review AI rewrites",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    pack = subparsers.add_parser(
        "pack", parents=[common], help="Serialize the selected files of a project"
    )
    _add_collection_args(pack)
    pack.add_argument(
        "--format",
        dest="output_format",
        type=str,
        default=None,
        choices=[f.value for f in OutputFormat],
        help="Output format (default: markdown)",
    )
    pack.add_argument(
        "--only-filtered",
        action="store_true",
        help="Select only the files matching --search/--language",
    )
    pack.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory for the <project>_context.<ext> export",
    )
    pack.add_argument(
        "--stdout", action="store_true", help="Print the document instead of writing it"
    )
    pack.add_argument(
        "--save-session", action="store_true", help="Persist the project as a session"
    )
    pack.add_argument("--session-dir", type=str, default=None, help="Session directory")
    pack.add_argument(
        "--output-json", action="store_true", help="Print the summary as JSON"
    )

    tree = subparsers.add_parser(
        "tree", parents=[common], help="Show the file tree with selection state"
    )
    _add_collection_args(tree)

    diff = subparsers.add_parser(
        "diff", parents=[common], help="Render a unified diff file"
    )
    diff.add_argument("patch", type=str, help="Patch file, or '-' for stdin")
    diff.add_argument("--split", action="store_true", help="Side-by-side view")
    diff.add_argument(
        "--width",
        type=int,
        default=DEFAULT_SPLIT_WIDTH,
        help=f"Split view width (default: {DEFAULT_SPLIT_WIDTH})",
    )
    diff.add_argument(
        "--strict",
        action="store_true",
        help="Fail on malformed patches instead of showing nothing",
    )

    apply = subparsers.add_parser(
        "apply", parents=[common], help="Merge a suggested change into one file"
    )
    apply.add_argument("root", type=str, help="Project directory")
    apply.add_argument("path", type=str, help="File path relative to the project root")
    apply.add_argument(
        "fragment", type=str, help="File holding the suggested change, or '-' for stdin"
    )
    apply.add_argument("--yes", action="store_true", help="Commit without asking")
    apply.add_argument(
        "--download",
        action="store_true",
        help="Never write in place; save the new file to --download-dir",
    )
    apply.add_argument("--download-dir", type=str, default=None, help="Download directory")
    apply.add_argument(
        "--full", action="store_true", help="Preview every line instead of hunks"
    )
    apply.add_argument("--model", type=str, default=None, help="Model ID to use")
    apply.add_argument(
        "--llm-provider",
        type=str,
        default=None,
        choices=("auto", "anthropic", "openai"),
        help="LLM provider: auto (default), anthropic, or openai",
    )
    apply.add_argument(
        "--llm-fallback-provider",
        type=str,
        default="",
        choices=("", "anthropic", "openai"),
        help="Optional fallback provider when the primary provider fails",
    )
    apply.add_argument(
        "--allow-llm-fallback",
        action="store_true",
        help="Allow fallback to the alternate provider when the primary provider fails",
    )

    sessions = subparsers.add_parser(
        "sessions", parents=[common], help="List or delete saved sessions"
    )
    sessions.add_argument("--session-dir", type=str, default=None, help="Session directory")
    sessions.add_argument("--delete", type=str, default=None, metavar="ID", help="Delete a session")
    sessions.add_argument(
        "--output-json", action="store_true", help="Output the list as JSON"
    )
    return parser


def validate_root(raw_path: str) -> Path:
    """Resolve a project root.

    Raises:
        SystemExit: If the path is not a directory.
    """
    resolved = Path(raw_path).resolve()
    if not resolved.is_dir():
        print(f"Error: '{raw_path}' is not a valid directory.", file=sys.stderr)
        raise SystemExit(EXIT_INVALID_INPUT)
    return resolved


def _read_input(raw_path: str) -> str:
    if raw_path == "-":
        return sys.stdin.read()
    return Path(raw_path).read_text(encoding="utf-8")


def _ask(question: str) -> bool:
    try:
        answer = input(f"{question} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _collector(args: argparse.Namespace, settings: Settings) -> FileCollector:
    return FileCollector(
        ignore_patterns=args.ignore if args.ignore else settings.ignore_patterns,
        max_size_kb=args.max_size_kb if args.max_size_kb is not None else settings.max_size_kb,
    )


def _open_workspace(args: argparse.Namespace, settings: Settings) -> ProjectWorkspace:
    workspace = ProjectWorkspace(
        collector=_collector(args, settings),
        output_format=settings.output_format,
    )
    result = workspace.open_directory(validate_root(args.root), grant_write=False)
    for error in result.errors:
        print(f"Skipped {error.path}: {error.reason}", file=sys.stderr)
    workspace.set_filter(args.search, args.language)
    return workspace


def run_pack(args: argparse.Namespace, settings: Settings) -> int:
    workspace = _open_workspace(args, settings)
    if args.only_filtered:
        workspace.select_none()
        workspace.select_filtered()

    output_format = OutputFormat(args.output_format or settings.output_format)
    artifact = workspace.export(output_format)
    stats = workspace.stats()
    tokens = workspace.estimate_tokens(output_format)

    if args.stdout:
        sys.stdout.write(artifact.content)
        written = None
    else:
        written = write_artifact(artifact, args.output_dir or settings.download_dir)

    session_id = None
    if args.save_session:
        workspace.output_format = output_format
        store = SessionStore(args.session_dir or settings.session_dir)
        session = workspace.to_session()
        store.save(session)
        session_id = session.id

    summary = {
        "project": workspace.name,
        "format": output_format.value,
        "selected": stats.selected,
        "text": stats.text,
        "binary": stats.binary,
        "oversized": stats.oversized,
        "estimated_tokens": tokens,
        "output": str(written) if written else None,
        "session_id": session_id,
    }
    if args.output_json:
        print(json.dumps(summary, indent=2), file=sys.stderr if args.stdout else sys.stdout)
        return EXIT_SUCCESS

    # Keep stdout clean when it carries the document
    stream = sys.stderr if args.stdout else sys.stdout
    print(
        f"{summary['project']}: {stats.selected}/{stats.text} text files selected "
        f"({stats.binary} binary, {stats.oversized} oversized), "
        f"~{tokens} tokens ({output_format.value})",
        file=stream,
    )
    if written:
        print(f"Wrote {written}", file=stream)
    if session_id:
        print(f"Saved session {session_id}", file=stream)
    return EXIT_SUCCESS


def run_tree(args: argparse.Namespace, settings: Settings) -> int:
    from repo_unifier.catalog import iter_nodes

    workspace = _open_workspace(args, settings)
    roots = workspace.tree()
    statuses = workspace.statuses()
    for node, depth in iter_nodes(roots):
        indent = "  " * depth
        if node.is_directory:
            print(f"{indent}{_STATUS_MARKERS[statuses[node.path]]} {node.name}/")
            continue
        record = node.record
        if record is not None and record.kind is not FileKind.TEXT:
            print(f"{indent}[-] {node.name} ({record.kind.value})")
        else:
            print(f"{indent}{_STATUS_MARKERS[statuses[node.path]]} {node.name}")
    return EXIT_SUCCESS


def run_diff(args: argparse.Namespace, settings: Settings) -> int:
    text = _read_input(args.patch)
    diff_files = parse_patch_strict(text) if args.strict else parse_patch(text)
    if not diff_files:
        print("No diff loaded.")
        return EXIT_SUCCESS
    blocks = [
        format_split(diff_file, args.width) if args.split else format_unified(diff_file)
        for diff_file in diff_files
    ]
    print("\n\n".join(blocks))
    return EXIT_SUCCESS


def create_agent(args: argparse.Namespace, settings: Settings):
    """Build the rewrite agent from CLI flags, falling back to settings."""
    from repo_unifier.agents.merge_agent import MergeAgent

    return MergeAgent(
        model=args.model or settings.model,
        llm_provider=args.llm_provider or settings.llm_provider,
        llm_fallback_provider=args.llm_fallback_provider or None,
        allow_fallback=args.allow_llm_fallback,
    )


def run_apply(args: argparse.Namespace, settings: Settings) -> int:
    root = validate_root(args.root)
    fragment = _read_input(args.fragment)

    workspace = ProjectWorkspace(
        collector=FileCollector(settings.ignore_patterns, settings.max_size_kb),
        download_sink=DirectoryDownloadSink(args.download_dir or settings.download_dir),
    )
    workspace.open_directory(root, grant_write=not args.download)
    workspace.attach_rewriter(create_agent(args, settings))
    controller = workspace.controller

    print(f"Reconstructing {args.path}...", file=sys.stderr)
    controller.request_change(args.path, fragment)
    review = controller.review
    if review is None or not review.diff_text:
        controller.cancel()
        print(f"No changes for {args.path}.")
        return EXIT_SUCCESS

    if args.full:
        print(format_rows(review.rows))
    else:
        print(format_unified(review.diff_file))

    if not args.yes and not _ask(f"Apply changes to {args.path}?"):
        controller.cancel()
        print("Change discarded.")
        return EXIT_SUCCESS

    try:
        result = controller.confirm()
    except WriteError as exc:
        print(f"Write error: {exc}", file=sys.stderr)
        if args.yes or _ask("Download the file instead?"):
            result = controller.acknowledge_write_failure(download=True)
        else:
            controller.acknowledge_write_failure()
            return EXIT_WRITE_ERROR

    if result.location:
        print(f"Saved {result.path} to {result.location}")
    else:
        print(f"Wrote {result.path}")
    return EXIT_SUCCESS


def run_sessions(args: argparse.Namespace, settings: Settings) -> int:
    store = SessionStore(args.session_dir or settings.session_dir)
    if args.delete:
        store.delete(args.delete)
        print(f"Deleted session {args.delete}")
        return EXIT_SUCCESS

    sessions = store.list_sessions()
    if args.output_json:
        print(json.dumps(
            [
                {
                    "id": s.id,
                    "name": s.name,
                    "files": len(s.files),
                    "output_format": s.output_format.value,
                    "last_updated": s.last_updated.isoformat(),
                }
                for s in sessions
            ],
            indent=2,
        ))
        return EXIT_SUCCESS

    if not sessions:
        print("No saved sessions.")
        return EXIT_SUCCESS
    for s in sessions:
        print(
            f"{s.id}  {s.name}  {len(s.files)} files  "
            f"{s.output_format.value}  {s.last_updated:%Y-%m-%d %H:%M}"
        )
    return EXIT_SUCCESS


_COMMANDS = {
    "pack": run_pack,
    "tree": run_tree,
    "diff": run_diff,
    "apply": run_apply,
    "sessions": run_sessions,
}


def _handle_error(label: str, exc: BaseException, verbose: bool, exit_code: int) -> int:
    """Print error message to stderr and return the exit code."""
    print(f"{label}: {exc}", file=sys.stderr)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as exc:
        return _handle_error("Configuration error", exc, args.verbose, EXIT_INVALID_INPUT)

    setup_logging("DEBUG" if args.verbose else settings.log_level)

    try:
        return _COMMANDS[args.command](args, settings)

    except SystemExit as exc:
        return exc.code

    except AgentError as exc:
        return _handle_error("Agent error", exc, args.verbose, EXIT_AGENT_ERROR)

    except WriteError as exc:
        return _handle_error("Write error", exc, args.verbose, EXIT_WRITE_ERROR)

    except PatchParseError as exc:
        return _handle_error("Patch error", exc, args.verbose, EXIT_PATCH_PARSE_ERROR)

    except (CatalogError, ChangeError, StorageError, FileNotFoundError) as exc:
        return _handle_error("Error", exc, args.verbose, EXIT_INVALID_INPUT)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except Exception as exc:
        return _handle_error("Unexpected error", exc, args.verbose, EXIT_UNEXPECTED)


def entrypoint() -> None:
    sys.exit(main())


if __name__ == "__main__":
    entrypoint()
