"""Unit tests for the CLI module (repo_unifier.cli.main)."""

from __future__ import annotations

import json
import pytest
from unittest.mock import patch, MagicMock

from repo_unifier.agents.exceptions import ProviderConfigError, ReconstructionError
from repo_unifier.cli.main import (
    build_parser,
    validate_root,
    main,
    EXIT_SUCCESS,
    EXIT_INVALID_INPUT,
    EXIT_AGENT_ERROR,
    EXIT_WRITE_ERROR,
    EXIT_PATCH_PARSE_ERROR,
    EXIT_UNEXPECTED,
    EXIT_KEYBOARD_INTERRUPT,
    DEFAULT_SPLIT_WIDTH,
)
from repo_unifier.storage import SessionStore

SIMPLE_PATCH = "--- a/f.txt\n+++ b/f.txt\n@@ -1,2 +1,3 @@\n context\n-old\n+new1\n+new2\n"


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep main() from reconfiguring the root logger during tests."""
    with patch("repo_unifier.cli.main.setup_logging") as mock_setup:
        yield mock_setup


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in (
        "UNIFIER_IGNORE",
        "UNIFIER_MAX_SIZE_KB",
        "UNIFIER_OUTPUT_FORMAT",
        "UNIFIER_LLM_PROVIDER",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("UNIFIER_SESSION_DIR", str(tmp_path / "sessions"))
    monkeypatch.setenv("UNIFIER_DOWNLOAD_DIR", str(tmp_path / "downloads"))


@pytest.fixture
def mock_agent():
    """Patch agent creation inside run_apply."""
    agent = MagicMock()
    agent.rewrite.return_value = "const a = 10;\nconst b = 2;\n"
    with patch("repo_unifier.cli.main.create_agent", return_value=agent):
        yield agent


# ---------------------------------------------------------------------------
# TestBuildParser
# ---------------------------------------------------------------------------
class TestBuildParser:
    def test_pack_args(self):
        args = build_parser().parse_args([
            "pack", "/tmp", "--format", "xml", "--ignore", "dist", "--ignore", "tmp",
            "--max-size-kb", "10", "--search", "src", "--language", "ts", "--stdout",
        ])
        assert args.command == "pack"
        assert args.output_format == "xml"
        assert args.ignore == ["dist", "tmp"]
        assert args.max_size_kb == 10
        assert args.stdout is True

    def test_diff_defaults(self):
        args = build_parser().parse_args(["diff", "-"])
        assert args.split is False
        assert args.width == DEFAULT_SPLIT_WIDTH
        assert args.strict is False
        assert args.verbose is False

    def test_apply_args(self):
        args = build_parser().parse_args([
            "apply", "/repo", "src/a.ts", "frag.txt", "--yes", "--llm-provider", "openai",
        ])
        assert (args.root, args.path, args.fragment) == ("/repo", "src/a.ts", "frag.txt")
        assert args.yes is True
        assert args.llm_provider == "openai"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_invalid_format_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["pack", "/tmp", "--format", "yaml"])


# ---------------------------------------------------------------------------
# TestValidateRoot
# ---------------------------------------------------------------------------
class TestValidateRoot:
    def test_valid_dir(self, tmp_path):
        assert validate_root(str(tmp_path)) == tmp_path.resolve()

    def test_missing_dir_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            validate_root(str(tmp_path / "missing"))
        assert exc_info.value.code == EXIT_INVALID_INPUT
        assert "not a valid directory" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# TestPack
# ---------------------------------------------------------------------------
class TestPack:
    def test_writes_export(self, project_dir, tmp_path, capsys):
        out_dir = tmp_path / "out"
        code = main(["pack", str(project_dir), "--output-dir", str(out_dir)])
        assert code == EXIT_SUCCESS
        written = out_dir / "demo_context.md"
        assert written.read_text().startswith("# Project: demo\n")
        assert "3/3 text files selected" in capsys.readouterr().out

    def test_stdout_keeps_summary_on_stderr(self, project_dir, capsys):
        code = main(["pack", str(project_dir), "--stdout", "--format", "xml"])
        captured = capsys.readouterr()
        assert code == EXIT_SUCCESS
        assert captured.out.startswith('<?xml version="1.0"')
        assert "tokens" in captured.err

    def test_only_filtered(self, project_dir, capsys):
        main(["pack", str(project_dir), "--stdout", "--only-filtered", "--language", "py"])
        out = capsys.readouterr().out
        assert "## File: src/lib/util.py" in out
        assert "src/app.ts" not in out

    def test_output_json_summary(self, project_dir, tmp_path, capsys):
        main(["pack", str(project_dir), "--output-dir", str(tmp_path), "--output-json"])
        summary = json.loads(capsys.readouterr().out)
        assert summary["selected"] == 3
        assert summary["binary"] == 1
        assert summary["output"].endswith("demo_context.md")

    def test_save_session(self, project_dir, tmp_path, capsys):
        sessions = tmp_path / "sessions"
        main(["pack", str(project_dir), "--stdout", "--save-session"])
        saved = SessionStore(sessions).list_sessions()
        assert len(saved) == 1
        assert saved[0].name == "demo"

    def test_missing_root(self, tmp_path):
        assert main(["pack", str(tmp_path / "missing")]) == EXIT_INVALID_INPUT

    def test_invalid_env_config(self, project_dir, monkeypatch, capsys):
        monkeypatch.setenv("UNIFIER_MAX_SIZE_KB", "big")
        assert main(["pack", str(project_dir)]) == EXIT_INVALID_INPUT
        assert "UNIFIER_MAX_SIZE_KB" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# TestTree
# ---------------------------------------------------------------------------
def test_tree_listing(project_dir, capsys):
    assert main(["tree", str(project_dir)]) == EXIT_SUCCESS
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "[x] src/"
    assert "  [x] lib/" in lines
    assert "[-] logo.png (binary)" in lines


# ---------------------------------------------------------------------------
# TestDiff
# ---------------------------------------------------------------------------
class TestDiff:
    def test_unified(self, tmp_path, capsys):
        patch_file = tmp_path / "change.patch"
        patch_file.write_text(SIMPLE_PATCH)
        assert main(["diff", str(patch_file)]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "MODIFY f.txt (+2 -1)" in out
        assert "@@ -1,2 +1,3 @@" in out

    def test_split_from_stdin(self, monkeypatch, capsys):
        import io

        monkeypatch.setattr("sys.stdin", io.StringIO(SIMPLE_PATCH))
        assert main(["diff", "-", "--split", "--width", "80"]) == EXIT_SUCCESS
        assert " | " in capsys.readouterr().out

    def test_malformed_soft(self, tmp_path, capsys):
        patch_file = tmp_path / "bad.patch"
        patch_file.write_text("not a patch\n")
        assert main(["diff", str(patch_file)]) == EXIT_SUCCESS
        assert "No diff loaded." in capsys.readouterr().out

    def test_malformed_strict(self, tmp_path, capsys):
        patch_file = tmp_path / "bad.patch"
        patch_file.write_text("not a patch\n")
        assert main(["diff", str(patch_file), "--strict"]) == EXIT_PATCH_PARSE_ERROR
        assert "Patch error" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# TestApply
# ---------------------------------------------------------------------------
class TestApply:
    def _fragment(self, tmp_path):
        fragment = tmp_path / "fragment.txt"
        fragment.write_text("const a = 10;")
        return str(fragment)

    def test_yes_writes_in_place(self, project_dir, tmp_path, mock_agent, capsys):
        code = main(["apply", str(project_dir), "src/app.ts", self._fragment(tmp_path), "--yes"])
        assert code == EXIT_SUCCESS
        assert (project_dir / "src" / "app.ts").read_text() == "const a = 10;\nconst b = 2;\n"
        out = capsys.readouterr().out
        assert "+const a = 10;" in out.replace("+ ", "+")
        assert "Wrote src/app.ts" in out

    def test_declined_leaves_file(self, project_dir, tmp_path, mock_agent, capsys):
        with patch("builtins.input", return_value="n"):
            code = main(["apply", str(project_dir), "src/app.ts", self._fragment(tmp_path)])
        assert code == EXIT_SUCCESS
        assert (project_dir / "src" / "app.ts").read_text() == "const a = 1;\nconst b = 2;\n"
        assert "Change discarded." in capsys.readouterr().out

    def test_download_mode(self, project_dir, tmp_path, mock_agent):
        code = main([
            "apply", str(project_dir), "src/app.ts", self._fragment(tmp_path),
            "--yes", "--download",
        ])
        assert code == EXIT_SUCCESS
        assert (tmp_path / "downloads" / "app.ts").read_text() == "const a = 10;\nconst b = 2;\n"
        assert (project_dir / "src" / "app.ts").read_text() == "const a = 1;\nconst b = 2;\n"

    def test_no_changes(self, project_dir, tmp_path, mock_agent, capsys):
        mock_agent.rewrite.return_value = "const a = 1;\nconst b = 2;\n"
        code = main(["apply", str(project_dir), "src/app.ts", self._fragment(tmp_path)])
        assert code == EXIT_SUCCESS
        assert "No changes" in capsys.readouterr().out

    def test_reconstruction_error(self, project_dir, tmp_path, mock_agent, capsys):
        mock_agent.rewrite.side_effect = ReconstructionError("src/app.ts", "model down")
        code = main(["apply", str(project_dir), "src/app.ts", self._fragment(tmp_path), "--yes"])
        assert code == EXIT_AGENT_ERROR
        assert "src/app.ts" in capsys.readouterr().err

    def test_provider_config_error(self, project_dir, tmp_path):
        with patch("repo_unifier.cli.main.create_agent", side_effect=ProviderConfigError("no key")):
            code = main(["apply", str(project_dir), "src/app.ts", self._fragment(tmp_path)])
        assert code == EXIT_AGENT_ERROR

    def test_unknown_path(self, project_dir, tmp_path, mock_agent):
        code = main(["apply", str(project_dir), "src/nope.ts", self._fragment(tmp_path)])
        assert code == EXIT_INVALID_INPUT

    def test_write_failure_declined(self, project_dir, tmp_path, mock_agent, capsys):
        with patch(
            "repo_unifier.controller.write_capability.FileSystemWriteHandle.write",
            side_effect=PermissionError("denied"),
        ), patch("builtins.input", side_effect=["y", "n"]):
            code = main(["apply", str(project_dir), "src/app.ts", self._fragment(tmp_path)])
        assert code == EXIT_WRITE_ERROR
        assert "retry by downloading" in capsys.readouterr().err

    def test_write_failure_downloads_with_yes(self, project_dir, tmp_path, mock_agent):
        with patch(
            "repo_unifier.controller.write_capability.FileSystemWriteHandle.write",
            side_effect=PermissionError("denied"),
        ):
            code = main(["apply", str(project_dir), "src/app.ts", self._fragment(tmp_path), "--yes"])
        assert code == EXIT_SUCCESS
        assert (tmp_path / "downloads" / "app.ts").exists()


# ---------------------------------------------------------------------------
# TestSessions
# ---------------------------------------------------------------------------
class TestSessions:
    def test_empty(self, capsys):
        assert main(["sessions"]) == EXIT_SUCCESS
        assert "No saved sessions." in capsys.readouterr().out

    def test_list_json_and_delete(self, project_dir, capsys):
        main(["pack", str(project_dir), "--stdout", "--save-session"])
        capsys.readouterr()
        main(["sessions", "--output-json"])
        listed = json.loads(capsys.readouterr().out)
        assert listed[0]["name"] == "demo"
        assert main(["sessions", "--delete", listed[0]["id"]]) == EXIT_SUCCESS
        assert main(["sessions", "--delete", listed[0]["id"]]) == EXIT_INVALID_INPUT


# ---------------------------------------------------------------------------
# TestErrorHandling
# ---------------------------------------------------------------------------
class TestErrorHandling:
    def test_keyboard_interrupt(self, project_dir, capsys):
        interrupted = MagicMock(side_effect=KeyboardInterrupt)
        with patch.dict("repo_unifier.cli.main._COMMANDS", {"tree": interrupted}):
            code = main(["tree", str(project_dir)])
        assert code == EXIT_KEYBOARD_INTERRUPT
        assert "Interrupted." in capsys.readouterr().err

    def test_unexpected_error(self, project_dir, capsys):
        boom = MagicMock(side_effect=RuntimeError("boom"))
        with patch.dict("repo_unifier.cli.main._COMMANDS", {"tree": boom}):
            code = main(["tree", str(project_dir)])
        assert code == EXIT_UNEXPECTED
        assert "Unexpected error: boom" in capsys.readouterr().err

    def test_verbose_sets_debug(self, project_dir, quiet_logging):
        main(["tree", str(project_dir), "--verbose"])
        quiet_logging.assert_called_once_with("DEBUG")
