"""End-to-end tests for the hook entry point."""

import io
import json
from pathlib import Path

import pytest

from edit_context.hooks.router import main, read_hook_input


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    project = tmp_path / "project"
    (project / ".git").mkdir(parents=True)
    monkeypatch.setenv("CLAUDE_PROJECT_DIR", str(project))
    monkeypatch.delenv("CLAUDE_EDIT_LOOKBACK", raising=False)
    return project


def run(monkeypatch: pytest.MonkeyPatch, argv: list[str], stdin: str) -> int:
    monkeypatch.setattr("sys.stdin", io.StringIO(stdin))
    return main(argv)


def post_tool_use(file_path: str | None, session_id: str = "s1") -> str:
    payload = {
        "session_id": session_id,
        "hook_event_name": "PostToolUse",
        "tool_name": "Edit",
        "tool_input": {"file_path": file_path} if file_path else {},
    }
    return json.dumps(payload)


def test_records_then_summarizes(project: Path, monkeypatch, capsys) -> None:
    assert run(monkeypatch, ["PostToolUse"], post_tool_use(str(project / "src" / "a.go"))) == 0
    assert capsys.readouterr().out == ""

    assert run(monkeypatch, ["UserPromptSubmit"], json.dumps({"prompt": "hi"})) == 0
    out = capsys.readouterr().out

    assert out.startswith("<session-context>\n")
    assert "  - src/a.go (go)\n" in out
    assert out.endswith("</session-context>\n")


def test_fresh_project_prints_nothing(project: Path, monkeypatch, capsys) -> None:
    assert run(monkeypatch, ["UserPromptSubmit"], "") == 0
    assert capsys.readouterr().out == ""


def test_missing_file_path_appends_nothing(project: Path, monkeypatch) -> None:
    assert run(monkeypatch, ["PostToolUse"], post_tool_use(None)) == 0
    assert not (project / ".claude" / "edit-cache").exists()


def test_markdown_edit_appends_nothing(project: Path, monkeypatch) -> None:
    assert run(monkeypatch, ["PostToolUse"], post_tool_use("notes.md")) == 0
    assert not (project / ".claude" / "edit-cache").exists()


def test_garbage_input_still_succeeds(project: Path, monkeypatch) -> None:
    for stdin in ("not json", "[1, 2]", '{"session_id": 7, "tool_input": 3}'):
        assert run(monkeypatch, ["PostToolUse"], stdin) == 0
    assert not (project / ".claude" / "edit-cache").exists()


def test_filesystem_failure_does_not_fail_hook(project: Path, monkeypatch) -> None:
    """An unwritable cache location is logged, never raised to the host."""
    claude_dir = project / ".claude"
    claude_dir.mkdir()
    (claude_dir / "edit-cache").write_text("not a directory")

    assert run(monkeypatch, ["PostToolUse"], post_tool_use(str(project / "a.py"))) == 0


def test_event_taken_from_payload(project: Path, monkeypatch) -> None:
    assert run(monkeypatch, [], post_tool_use(str(project / "lib" / "x.py"))) == 0
    assert (project / ".claude" / "edit-cache" / "s1" / "edited-files.log").exists()


def test_unknown_or_missing_event_is_noop(project: Path, monkeypatch, capsys) -> None:
    assert run(monkeypatch, ["Notification"], "{}") == 0
    assert run(monkeypatch, [], "{}") == 0
    assert capsys.readouterr().out == ""


def test_json_output(project: Path, monkeypatch, capsys) -> None:
    run(monkeypatch, ["PostToolUse"], post_tool_use(str(project / "src" / "b.ts")))
    capsys.readouterr()

    assert run(monkeypatch, ["UserPromptSubmit", "--json"], "{}") == 0
    output = json.loads(capsys.readouterr().out)

    hso = output["hookSpecificOutput"]
    assert hso["hookEventName"] == "UserPromptSubmit"
    assert "  - src/b.ts (ts)" in hso["additionalContext"]
    assert "systemMessage" not in output


def test_lookback_flag_and_env(project: Path, monkeypatch, capsys) -> None:
    log = project / ".claude" / "edit-cache" / "s1" / "edited-files.log"
    log.parent.mkdir(parents=True)
    log.write_text(f"1000|{project}/old.py|old.py|py|{project}\n")

    run(monkeypatch, ["UserPromptSubmit"], "{}")
    assert capsys.readouterr().out == ""

    monkeypatch.setenv("CLAUDE_EDIT_LOOKBACK", str(10**12))
    run(monkeypatch, ["UserPromptSubmit"], "{}")
    assert "old.py (py)" in capsys.readouterr().out

    run(monkeypatch, ["UserPromptSubmit", "--lookback", "60"], "{}")
    assert capsys.readouterr().out == ""


def test_read_hook_input_tolerates_bad_streams() -> None:
    assert read_hook_input(io.StringIO("")) == {}
    assert read_hook_input(io.StringIO("{broken")) == {}
    assert read_hook_input(io.StringIO('{"a": 1}')) == {"a": 1}


def test_bad_arguments_never_block_the_host(project: Path, monkeypatch, capsys) -> None:
    """Argument errors end the hook with exit 0, not argparse's blocking exit 2."""
    assert run(monkeypatch, ["UserPromptSubmit", "--bogus"], "{}") == 0
    assert run(monkeypatch, ["UserPromptSubmit", "--lookback"], "{}") == 0
    assert capsys.readouterr().out == ""


def test_invalid_lookback_flag_falls_back_to_default(project: Path, monkeypatch, capsys) -> None:
    """Non-integer or negative --lookback is ignored like a bad CLAUDE_EDIT_LOOKBACK."""
    run(monkeypatch, ["PostToolUse"], post_tool_use(str(project / "src" / "c.py")))
    capsys.readouterr()

    assert run(monkeypatch, ["UserPromptSubmit", "--lookback", "abc"], "{}") == 0
    assert "  - src/c.py (py)" in capsys.readouterr().out

    assert run(monkeypatch, ["UserPromptSubmit", "--lookback", "-100000"], "{}") == 0
    assert "  - src/c.py (py)" in capsys.readouterr().out
