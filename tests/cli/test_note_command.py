from __future__ import annotations

import json
from pathlib import Path

import pytest

from labctl import __version__
from labctl.cli import main as cli_main
from labctl.domain.notes import ContainerKind, Discussion, Note
from labctl.settings import RuntimeSettings


@pytest.fixture()
def runtime_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, forge_client, fake_vcs) -> RuntimeSettings:
    home = tmp_path / "home"
    home.mkdir()
    settings = RuntimeSettings(
        home_dir=home,
        config_file=home / "config.yaml",
        log_dir=home / "logs",
        cli_version=__version__,
    )
    monkeypatch.setattr(cli_main, "SETTINGS", settings, raising=False)
    monkeypatch.setattr(cli_main, "_build_client", lambda config: forge_client)
    monkeypatch.setattr(cli_main, "_build_vcs", lambda: fake_vcs)
    monkeypatch.delenv("LABCTL_TELEMETRY", raising=False)
    return settings


def _events(settings: RuntimeSettings) -> list[dict]:
    log_path = settings.log_dir / "telemetry.jsonl"
    return [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]


def test_mr_note_prints_only_url(runtime_settings, forge_client, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli_main.main(["mr", "note", "myremote", "42", "-m", "hello"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert out == "https://gitlab.example.com/group/myremote/-/merge_requests/42#note_100\n"
    assert forge_client.calls == [("create_note", "group/myremote", ContainerKind.MERGE_REQUEST, 42, "hello")]

    events = _events(runtime_settings)
    assert events[-1]["event"] == "notes.create"
    assert events[-1]["status"] == "created"
    assert events[-1]["payload"]["kind"] == "mr"


def test_issue_reply_with_quote(runtime_settings, forge_client, fake_vcs, capsys: pytest.CaptureFixture[str]) -> None:
    forge_client.discussions = [Discussion(id="abc123", notes=(Note(id=15, body="orig"),))]

    exit_code = cli_main.main(["issue", "note", "myremote", "7:15", "--quote"])

    assert exit_code == 0
    assert fake_vcs.edits[0][1].startswith(">orig\n")
    assert forge_client.submissions == [
        ("create_discussion_reply", "group/myremote", ContainerKind.ISSUE, 7, "abc123", ">orig")
    ]
    assert capsys.readouterr().out.strip().endswith("/issues/7#note_200")
    assert _events(runtime_settings)[-1]["event"] == "notes.reply"


def test_default_remote_and_aliases(runtime_settings, forge_client, capsys: pytest.CaptureFixture[str]) -> None:
    runtime_settings.config_file.write_text("default_remote: upstream\n", encoding="utf-8")

    assert cli_main.main(["issue", "comment", "3", "-m", "one", "-m", "two"]) == 0
    assert cli_main.main(["mr", "reply", "4", "-m", "x", "--force-linebreak"]) == 0

    assert forge_client.calls[0] == ("create_note", "group/upstream", ContainerKind.ISSUE, 3, "one\n\ntwo")
    assert forge_client.calls[1] == ("create_note", "group/upstream", ContainerKind.MERGE_REQUEST, 4, "x  ")


def test_file_flag(runtime_settings, forge_client, tmp_path: Path) -> None:
    message = tmp_path / "msg.txt"
    message.write_text("from file\n", encoding="utf-8")

    assert cli_main.main(["issue", "note", "7", "-F", str(message), "-m", "ignored"]) == 0
    assert forge_client.calls[0][-1] == "from file\n"


def test_empty_message_aborts(runtime_settings, forge_client, fake_vcs, capsys: pytest.CaptureFixture[str]) -> None:
    fake_vcs.edited = ""

    exit_code = cli_main.main(["issue", "note", "7"])

    assert exit_code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "aborting note due to empty note message" in captured.err
    assert forge_client.calls == []
    event = _events(runtime_settings)[-1]
    assert event["level"] == "error"
    assert event["payload"]["error"] == "EmptyNoteError"


def test_unknown_reply_target_is_reported(runtime_settings, forge_client, capsys: pytest.CaptureFixture[str]) -> None:
    forge_client.discussions = [Discussion(id="d", notes=(Note(id=1, body="sys", system=True),))]

    exit_code = cli_main.main(["mr", "note", "42:1", "-m", "hi"])

    assert exit_code == 1
    assert "note 1 not found" in capsys.readouterr().err
    assert forge_client.submissions == []


@pytest.mark.parametrize("argv", [["issue", "note", "abc"], ["issue", "note", "a", "b", "7"]])
def test_bad_positionals(runtime_settings, forge_client, argv: list[str], capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(argv + ["-m", "hi"]) == 1
    assert capsys.readouterr().err
    assert forge_client.calls == []


def test_invalid_config_is_reported(runtime_settings, capsys: pytest.CaptureFixture[str]) -> None:
    runtime_settings.config_file.write_text("- not\n- a mapping\n", encoding="utf-8")

    assert cli_main.main(["issue", "note", "7", "-m", "hi"]) == 1
    assert "must contain a mapping" in capsys.readouterr().err


def test_note_requires_target(runtime_settings) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_main.main(["issue", "note"])
    assert excinfo.value.code == 2
