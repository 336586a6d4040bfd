"""Tests for the sugarflow command line."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import yaml

from sugarflow.config import load_secrets
from sugarflow.main import _message_for, _print_messages, main, parse_args


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        "jira:\n"
        "  domain: https://acme.atlassian.net\n"
        "  username: dev@acme.io\n"
        "github:\n"
        "  repository: acme/app\n"
        "git:\n"
        f"  workspace: {tmp_path}\n",
        encoding="utf-8",
    )
    return path


def test_parse_args_defaults() -> None:
    args = parse_args([])
    assert args.config == Path("config.yaml")
    assert args.check is False
    assert args.subcommand is None


def test_parse_args_run_container_version() -> None:
    args = parse_args(["-c", "x.yaml", "run-container", "--version", "15.0.0"])
    assert args.config == Path("x.yaml")
    assert args.subcommand == "run-container"
    assert args.version == "15.0.0"


@pytest.mark.parametrize(
    "argv, expected",
    [
        (["search", "ABC-1"], {"command": "searchJira", "ticket": "ABC-1"}),
        (["start", "ABC-1"], {"command": "startWork", "ticket": "ABC-1"}),
        (["submit"], {"command": "createPR"}),
        (["stage", "a.py"], {"command": "stageFile", "file": "a.py"}),
        (["diff", "a.py"], {"command": "viewChanges", "file": "a.py"}),
        (["run-container"], {"command": "runDockerContainer", "version": None}),
    ],
)
def test_message_for(argv: list, expected: dict) -> None:
    assert _message_for(parse_args(argv)) == expected


def test_print_messages_exit_code(capsys: pytest.CaptureFixture[str]) -> None:
    assert _print_messages([{"command": "notify", "level": "info", "text": "ok"}]) == 0
    assert _print_messages([{"command": "notify", "level": "error", "text": "no"}]) == 1
    lines = capsys.readouterr().out.splitlines()
    assert json.loads(lines[0])["text"] == "ok"


def test_check_only_validates_config(config_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with patch("sugarflow.main.build_bridge") as mock_build:
        assert main(["-c", str(config_file), "--check"]) == 0
    mock_build.assert_not_called()
    assert "Config OK: https://acme.atlassian.net acme/app" in capsys.readouterr().out


def test_subcommand_dispatches_one_message(config_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bridge = MagicMock()
    bridge.dispatch.return_value = [
        {"command": "notify", "level": "error", "text": "Failed to find account ID for user dev@acme.io."}
    ]
    with patch("sugarflow.main.build_bridge", return_value=bridge):
        assert main(["-c", str(config_file), "start", "ABC-1"]) == 1
    bridge.dispatch.assert_called_once_with({"command": "startWork", "ticket": "ABC-1"})
    assert "Failed to find account ID" in capsys.readouterr().out


def test_status_prints_initial_messages(config_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bridge = MagicMock()
    bridge.initial_messages.return_value = [
        {"command": "displayChangedFiles", "changedFiles": {"staged": [], "unstaged": []}}
    ]
    with patch("sugarflow.main.build_bridge", return_value=bridge):
        assert main(["-c", str(config_file), "status"]) == 0
    assert json.loads(capsys.readouterr().out.strip())["command"] == "displayChangedFiles"


def test_serve_runs_bridge_server(config_file: Path) -> None:
    with (
        patch("sugarflow.main.build_bridge") as mock_build,
        patch("sugarflow.main.run_bridge_server", side_effect=KeyboardInterrupt) as mock_serve,
    ):
        assert main(["-c", str(config_file), "serve"]) == 0
    mock_serve.assert_called_once()
    assert mock_serve.call_args[0][1] is mock_build.return_value


def test_set_username_updates_config(config_file: Path) -> None:
    assert main(["-c", str(config_file), "set-username", "other@acme.io"]) == 0
    raw = yaml.safe_load(config_file.read_text(encoding="utf-8"))
    assert raw["jira"]["username"] == "other@acme.io"
    assert raw["github"]["repository"] == "acme/app"


def test_set_token_stores_secret(config_file: Path, tmp_path: Path) -> None:
    with patch("sugarflow.main.getpass.getpass", return_value=" secret-token \n"):
        assert main(["-c", str(config_file), "set-token"]) == 0
    assert load_secrets(tmp_path) == {"jira_api_token": "secret-token"}


def test_set_github_token_rejects_empty(config_file: Path, tmp_path: Path) -> None:
    with patch("sugarflow.main.getpass.getpass", return_value="  "):
        assert main(["-c", str(config_file), "set-github-token"]) == 1
    assert load_secrets(tmp_path) == {}


def test_set_username_without_config_keeps_example_settings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """config.yaml is started from config.example.yaml, not from an empty file."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.example.yaml").write_text(
        "jira:\n  domain: https://acme.atlassian.net\n  username: you@example.com\n"
        "github:\n  repository: acme/app\n",
        encoding="utf-8",
    )
    assert main(["set-username", "dev@acme.io"]) == 0
    raw = yaml.safe_load((tmp_path / "config.yaml").read_text(encoding="utf-8"))
    assert raw["jira"] == {"domain": "https://acme.atlassian.net", "username": "dev@acme.io"}
    assert raw["github"]["repository"] == "acme/app"
    example = yaml.safe_load((tmp_path / "config.example.yaml").read_text(encoding="utf-8"))
    assert example["jira"]["username"] == "you@example.com"
