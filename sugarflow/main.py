"""sugarflow entry point.

``sugarflow serve`` runs the panel bridge; the other subcommands send a
single panel message and print the replies as JSON lines, e.g.
``sugarflow start ABC-123`` or ``sugarflow submit``.
"""

import argparse
import getpass
import json
import logging
import shutil
import sys
from pathlib import Path
from typing import Any, Dict

from sugarflow.bridge import MessageBridge, run_bridge_server
from sugarflow.config import AppConfig, load_config, save_secret, save_setting
from sugarflow.logging import SugarflowLogging
from sugarflow.services.state import YamlStateStore
from sugarflow.services.workflow import WorkflowContext, WorkflowPipeline

LOG = logging.getLogger("sugarflow.main")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI: global options plus one subcommand."""
    parser = argparse.ArgumentParser(
        prog="sugarflow",
        description="Sugarflow - Jira ticket to GitHub pull request workflow",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    sub = parser.add_subparsers(dest="subcommand")
    sub.add_parser("serve", help="Run the panel bridge (HTTP) with periodic refresh")
    sub.add_parser("status", help="Show the active ticket and changed files")
    search = sub.add_parser("search", help="Show a ticket")
    search.add_argument("ticket")
    start = sub.add_parser("start", help="Start work on a ticket")
    start.add_argument("ticket")
    sub.add_parser("submit", help="Commit staged changes, push and open a pull request")
    sub.add_parser("build", help="Trigger a build")
    for name, help_text in (
        ("stage", "Stage a file"),
        ("unstage", "Unstage a file"),
        ("diff", "Show changes of a file against HEAD"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("file")
    sub.add_parser("build-image", help="Build the dev Docker image")
    run = sub.add_parser("run-container", help="Run the dev container for the active ticket")
    run.add_argument("--version", default=None, help="Version passed to the setup command")
    sub.add_parser("set-token", help="Store the Jira API token")
    sub.add_parser("set-github-token", help="Store the GitHub token")
    username = sub.add_parser("set-username", help="Store the Jira username (account email)")
    username.add_argument("username")
    return parser.parse_args(argv)


def build_bridge(config: AppConfig) -> MessageBridge:
    """Wire pipeline, persisted state and session for the configured workspace."""
    pipeline = WorkflowPipeline(config)
    ctx = WorkflowContext(YamlStateStore.for_workspace(pipeline.repo_dir), config.jira.username)
    return MessageBridge(pipeline, ctx)


def _message_for(args: argparse.Namespace) -> Dict[str, Any] | None:
    cmd = args.subcommand
    if cmd == "search":
        return {"command": "searchJira", "ticket": args.ticket}
    if cmd == "start":
        return {"command": "startWork", "ticket": args.ticket}
    if cmd == "submit":
        return {"command": "createPR"}
    if cmd == "build":
        return {"command": "createBuild"}
    if cmd == "stage":
        return {"command": "stageFile", "file": args.file}
    if cmd == "unstage":
        return {"command": "unstageFile", "file": args.file}
    if cmd == "diff":
        return {"command": "viewChanges", "file": args.file}
    if cmd == "build-image":
        return {"command": "buildDockerImage"}
    if cmd == "run-container":
        return {"command": "runDockerContainer", "version": args.version}
    return None


def _print_messages(messages: list[Dict[str, Any]]) -> int:
    failed = False
    for message in messages:
        print(json.dumps(message))
        if message.get("command") == "notify" and message.get("level") == "error":
            failed = True
    return 1 if failed else 0


def _store_credentials(args: argparse.Namespace, config: AppConfig, config_path: Path) -> int:
    cmd = args.subcommand
    if cmd == "set-username":
        save_setting(config_path, "jira", "username", args.username)
        print("Jira username saved successfully.")
        return 0
    label, key = ("Jira API token", "jira_api_token") if cmd == "set-token" else ("GitHub token", "github_token")
    value = getpass.getpass(f"Enter your {label}: ").strip()
    if not value:
        print(f"No {label} entered.", file=sys.stderr)
        return 1
    save_secret(config.workspace_path, key, value)
    print(f"{label} saved successfully.")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point: dispatch subcommand."""
    args = parse_args(argv)

    config_path = args.config
    if not config_path.is_file() and config_path == Path("config.yaml"):
        if Path("config.example.yaml").is_file():
            config_path = Path("config.example.yaml")
            logging.basicConfig(level=logging.INFO)
            LOG.warning("config.yaml not found, using config.example.yaml")

    config = load_config(config_path)
    SugarflowLogging(config.logging).setup()

    if args.check:
        print("Config OK:", config.jira.domain or "(no jira domain)", config.github.repository)
        return 0

    if args.subcommand in ("set-token", "set-github-token", "set-username"):
        if config_path != args.config and not args.config.is_file():
            # Start config.yaml from the example so its other settings survive
            shutil.copyfile(config_path, args.config)
        return _store_credentials(args, config, args.config)

    bridge = build_bridge(config)

    if args.subcommand in (None, "serve"):
        try:
            run_bridge_server(config, bridge)
        except KeyboardInterrupt:
            return 0
        except Exception as e:
            LOG.exception("Fatal error: %s", e)
            return 1
        return 0

    if args.subcommand == "status":
        return _print_messages(bridge.initial_messages())

    message = _message_for(args)
    if message is None:
        LOG.error("Unknown subcommand: %s", args.subcommand)
        return 2
    return _print_messages(bridge.dispatch(message))


if __name__ == "__main__":
    sys.exit(main())
