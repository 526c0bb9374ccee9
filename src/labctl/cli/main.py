#!/usr/bin/env python3
"""Entry point for the labctl CLI."""

from __future__ import annotations

import argparse
import json
import sys
import time
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from textwrap import dedent, indent
from typing import Any, Iterable, Sequence

from labctl import __version__
from labctl.adapters.forge import GitLabClient
from labctl.adapters.git import GitCLI
from labctl.app.merge_requests import MergeRequestService, MergeRequestServiceError, MergeRequestView
from labctl.app.notes import NoteService, NoteServiceError
from labctl.domain.notes import (
    ContainerKind,
    Discussion,
    NoteInputError,
    NoteNotFoundError,
    NoteOptions,
    TargetRef,
    parse_target_id,
)
from labctl.ports.forge import ForgeClient
from labctl.ports.vcs import VersionControl
from labctl.settings import SETTINGS, ConfigError, ForgeConfig, load_forge_config
from labctl.utils.telemetry import clear as telemetry_clear
from labctl.utils.telemetry import iter_events as telemetry_iter
from labctl.utils.telemetry import record_structured_event
from labctl.utils.telemetry import summarize as telemetry_summarize

HELP_OVERVIEW = dedent(
    """
    Work with GitLab issues and merge requests from a git checkout.

    Examples:
      labctl issue note origin 7 -m "Looks good"
      labctl mr reply 42:1503 --quote
      labctl mr show 42 --comments

    Configuration: ~/.labctl/config.yaml (host, token_env, default_remote)
    """
)

RULE = "-----------------------------------"
SINCE_FORMATS = ("%Y-%m-%d %H:%M:%S.%f %z", "%Y-%m-%d %H:%M:%S %z")


def _build_client(config: ForgeConfig) -> ForgeClient:
    return GitLabClient(config.api_url, config.resolve_token())


def _build_vcs() -> VersionControl:
    return GitCLI()


def _split_remote_args(values: Sequence[str], default_remote: str) -> tuple[str, str]:
    if len(values) == 1:
        return default_remote, values[0]
    if len(values) == 2:
        return values[0], values[1]
    raise NoteInputError("too many arguments; expected [remote] <id>")


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 3)


def _note_cmd(args: argparse.Namespace) -> int:
    kind = ContainerKind(args.container)
    started = time.perf_counter()
    event = "notes.create"
    try:
        config = load_forge_config(SETTINGS)
        remote, token = _split_remote_args(args.target, config.default_remote)
        primary_id, reply = parse_target_id(token)
        if reply is not None:
            event = "notes.reply"
        options = NoteOptions(
            messages=tuple(args.message or ()),
            file=Path(args.file) if args.file else None,
            force_linebreak=args.force_linebreak,
            quote=args.quote,
        )
        service = NoteService(_build_client(config), _build_vcs())
        result = service.submit(TargetRef(kind=kind, remote=remote, primary_id=primary_id), reply, options)
    except (NoteInputError, NoteNotFoundError, NoteServiceError, ConfigError) as exc:
        print(str(exc), file=sys.stderr)
        record_structured_event(
            SETTINGS,
            event,
            status="failed",
            component="notes",
            duration_ms=_elapsed_ms(started),
            payload={"kind": kind.value, "error": type(exc).__name__},
        )
        return 1

    print(result.url)
    record_structured_event(
        SETTINGS,
        event,
        status="created",
        component="notes",
        duration_ms=_elapsed_ms(started),
        payload={"kind": kind.value, "reply": result.is_reply, "length": len(result.body.text)},
    )
    return 0


def _parse_since(raw: str) -> datetime:
    value = raw.strip()
    if value.endswith(" UTC"):
        value = value[: -len(" UTC")]
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        for fmt in SINCE_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue
        else:
            raise argparse.ArgumentTypeError(f"invalid date '{raw}'")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _mr_show_cmd(args: argparse.Namespace) -> int:
    started = time.perf_counter()
    try:
        config = load_forge_config(SETTINGS)
        remote, token = _split_remote_args(args.target, config.default_remote)
        iid, reply = parse_target_id(token)
        if reply is not None:
            raise NoteInputError("mr show does not accept a note id")
        service = MergeRequestService(_build_client(config), _build_vcs())
        view = service.show(remote, iid, comments=args.comments, since=args.since)
        if args.patch:
            explicit_remote = remote if len(args.target) == 2 else None
            service.show_patch(view.merge_request, explicit_remote, reverse=args.reverse)
        else:
            _print_merge_request(view)
    except (NoteInputError, MergeRequestServiceError, ConfigError) as exc:
        print(str(exc), file=sys.stderr)
        record_structured_event(
            SETTINGS,
            "mr.show",
            status="failed",
            component="merge_requests",
            duration_ms=_elapsed_ms(started),
            payload={"error": type(exc).__name__},
        )
        return 1

    if args.comments:
        _print_discussions(view.discussions)
    record_structured_event(
        SETTINGS,
        "mr.show",
        status="ok",
        component="merge_requests",
        duration_ms=_elapsed_ms(started),
        payload={"patch": args.patch, "discussions": len(view.discussions)},
    )
    return 0


def _print_merge_request(view: MergeRequestView) -> None:
    mr = view.merge_request
    print()
    print(f"#{mr.iid} {mr.title}")
    print("===================================")
    print(mr.description)
    print(RULE)
    for label, value in mr.summary_fields(view.project):
        print(f"{label}: {value}")


def _format_time(value: datetime | None) -> str:
    if value is None:
        return "unknown time"
    return value.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def _print_discussions(discussions: Iterable[Discussion]) -> None:
    for discussion in discussions:
        for index, note in enumerate(discussion.notes):
            when = _format_time(note.created_at)
            if index == 0:
                print(RULE)
            if index == 0 and discussion.starts_thread:
                if note.system:
                    print(f"#{note.id}: {note.author} {note.body} at {when}")
                    continue
                verb = "commented" if len(discussion.notes) == 1 else "started a discussion"
                print(f"#{note.id}: {note.author} {verb} at {when}:")
                print(indent(note.body, "    "))
            else:
                print(f"    #{note.id}: {note.author} replied at {when}:")
                print(indent(note.body, "        "))
        print()


def _telemetry_cmd(args: argparse.Namespace) -> int:
    if args.telemetry_command == "report":
        recent = getattr(args, "recent", 0)
        if recent and recent > 0:
            events: list[dict[str, Any]] = list(deque(telemetry_iter(SETTINGS), maxlen=recent))
        else:
            events = list(telemetry_iter(SETTINGS))
        print(json.dumps(telemetry_summarize(events), indent=2, ensure_ascii=False))
        return 0
    if args.telemetry_command == "clear":
        telemetry_clear(SETTINGS)
        print("Telemetry log cleared")
        return 0
    if args.telemetry_command == "tail":
        for evt in deque(telemetry_iter(SETTINGS), maxlen=args.limit):
            print(json.dumps(evt, ensure_ascii=False))
        return 0
    print("Unsupported telemetry command", file=sys.stderr)
    return 2


def _add_note_parser(container_sub: Any, container: str, noun: str) -> None:
    note_cmd = container_sub.add_parser(
        "note",
        aliases=["comment", "reply"],
        help=f"Add a note or comment to {noun}",
        description=f"Add a note to {noun}, or reply to note <note_id> in its discussion.",
    )
    note_cmd.add_argument("target", nargs="+", metavar="[remote] <id>[:<note_id>]")
    note_cmd.add_argument(
        "-m",
        "--message",
        action="append",
        default=[],
        help="Use the given message; multiple -m are joined as separate paragraphs",
    )
    note_cmd.add_argument("-F", "--file", help="Use the given file as the message")
    note_cmd.add_argument(
        "--force-linebreak",
        action="store_true",
        help="Append 2 spaces to the end of each line to force markdown linebreaks",
    )
    note_cmd.add_argument(
        "--quote",
        action="store_true",
        help="Quote the note being replied to (used with <id>:<note_id> only)",
    )
    note_cmd.set_defaults(func=_note_cmd, container=container)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="labctl",
        description=HELP_OVERVIEW,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"labctl {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    issue_cmd = sub.add_parser("issue", help="Work with issues")
    issue_sub = issue_cmd.add_subparsers(dest="issue_command", required=True)
    _add_note_parser(issue_sub, ContainerKind.ISSUE.value, "an issue")

    mr_cmd = sub.add_parser("mr", help="Work with merge requests")
    mr_sub = mr_cmd.add_subparsers(dest="mr_command", required=True)
    _add_note_parser(mr_sub, ContainerKind.MERGE_REQUEST.value, "a merge request")

    mr_show = mr_sub.add_parser("show", aliases=["get"], help="Describe a merge request")
    mr_show.add_argument("target", nargs="+", metavar="[remote] <id>")
    mr_show.add_argument("-c", "--comments", action="store_true", help="Show comments for the merge request")
    mr_show.add_argument(
        "-s",
        "--since",
        type=_parse_since,
        help="Show comments created after the given date (e.g. 2020-08-21 14:57:46.808 +0000 UTC)",
    )
    mr_show.add_argument("-p", "--patch", action="store_true", help="Show merge request patches")
    mr_show.add_argument(
        "--reverse",
        action="store_true",
        help="Show patches in chronological order (with --patch)",
    )
    mr_show.set_defaults(func=_mr_show_cmd)

    telemetry_cmd = sub.add_parser("telemetry", help="Inspect local telemetry logs")
    telemetry_sub = telemetry_cmd.add_subparsers(dest="telemetry_command", required=True)

    telemetry_report = telemetry_sub.add_parser("report", help="Print aggregated telemetry stats")
    telemetry_report.add_argument(
        "--recent",
        type=int,
        default=0,
        help="Limit aggregation to the last N telemetry events",
    )
    telemetry_report.set_defaults(func=_telemetry_cmd)

    telemetry_clear_cmd = telemetry_sub.add_parser("clear", help="Remove telemetry log file")
    telemetry_clear_cmd.set_defaults(func=_telemetry_cmd)

    telemetry_tail = telemetry_sub.add_parser("tail", help="Print last N telemetry events")
    telemetry_tail.add_argument("--limit", type=int, default=20)
    telemetry_tail.set_defaults(func=_telemetry_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
