"""ScanLens CLI: capture scans and manage the scan history."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Callable, Sequence

from . import __version__
from .api.schemas import ActionResponse
from .api.services import ScanService
from .capture.history import HistoryStore
from .capture.models import format_age
from .config import settings

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _resolve_id(history: HistoryStore, token: str) -> str | None:
    """Accept a full record id or a unique prefix of one."""

    if history.get(token) is not None:
        return token
    matches = [record.id for record in history.records if record.id.startswith(token)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        logger.error("scan id prefix %s is ambiguous", token)
    return None


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _cmd_capture(service: ScanService, args: argparse.Namespace) -> int:
    pipeline = service.pipeline
    if args.keep_line_breaks is not None:
        pipeline.keep_line_breaks = args.keep_line_breaks
    if args.auto_copy is not None:
        pipeline.auto_copy = args.auto_copy
    if args.auto_open_links is not None:
        pipeline.auto_open_links = args.auto_open_links

    response = asyncio.run(service.capture())
    _print_json(response.model_dump(mode="json"))
    return 1 if response.status == "failed" else 0


def _cmd_list(service: ScanService, args: argparse.Namespace) -> int:
    if args.json:
        _print_json(service.list_scans().model_dump(mode="json"))
        return 0

    history = service.history
    records = history.records
    if not records:
        print("No scans yet.")
        return 0
    now = datetime.now(timezone.utc)
    for record in records[: args.limit] if args.limit else records:
        marker = "*" if record.id == history.selected_id else " "
        badge = f"[{record.content_type.badge}] " if record.content_type.badge else ""
        print(
            f"{marker} {record.id[:8]}  {format_age(record.timestamp, now):>10}  "
            f"{badge}{record.source_app}: {record.title}"
        )
    return 0


def _cmd_show(service: ScanService, args: argparse.Namespace) -> int:
    history = service.history
    if args.id:
        record_id = _resolve_id(history, args.id)
        record = history.get(record_id) if record_id else None
    else:
        record = history.selected
    if record is None:
        logger.error("scan not found")
        return 1
    if args.json:
        _print_json(service.to_schema(record).model_dump(mode="json"))
    else:
        print(record.content)
    return 0


def _cmd_delete(service: ScanService, args: argparse.Namespace) -> int:
    record_id = _resolve_id(service.history, args.id)
    if record_id is None or not service.delete(record_id):
        logger.error("scan %s not found", args.id)
        return 1
    logger.info("deleted scan %s", record_id)
    return 0


def _cmd_clear(service: ScanService, args: argparse.Namespace) -> int:
    if not args.yes:
        logger.error("refusing to clear %d scans without --yes", len(service.history))
        return 1
    service.clear()
    return 0


def _record_action(action: Callable[[ScanService, str], ActionResponse | None]):
    def run(service: ScanService, args: argparse.Namespace) -> int:
        history = service.history
        record_id = _resolve_id(history, args.id) if args.id else history.selected_id
        if record_id is None:
            logger.error("scan not found")
            return 1
        result = action(service, record_id)
        if result is None:
            logger.error("scan %s not found", record_id)
            return 1
        _print_json(result.model_dump(mode="json"))
        return 0 if result.success else 1

    return run


def _cmd_speak(service: ScanService, args: argparse.Namespace) -> int:
    code = _record_action(ScanService.speak)(service, args)
    if code != 0 or not args.wait:
        return code
    try:
        while service.is_speaking():
            time.sleep(0.2)
    except KeyboardInterrupt:
        logger.info("speech interrupted")
        service.stop_speaking()
    return code


def _cmd_serve(service: ScanService, args: argparse.Namespace) -> int:
    import uvicorn

    from .api.app import create_app

    cfg = settings.get_settings()
    uvicorn.run(
        create_app(service),
        host=args.host or cfg.api_host,
        port=args.port or cfg.api_port,
        log_level="info",
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scanlens", description="Capture and recognize screen regions")
    parser.add_argument(
        "--version",
        action="version",
        version=f"scanlens {__version__}",
        help="Show version",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--history-file", help="Override the history file location")
    subparsers = parser.add_subparsers(dest="command", required=False)

    capture = subparsers.add_parser("capture", help="Select a screen region and store the scan")
    capture.add_argument(
        "--keep-line-breaks",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Keep recognized line breaks",
    )
    capture.add_argument(
        "--auto-copy",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Copy the result to the clipboard",
    )
    capture.add_argument(
        "--auto-open-links",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Open the first detected link",
    )
    capture.set_defaults(handler=_cmd_capture)

    listing = subparsers.add_parser("list", help="List stored scans, newest first")
    listing.add_argument("--limit", type=int, default=0, help="Show at most this many scans")
    listing.add_argument("--json", action="store_true", help="Emit JSON")
    listing.set_defaults(handler=_cmd_list)

    show = subparsers.add_parser("show", help="Print a scan's content (default: newest)")
    show.add_argument("id", nargs="?", help="Scan id or unique prefix")
    show.add_argument("--json", action="store_true", help="Emit JSON")
    show.set_defaults(handler=_cmd_show)

    delete = subparsers.add_parser("delete", help="Delete one scan")
    delete.add_argument("id", help="Scan id or unique prefix")
    delete.set_defaults(handler=_cmd_delete)

    clear = subparsers.add_parser("clear", help="Delete every scan")
    clear.add_argument("--yes", action="store_true", help="Confirm clearing the history")
    clear.set_defaults(handler=_cmd_clear)

    for name, action, help_text in (
        ("copy", ScanService.copy, "Copy a scan to the clipboard (default: newest)"),
        ("open", ScanService.open_scan_link, "Open the first link in a scan (default: newest)"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("id", nargs="?", help="Scan id or unique prefix")
        sub.set_defaults(handler=_record_action(action))

    speak = subparsers.add_parser("speak", help="Read a scan aloud (default: newest)")
    speak.add_argument("id", nargs="?", help="Scan id or unique prefix")
    speak.add_argument("--wait", action="store_true", help="Block until speech finishes")
    speak.set_defaults(handler=_cmd_speak)

    serve = subparsers.add_parser("serve", help="Serve the local HTTP API")
    serve.add_argument("--host", help="Bind address")
    serve.add_argument("--port", type=int, help="Bind port")
    serve.set_defaults(handler=_cmd_serve)

    return parser


def main(argv: Sequence[str] | None = None, *, service: ScanService | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1

    _configure_logging(args.verbose)
    if service is None:
        cfg = settings.get_settings()
        history = HistoryStore.load(args.history_file or cfg.history_file)
        service = ScanService(cfg, history=history)
    return args.handler(service, args)


if __name__ == "__main__":
    raise SystemExit(main())
