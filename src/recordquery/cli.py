"""CLI entrypoint for recordquery."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from recordquery.api.records_api import get_record, get_related_records
from recordquery.client.restlet import RestletClient
from recordquery.config.loader import (
    DEFAULT_CONFIG_PATH,
    get_endpoint_settings,
    get_engine_settings,
    get_storage_settings,
    load_config,
)
from recordquery.database.record_repo import load_fixture_file, seed_records
from recordquery.database.sqlite_client import session_context
from recordquery.store.sqlite_store import SqliteRecordStore
from recordquery.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "AUDIT", "WARNING", "ERROR", "CRITICAL")


def _load_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Explicit --config must exist; the default path is optional."""
    path = args.config
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return {}
        path = DEFAULT_CONFIG_PATH
    return load_config(path)


def _read_request(value: str) -> Any:
    """Accept a path to a JSON file, or inline JSON."""
    text = value
    if not value.lstrip().startswith(("{", "[")):
        candidate = Path(value)
        if candidate.exists():
            text = candidate.read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"--request is neither a file nor valid JSON: {e.msg}") from e


def _emit(payload: Dict[str, Any]) -> int:
    print(json.dumps(payload, indent=2, default=str))
    return 0 if payload.get("status") == 200 else 1


def _sqlite_path(args: argparse.Namespace, config: Dict[str, Any]) -> str:
    return args.db or get_storage_settings(config)["sqlite_path"]


def cmd_seed(args: argparse.Namespace) -> int:
    """Load fixture records into the local store."""
    config = _load_config(args)
    entries = load_fixture_file(Path(args.fixtures))
    with session_context(_sqlite_path(args, config)) as session:
        rows = seed_records(session, entries)
    print(f"Seeded {len(rows)} record(s) from {args.fixtures}")
    return 0


def _run_local(args: argparse.Namespace, handler) -> int:
    config = _load_config(args)
    settings = get_engine_settings(config)
    request = _read_request(args.request)
    with session_context(_sqlite_path(args, config)) as session:
        envelope = handler(request, SqliteRecordStore(session), settings)
    return _emit(envelope.to_wire())


def cmd_get(args: argparse.Namespace) -> int:
    return _run_local(args, get_record)


def cmd_related(args: argparse.Namespace) -> int:
    return _run_local(args, get_related_records)


def cmd_remote(args: argparse.Namespace) -> int:
    """Send a request to the deployed endpoints instead of the local store."""
    config = _load_config(args)
    endpoint_settings = get_endpoint_settings(config)
    if args.url:
        endpoint_settings["restlet_url"] = args.url
    if not endpoint_settings["restlet_url"]:
        logger.error("No endpoint URL: set endpoints.restlet_url in config or pass --url")
        return 1
    client = RestletClient.from_settings(endpoint_settings, access_token=args.token)
    request = _read_request(args.request)
    if args.remote_subcommand == "get":
        payload = client.get_record(request)
    else:
        payload = client.get_related_records(request)
    return _emit(payload)


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Config file (default: {DEFAULT_CONFIG_PATH} if present)",
    )


def _add_db(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--db", type=str, help="SQLite path (overrides storage.sqlite_path)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recordquery",
        description="Resolve, project and traverse records",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Process log level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # seed command
    seed_parser = subparsers.add_parser("seed", help="Load fixture records into the local store")
    seed_parser.add_argument("--fixtures", type=str, required=True, help="YAML/JSON fixture file")
    _add_common(seed_parser)
    _add_db(seed_parser)
    seed_parser.set_defaults(func=cmd_seed)

    # get command
    get_parser = subparsers.add_parser("get", help="Run a single-record request against the local store")
    get_parser.add_argument("--request", type=str, required=True, help="Request JSON or path to a JSON file")
    _add_common(get_parser)
    _add_db(get_parser)
    get_parser.set_defaults(func=cmd_get)

    # related command
    related_parser = subparsers.add_parser("related", help="Run a related-record request against the local store")
    related_parser.add_argument("--request", type=str, required=True, help="Request JSON or path to a JSON file")
    _add_common(related_parser)
    _add_db(related_parser)
    related_parser.set_defaults(func=cmd_related)

    # remote commands
    remote_parser = subparsers.add_parser("remote", help="Send a request to the deployed endpoints")
    remote_subparsers = remote_parser.add_subparsers(
        dest="remote_subcommand",
        help="Remote subcommands",
        required=True,
    )
    for name, help_text in (("get", "Single-record request"), ("related", "Related-record request")):
        sub = remote_subparsers.add_parser(name, help=help_text)
        sub.add_argument("--request", type=str, required=True, help="Request JSON or path to a JSON file")
        sub.add_argument("--token", type=str, required=True, help="Bearer access token")
        sub.add_argument("--url", type=str, help="Endpoint URL (overrides endpoints.restlet_url)")
        _add_common(sub)
        sub.set_defaults(func=cmd_remote)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    configure_logging(args.log_level)
    try:
        code = args.func(args)
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
