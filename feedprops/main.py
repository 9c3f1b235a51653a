"""Command-line entrypoint for feedprops.

Reads and writes "payload-in-content" feed entries as JSON property maps:
1) load configuration
2) build the Atom transport and entry client
3) run the requested command and print JSON to stdout
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence

from dotenv import load_dotenv

from .client import FeedEntryClient
from .converters import convert_xml_to_properties
from .errors import FeedPropsError, ValidationError
from .transport import AtomFeedTransport
from .utils.config_loader import load_client_config
from .utils.logging import configure_logging, get_logger

DEFAULT_CONFIG = "config/feedprops.yaml"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Read and write feed entries as JSON property maps"
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to client configuration file (YAML, default {DEFAULT_CONFIG} if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default from LOG_LEVEL)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    get_p = sub.add_parser("get", help="Fetch one entry and print it as JSON")
    get_p.add_argument("url", help="Full entry URL")

    list_p = sub.add_parser("list", help="Fetch a feed and print its entries as a JSON array")
    list_p.add_argument("url", help="Feed URL, may include an Atom query")

    for name, help_text in (("insert", "Insert entries"), ("update", "Update entries")):
        write_p = sub.add_parser(name, help=f"{help_text} read from a JSON file")
        write_p.add_argument("file", help="JSON object or array of objects; '-' for stdin")
        write_p.add_argument(
            "--base-url",
            default=None,
            help="Feed URL without the entry name (default: transport.base_url from config)",
        )

    delete_p = sub.add_parser("delete", help="Delete one entry by full URL")
    delete_p.add_argument("url", help="Full entry URL")

    convert_p = sub.add_parser("convert", help="Convert an XML payload file to JSON without network access")
    convert_p.add_argument("file", help="XML file; '-' for stdin")

    return parser.parse_args(argv)


def _read_input(path: str, *, binary: bool = False) -> Any:
    if path == "-":
        return sys.stdin.buffer.read() if binary else sys.stdin.read()
    p = Path(path)
    return p.read_bytes() if binary else p.read_text(encoding="utf-8")


def _load_maps(path: str) -> List[dict]:
    try:
        data = json.loads(_read_input(path))
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid JSON in {path}: {exc}") from exc
    maps = data if isinstance(data, list) else [data]
    if not all(isinstance(m, dict) for m in maps):
        raise ValidationError(f"{path} must hold a JSON object or an array of objects")
    return maps


def _print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, ensure_ascii=False))


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    logger = get_logger("feedprops.cli")

    try:
        if args.command == "convert":
            _print_json(convert_xml_to_properties(_read_input(args.file, binary=True)))
            return 0

        config_path = args.config or DEFAULT_CONFIG
        logger.info("Loading client configuration from %s", config_path)
        config = load_client_config(config_path, required=args.config is not None)
        client = FeedEntryClient(AtomFeedTransport(config))

        if args.command in ("insert", "update"):
            base_url = args.base_url or config.base_url
            if not base_url:
                raise ValidationError("No base URL: pass --base-url or set transport.base_url")
            maps = _load_maps(args.file)
            if args.command == "insert":
                _print_json(client.insert_entries(base_url, maps))
            else:
                _print_json(client.update_entries(base_url, maps))
        elif args.command == "get":
            _print_json(client.get_entry(args.url))
        elif args.command == "list":
            _print_json(client.get_entries(args.url))
        elif args.command == "delete":
            client.delete_entry(args.url)
        return 0
    except (FeedPropsError, OSError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
