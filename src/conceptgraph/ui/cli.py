from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from conceptgraph.adapters.payload import encode_aggregate, encode_changes
from conceptgraph.app import (
    build_concept_service,
    new_transaction_id,
    start_graph_store,
    stop_graph_store,
    write_payload,
)
from conceptgraph.config import ConfigurationError, configure_logging
from conceptgraph.domain.errors import ConceptGraphError, ErrorStatus

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from sqlalchemy.engine import Engine

    from conceptgraph.domain.concordance import ConceptService

log = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_INVALID_REQUEST = 2
EXIT_CONFLICT = 3
EXIT_NOT_FOUND = 4

_EXIT_CODES: dict[ErrorStatus, int] = {
    ErrorStatus.BAD_REQUEST: EXIT_INVALID_REQUEST,
    ErrorStatus.CONFLICT: EXIT_CONFLICT,
}


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Write and read canonical concepts")
    parser.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy URI of the graph store (defaults to DATABASE_URI or a local file)",
    )
    parser.add_argument(
        "--require-database-uri",
        action="store_true",
        help="Fail instead of falling back to the local SQLite store when DATABASE_URI is unset",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    write = subparsers.add_parser("write", help="Write an aggregate concept payload")
    write.add_argument(
        "payload",
        type=str,
        help="Path to a JSON payload (.json or gzip-compressed .json.gz), '-' for stdin",
    )
    write.add_argument(
        "--transaction-id",
        type=str,
        help="Transaction id threaded through logs and events (generated when omitted)",
    )

    read = subparsers.add_parser("read", help="Read an aggregate concept by canonical id")
    read.add_argument("pref_uuid", type=str, help="Canonical id (prefUUID) to read")
    read.add_argument("--transaction-id", type=str, help="Transaction id for log lines")

    subparsers.add_parser("check", help="Check the graph store can be reached")
    subparsers.add_parser("init", help="Create the graph store tables and indexes")

    return parser.parse_args(list(argv))


def _read_payload(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise ValueError(f"Cannot read payload {path}: {exc}") from exc


def _run_command(args: argparse.Namespace, service: ConceptService) -> int:
    if args.command == "write":
        changes = write_payload(
            service,
            _read_payload(args.payload),
            transaction_id=args.transaction_id,
        )
        sys.stdout.write(encode_changes(changes) + "\n")
        return 0
    if args.command == "read":
        transaction_id = args.transaction_id or new_transaction_id()
        aggregate = service.read(args.pref_uuid, transaction_id)
        if aggregate is None:
            log.warning("transaction_id=%s uuid=%s not found", transaction_id, args.pref_uuid)
            return EXIT_NOT_FOUND
        sys.stdout.write(encode_aggregate(aggregate) + "\n")
        return 0
    if args.command == "check":
        service.check()
        log.info("Graph store is reachable")
        return 0
    if args.command == "init":
        service.initialise()
        return 0
    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    """Main application entry point, returning the process exit status."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    engine: Engine | None = None
    try:
        engine = start_graph_store(
            database_uri=parsed_args.database_uri,
            require_database_uri=parsed_args.require_database_uri,
        )
        return _run_command(parsed_args, build_concept_service(engine))
    except ValueError:
        log.exception("CLI validation error")
        return EXIT_INVALID_REQUEST
    except ConfigurationError:
        log.exception("Configuration error")
        return EXIT_FAILURE
    except ConceptGraphError as exc:
        log.error("%s failed (%s): %s", parsed_args.command, exc.status, exc)  # noqa: TRY400
        return _EXIT_CODES.get(exc.status, EXIT_FAILURE)
    except Exception:
        log.exception("Fatal error")
        return EXIT_FAILURE
    finally:
        if engine is not None:
            stop_graph_store(engine)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    sys.exit(main())


if __name__ == "__main__":
    run()
