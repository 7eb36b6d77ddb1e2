"""tlesync CLI entry points.
This module exposes commands for ingest, YAML run specs, store reads,
and checkpoint state. It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import TleSyncConfig
from core.constants import (
    DEFAULT_CONCURRENCY_LIMIT,
    DEFAULT_PAGE_SIZE,
    DEFAULT_UNIT_DIVISOR,
    SUPPORTED_MERGE_POLICIES,
)
from core.errors import PersistenceError, TleSyncConfigError
from core.run_spec import load_run_spec
from core.types import IngestOptions, IngestSummary
from store.satellite_sdk import TleSyncClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="tlesync", description="TLE catalog ingest CLI")
    parser.add_argument("--data-root", help="Override TLESYNC_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_ingest_command(subparsers)
    run_spec_parser = subparsers.add_parser(
        "run-spec", help="Run ingest with options from a YAML run spec"
    )
    run_spec_parser.add_argument("spec_file", help="Path to YAML run-spec file")
    subparsers.add_parser("show", help="Print the persisted satellite store")
    subparsers.add_parser("checkpoint", help="Print the last completed catalog page")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the tlesync CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "run-spec":
        return _run_run_spec_command(args)
    client = _build_client(args.data_root)
    if args.command == "ingest":
        return _run_ingest_command(client, args)
    if args.command == "show":
        return _run_show_command(client)
    if args.command == "checkpoint":
        return _run_checkpoint_command(client)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(data_root: str | None) -> TleSyncClient:
    """Build SDK client with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = TleSyncConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return TleSyncClient(config)


def _run_ingest_command(client: TleSyncClient, args: argparse.Namespace) -> int:
    """Handle ingest command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code, 1 when the run failed.
    """
    options = IngestOptions(
        page_size=args.page_size,
        concurrency_limit=args.concurrency,
        unit_divisor=args.unit_divisor,
        merge_policy=args.merge_policy,
        reset=args.reset,
    )
    return _ingest_and_report(client, options)


def _run_run_spec_command(args: argparse.Namespace) -> int:
    """Handle run-spec command.

    ``--data-root`` wins over the run spec's ``data_root``, which wins over
    ``TLESYNC_DATA_ROOT``.
    """
    try:
        run_spec = load_run_spec(args.spec_file)
    except TleSyncConfigError as error:
        print(f"error: {error}")
        return 2
    data_root = args.data_root or (str(run_spec.data_root) if run_spec.data_root else None)
    return _ingest_and_report(_build_client(data_root), run_spec.options)


def _ingest_and_report(client: TleSyncClient, options: IngestOptions) -> int:
    try:
        summary = client.ingest(options)
    except TleSyncConfigError as error:
        print(f"error: {error}")
        return 2
    print(_format_summary(summary))
    return 0 if summary.success else 1


def _format_summary(summary: IngestSummary) -> str:
    return (
        f"pages {summary.start_page}-{summary.total_pages}: "
        f"{summary.pages_fetched} fetched, {summary.pages_failed} failed, "
        f"{summary.records_added} records added, {summary.record_count} stored"
    )


def _run_show_command(client: TleSyncClient) -> int:
    """Print the raw satellite store."""
    try:
        print(client.read_store(), end="")
    except PersistenceError as error:
        print(f"error: {error}")
        return 1
    return 0


def _run_checkpoint_command(client: TleSyncClient) -> int:
    """Print the last completed catalog page."""
    try:
        print(client.last_page())
    except PersistenceError as error:
        print(f"error: {error}")
        return 1
    return 0


def _add_ingest_command(subparsers: Any) -> None:
    """Register ingest subcommand."""
    parser = subparsers.add_parser("ingest", help="Fetch the catalog and rewrite the store")
    parser.add_argument(
        "--page-size", type=int, default=DEFAULT_PAGE_SIZE, help="Catalog records per page"
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=DEFAULT_CONCURRENCY_LIMIT,
        help="Maximum page requests in flight",
    )
    parser.add_argument(
        "--unit-divisor",
        type=float,
        default=DEFAULT_UNIT_DIVISOR,
        help="Divisor applied to Cartesian kilometers",
    )
    parser.add_argument(
        "--merge-policy",
        choices=SUPPORTED_MERGE_POLICIES,
        help="Duplicate handling; defaults to TLESYNC_MERGE_POLICY",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Ignore the saved checkpoint and rebuild the store from page one",
    )
