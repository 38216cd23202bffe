"""
Command line interface for arewethere.

Usage:
    arewethere status              # Poll once and print the summary
    arewethere watch --interval 30 # Redraw the summary every 30 seconds
    arewethere history             # Show retained observations and the estimate
    arewethere reset               # Forget retained observations
    arewethere open                # Open the dashboard in a browser
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
import webbrowser
from collections.abc import AsyncIterator, Sequence
from dataclasses import replace

from arewethere import __version__
from arewethere.client import StatusClient
from arewethere.config import DEFAULT_DATABASE_PATH, DEFAULT_STATUS_URL, MonitorConfig
from arewethere.exceptions import StoreError
from arewethere.history.tracker import HistoryTracker
from arewethere.poller import MonitorSnapshot, StatusPoller
from arewethere.rendering import render_history, render_snapshot
from arewethere.stores.sqlite import SQLiteKeyValueStore

logger = logging.getLogger(__name__)

CLEAR_SCREEN = "\033[2J\033[H"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arewethere",
        description="Track a long-running migration and estimate when it will finish.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--url",
        default=DEFAULT_STATUS_URL,
        help="Status endpoint to poll (default: %(default)s)",
    )
    parser.add_argument(
        "--db",
        default=str(DEFAULT_DATABASE_PATH),
        help="SQLite file holding the progress history (default: %(default)s)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="HTTP timeout in seconds (default: %(default)s)",
    )
    parser.add_argument(
        "--client-time",
        action="store_true",
        help="Timestamp observations with the local clock instead of the server's last_updated",
    )
    parser.add_argument("--no-tracing", action="store_true", help="Disable OpenTelemetry spans")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Poll once and print the summary")

    watch = subparsers.add_parser("watch", help="Poll periodically and redraw the summary")
    watch.add_argument(
        "--interval",
        type=float,
        default=60.0,
        help="Seconds between polls (default: %(default)s)",
    )
    watch.add_argument(
        "--until-complete",
        action="store_true",
        help="Exit once the migration reports 100%%",
    )
    watch.add_argument("--no-clear", action="store_true", help="Do not clear the screen")

    subparsers.add_parser("history", help="Show retained observations and the estimate")
    subparsers.add_parser("reset", help="Discard retained observations")
    subparsers.add_parser("open", help="Open the migration dashboard in a browser")

    return parser


def config_from_args(args: argparse.Namespace) -> MonitorConfig:
    config = MonitorConfig(
        status_url=args.url,
        request_timeout=args.timeout,
        database_path=args.db,
        timestamp_source="client" if args.client_time else "server",
        enable_tracing=not args.no_tracing,
    )
    if args.command == "watch":
        config = replace(
            config,
            refresh_interval=args.interval,
            stop_when_complete=args.until_complete,
        )
    return config


@contextlib.asynccontextmanager
async def open_tracker(config: MonitorConfig) -> AsyncIterator[HistoryTracker]:
    """Open the history database and load the retained history."""
    async with SQLiteKeyValueStore(
        config.database_path, enable_tracing=config.enable_tracing
    ) as store:
        tracker = HistoryTracker(
            store,
            config.history_key,
            enable_tracing=config.enable_tracing,
        )
        await tracker.load()
        yield tracker


@contextlib.asynccontextmanager
async def open_poller(config: MonitorConfig) -> AsyncIterator[StatusPoller]:
    """Wire store, tracker, client and poller together for one CLI run."""
    async with (
        open_tracker(config) as tracker,
        StatusClient(
            config.status_url,
            timeout=config.request_timeout,
            enable_tracing=config.enable_tracing,
        ) as client,
    ):
        poller = StatusPoller(client, tracker, config)
        try:
            yield poller
        finally:
            await poller.close()


async def run_status(config: MonitorConfig) -> int:
    async with open_poller(config) as poller:
        snapshot = await poller.refresh()
    print(render_snapshot(snapshot))
    return 0 if snapshot.status is not None else 1


def _listen_for_enter(poller: StatusPoller) -> bool:
    """Let the user press Enter to refresh immediately (POSIX terminals only)."""
    if not sys.stdin.isatty():
        return False

    def on_input() -> None:
        sys.stdin.readline()
        poller.request_refresh()

    try:
        asyncio.get_running_loop().add_reader(sys.stdin, on_input)
    except (NotImplementedError, RuntimeError):
        return False
    return True


def _draw(snapshot: MonitorSnapshot, clear: bool, interactive: bool) -> None:
    if clear:
        sys.stdout.write(CLEAR_SCREEN)
    print(render_snapshot(snapshot))
    hint = "Press Enter to refresh, Ctrl+C to exit" if interactive else "Press Ctrl+C to exit"
    print(f"\n{hint}", flush=True)


async def run_watch(config: MonitorConfig, clear: bool = True) -> int:
    async with open_poller(config) as poller:
        interactive = _listen_for_enter(poller)
        clear = clear and sys.stdout.isatty()
        try:
            async for snapshot in poller.watch():
                _draw(snapshot, clear, interactive)
        finally:
            if interactive:
                asyncio.get_running_loop().remove_reader(sys.stdin)
    return 0


async def run_history(config: MonitorConfig) -> int:
    async with open_tracker(config) as tracker:
        print(render_history(MonitorSnapshot(history=tracker.history)))
    return 0


async def run_reset(config: MonitorConfig) -> int:
    async with open_tracker(config) as tracker:
        discarded = len(tracker.history)
        await tracker.reset()
    print(f"Discarded {discarded} observation(s).")
    return 0


def run_open(config: MonitorConfig) -> int:
    if not webbrowser.open(config.dashboard_url):
        print(config.dashboard_url)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    try:
        if args.command == "status":
            return asyncio.run(run_status(config))
        if args.command == "watch":
            return asyncio.run(run_watch(config, clear=not args.no_clear))
        if args.command == "history":
            return asyncio.run(run_history(config))
        if args.command == "reset":
            return asyncio.run(run_reset(config))
        return run_open(config)
    except KeyboardInterrupt:
        print("\nMonitor stopped by user")
        return 0
    except StoreError as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
