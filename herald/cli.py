"""Command line entry point: migrations, API server, task worker, or all of them."""

import argparse
import asyncio
import logging
import os
import signal
import subprocess
import sys
import time
from collections.abc import Sequence
from pathlib import Path
from types import FrameType

from alembic import command
from alembic.config import Config

from herald.core.config import settings
from herald.core.database import engine, ping
from herald.core.logging_config import setup_logging
from herald.workers.celery_app import QUEUE_WEIGHTS

logger = logging.getLogger(__name__)

CELERY_APP = "herald.workers.celery_app:celery_app"
ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def migrate() -> None:
    """Apply all pending migrations."""
    cfg = Config(str(ALEMBIC_INI))
    cfg.set_main_option("script_location", settings.migration_url)
    command.upgrade(cfg, "head")
    logger.info("migrations applied")


async def _ping_database(timeout: float) -> None:
    try:
        await ping(engine, timeout=timeout)
    finally:
        await engine.dispose()


def api_command() -> list[str]:
    host, _, port = settings.http_server_address.rpartition(":")
    return [
        sys.executable,
        "-m",
        "uvicorn",
        "herald.main:app",
        "--host",
        host or "0.0.0.0",
        "--port",
        port,
    ]


def worker_concurrency(queue: str | None) -> int:
    """Worker slots for one queue, proportional to its weight."""
    if queue is None:
        return settings.worker_concurrency
    share = QUEUE_WEIGHTS[queue] / sum(QUEUE_WEIGHTS.values())
    return max(1, round(settings.worker_concurrency * share))


def worker_command(queue: str | None = None) -> list[str]:
    queues = queue or ",".join(QUEUE_WEIGHTS)
    return [
        sys.executable,
        "-m",
        "celery",
        "-A",
        CELERY_APP,
        "worker",
        "-Q",
        queues,
        "--concurrency",
        str(worker_concurrency(queue)),
        "--loglevel",
        "DEBUG" if settings.debug else "INFO",
    ]


# ---------------------------------------------------------------------------
# Process supervision
# ---------------------------------------------------------------------------


def _popen(cmd: Sequence[str]) -> subprocess.Popen[bytes]:
    # Own process group so the whole tree (uvicorn, celery pool) gets the signal
    return subprocess.Popen(list(cmd), start_new_session=True)


def _terminate(proc: subprocess.Popen[bytes], timeout: float = 30.0) -> None:
    if proc.poll() is not None:
        return
    try:
        os.killpg(proc.pid, signal.SIGTERM)
    except ProcessLookupError:
        return
    try:
        proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.warning("process did not stop in time, killing", extra={"pid": proc.pid})
        os.killpg(proc.pid, signal.SIGKILL)
        proc.wait()


def supervise(commands: Sequence[Sequence[str]]) -> int:
    """Run the commands side by side until one exits or we are signalled.

    SIGINT/SIGTERM stop every child gracefully (SIGTERM to each process group: the API
    drains in-flight requests, the worker finishes running tasks). Returns the first
    non-zero exit code, or 0.
    """
    procs = [_popen(cmd) for cmd in commands]
    stopping = False

    def handle_signal(signum: int, _frame: FrameType | None) -> None:
        nonlocal stopping
        logger.info("shutdown signal received", extra={"signal": signal.Signals(signum).name})
        stopping = True

    previous = {sig: signal.signal(sig, handle_signal) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        while not stopping and all(proc.poll() is None for proc in procs):
            time.sleep(0.5)
    finally:
        for proc in procs:
            _terminate(proc)
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    codes = [proc.returncode for proc in procs]
    logger.info("all processes stopped", extra={"exit_codes": codes})
    if stopping:
        return 0
    return next((code for code in codes if code), 0)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="herald", description="Herald notification service")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("migrate", help="Apply database migrations")
    sub.add_parser("api", help="Run the HTTP API server")

    worker = sub.add_parser("worker", help="Run a task worker")
    worker.add_argument(
        "--queue",
        choices=sorted(QUEUE_WEIGHTS),
        help="Consume a single queue (default: all queues)",
    )

    run = sub.add_parser("run", help="Migrate, then run the API server and a worker")
    run.add_argument(
        "--ping-timeout",
        type=float,
        default=30.0,
        help="Seconds to wait for the database before giving up",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(debug=settings.debug, service="cli")

    if args.command == "migrate":
        migrate()
        return 0
    if args.command == "api":
        return supervise([api_command()])
    if args.command == "worker":
        return supervise([worker_command(args.queue)])

    asyncio.run(_ping_database(args.ping_timeout))
    migrate()
    return supervise([api_command(), worker_command()])


if __name__ == "__main__":
    sys.exit(main())
