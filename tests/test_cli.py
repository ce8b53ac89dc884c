"""Tests for the command line entry point."""

import sys
from unittest.mock import MagicMock

import pytest

from herald import cli
from herald.core.config import settings
from herald.workers.celery_app import QUEUE_CRITICAL, QUEUE_DEFAULT


class TestWorkerCommand:
    def test_concurrency_follows_queue_weights(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "worker_concurrency", 6)

        assert cli.worker_concurrency(None) == 6
        assert cli.worker_concurrency(QUEUE_CRITICAL) == 4
        assert cli.worker_concurrency(QUEUE_DEFAULT) == 2

    def test_small_pool_keeps_one_slot(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "worker_concurrency", 1)
        assert cli.worker_concurrency(QUEUE_DEFAULT) == 1

    def test_all_queues_by_default(self) -> None:
        cmd = cli.worker_command()

        assert cmd[:3] == [sys.executable, "-m", "celery"]
        assert cmd[cmd.index("-Q") + 1] == f"{QUEUE_CRITICAL},{QUEUE_DEFAULT}"

    def test_single_queue(self) -> None:
        cmd = cli.worker_command(QUEUE_DEFAULT)
        assert cmd[cmd.index("-Q") + 1] == QUEUE_DEFAULT


class TestApiCommand:
    def test_listen_address(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "http_server_address", "127.0.0.1:8080")

        cmd = cli.api_command()

        assert "herald.main:app" in cmd
        assert cmd[cmd.index("--host") + 1] == "127.0.0.1"
        assert cmd[cmd.index("--port") + 1] == "8080"


class TestSupervise:
    def test_clean_exit(self) -> None:
        assert cli.supervise([[sys.executable, "-c", "pass"]]) == 0

    def test_first_failure_wins(self) -> None:
        code = cli.supervise(
            [
                [sys.executable, "-c", "raise SystemExit(3)"],
                [sys.executable, "-c", "import time; time.sleep(30)"],
            ]
        )
        assert code == 3


class TestMain:
    def test_migrate(self, monkeypatch: pytest.MonkeyPatch) -> None:
        migrate = MagicMock()
        monkeypatch.setattr(cli, "migrate", migrate)
        monkeypatch.setattr(cli, "setup_logging", MagicMock())

        assert cli.main(["migrate"]) == 0
        migrate.assert_called_once_with()

    def test_worker(self, monkeypatch: pytest.MonkeyPatch) -> None:
        supervise = MagicMock(return_value=0)
        monkeypatch.setattr(cli, "supervise", supervise)
        monkeypatch.setattr(cli, "setup_logging", MagicMock())

        assert cli.main(["worker", "--queue", QUEUE_CRITICAL]) == 0
        [commands] = supervise.call_args.args
        assert commands == [cli.worker_command(QUEUE_CRITICAL)]

    def test_unknown_queue(self) -> None:
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["worker", "--queue", "bulk"])

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])
