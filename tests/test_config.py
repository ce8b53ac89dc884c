"""Tests for settings parsing."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from herald.core.config import Settings, parse_duration

KEY = "12345678901234567890123456789012"


def make_settings(**overrides) -> Settings:
    overrides.setdefault("DATABASE_URL", None)
    return Settings(_env_file=None, token_symmetric_key=KEY, **overrides)


class TestParseDuration:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("15m", timedelta(minutes=15)),
            ("24h", timedelta(hours=24)),
            ("1h30m", timedelta(hours=1, minutes=30)),
            ("10s", timedelta(seconds=10)),
            ("250ms", timedelta(milliseconds=250)),
        ],
    )
    def test_go_style(self, raw: str, expected: timedelta) -> None:
        assert parse_duration(raw) == expected

    @pytest.mark.parametrize("raw", [30, "30", "PT5M", timedelta(seconds=1)])
    def test_other_values_pass_through(self, raw) -> None:
        assert parse_duration(raw) == raw

    def test_settings_accept_go_style(self) -> None:
        config = make_settings(access_token_duration="5m", task_process_in="0s")
        assert config.access_token_duration == timedelta(minutes=5)
        assert config.task_process_in == timedelta(0)


class TestSymmetricKey:
    @pytest.mark.parametrize("key", ["short", KEY + "1"])
    def test_wrong_length_rejected(self, key: str) -> None:
        with pytest.raises(ValidationError, match="exactly 32 characters"):
            Settings(_env_file=None, token_symmetric_key=key)


class TestDatabaseUrl:
    def test_assembled_from_parts(self) -> None:
        config = make_settings(
            db_user="herald",
            db_password="pw",
            db_host="db",
            db_port=5433,
            db_name="notify",
            disable_tls=False,
        )
        assert config.database_url == "postgresql+asyncpg://herald:pw@db:5433/notify?ssl=require"

    def test_tls_disabled(self) -> None:
        assert make_settings(disable_tls=True).database_url.endswith("?ssl=disable")

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("postgres://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
            ("postgresql://u:p@h/db?sslmode=require", "postgresql+asyncpg://u:p@h/db?ssl=require"),
            ("sqlite+aiosqlite:///herald.db", "sqlite+aiosqlite:///herald.db"),
        ],
    )
    def test_override(self, raw: str, expected: str) -> None:
        assert make_settings(DATABASE_URL=raw).database_url == expected


class TestRedisUrl:
    def test_host_port(self) -> None:
        assert make_settings(redis_host="cache:6380").redis_url == "redis://cache:6380/0"

    def test_full_url(self) -> None:
        url = "rediss://user:pw@cache:6380/2"
        assert make_settings(redis_host=url).redis_url == url
