"""
Tests for settings, logging setup and the session store.
"""

import io
import logging
from datetime import timedelta

import pytest
from rich.console import Console

from cloudmon.api.sessions import SessionStore
from cloudmon.config import AppSettings, parse_accounts_env, setup_logging


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestParseAccountsEnv:
    """Tests for parse_accounts_env."""

    def test_empty(self):
        assert parse_accounts_env(None) == []
        assert parse_accounts_env("") == []

    def test_default_and_explicit_provider(self):
        assert parse_accounts_env(" main : tok1 , site|vercel:tok2") == [
            {"name": "main", "token": "tok1", "provider": "zeabur"},
            {"name": "site", "token": "tok2", "provider": "vercel"},
        ]

    def test_token_may_contain_colon(self):
        [account] = parse_accounts_env("hf|huggingface:hf_abc:def")
        assert account["token"] == "hf_abc:def"

    def test_malformed_entries_skipped(self):
        assert parse_accounts_env("no-token,:tok,name:,ok:tok") == [
            {"name": "ok", "token": "tok", "provider": "zeabur"},
        ]

    def test_custom_default_provider(self):
        [account] = parse_accounts_env("bot:tok", default_provider="railway")
        assert account["provider"] == "railway"


class TestAppSettings:
    """Tests for AppSettings."""

    def test_defaults(self, settings):
        assert settings.http_timeout_seconds == 10.0
        assert settings.default_provider == "zeabur"
        assert settings.session_days == 10
        assert settings.env_accounts() == []

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("CLOUDMON_ACCOUNTS", "main:tok1")
        monkeypatch.setenv("CLOUDMON_HTTP_TIMEOUT_SECONDS", "2.5")
        settings = AppSettings(_env_file=None)
        assert settings.http_timeout_seconds == 2.5
        assert settings.env_accounts() == [{"name": "main", "token": "tok1", "provider": "zeabur"}]

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            AppSettings(_env_file=None, http_timeout_seconds=0)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_level_and_httpx_quieted(self):
        setup_logging("debug", console=Console(file=io.StringIO()))
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING


class TestSessionStore:
    """Tests for SessionStore."""

    def test_issue_and_validate(self):
        store = SessionStore()
        token = store.issue()
        assert token.startswith("session_")
        assert store.validate(token) is True
        assert store.validate("session_unknown") is False
        assert store.validate(None) is False

    def test_tokens_are_unique(self):
        store = SessionStore()
        assert len({store.issue() for _ in range(50)}) == 50

    def test_expiry(self):
        clock = FakeClock()
        store = SessionStore(lifetime=timedelta(days=10), clock=clock)
        token = store.issue()

        clock.now += timedelta(days=9).total_seconds()
        assert store.validate(token) is True

        clock.now += timedelta(days=1).total_seconds()
        assert store.validate(token) is False
        assert store.sweep() == 0

    def test_sweep(self):
        clock = FakeClock()
        store = SessionStore(lifetime=timedelta(hours=1), clock=clock)
        old = store.issue()
        clock.now += 3000
        fresh = store.issue()
        clock.now += 700

        assert store.sweep() == 1
        assert store.validate(old) is False
        assert store.validate(fresh) is True
