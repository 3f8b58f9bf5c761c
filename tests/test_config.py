"""Tests for Settings, the runtime constructors and bootstrap."""

import pytest
import structlog
from pydantic import ValidationError

import chronoset.bootstrap as bootstrap
from chronoset import Chronoset, SortedRecord, init_chronoset
from chronoset.config import Settings
from chronoset.log import configure_logging
from chronoset.persistence.store import SqlOrderedStore
from chronoset.persistence.stream import SqlEventStream


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.backend == "sql"
        assert settings.default_limit == 100
        assert settings.stream_maxlen is None
        assert settings.log_json is None

    def test_values_from_environ(self):
        settings = Settings.from_env(
            {
                "CHRONOSET_BACKEND": "redis",
                "CHRONOSET_REDIS_URL": "redis://cache:6379/1",
                "CHRONOSET_DEFAULT_LIMIT": "25",
                "CHRONOSET_STREAM_MAXLEN": "1000",
                "CHRONOSET_SOCKET_TIMEOUT": "2.5",
                "CHRONOSET_LOG_JSON": "false",
                "UNRELATED": "x",
            }
        )
        assert settings.backend == "redis"
        assert settings.redis_url == "redis://cache:6379/1"
        assert settings.default_limit == 25
        assert settings.stream_maxlen == 1000
        assert settings.socket_timeout == 2.5
        assert settings.log_json is False

    def test_empty_values_keep_defaults(self):
        assert Settings.from_env({"CHRONOSET_DEFAULT_LIMIT": ""}).default_limit == 100

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("CHRONOSET_DATABASE_URL", "sqlite:///other.db")
        assert Settings.from_env(dotenv=False).database_url == "sqlite:///other.db"

    @pytest.mark.parametrize(
        "env",
        [
            {"CHRONOSET_BACKEND": "mongo"},
            {"CHRONOSET_DEFAULT_LIMIT": "0"},
            {"CHRONOSET_POOL_TIMEOUT": "soon"},
        ],
    )
    def test_invalid_values(self, env):
        with pytest.raises(ValidationError):
            Settings.from_env(env)


class TestRuntime:
    def test_from_settings_sql(self):
        db = Chronoset.from_settings(Settings(database_url="sqlite://", default_limit=7))
        assert isinstance(db.store, SqlOrderedStore)
        assert isinstance(db.stream, SqlEventStream)
        assert db.default_limit == 7
        SortedRecord(db, scope="S", start=1).create()
        assert SortedRecord.count(db, scope="S") == 1

    def test_from_settings_redis(self, monkeypatch):
        calls = {}

        def fake_connect(url, *, socket_timeout=None):
            calls["url"] = url
            calls["socket_timeout"] = socket_timeout
            return object()

        monkeypatch.setattr("chronoset.persistence.redis_backend.connect", fake_connect)
        db = Chronoset.from_settings(
            Settings(backend="redis", redis_url="redis://r:1/0", socket_timeout=3)
        )
        assert calls == {"url": "redis://r:1/0", "socket_timeout": 3}
        assert type(db.store).__name__ == "RedisOrderedStore"

    def test_clock_helpers(self):
        db = Chronoset(None, None, clock=lambda: 1_500_000_000_999_999_999)
        assert db.now_ns() == 1_500_000_000_999_999_999
        assert db.now_s() == 1_500_000_000


class TestBootstrap:
    def test_init_configures_logging_and_returns_handle(self, monkeypatch):
        seen = {}
        monkeypatch.setattr(
            bootstrap, "configure_logging", lambda **kw: seen.update(kw)
        )
        db = init_chronoset(Settings(database_url="sqlite://", log_level="DEBUG", log_json=True))
        assert seen == {"level": "DEBUG", "json_format": True}
        assert isinstance(db, Chronoset)


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="unknown log level"):
            configure_logging(level="LOUD")

    def test_json_output(self, capsys):
        configure_logging(level="INFO", json_format=True, service="tests")
        structlog.get_logger("probe").info("probe_event", answer=42)
        out = capsys.readouterr().out
        assert '"event": "probe_event"' in out
        assert '"service": "tests"' in out

    def test_level_filters(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        structlog.get_logger("probe").info("hidden")
        assert "hidden" not in capsys.readouterr().out
