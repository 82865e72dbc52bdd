"""Unit tests for common/config.py"""
import io
import logging

import pytest

from common import config as config_module
from common.config import (
    DEFAULTS,
    configure_logger,
    get_config,
    load_config,
    parse_log_level,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("TRIVIA_DATABASE_URL", raising=False)
    monkeypatch.delenv("TRIVIA_NATS_URL", raising=False)


class TestLoadConfig:
    """Tests for config file loading"""

    def test_json(self, write_config):
        path = write_config({"nats_url": "nats://bus:4222", "trivia": {"cooldown": 10}})

        conf = load_config(path)

        assert conf["nats_url"] == "nats://bus:4222"
        assert conf["trivia"] == {"cooldown": 10}
        assert conf["database_url"] == DEFAULTS["database_url"]

    def test_yaml(self, write_config):
        path = write_config({"catalog": {"url": "https://cards.example/items.json"}}, ".yaml")

        conf = load_config(path)

        assert conf["catalog"]["url"] == "https://cards.example/items.json"
        assert conf["catalog"]["path"] == "cache/items.json"

    def test_empty_yaml(self, write_config):
        path = write_config(None, ".yml")
        conf = load_config(path)
        assert conf["logging"] == {"level": "info"}

    def test_sections_merge_with_defaults(self, write_config):
        path = write_config({"logging": {"file": "bot.log"}})

        conf = load_config(path)

        assert conf["logging"] == {"level": "info", "file": "bot.log"}

    def test_null_section(self, write_config):
        conf = load_config(write_config({"trivia": None}))
        assert conf["trivia"] == {}

    def test_non_mapping_root(self, write_config):
        with pytest.raises(ValueError, match="mapping"):
            load_config(write_config(["not", "a", "dict"]))

    def test_env_overrides(self, write_config, monkeypatch):
        monkeypatch.setenv("TRIVIA_DATABASE_URL", "postgresql+asyncpg://db/trivia")
        monkeypatch.setenv("TRIVIA_NATS_URL", "nats://env:4222")

        conf = load_config(write_config({"nats_url": "nats://file:4222"}))

        assert conf["database_url"] == "postgresql+asyncpg://db/trivia"
        assert conf["nats_url"] == "nats://env:4222"

    def test_defaults_not_mutated(self, write_config):
        conf = load_config(write_config({"trivia": {"cooldown": 1}}))
        conf["catalog"]["path"] = "elsewhere.json"
        assert DEFAULTS["catalog"] == {"path": "cache/items.json"}
        assert DEFAULTS["trivia"] == {}


class TestParseLogLevel:

    @pytest.mark.parametrize("value, expected", [
        ("info", logging.INFO),
        ("DEBUG", logging.DEBUG),
        ("Warning", logging.WARNING),
        (logging.ERROR, logging.ERROR),
    ])
    def test_levels(self, value, expected):
        assert parse_log_level(value) == expected

    def test_unknown(self):
        with pytest.raises(ValueError):
            parse_log_level("chatty")


class TestConfigureLogger:

    def test_stream_handler(self):
        stream = io.StringIO()
        logger = configure_logger(
            "trivia.test.stream",
            log_file=stream,
            log_format="%(levelname)s %(message)s",
            log_level=logging.DEBUG,
        )

        logger.debug("hello")

        assert logger.level == logging.DEBUG
        assert stream.getvalue() == "DEBUG hello\n"
        logger.handlers.clear()

    def test_file_handler(self, tmp_path):
        log_path = tmp_path / "bot.log"
        logger = configure_logger(logging.getLogger("trivia.test.file"), log_file=str(log_path))

        logger.info("written")
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

        assert "[trivia.test.file] [INFO] written" in log_path.read_text(encoding="utf-8")


class TestGetConfig:

    def test_usage(self, capsys):
        with pytest.raises(SystemExit) as exc:
            get_config(["trivia-bot"])
        assert exc.value.code == 1
        assert "usage: trivia-bot <config file>" in capsys.readouterr().err

    def test_configures_root_logger(self, write_config, monkeypatch):
        calls = []
        monkeypatch.setattr(
            config_module, "configure_logger", lambda *args, **kwargs: calls.append(kwargs)
        )
        path = write_config({"logging": {"level": "debug", "format": "%(message)s"}})

        conf = get_config(["trivia-bot", path])

        assert conf["logging"]["level"] == "debug"
        assert calls == [{
            "log_file": None,
            "log_format": "%(message)s",
            "log_level": logging.DEBUG,
        }]
