"""Tester för konfiguration och loggning."""

import logging
from pathlib import Path

import pytest
import yaml

from sendcloud_client.config import (
    SendcloudConfig, SENDCLOUD_API_URL, load_config, setup_logging,
)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "sendcloud:\n"
        "  api_key: ${TEST_SENDCLOUD_KEY}\n"
        "  api_secret: ${TEST_SENDCLOUD_UNSET}\n"
        "  sendcloud_plus: true\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def client_logger():
    """Aterstaller paketets logger efter testet."""
    target = logging.getLogger("sendcloud_client")
    handlers, level = list(target.handlers), target.level
    yield target
    for handler in target.handlers:
        if handler not in handlers:
            handler.close()
    target.handlers = handlers
    target.setLevel(level)


class TestSendcloudConfig:

    def test_from_dict_defaults(self):
        config = SendcloudConfig.from_dict({"api_key": "k", "api_secret": "s"})
        assert config.api_key == "k"
        assert config.api_secret == "s"
        assert config.sendcloud_plus is False
        assert config.base_url == SENDCLOUD_API_URL
        assert config.timeout_seconds is None

    def test_from_dict_missing_key(self):
        with pytest.raises(KeyError):
            SendcloudConfig.from_dict({"api_secret": "s"})

    def test_empty_base_url_falls_back(self):
        config = SendcloudConfig.from_dict({"api_key": "k", "api_secret": "s", "base_url": ""})
        assert config.base_url == SENDCLOUD_API_URL

    def test_frozen(self):
        config = SendcloudConfig(api_key="k", api_secret="s")
        with pytest.raises(AttributeError):
            config.api_key = "other"


class TestLoadConfig:

    def test_env_substitution(self, config_file, monkeypatch):
        monkeypatch.setenv("TEST_SENDCLOUD_KEY", "env-key")
        monkeypatch.delenv("TEST_SENDCLOUD_UNSET", raising=False)
        config = load_config(config_file)

        assert config["sendcloud"]["api_key"] == "env-key"
        # Okand variabel lamnas orord
        assert config["sendcloud"]["api_secret"] == "${TEST_SENDCLOUD_UNSET}"
        assert config["sendcloud"]["sendcloud_plus"] is True

    def test_feeds_config_object(self, config_file, monkeypatch):
        monkeypatch.setenv("TEST_SENDCLOUD_KEY", "env-key")
        config = SendcloudConfig.from_dict(load_config(config_file)["sendcloud"])
        assert config.sendcloud_plus is True

    def test_empty_file_gives_empty_dict(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("sendcloud: [unclosed\n", encoding="utf-8")
        with pytest.raises(yaml.YAMLError):
            load_config(path)

    def test_section(self, config_file, monkeypatch):
        monkeypatch.setenv("TEST_SENDCLOUD_KEY", "env-key")
        section = load_config(config_file, "sendcloud")
        assert section["api_key"] == "env-key"
        assert SendcloudConfig.from_dict(section).sendcloud_plus is True

    def test_missing_section(self, config_file):
        with pytest.raises(KeyError):
            load_config(config_file, "logging")


class TestSetupLogging:

    def test_file_handlers_created(self, tmp_path, client_logger):
        log_dir = tmp_path / "logs"
        returned = setup_logging({"logging": {
            "level": "DEBUG", "log_dir": str(log_dir), "console_output": False,
        }})

        assert returned is client_logger
        assert client_logger.level == logging.DEBUG
        assert log_dir.is_dir()
        files = {
            Path(h.baseFilename).name
            for h in client_logger.handlers if hasattr(h, "baseFilename")
        }
        assert {"sendcloud.log", "sendcloud_errors.log"} <= files

    def test_custom_file_names(self, tmp_path, client_logger):
        setup_logging({"logging": {
            "log_dir": str(tmp_path), "log_file": "shop.log", "console_output": False,
        }})
        files = {
            Path(h.baseFilename).name
            for h in client_logger.handlers if hasattr(h, "baseFilename")
        }
        assert {"shop.log", "shop_errors.log"} <= files

    def test_error_handler_level(self, tmp_path, client_logger):
        setup_logging({"logging": {"log_dir": str(tmp_path), "console_output": False}})
        error_handlers = [
            h for h in client_logger.handlers
            if getattr(h, "baseFilename", "").endswith("sendcloud_errors.log")
        ]
        assert error_handlers[0].level == logging.ERROR

    def test_root_logger_untouched(self, client_logger):
        root = logging.getLogger()
        before = list(root.handlers)
        setup_logging({})
        assert root.handlers == before

    def test_console_only_without_log_dir(self, client_logger):
        before = len(client_logger.handlers)
        setup_logging({})
        added = client_logger.handlers[before:]
        assert len(added) == 1
        assert isinstance(added[0], logging.StreamHandler)

    def test_client_messages_reach_log_file(self, tmp_path, client_logger):
        setup_logging({"logging": {"log_dir": str(tmp_path), "console_output": False}})
        logging.getLogger("sendcloud_client.client").info("Sendcloud: test")
        for handler in client_logger.handlers:
            handler.flush()
        assert "Sendcloud: test" in (tmp_path / "sendcloud.log").read_text(encoding="utf-8")
