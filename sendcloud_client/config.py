"""Konfiguration och loggning för Sendcloud-klienten.

Klienten läser aldrig konfiguration på egen hand. Anroparen skapar en
SendcloudConfig direkt, från en dict, eller via load_config() från en
YAML-fil där ${ENV_VAR} ersätts med miljövariabler.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import yaml

logger = logging.getLogger(__name__)

SENDCLOUD_API_URL = "https://panel.sendcloud.sc/api/v2/"

DEFAULT_LOGGER_NAME = "sendcloud_client"

_ENV_PATTERN = re.compile(r"\$\{(\w+)\}")


@dataclass(frozen=True)
class SendcloudConfig:
    """Inloggningsuppgifter och inställningar, ägs av en klientinstans."""
    api_key: str
    api_secret: str
    sendcloud_plus: bool = False
    base_url: str = SENDCLOUD_API_URL
    timeout_seconds: Optional[float] = None

    @classmethod
    def from_dict(cls, config: dict) -> "SendcloudConfig":
        """Skapar config från en dict (t.ex. sektionen "sendcloud" i YAML).

        api_key och api_secret är obligatoriska (KeyError annars).
        """
        return cls(
            api_key=config["api_key"],
            api_secret=config["api_secret"],
            sendcloud_plus=bool(config.get("sendcloud_plus", False)),
            base_url=config.get("base_url") or SENDCLOUD_API_URL,
            timeout_seconds=config.get("timeout_seconds"),
        )


def load_config(config_path: Union[str, Path],
                section: Optional[str] = None) -> dict:
    """Läser YAML-konfiguration där ${VAR} ersätts med miljövariabler.

    Okända ${VAR} lämnas orörda. Med section returneras bara den
    sektionen, t.ex. load_config(path, "sendcloud") → dict som kan
    ges direkt till SendcloudConfig.from_dict().
    """
    text = Path(config_path).read_text(encoding="utf-8")
    text = _ENV_PATTERN.sub(
        lambda m: os.environ.get(m.group(1), m.group(0)), text,
    )
    config = yaml.safe_load(text) or {}

    if section is None:
        return config
    # Saknad sektion ger KeyError, precis som saknade nycklar i from_dict
    return config[section] or {}


def _rotating_handler(path: Path, log_config: dict,
                      formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=log_config.get("max_file_size_mb", 10) * 1024 * 1024,
        backupCount=log_config.get("backup_count", 30),
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(config: dict) -> logging.Logger:
    """Kopplar loggfiler och konsol till klientens logger.

    Läser sektionen "logging":
        logger          loggernamn (default "sendcloud_client", dvs. alla
                        moduler i paketet)
        level           INFO, DEBUG, ...
        log_dir         katalog för loggfiler; utan den bara konsol
        log_file        default "sendcloud.log"
        error_log_file  default "<log_file utan ändelse>_errors.log"
        max_file_size_mb, backup_count, console_output

    Root-loggern lämnas orörd, så applikationen som använder klienten
    behåller sin egen loggkonfiguration.
    """
    log_config = config.get("logging") or {}

    target = logging.getLogger(log_config.get("logger", DEFAULT_LOGGER_NAME))
    level = getattr(logging, str(log_config.get("level", "INFO")).upper())
    target.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    log_dir = log_config.get("log_dir")
    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_config.get("log_file", "sendcloud.log")
        error_file = log_config.get(
            "error_log_file", f"{Path(log_file).stem}_errors.log",
        )

        target.addHandler(_rotating_handler(log_dir / log_file, log_config, formatter))

        error_handler = _rotating_handler(log_dir / error_file, log_config, formatter)
        error_handler.setLevel(logging.ERROR)
        target.addHandler(error_handler)

    if log_config.get("console_output", True):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        target.addHandler(console)

    logger.debug(
        f"Loggning konfigurerad för '{target.name}' "
        f"(nivå {logging.getLevelName(level)})"
    )
    return target
