from __future__ import annotations

import math
import os
from urllib.parse import urlparse
from dataclasses import dataclass
from typing import Any, Mapping

from dotenv import load_dotenv

from metarbot.adapters.base import JSON, XML
from metarbot.adapters.live_noaa import DEFAULT_BASE_URL, DEFAULT_HOURS, DEFAULT_TIMEOUT
from metarbot.errors import ConfigError

SAMPLE = "sample"
WEATHER_FORMATS = (JSON, XML, SAMPLE)

POLLING = "polling"
WEBHOOK = "webhook"
CONSOLE = "console"
BOT_MODES = (POLLING, WEBHOOK, CONSOLE)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    noaa_interval: int = DEFAULT_HOURS
    request_timeout: float = DEFAULT_TIMEOUT
    noaa_base_url: str = DEFAULT_BASE_URL
    weather_format: str = JSON
    samples_dir: str = "data/samples"
    airports_file: str = "data/airports.json"
    bot_mode: str = POLLING
    telegram_token: str | None = None
    webhook_url: str | None = None
    webhook_port: int | None = None
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> "Settings":
        """Read settings from the environment; non-None overrides win."""
        env = os.environ if environ is None else environ
        values = dict(
            noaa_interval=get_noaa_interval(env),
            request_timeout=_positive_float(env, "REQUEST_TIMEOUT", DEFAULT_TIMEOUT),
            noaa_base_url=env.get("NOAA_BASE_URL") or DEFAULT_BASE_URL,
            weather_format=(env.get("WEATHER_FORMAT") or JSON).lower(),
            samples_dir=env.get("SAMPLES_DIR") or cls.samples_dir,
            airports_file=env.get("AIRPORTS_FILE") or cls.airports_file,
            bot_mode=(env.get("BOT_MODE") or _default_mode(env)).lower(),
            telegram_token=env.get("TELEGRAM_TOKEN") or None,
            webhook_url=env.get("WEBHOOK_URL") or None,
            webhook_port=_port(env, "WEBHOOK_PORT"),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
            log_file=env.get("LOG_FILE") or None,
        )
        values.update({key: value for key, value in overrides.items() if value is not None})
        settings = cls(**values)
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.noaa_interval <= 0:
            raise ConfigError("NOAA_INTERVAL should be a positive integer")
        if self.request_timeout <= 0:
            raise ConfigError("REQUEST_TIMEOUT should be a positive number of seconds")
        if self.weather_format not in WEATHER_FORMATS:
            raise ConfigError(f"WEATHER_FORMAT should be one of {', '.join(WEATHER_FORMATS)}")
        if self.bot_mode not in BOT_MODES:
            raise ConfigError(f"BOT_MODE should be one of {', '.join(BOT_MODES)}")
        if self.bot_mode in (POLLING, WEBHOOK) and not self.telegram_token:
            raise ConfigError("TELEGRAM_TOKEN not set. Unable to start the bot.")
        if self.bot_mode == WEBHOOK:
            url = urlparse(self.webhook_url or "")
            if url.scheme not in ("http", "https") or not url.netloc:
                raise ConfigError("WEBHOOK_URL should be an http(s) URL in webhook mode")
            if self.webhook_port is None:
                raise ConfigError("WEBHOOK_PORT not set. Unable to start the webhook.")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"LOG_LEVEL should be one of {', '.join(LOG_LEVELS)}")


def get_noaa_interval(environ: Mapping[str, str] | None = None) -> int:
    """Lookback window in hours, 12 unless NOAA_INTERVAL says otherwise."""
    env = os.environ if environ is None else environ
    value = env.get("NOAA_INTERVAL", "").strip()
    if not value:
        return DEFAULT_HOURS
    try:
        interval = int(value)
    except ValueError as exc:
        raise ConfigError(f"NOAA_INTERVAL should be a positive integer, got {value!r}") from exc
    if interval <= 0:
        raise ConfigError(f"NOAA_INTERVAL should be a positive integer, got {value!r}")
    return interval


def _default_mode(env: Mapping[str, str]) -> str:
    if env.get("WEBHOOK_URL") and env.get("WEBHOOK_PORT"):
        return WEBHOOK
    return POLLING


def _port(env: Mapping[str, str], key: str) -> int | None:
    value = env.get(key, "").strip()
    if not value:
        return None
    try:
        port = int(value)
    except ValueError as exc:
        raise ConfigError(f"{key} should be a port number, got {value!r}") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"{key} should be between 1 and 65535, got {value!r}")
    return port


def _positive_float(env: Mapping[str, str], key: str, default: float) -> float:
    value = env.get(key, "").strip()
    if not value:
        return default
    try:
        number = float(value)
    except ValueError as exc:
        raise ConfigError(f"{key} should be a number, got {value!r}") from exc
    if not math.isfinite(number) or number <= 0:
        raise ConfigError(f"{key} should be positive, got {value!r}")
    return number


def load_settings(env_file: str = "config.env", **overrides: Any) -> Settings:
    load_dotenv(env_file)
    load_dotenv()
    return Settings.from_env(**overrides)
