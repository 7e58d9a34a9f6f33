from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Sequence

import httpx

from metarbot.adapters.base import JSON, WeatherFetcher
from metarbot.adapters.live_noaa import NoaaJsonFetcher, NoaaXmlFetcher
from metarbot.adapters.sample_metar_taf import SampleFetcher
from metarbot.airports import AirportDirectory
from metarbot.config import BOT_MODES, CONSOLE, SAMPLE, WEATHER_FORMATS, WEBHOOK, Settings, load_settings
from metarbot.console import run_console
from metarbot.errors import AirportLoadError, ConfigError
from metarbot.logging_setup import setup_logging
from metarbot.retrieval import WeatherRetriever
from metarbot.service import BotService
from metarbot.telegram import TelegramBot
from metarbot.webhook import run_webhook

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="metarbot", description="METAR/TAF chat bot")
    parser.add_argument("--mode", choices=BOT_MODES, help="Chat transport (default from BOT_MODE)")
    parser.add_argument("--format", choices=WEATHER_FORMATS, help="Weather source (default from WEATHER_FORMAT)")
    parser.add_argument("--airports", help="Airport dataset, JSON or CSV (default from AIRPORTS_FILE)")
    parser.add_argument("--log-level", help="Logging level (default from LOG_LEVEL)")
    parser.add_argument("--env-file", default="config.env", help="dotenv file to load")
    return parser.parse_args(argv)


def overrides_from_args(args: argparse.Namespace) -> dict[str, str | None]:
    return {
        "bot_mode": args.mode,
        "weather_format": args.format,
        "airports_file": args.airports,
        "log_level": args.log_level.upper() if args.log_level else None,
    }


def build_fetcher(settings: Settings, client: httpx.AsyncClient) -> WeatherFetcher:
    if settings.weather_format == SAMPLE:
        return SampleFetcher(settings.samples_dir)
    fetcher_cls = NoaaJsonFetcher if settings.weather_format == JSON else NoaaXmlFetcher
    return fetcher_cls(
        client,
        base_url=settings.noaa_base_url,
        hours=settings.noaa_interval,
        timeout=settings.request_timeout,
    )


async def serve(settings: Settings, directory: AirportDirectory) -> None:
    async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
        service = BotService(WeatherRetriever(directory, build_fetcher(settings, client)))
        if settings.bot_mode == CONSOLE:
            logger.info("Starting the bot on the console")
            await run_console(service)
            return

        bot = TelegramBot(client, settings.telegram_token or "", service)
        if settings.bot_mode == WEBHOOK:
            await run_webhook(bot, settings.webhook_url or "", settings.webhook_port or 0)
        else:
            await bot.run()


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings(args.env_file, **overrides_from_args(args))
    except ConfigError as exc:
        setup_logging()
        logger.error("Invalid configuration: %s", exc)
        return 2

    setup_logging(settings.log_level, settings.log_file)
    try:
        directory = AirportDirectory.from_path(settings.airports_file)
    except AirportLoadError as exc:
        logger.error("Unable to load airports from %s: %s", settings.airports_file, exc)
        return 1

    try:
        asyncio.run(serve(settings, directory))
    except KeyboardInterrupt:
        logger.info("Stopped")
    return 0
