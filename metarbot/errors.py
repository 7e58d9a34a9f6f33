from __future__ import annotations


class BotError(Exception):
    """Base class for every error raised by metarbot."""


class ConfigError(BotError):
    pass


class AirportLoadError(BotError):
    pass


class ResolutionError(BotError):
    pass


class NotFoundError(ResolutionError):
    pass


class WeatherError(BotError):
    """A single METAR or TAF could not be produced. Shown in place of the report."""


class FetchError(WeatherError):
    pass


class ParseError(WeatherError):
    pass


class DecodeError(ParseError):
    pass


class NoDataError(ParseError):
    pass
