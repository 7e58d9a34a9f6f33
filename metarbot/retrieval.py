from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Sequence

from metarbot.adapters.base import METAR, TAF, RawPayload, WeatherFetcher
from metarbot.airports import Airport, AirportDirectory
from metarbot.errors import FetchError, NoDataError, ParseError, ResolutionError, WeatherError
from metarbot.parsers.payload import parse_payload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Report:
    product: str
    raw: str = ""
    error: WeatherError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def text(self) -> str:
        return self.raw if self.error is None else str(self.error)


@dataclass(frozen=True)
class WeatherReport:
    station: str
    metar: Report
    taf: Report


@dataclass(frozen=True)
class RetrievalOutcome:
    token: str
    airport: Airport | None = None
    weather: WeatherReport | None = None
    error: ResolutionError | None = None

    @property
    def found(self) -> bool:
        return self.airport is not None


class WeatherRetriever:
    """Fetches METAR and TAF for every requested airport concurrently.

    Each token is its own task; ``asyncio.gather`` hands the outcomes back in
    token order whatever order the fetches finish in.
    """

    def __init__(self, directory: AirportDirectory, fetcher: WeatherFetcher) -> None:
        self.directory = directory
        self.fetcher = fetcher

    async def retrieve(self, tokens: Sequence[str]) -> list[RetrievalOutcome]:
        return list(await asyncio.gather(*(self.retrieve_one(token) for token in tokens)))

    async def retrieve_one(self, token: str) -> RetrievalOutcome:
        try:
            airport = self.directory.resolve(token)
        except ResolutionError as exc:
            logger.info("Airport %s not resolved: %s", token, exc)
            return RetrievalOutcome(token=token, error=exc)

        weather = await self.fetch_weather(airport.icao)
        return RetrievalOutcome(token=token, airport=airport, weather=weather)

    async def fetch_weather(self, icao: str) -> WeatherReport:
        if self.fetcher.combined:
            decoded = _decode(await self._fetch(icao, METAR))
            metar = _report(METAR, decoded, 0)
            taf = _report(TAF, decoded, 1)
        else:
            metar_payload, taf_payload = await asyncio.gather(
                self._fetch(icao, METAR),
                self._fetch(icao, TAF),
            )
            metar = _report(METAR, _decode(metar_payload), 0)
            taf = _report(TAF, _decode(taf_payload), 1)
        return WeatherReport(station=icao, metar=metar, taf=taf)

    async def _fetch(self, icao: str, product: str) -> RawPayload | FetchError:
        try:
            return await self.fetcher.fetch(icao, product)
        except FetchError as exc:
            logger.warning("Fetching %s for %s failed: %s", product.upper(), icao, exc)
            return exc


Decoded = tuple[str | None, str | None]


def _decode(payload: RawPayload | FetchError) -> Decoded | WeatherError:
    if isinstance(payload, FetchError):
        return payload
    try:
        return parse_payload(payload)
    except ParseError as exc:
        logger.warning("Parsing %s for %s failed: %s", payload.product.upper(), payload.ident, exc)
        return exc


def _report(product: str, decoded: Decoded | WeatherError, slot: int) -> Report:
    if isinstance(decoded, WeatherError):
        return Report(product=product, error=decoded)
    raw = decoded[slot]
    if not raw:
        return Report(product=product, error=NoDataError(f"no {product.upper()} found"))
    return Report(product=product, raw=raw)
