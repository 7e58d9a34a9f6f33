from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx

from metarbot.adapters.base import JSON, METAR, TAF, XML, RawPayload
from metarbot.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://aviationweather.gov"
DEFAULT_HOURS = 12
DEFAULT_TIMEOUT = 10.0
USER_AGENT = "metarbot (METAR/TAF chat bot)"


class _NoaaFetcher(ABC):
    source = "LIVE"
    path = ""
    format = ""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = DEFAULT_BASE_URL,
        hours: int = DEFAULT_HOURS,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.hours = hours
        self.timeout = timeout

    @abstractmethod
    def params(self, ident: str, product: str) -> dict[str, str | int]:
        """Query parameters for one request."""

    async def fetch(self, ident: str, product: str) -> RawPayload:
        url = f"{self.base_url}{self.path}"
        label = f"{product.upper()} for {ident}"
        logger.debug("Fetching %s from %s", label, url)
        try:
            resp = await self.client.get(
                url,
                params=self.params(ident, product),
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"http status {exc.response.status_code} while fetching {label}"
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"http error while fetching {label}: {exc!r}") from exc
        return RawPayload(
            ident=ident,
            product=product,
            format=self.format,
            body=resp.content,
            source=self.source,
        )


class NoaaJsonFetcher(_NoaaFetcher):
    """aviationweather.gov data API, METAR with the TAF attached in one JSON call."""

    combined = True
    path = "/api/data/metar"
    format = JSON

    def params(self, ident: str, product: str) -> dict[str, str | int]:
        return {"ids": ident, "format": "json", "taf": "true", "hours": self.hours}


class NoaaXmlFetcher(_NoaaFetcher):
    """aviationweather.gov data server, one XML document per product."""

    combined = False
    path = "/api/data/dataserver"
    format = XML
    data_sources = {METAR: "metars", TAF: "tafs"}

    def params(self, ident: str, product: str) -> dict[str, str | int]:
        return {
            "requestType": "retrieve",
            "dataSource": self.data_sources[product],
            "stationString": ident,
            "hoursBeforeNow": self.hours,
            "format": "xml",
        }
