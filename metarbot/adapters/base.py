from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

METAR = "metar"
TAF = "taf"

JSON = "json"
XML = "xml"


@dataclass(frozen=True)
class RawPayload:
    ident: str
    product: str
    format: str
    body: bytes
    source: str


class WeatherFetcher(Protocol):
    # True when a single fetch returns both the METAR and the TAF.
    combined: bool

    async def fetch(self, ident: str, product: str) -> RawPayload: ...
