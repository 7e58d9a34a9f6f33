from __future__ import annotations

import asyncio
import random
from pathlib import Path

import pytest

from metarbot.adapters.base import METAR, TAF, XML, RawPayload
from metarbot.airports import Airport, AirportDirectory
from metarbot.errors import FetchError

ROOT = Path(__file__).resolve().parents[1]
SAMPLES_DIR = ROOT / "data" / "samples"

ENVELOPE = """<?xml version="1.0" encoding="UTF-8"?>
<response version="1.3">
  <request_index>1</request_index>
  <data_source name="{source}" />
  <request type="retrieve" />
  <errors />
  <warnings />
  <time_taken_ms>3</time_taken_ms>
  <data num_results="{count}">{entries}</data>
</response>
"""


def metar_xml(*raw_texts: str) -> bytes:
    entries = "".join(
        f"<METAR><raw_text>{raw}</raw_text><station_id>{raw[:4]}</station_id></METAR>" for raw in raw_texts
    )
    return ENVELOPE.format(source="metars", count=len(raw_texts), entries=entries).encode()


def taf_xml(*raw_texts: str) -> bytes:
    entries = "".join(
        f"<TAF><raw_text>{raw}</raw_text><station_id>{raw[:4]}</station_id></TAF>" for raw in raw_texts
    )
    return ENVELOPE.format(source="tafs", count=len(raw_texts), entries=entries).encode()


class FakeFetcher:
    """XML fetcher that answers after a random delay and records every call."""

    combined = False

    def __init__(self, max_delay: float = 0.0, failing: set[tuple[str, str]] | None = None) -> None:
        self.max_delay = max_delay
        self.failing = failing or set()
        self.calls: list[tuple[str, str]] = []

    async def fetch(self, ident: str, product: str) -> RawPayload:
        self.calls.append((ident, product))
        if self.max_delay:
            await asyncio.sleep(random.uniform(0, self.max_delay))
        if (ident, product) in self.failing:
            raise FetchError(f"http error while fetching {product.upper()} for {ident}")
        if product == METAR:
            body = metar_xml(f"{ident} 191150Z 24009KT 9999 SCT036 14/08 Q1012")
        elif product == TAF:
            body = taf_xml(f"{ident} 191100Z 1912/2018 24010KT 9999 SCT035")
        else:
            raise AssertionError(f"unexpected product {product}")
        return RawPayload(ident=ident, product=product, format=XML, body=body, source="FAKE")


@pytest.fixture
def directory() -> AirportDirectory:
    return AirportDirectory(
        [
            Airport("KJFK", "JFK", "John F Kennedy International Airport"),
            Airport("KLAX", "LAX", "Los Angeles International Airport"),
            Airport("EGSS", "STN", "London Stansted Airport"),
            Airport("EGPF", "GLA", "Glasgow International Airport"),
            Airport("LJLJ", "LJU", "Ljubljana Joze Pucnik Airport"),
            Airport("EIDW", "DUB", "Dublin Airport"),
        ]
    )
