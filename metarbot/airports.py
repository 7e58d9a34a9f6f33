from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, TextIO

from metarbot.codes import CODE_LENGTHS
from metarbot.errors import AirportLoadError, NotFoundError

logger = logging.getLogger(__name__)

BAD_LENGTH_MESSAGE = "airport code should be in IATA (3 letters) or ICAO (4 letters) form"
NOT_FOUND_MESSAGE = "no airport found"


@dataclass(frozen=True)
class Airport:
    icao: str
    iata: str
    name: str


class AirportDirectory:
    """Read-only airport table indexed by ICAO and by IATA code."""

    def __init__(self, airports: Iterable[Airport] = ()) -> None:
        self._by_icao, self._by_iata = _index(airports)

    def __len__(self) -> int:
        return len(self._by_icao)

    def resolve(self, code: str) -> Airport:
        code = (code or "").strip().upper()
        if len(code) not in CODE_LENGTHS:
            raise NotFoundError(BAD_LENGTH_MESSAGE)
        index = self._by_icao if len(code) == 4 else self._by_iata
        airport = index.get(code)
        if airport is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return airport

    def load(self, stream: TextIO, fmt: str = "json") -> None:
        """Replace the table with the records read from ``stream``.

        The indexes are swapped in only once every record has been read, so a
        failed load leaves the directory as it was.
        """
        try:
            text = stream.read()
        except (OSError, ValueError) as exc:
            raise AirportLoadError(f"unable to read airports: {exc}") from exc
        if not text or not text.strip():
            raise AirportLoadError("airport source is empty")

        if fmt == "json":
            airports = _parse_json(text)
        elif fmt == "csv":
            airports = _parse_csv(text)
        else:
            raise AirportLoadError(f"unsupported airport format: {fmt}")
        if not airports:
            raise AirportLoadError("airport source holds no records")

        self._by_icao, self._by_iata = _index(airports)
        logger.info("Loaded %d airports (%d with an IATA code)", len(self._by_icao), len(self._by_iata))

    @classmethod
    def from_path(cls, path: Path | str) -> "AirportDirectory":
        path = Path(path)
        fmt = "csv" if path.suffix.lower() == ".csv" else "json"
        directory = cls()
        try:
            with path.open(encoding="utf-8", newline="") as stream:
                directory.load(stream, fmt)
        except OSError as exc:
            raise AirportLoadError(f"unable to open {path}: {exc}") from exc
        return directory


def _index(airports: Iterable[Airport]) -> tuple[dict[str, Airport], dict[str, Airport]]:
    by_icao: dict[str, Airport] = {}
    by_iata: dict[str, Airport] = {}
    for airport in airports:
        if airport.icao:
            by_icao[airport.icao] = airport
        if airport.iata:
            by_iata.setdefault(airport.iata, airport)
    return by_icao, by_iata


def _field(record: dict, key: str, position: int) -> str:
    value = record.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise AirportLoadError(f"record {position}: {key} should be a string")
    return value.strip()


def _parse_json(text: str) -> list[Airport]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise AirportLoadError(f"unable to parse airports json: {exc}") from exc
    if not isinstance(data, list):
        raise AirportLoadError("airports json should be an array of records")

    airports = []
    for position, record in enumerate(data):
        if not isinstance(record, dict):
            raise AirportLoadError(f"record {position}: expected an object")
        icao = _field(record, "ICAO", position).upper()
        if not icao:
            raise AirportLoadError(f"record {position}: missing ICAO code")
        airports.append(
            Airport(
                icao=icao,
                iata=_field(record, "IATA", position).upper(),
                name=_field(record, "Name", position),
            )
        )
    return airports


def _parse_csv(text: str) -> list[Airport]:
    reader = csv.DictReader(io.StringIO(text, newline=""))
    missing = {"ident", "iata_code", "name"} - set(reader.fieldnames or [])
    if missing:
        raise AirportLoadError(f"airports csv is missing columns: {', '.join(sorted(missing))}")

    airports = []
    try:
        for row in reader:
            icao = (row.get("ident") or "").strip().upper()
            if not icao:
                continue
            airports.append(
                Airport(
                    icao=icao,
                    iata=(row.get("iata_code") or "").strip().upper(),
                    name=(row.get("name") or "").strip(),
                )
            )
    except csv.Error as exc:
        raise AirportLoadError(f"unable to parse airports csv: {exc}") from exc
    return airports
