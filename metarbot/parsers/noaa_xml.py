from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

from metarbot.errors import DecodeError, NoDataError

T = TypeVar("T")


@dataclass
class SkyCondition:
    sky_cover: str
    cloud_base_ft_agl: int | None = None


@dataclass
class Metar:
    raw_text: str
    station_id: str = ""
    observation_time: str = ""
    latitude: float | None = None
    longitude: float | None = None
    temp_c: float | None = None
    dewpoint_c: float | None = None
    wind_dir_degrees: str = ""
    wind_speed_kt: int | None = None
    wind_gust_kt: int | None = None
    visibility_statute_mi: str = ""
    altim_in_hg: float | None = None
    sea_level_pressure_mb: float | None = None
    wx_string: str = ""
    sky_condition: list[SkyCondition] = field(default_factory=list)
    flight_category: str = ""
    metar_type: str = ""
    elevation_m: float | None = None


@dataclass
class TafForecast:
    fcst_time_from: str = ""
    fcst_time_to: str = ""
    change_indicator: str = ""
    probability: int | None = None
    wind_dir_degrees: str = ""
    wind_speed_kt: int | None = None
    wind_gust_kt: int | None = None
    visibility_statute_mi: str = ""
    wx_string: str = ""
    sky_condition: list[SkyCondition] = field(default_factory=list)


@dataclass
class Taf:
    raw_text: str
    station_id: str = ""
    issue_time: str = ""
    bulletin_time: str = ""
    valid_time_from: str = ""
    valid_time_to: str = ""
    latitude: float | None = None
    longitude: float | None = None
    elevation_m: float | None = None
    forecast: list[TafForecast] = field(default_factory=list)


@dataclass
class Response(Generic[T]):
    """Envelope returned by the aviationweather.gov XML data server."""

    request_index: int | None
    data_source: str
    errors: list[str]
    warnings: list[str]
    time_taken_ms: int | None
    num_results: int | None
    entries: list[T]


def _text(node: ET.Element, tag: str) -> str:
    child = node.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _number(node: ET.Element, tag: str, cast: Callable[[str], T]) -> T | None:
    value = _text(node, tag)
    if not value:
        return None
    try:
        return cast(value)
    except ValueError as exc:
        raise DecodeError(f"invalid {tag} value {value!r}") from exc


def _int(node: ET.Element, tag: str) -> int | None:
    return _number(node, tag, int)


def _float(node: ET.Element, tag: str) -> float | None:
    return _number(node, tag, float)


def _sky(node: ET.Element) -> list[SkyCondition]:
    layers = []
    for layer in node.findall("sky_condition"):
        base = layer.get("cloud_base_ft_agl")
        layers.append(
            SkyCondition(
                sky_cover=layer.get("sky_cover", ""),
                cloud_base_ft_agl=int(base) if base and base.isdigit() else None,
            )
        )
    return layers


def _metar(node: ET.Element) -> Metar:
    return Metar(
        raw_text=_text(node, "raw_text"),
        station_id=_text(node, "station_id"),
        observation_time=_text(node, "observation_time"),
        latitude=_float(node, "latitude"),
        longitude=_float(node, "longitude"),
        temp_c=_float(node, "temp_c"),
        dewpoint_c=_float(node, "dewpoint_c"),
        wind_dir_degrees=_text(node, "wind_dir_degrees"),
        wind_speed_kt=_int(node, "wind_speed_kt"),
        wind_gust_kt=_int(node, "wind_gust_kt"),
        visibility_statute_mi=_text(node, "visibility_statute_mi"),
        altim_in_hg=_float(node, "altim_in_hg"),
        sea_level_pressure_mb=_float(node, "sea_level_pressure_mb"),
        wx_string=_text(node, "wx_string"),
        sky_condition=_sky(node),
        flight_category=_text(node, "flight_category"),
        metar_type=_text(node, "metar_type"),
        elevation_m=_float(node, "elevation_m"),
    )


def _forecast(node: ET.Element) -> TafForecast:
    return TafForecast(
        fcst_time_from=_text(node, "fcst_time_from"),
        fcst_time_to=_text(node, "fcst_time_to"),
        change_indicator=_text(node, "change_indicator"),
        probability=_int(node, "probability"),
        wind_dir_degrees=_text(node, "wind_dir_degrees"),
        wind_speed_kt=_int(node, "wind_speed_kt"),
        wind_gust_kt=_int(node, "wind_gust_kt"),
        visibility_statute_mi=_text(node, "visibility_statute_mi"),
        wx_string=_text(node, "wx_string"),
        sky_condition=_sky(node),
    )


def _taf(node: ET.Element) -> Taf:
    return Taf(
        raw_text=_text(node, "raw_text"),
        station_id=_text(node, "station_id"),
        issue_time=_text(node, "issue_time"),
        bulletin_time=_text(node, "bulletin_time"),
        valid_time_from=_text(node, "valid_time_from"),
        valid_time_to=_text(node, "valid_time_to"),
        latitude=_float(node, "latitude"),
        longitude=_float(node, "longitude"),
        elevation_m=_float(node, "elevation_m"),
        forecast=[_forecast(item) for item in node.findall("forecast")],
    )


def _parse_response(body: bytes, entry_tag: str, build: Callable[[ET.Element], T]) -> Response[T]:
    try:
        root = ET.fromstring(body)
    except ET.ParseError as exc:
        raise DecodeError(f"XML syntax error: {exc}") from exc

    errors = [item.text.strip() for item in root.iterfind("errors/error") if item.text]
    data = root.find("data")
    if data is None:
        detail = "; ".join(errors) or "response has no data element"
        raise DecodeError(f"unable to parse XML response: {detail}")

    source = root.find("data_source")
    num_results = data.get("num_results")
    return Response(
        request_index=_int(root, "request_index"),
        data_source=source.get("name", "") if source is not None else "",
        errors=errors,
        warnings=[item.text.strip() for item in root.iterfind("warnings/warning") if item.text],
        time_taken_ms=_int(root, "time_taken_ms"),
        num_results=int(num_results) if num_results and num_results.isdigit() else None,
        entries=[build(node) for node in data.findall(entry_tag)],
    )


def parse_metar_response(body: bytes) -> Response[Metar]:
    return _parse_response(body, "METAR", _metar)


def parse_taf_response(body: bytes) -> Response[Taf]:
    return _parse_response(body, "TAF", _taf)


def parse_metar(body: bytes) -> str:
    """Raw text of the newest METAR in a data server document."""
    response = parse_metar_response(body)
    if not response.entries:
        raise NoDataError("no METAR found")
    return response.entries[0].raw_text


def parse_taf(body: bytes) -> str:
    """Raw text of the newest TAF in a data server document."""
    response = parse_taf_response(body)
    if not response.entries:
        raise NoDataError("no TAF found")
    return response.entries[0].raw_text
