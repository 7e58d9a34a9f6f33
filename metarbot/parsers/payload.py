from __future__ import annotations

from metarbot.adapters.base import JSON, METAR, TAF, XML, RawPayload
from metarbot.errors import DecodeError
from metarbot.parsers.noaa_json import parse_combined
from metarbot.parsers.noaa_xml import parse_metar, parse_taf


def parse_payload(payload: RawPayload) -> tuple[str | None, str | None]:
    """Decode a payload into ``(metar, taf)``.

    Combined JSON payloads fill both slots. An XML document holds a single
    product, so the other slot is ``None``.
    """
    if payload.format == JSON:
        return parse_combined(payload.body)
    if payload.format == XML:
        if payload.product == METAR:
            return parse_metar(payload.body), None
        if payload.product == TAF:
            return None, parse_taf(payload.body)
    raise DecodeError(f"unsupported {payload.format} payload for {payload.product}")
