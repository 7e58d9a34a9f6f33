from __future__ import annotations

import json

from metarbot.errors import DecodeError, NoDataError


def parse_combined(body: bytes) -> tuple[str, str]:
    """Return the raw METAR and TAF text of the newest station record.

    The data API answers an empty body (HTTP 204) when nothing matched, which is
    treated the same as an empty array.
    """
    if not body or not body.strip():
        raise NoDataError("no METAR found")
    try:
        records = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(f"unable to parse json: {exc}") from exc
    if not isinstance(records, list):
        raise DecodeError("unable to parse json: expected an array of station records")
    if not records:
        raise NoDataError("no METAR found")

    newest = records[0]
    if not isinstance(newest, dict):
        raise DecodeError("unable to parse json: station record is not an object")
    return _text(newest.get("rawOb")), _text(newest.get("rawTaf"))


def _text(value: object) -> str:
    if isinstance(value, str):
        return value.strip()
    return ""
