import asyncio

import httpx
import pytest

from metarbot.adapters.base import JSON, METAR, TAF, XML
from metarbot.adapters.live_noaa import NoaaJsonFetcher, NoaaXmlFetcher, _NoaaFetcher
from metarbot.adapters.sample_metar_taf import SampleFetcher
from metarbot.errors import FetchError

from conftest import SAMPLES_DIR


def fetch(fetcher_cls, handler, ident, product, **kwargs):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            fetcher = fetcher_cls(client, base_url="https://awc.test/", **kwargs)
            return await fetcher.fetch(ident, product)

    return asyncio.run(run())


def test_json_fetcher_builds_combined_request():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, content=(SAMPLES_DIR / "metar_KJFK.json").read_bytes())

    payload = fetch(NoaaJsonFetcher, handler, "KJFK", METAR, hours=6)

    request = seen[0]
    assert request.url.host == "awc.test"
    assert request.url.path == "/api/data/metar"
    assert request.url.params["ids"] == "KJFK"
    assert request.url.params["format"] == "json"
    assert request.url.params["taf"] == "true"
    assert request.url.params["hours"] == "6"
    assert payload.format == JSON
    assert payload.source == "LIVE"
    assert b"KJFK" in payload.body


@pytest.mark.parametrize("product, source", [(METAR, "metars"), (TAF, "tafs")])
def test_xml_fetcher_requests_one_product(product, source):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, content=(SAMPLES_DIR / f"{product}_KJFK.xml").read_bytes())

    payload = fetch(NoaaXmlFetcher, handler, "KJFK", product)

    params = seen[0].url.params
    assert seen[0].url.path == "/api/data/dataserver"
    assert params["dataSource"] == source
    assert params["stationString"] == "KJFK"
    assert params["hoursBeforeNow"] == "12"
    assert payload.format == XML
    assert payload.product == product


def test_fetch_http_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(FetchError, match="http") as excinfo:
        fetch(NoaaXmlFetcher, handler, "KJFK", METAR)
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


def test_fetch_timeout():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(FetchError, match="METAR for KJFK"):
        fetch(NoaaJsonFetcher, handler, "KJFK", METAR)


def test_fetch_error_status():
    def handler(request):
        return httpx.Response(502, text="Bad gateway")

    with pytest.raises(FetchError, match="http status 502"):
        fetch(NoaaXmlFetcher, handler, "KJFK", TAF)


def test_fetch_no_content_is_not_an_error():
    payload = fetch(NoaaJsonFetcher, lambda request: httpx.Response(204), "KJFK", METAR)
    assert payload.body == b""


def test_sample_fetcher_reads_files():
    fetcher = SampleFetcher(SAMPLES_DIR)
    payload = asyncio.run(fetcher.fetch("KJFK", TAF))
    assert not fetcher.combined
    assert payload.source == "SAMPLE"
    assert b"<TAF>" in payload.body


def test_sample_fetcher_json_is_combined():
    fetcher = SampleFetcher(SAMPLES_DIR, fmt=JSON)
    payload = asyncio.run(fetcher.fetch("KJFK", METAR))
    assert fetcher.combined
    assert payload.format == JSON


def test_sample_fetcher_missing_station():
    with pytest.raises(FetchError, match="no sample METAR for ZZZZ"):
        asyncio.run(SampleFetcher(SAMPLES_DIR).fetch("ZZZZ", METAR))


def test_base_fetcher_needs_request_params():
    with pytest.raises(TypeError):
        _NoaaFetcher(httpx.AsyncClient())
