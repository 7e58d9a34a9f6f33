from __future__ import annotations

from pathlib import Path

from metarbot.adapters.base import JSON, XML, RawPayload
from metarbot.errors import FetchError


class SampleFetcher:
    """Serves payloads saved as ``{product}_{ident}.{json|xml}`` in a directory."""

    source = "SAMPLE"

    def __init__(self, samples_dir: Path, fmt: str = XML) -> None:
        self.samples_dir = Path(samples_dir)
        self.format = fmt
        self.combined = fmt == JSON

    def _read(self, product: str, ident: str) -> bytes:
        path = self.samples_dir / f"{product}_{ident}.{self.format}"
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FetchError(f"no sample {product.upper()} for {ident}: {exc.strerror}") from exc

    async def fetch(self, ident: str, product: str) -> RawPayload:
        body = self._read(product, ident)
        return RawPayload(ident=ident, product=product, format=self.format, body=body, source=self.source)
