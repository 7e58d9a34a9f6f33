from __future__ import annotations

import logging

from metarbot.codes import get_airport_codes
from metarbot.formatting import USAGE_HINT, render_outcome
from metarbot.retrieval import WeatherRetriever

logger = logging.getLogger(__name__)


class BotService:
    """Turns one chat message into the list of replies to send back."""

    def __init__(self, retriever: WeatherRetriever) -> None:
        self.retriever = retriever

    async def handle(self, text: str) -> list[str]:
        codes = get_airport_codes(text)
        if not codes:
            return [USAGE_HINT]
        logger.info("Retrieving weather for %s", ", ".join(codes))
        outcomes = await self.retriever.retrieve(codes)
        return [render_outcome(outcome) for outcome in outcomes]
