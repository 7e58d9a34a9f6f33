from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from metarbot.formatting import HELP, WELCOME
from metarbot.service import BotService

logger = logging.getLogger(__name__)

API_URL = "https://api.telegram.org"
POLL_TIMEOUT = 30
ERROR_PAUSE = 5.0


class TelegramError(Exception):
    pass


class TelegramBot:
    """Telegram Bot API front-end for a BotService.

    Updates arrive either through ``poll_once`` (long polling) or through the
    webhook app, and both end up in ``handle_update``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str,
        service: BotService,
        api_url: str = API_URL,
        poll_timeout: int = POLL_TIMEOUT,
    ) -> None:
        self.client = client
        self.service = service
        self.base_url = f"{api_url.rstrip('/')}/bot{token}"
        self.poll_timeout = poll_timeout
        self.offset: int | None = None

    async def call(self, method: str, params: dict[str, Any] | None = None, http_timeout: float | None = None) -> Any:
        kwargs: dict[str, Any] = {"json": params or {}}
        if http_timeout is not None:
            kwargs["timeout"] = http_timeout
        resp = await self.client.post(f"{self.base_url}/{method}", **kwargs)
        payload = resp.json()
        if not payload.get("ok"):
            raise TelegramError(f"{method} failed: {payload.get('description', resp.status_code)}")
        return payload.get("result")

    async def send_message(self, chat_id: int, text: str, html: bool = True) -> None:
        params: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if html:
            params.update(parse_mode="HTML", disable_web_page_preview=True)
        await self.call("sendMessage", params)

    async def set_webhook(self, url: str) -> None:
        await self.call("setWebhook", {"url": url, "allowed_updates": ["message"]})

    async def delete_webhook(self) -> None:
        await self.call("deleteWebhook")

    async def handle_message(self, message: dict) -> None:
        chat_id = message["chat"]["id"]
        text = message.get("text") or ""
        words = text.split()
        command = words[0].split("@")[0] if words else ""

        if command == "/start":
            await self.send_message(chat_id, WELCOME, html=False)
            return
        if command == "/help":
            await self.send_message(chat_id, HELP, html=False)
            return

        await self.call("sendChatAction", {"chat_id": chat_id, "action": "typing"})
        for reply in await self.service.handle(text):
            await self.send_message(chat_id, reply)

    async def handle_update(self, update: dict) -> None:
        message = update.get("message")
        if not message or "text" not in message:
            return
        try:
            await self.handle_message(message)
        except (httpx.HTTPError, TelegramError, ValueError) as exc:
            logger.error("Unable to answer chat %s: %s", message["chat"]["id"], exc)

    async def _handle_chat(self, updates: list[dict]) -> None:
        for update in updates:
            await self.handle_update(update)

    async def poll_once(self) -> int:
        params: dict[str, Any] = {"timeout": self.poll_timeout, "allowed_updates": ["message"]}
        if self.offset is not None:
            params["offset"] = self.offset
        updates = await self.call("getUpdates", params, http_timeout=self.poll_timeout + 10)
        if not updates:
            return 0
        self.offset = max(update["update_id"] for update in updates) + 1

        # chats are answered concurrently, messages within a chat in order
        by_chat: dict[Any, list[dict]] = {}
        for update in updates:
            chat_id = (update.get("message") or {}).get("chat", {}).get("id")
            by_chat.setdefault(chat_id, []).append(update)
        await asyncio.gather(*(self._handle_chat(chat_updates) for chat_updates in by_chat.values()))
        return len(updates)

    async def run(self) -> None:
        me = await self.call("getMe")
        await self.delete_webhook()
        logger.info("Starting the bot @%s with the updates method", me.get("username"))
        while True:
            try:
                await self.poll_once()
            except (httpx.HTTPError, TelegramError, ValueError) as exc:
                logger.warning("Polling for updates failed: %s", exc)
                await asyncio.sleep(ERROR_PAUSE)
