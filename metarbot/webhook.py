from __future__ import annotations

import logging
from urllib.parse import urlparse

import uvicorn
from fastapi import BackgroundTasks, FastAPI, HTTPException, Request

from metarbot.telegram import TelegramBot

logger = logging.getLogger(__name__)

LISTEN_HOST = "0.0.0.0"


def webhook_path(url: str) -> str:
    return urlparse(url).path or "/"


def create_app(bot: TelegramBot, path: str = "/") -> FastAPI:
    """ASGI app that accepts Telegram updates and answers them after replying 200."""
    app = FastAPI(title="metarbot webhook", docs_url=None, redoc_url=None, openapi_url=None)

    @app.post(path)
    async def receive_update(request: Request, background_tasks: BackgroundTasks) -> dict:
        try:
            update = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Update is not valid JSON.")
        if not isinstance(update, dict):
            raise HTTPException(status_code=400, detail="Update should be a JSON object.")
        background_tasks.add_task(bot.handle_update, update)
        return {"ok": True}

    return app


async def run_webhook(bot: TelegramBot, url: str, port: int, host: str = LISTEN_HOST) -> None:
    await bot.set_webhook(url)
    logger.info("Starting the bot with webhook: %s:%s", url, port)
    app = create_app(bot, webhook_path(url))
    server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_config=None))
    await server.serve()
