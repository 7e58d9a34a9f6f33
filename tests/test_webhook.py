import asyncio
import json

import httpx

from metarbot.telegram import TelegramBot
from metarbot.webhook import create_app, webhook_path

from test_telegram import FakeTelegram, message, sample_service


def post_updates(fake, *payloads, path="/hook"):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(fake)) as telegram:
            bot = TelegramBot(telegram, "123:abc", sample_service(), api_url="https://tg.test")
            app = create_app(bot, path)
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://bot.test") as client:
                return [await client.post(path, content=payload) for payload in payloads]

    return asyncio.run(run())


def test_webhook_answers_update():
    fake = FakeTelegram([])
    (resp,) = post_updates(fake, json.dumps(message(3, "JFK XYZ")).encode())

    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
    texts = [body["text"] for body in fake.sent()]
    assert texts[0].startswith("<b>KJFK/JFK\nMETAR</b>")
    assert texts[1] == "Airport XYZ not found."
    assert not [method for method, _ in fake.calls if method == "getUpdates"]


def test_webhook_rejects_bad_payloads():
    fake = FakeTelegram([])
    responses = post_updates(fake, b"{not json", b"[1, 2]")
    assert [resp.status_code for resp in responses] == [400, 400]
    assert fake.calls == []


def test_webhook_ignores_updates_without_text():
    fake = FakeTelegram([])
    (resp,) = post_updates(fake, b'{"update_id": 4, "edited_message": {"chat": {"id": 1}}}')
    assert resp.status_code == 200
    assert fake.calls == []


def test_webhook_path():
    assert webhook_path("https://bot.example.com/telegram/hook") == "/telegram/hook"
    assert webhook_path("https://bot.example.com") == "/"


def test_set_webhook_call():
    fake = FakeTelegram([])

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(fake)) as client:
            bot = TelegramBot(client, "123:abc", sample_service(), api_url="https://tg.test")
            await bot.set_webhook("https://bot.example.com/hook")

    asyncio.run(run())
    assert fake.calls == [("setWebhook", {"url": "https://bot.example.com/hook", "allowed_updates": ["message"]})]
