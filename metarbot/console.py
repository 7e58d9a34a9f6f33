from __future__ import annotations

import asyncio
import sys
from typing import TextIO

from metarbot.service import BotService


async def run_console(service: BotService, stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> None:
    """Answer one message per input line until end of input."""
    while True:
        line = await asyncio.to_thread(stdin.readline)
        if not line:
            return
        for reply in await service.handle(line):
            stdout.write(reply + "\n\n")
        stdout.flush()
