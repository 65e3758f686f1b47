"""Entrypoint: python -m lobby_sync

Runs a headless lobby session for SESSION_TOKEN / ACCOUNT_ID. Lines typed on
stdin are sent to the lobby chat.
"""
from __future__ import annotations

import asyncio
import logging
import sys

from lobby_sync.app import UiAdapters, lifespan
from lobby_sync.application.context import AuthSession
from lobby_sync.config import settings
from lobby_sync.infrastructure.console import (
    ConsoleNotifier,
    ConsoleOverlay,
    FixedAnswerPrompt,
    HeadlessMatchViewFactory,
    HeadlessView,
    KeepSettingsDialog,
    ShutdownLoginNavigator,
    SkipReportDialog,
)

logger = logging.getLogger(__name__)


async def run_headless_session() -> None:
    notifier = ConsoleNotifier()
    navigator = ShutdownLoginNavigator()
    ui = UiAdapters(
        notifier=notifier,
        overlay=ConsoleOverlay(notifier),
        prompt=FixedAnswerPrompt(keep_waiting=True),
        login_navigator=navigator,
        report_dialog=SkipReportDialog(),
        settings_dialog=KeepSettingsDialog(),
        drawer=HeadlessView("friends-drawer"),
        lobby_view=HeadlessView("lobby", visible=True),
        match_views=HeadlessMatchViewFactory(),
    )
    auth = AuthSession(token=settings.SESSION_TOKEN, account_id=settings.ACCOUNT_ID)

    async with lifespan(ui, auth) as session:
        def _print_last(lines) -> None:
            if lines:
                last = lines[-1]
                print(f"[{last.time}] {last.author}: {last.text}", flush=True)

        session.chat.lines.observe(_print_last)

        async def _read_stdin() -> None:
            while True:
                line = await asyncio.to_thread(sys.stdin.readline)
                if not line:
                    return
                await session.chat.submit_input(line)

        reader = asyncio.create_task(_read_stdin(), name="stdin-reader")
        login = asyncio.create_task(navigator.requested.wait(), name="login-wait")
        try:
            await asyncio.wait({reader, login}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (reader, login):
                task.cancel()

        if navigator.requested.is_set():
            logger.info("Session ended, sign in again to continue")


def main() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        asyncio.run(run_headless_session())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
