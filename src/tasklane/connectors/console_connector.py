# src/tasklane/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

PASTE_END = "."


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


async def _read_line(prompt: str) -> str:
    # input() blocks; keep the event loop (and the live subscription) running.
    return await asyncio.to_thread(input, prompt)


async def _read_paste() -> str:
    lines: list[str] = []
    while True:
        line = await _read_line("... ")
        if line.strip() == PASTE_END:
            break
        lines.append(line)
    return "\n".join(lines)


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (user=%s).", state.user_id)
    _print_ts("Type /help for commands, /exit to quit.")

    def on_snapshot(tasks: list[Task]) -> None:
        state.tasks = tasks

    unsubscribe = state.adapter.on_change(on_snapshot)

    try:
        while True:
            try:
                user_input = (await _read_line(">>> ")).strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            if not user_input.startswith("/"):
                user_input = f"/add {user_input}"

            body = None
            try:
                if command_registry.needs_body(user_input):
                    _print_ts(f"Paste your list, then a line with only '{PASTE_END}'.")
                    body = await _read_paste()
            except EOFError:
                break

            try:
                reply = await command_registry.handle(state, user_input, body=body, emit=_print_ts)
            except Exception:
                logger.exception("Command handler crashed.")
                reply = "Internal error while handling a command."

            if reply is not None:
                _print_ts(reply)

            # Let the subscription catch up so the next /list sees our own write.
            await asyncio.sleep(0)
    finally:
        unsubscribe()

    logger.info("Console connector finished.")
