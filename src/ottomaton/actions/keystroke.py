"""
Pause a script until a key is pressed; Escape ends the script.
"""

from __future__ import annotations

import asyncio
import logging
import re
import sys
from typing import Optional, TextIO

from ..action import FINISH, Action, Sentinel
from ..state import State

logger = logging.getLogger("ottomaton.actions")

ESCAPE = "\x1b"
DEFAULT_PROMPT = "Press any key..."


def read_key(stream: Optional[TextIO] = None) -> str:
    stream = stream or sys.stdin
    if not stream.isatty():
        return stream.read(1)

    import termios
    import tty

    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        return stream.read(1)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


async def _wait_for_keystroke(state: State, prompt: str = "") -> Optional[Sentinel]:
    text = prompt.strip()
    print(f"{DEFAULT_PROMPT} {text}" if text else DEFAULT_PROMPT, flush=True)
    key = await asyncio.to_thread(read_key)
    if key == ESCAPE:
        logger.debug("Escape pressed, finishing script")
        return FINISH
    return None


wait_for_keystroke = Action(re.compile(r"^WAIT FOR KEYSTROKE\s*(.*)$"), _wait_for_keystroke, deref=False)
