from __future__ import annotations

import asyncio
import logging
import re

from ..action import DONE, Action, Sentinel
from ..state import State

logger = logging.getLogger("ottomaton.actions")

_MILLISECONDS_PER_UNIT = {"ms": 1, "s": 1000, "m": 60 * 1000}


async def _sleep(state: State, duration: str, units: str) -> Sentinel:
    seconds = int(duration) * _MILLISECONDS_PER_UNIT[units.lower()] / 1000
    logger.debug("Sleeping %.3fs", seconds)
    await asyncio.sleep(seconds)
    return DONE


# Units are single letters that would otherwise read as state references.
sleep = Action(re.compile(r"^SLEEP (\d+)\s*(ms|s|m)$", re.IGNORECASE), _sleep, deref=False)
