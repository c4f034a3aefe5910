"""
Resolution of registrations into a flat, ordered list of actions.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Any, Iterable, List

from .action import Action
from .errors import InvalidRegistrationError

logger = logging.getLogger("ottomaton.registration")


def _is_record(value: Any) -> bool:
    if isinstance(value, Mapping):
        return "matcher" in value and "handler" in value
    return hasattr(value, "matcher") and hasattr(value, "handler")


def _action_from_record(record: Any) -> Action:
    if isinstance(record, Mapping):
        return Action(record["matcher"], record["handler"], record.get("options"))
    return Action(record.matcher, record.handler, getattr(record, "options", None))


async def resolve_registration(registration: Any, engine: Any) -> List[Action]:
    """
    Expand one registration into actions.

    Awaitables are awaited, lists and generators flattened, callables invoked
    with the engine, ``{"matcher": ..., "handler": ...}`` records wrapped and any
    other mapping expanded into one action per key.
    """

    if isinstance(registration, Action):
        return [registration]
    if inspect.isawaitable(registration):
        return await resolve_registration(await registration, engine)
    if isinstance(registration, (list, tuple)) or inspect.isgenerator(registration):
        return await resolve_registrations(registration, engine)
    if inspect.isasyncgen(registration):
        return await resolve_registrations([item async for item in registration], engine)
    if _is_record(registration):
        return [_action_from_record(registration)]
    if isinstance(registration, Mapping):
        return [Action(matcher, handler) for matcher, handler in registration.items()]
    if callable(registration):
        logger.debug("Invoking action generator %r", registration)
        return await resolve_registration(registration(engine), engine)
    raise InvalidRegistrationError(f"Invalid registration: {type(registration).__name__}")


async def resolve_registrations(registrations: Iterable[Any], engine: Any) -> List[Action]:
    actions: List[Action] = []
    for registration in registrations:
        actions.extend(await resolve_registration(registration, engine))
    return actions
