"""
Execution engine: drives scripts through the registered actions.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import re
from collections import deque
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .action import DONE, FINISH, Action, Sentinel, coerce_match
from .actions.comment import COMMENT_ACTIONS
from .config import OttomatonOptions, coerce_options
from .errors import LineError, UnrecognizedLineError
from .registration import resolve_registration
from .state import LINE_KEY, State, deref, inject_transient, strip_transient

logger = logging.getLogger("ottomaton.engine")

Line = Union[str, Sentinel]
Script = Union[str, Sequence[Line]]

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


class LineOutcome(Enum):
    CONTINUE = "continue"
    REWRITE = "rewrite"
    STOP_LINE = "stop_line"
    STOP_SCRIPT = "stop_script"


@dataclass
class LineResolution:
    outcome: LineOutcome
    lines: List[Line] = field(default_factory=list)


def normalize_line(line: Line) -> Line:
    if isinstance(line, Sentinel):
        return line
    if not isinstance(line, str):
        line = str(line)
    if line.strip().upper() == FINISH.value:
        return FINISH
    if line == DONE.value:
        return DONE
    return line


def split_script(script: Script) -> List[Tuple[int, Line]]:
    """Number the lines of a script (1-based) and drop empty ones."""
    raw = _LINE_BREAK_RE.split(script) if isinstance(script, str) else list(script)
    numbered: List[Tuple[int, Line]] = []
    for number, line in enumerate(raw, start=1):
        if line == "":
            continue
        numbered.append((number, normalize_line(line)))
    return numbered


def truncate_at_finish(numbered: Sequence[Tuple[int, Line]]) -> List[Tuple[int, Line]]:
    kept: List[Tuple[int, Line]] = []
    for number, line in numbered:
        if line is FINISH:
            break
        kept.append((number, line))
    return kept


class Ottomaton:
    """
    Interpreter for line-oriented scripts whose vocabulary is the set of registered actions.

    Registrations are resolved lazily on the first ``run`` and cached; later
    registrations are resolved on the following run. Running one engine from
    several tasks while registering more actions is not supported.
    """

    def __init__(self, options: OttomatonOptions | Mapping[str, Any] | None = None, **overrides: Any) -> None:
        self.options = coerce_options(options, **overrides)
        self.registrations: List[Any] = list(COMMENT_ACTIONS) if self.options.common else []
        self._actions: List[Action] = []
        self._resolved_count = 0

    def register(self, matcher: Any, handler: Any = None, **options: Any) -> "Ottomaton":
        """
        Register actions for later runs.

        ``register(matcher, handler)`` builds one action immediately. With no
        handler the argument is kept as a registration and resolved at run
        time: an ``Action``, a ``{"matcher": ..., "handler": ...}`` record, a
        mapping of matcher specs to handlers, a list of any of these, an
        awaitable, or a callable receiving this engine.
        """

        if handler is not None:
            self.registrations.append(Action(matcher, handler, options or None))
        elif isinstance(matcher, (list, tuple)):
            self.registrations.extend(matcher)
        else:
            self.registrations.append(matcher)
        return self

    async def prepare_actions(self) -> List[Action]:
        # Commit per registration; earlier ones stay resolved when a later one fails.
        while self._resolved_count < len(self.registrations):
            registration = self.registrations[self._resolved_count]
            self._actions.extend(await resolve_registration(registration, self))
            self._resolved_count += 1
            logger.debug("Actions prepared %d", len(self._actions))
        return list(self._actions)

    async def run(self, script: Script, state: Optional[State] = None) -> State:
        """
        Execute ``script`` against ``state`` and return the same state object.

        Raises ``LineError`` before any handler runs when some line matches no
        action. Handler errors, ``UnrecognizedLineError`` and
        ``UnknownReferenceError`` propagate after the ``FINISH`` actions had a
        chance to run.
        """

        if state is None:
            state = {}
        if not isinstance(state, MutableMapping):
            raise TypeError(f"state must be a mutable mapping: {state!r}")

        numbered = truncate_at_finish(split_script(script))
        actions = await self.prepare_actions()
        await self._check_lines(actions, numbered)

        inject_transient(state, self)
        try:
            await self._execute(actions, [line for _, line in numbered] + [FINISH], state)
        finally:
            strip_transient(state)
        return state

    def run_sync(self, script: Script, state: Optional[State] = None) -> State:
        return asyncio.run(self.run(script, state))

    async def _check_lines(self, actions: Sequence[Action], numbered: Iterable[Tuple[int, Line]]) -> None:
        errors: List[str] = []
        for number, line in numbered:
            if isinstance(line, Sentinel):
                continue
            if not await self._is_recognized(actions, line):
                logger.debug("Unrecognized line #%d: %r", number, line)
                errors.append(f"Unrecognized Line: #{number}: {line}")
        if errors:
            raise LineError(errors)

    async def _is_recognized(self, actions: Sequence[Action], line: Line) -> bool:
        for action in actions:
            if action.accepts(line) and await self._match(action, line) is not None:
                return True
        return False

    async def _match(self, action: Action, line: Line) -> Optional[List[Any]]:
        result = action.matcher(line)
        if inspect.isawaitable(result):
            result = await result
        return coerce_match(result)

    async def _execute(self, actions: Sequence[Action], lines: Iterable[Line], state: State) -> None:
        logger.debug("Executing lines against %d actions", len(actions))
        queue: deque[Line] = deque(lines)
        finish_started = False
        try:
            while queue:
                line = queue.popleft()
                if line is FINISH:
                    finish_started = True
                if isinstance(line, str):
                    state[LINE_KEY] = line
                try:
                    resolution = await self._execute_line(actions, line, state)
                finally:
                    state.pop(LINE_KEY, None)

                if resolution.outcome is LineOutcome.STOP_SCRIPT:
                    queue.clear()
                    if not finish_started:
                        queue.append(FINISH)
                elif resolution.outcome is LineOutcome.REWRITE:
                    queue.extendleft(reversed(resolution.lines))
        except Exception:
            if not finish_started:
                await self._run_finish_hook(actions, state)
            raise

    async def _run_finish_hook(self, actions: Sequence[Action], state: State) -> None:
        try:
            await self._execute_line(actions, FINISH, state)
        except Exception:
            logger.debug("An error occurred running FINISH", exc_info=True)

    async def _execute_line(self, actions: Sequence[Action], line: Line, state: State) -> LineResolution:
        if line is FINISH:
            logger.debug("Executing line FINISH")
        else:
            logger.debug("Executing line %r", line)

        recognized = False
        replacement: Any = None
        for action in actions:
            if not action.accepts(line):
                continue
            args = await self._match(action, line)
            if args is None:
                continue
            recognized = True

            args = args or [line]
            if action.options.deref:
                args = deref(state, args)

            result = await self._invoke(action, state, args)
            if not _is_replacement(result):
                if result:
                    logger.debug("Ignoring non-replacement handler result %r", result)
                continue
            if replacement is None:
                replacement = result
            if result is DONE:
                break

        if replacement is DONE:
            return LineResolution(LineOutcome.STOP_LINE)
        if replacement is FINISH:
            return LineResolution(LineOutcome.STOP_SCRIPT)
        if line is FINISH:
            return LineResolution(LineOutcome.STOP_SCRIPT)
        if line is DONE:
            return LineResolution(LineOutcome.STOP_LINE)
        if not recognized:
            raise UnrecognizedLineError(f"Unrecognized Line: {line}", text=line)
        if replacement is None:
            return LineResolution(LineOutcome.CONTINUE)
        return LineResolution(LineOutcome.REWRITE, [item for _, item in split_script(replacement)])

    async def _invoke(self, action: Action, state: State, args: Sequence[Any]) -> Any:
        handler = action.handler
        if not callable(handler):
            return handler
        result = handler(state, *args)
        if inspect.isawaitable(result):
            result = await result
        return result


def _is_replacement(result: Any) -> bool:
    if isinstance(result, Sentinel):
        return True
    if isinstance(result, (str, list, tuple)):
        return len(result) > 0
    return False
