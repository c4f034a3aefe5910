"""
Actions pair a line matcher with a handler.

A matcher is any callable ``line -> list | None`` (or an awaitable resolving to
one). ``normalize_matcher`` builds one from the supported spec shapes:

* ``str``: template where every ``"PLACEHOLDER"`` captures ``(.+)`` and the rest
  is matched literally, anchored at both ends;
* ``re.Pattern``: searched against the line, returning only the groups;
* callable: used as-is;
* list/tuple of specs: first sub-matcher that matches wins;
* ``DONE`` / ``FINISH``: matches only that sentinel line.
"""

from __future__ import annotations

import inspect
import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Sequence, Union

from .errors import InvalidHandlerError, InvalidMatcherError


class Sentinel(Enum):
    """Engine-reserved control values, compared by identity and never equal to script text."""

    DONE = "DONE"
    FINISH = "FINISH"

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"Sentinel.{self.name}"


DONE = Sentinel.DONE
FINISH = Sentinel.FINISH

MatchResult = Optional[List[Any]]
Matcher = Callable[[Any], Union[MatchResult, Awaitable[MatchResult]]]
Handler = Union[Callable[..., Any], str, List[str], Sentinel]

_PLACEHOLDER_RE = re.compile(r'"[^"]+"')


@dataclass(frozen=True)
class ActionOptions:
    deref: bool = True


def coerce_match(result: Any) -> MatchResult:
    if isinstance(result, (list, tuple)):
        return list(result)
    return None


def compile_template(template: str) -> re.Pattern[str]:
    parts: list[str] = []
    last = 0
    for placeholder in _PLACEHOLDER_RE.finditer(template):
        parts.append(re.escape(template[last : placeholder.start()]))
        parts.append("(.+)")
        last = placeholder.end()
    parts.append(re.escape(template[last:]))
    return re.compile("^" + "".join(parts) + "$")


def _pattern_matcher(pattern: re.Pattern[str]) -> Matcher:
    def match(line: Any) -> MatchResult:
        if not isinstance(line, str):
            return None
        found = pattern.search(line)
        if found is None:
            return None
        return list(found.groups())

    match.pattern = pattern  # type: ignore[attr-defined]
    return match


def _sentinel_matcher(sentinel: Sentinel) -> Matcher:
    def match(line: Any) -> MatchResult:
        return [] if line is sentinel else None

    return match


async def _await_remaining(pending: Awaitable[Any], rest: Sequence[Matcher], line: Any) -> MatchResult:
    result = coerce_match(await pending)
    if result is not None:
        return result
    for matcher in rest:
        candidate = matcher(line)
        if inspect.isawaitable(candidate):
            candidate = await candidate
        result = coerce_match(candidate)
        if result is not None:
            return result
    return None


def _compound_matcher(matchers: Sequence[Matcher]) -> Matcher:
    def match(line: Any) -> Union[MatchResult, Awaitable[MatchResult]]:
        for index, matcher in enumerate(matchers):
            result = matcher(line)
            if inspect.isawaitable(result):
                # Stay synchronous until a sub-matcher actually suspends.
                return _await_remaining(result, matchers[index + 1 :], line)
            result = coerce_match(result)
            if result is not None:
                return result
        return None

    return match


def normalize_matcher(spec: Any) -> Matcher:
    if isinstance(spec, Sentinel):
        return _sentinel_matcher(spec)
    if isinstance(spec, str):
        return _pattern_matcher(compile_template(spec))
    if isinstance(spec, re.Pattern):
        return _pattern_matcher(spec)
    if isinstance(spec, (list, tuple)):
        return _compound_matcher([normalize_matcher(item) for item in spec])
    if callable(spec):
        return spec
    raise InvalidMatcherError(f"Invalid matcher: {spec!r}")


def _normalize_handler(handler: Any) -> Handler:
    if isinstance(handler, (str, Sentinel)) or callable(handler):
        return handler
    if isinstance(handler, (list, tuple)) and all(isinstance(line, (str, Sentinel)) for line in handler):
        return list(handler)
    raise InvalidHandlerError(f"Invalid handler: {handler!r}")


def _coerce_options(options: ActionOptions | Mapping[str, Any] | None) -> ActionOptions:
    if options is None:
        return ActionOptions()
    if isinstance(options, ActionOptions):
        return options
    return ActionOptions(deref=bool(options.get("deref", True)))


class Action:
    """A normalized matcher bound to a handler. Treated as immutable once built."""

    __slots__ = ("spec", "matcher", "handler", "options", "sentinel")

    def __init__(
        self,
        matcher: Any,
        handler: Any,
        options: ActionOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        if kwargs:
            options = {**asdict(_coerce_options(options)), **kwargs}
        self.spec = matcher
        self.sentinel: Sentinel | None = matcher if isinstance(matcher, Sentinel) else None
        self.matcher: Matcher = normalize_matcher(matcher)
        self.handler: Handler = _normalize_handler(handler)
        self.options: ActionOptions = _coerce_options(options)

    def accepts(self, line: Any) -> bool:
        """Sentinel lines are only offered to the action registered for that sentinel."""
        if isinstance(line, Sentinel):
            return self.sentinel is line
        return self.sentinel is None

    def __repr__(self) -> str:
        return f"Action(matcher={self.spec!r}, handler={self.handler!r}, options={self.options!r})"
