"""
Run state helpers: transient engine keys and argument dereferencing.

The state is a plain ``dict`` owned by the caller. During a run it is handed,
by reference, to every handler in turn; only one handler touches it at a time
because lines and actions execute strictly one after another. Handlers must not
keep writing to it from background tasks once their own call has returned.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, MutableMapping

from .errors import UnknownReferenceError

State = MutableMapping[str, Any]

ENGINE_KEY = "ottomaton"
LINE_KEY = "LINE"
TRANSIENT_KEYS = (ENGINE_KEY, LINE_KEY)

_QUOTED_RE = re.compile(r'^"(.*)"$', re.DOTALL)
_REFERENCE_RE = re.compile(r"^[A-Z][A-Z0-9]*(?:_[A-Z][A-Z0-9]*)*$")


def is_reference(value: Any) -> bool:
    return isinstance(value, str) and _REFERENCE_RE.match(value) is not None


def deref_value(state: State, value: Any) -> Any:
    if not isinstance(value, str):
        return value
    quoted = _QUOTED_RE.match(value)
    if quoted:
        return quoted.group(1)
    if not is_reference(value):
        return value
    if value not in state:
        raise UnknownReferenceError(f"Unknown Reference: {value}", name=value)
    return state[value]


def deref(state: State, args: Iterable[Any]) -> List[Any]:
    return [deref_value(state, arg) for arg in args]


def inject_transient(state: State, engine: Any) -> None:
    state[ENGINE_KEY] = engine


def strip_transient(state: State) -> State:
    for key in TRANSIENT_KEYS:
        state.pop(key, None)
    return state


def public_state(state: State, exclude: Iterable[str] = ()) -> Dict[str, Any]:
    """Copy of the state without engine keys or the given caller keys."""
    hidden = set(TRANSIENT_KEYS) | set(exclude)
    return {key: value for key, value in state.items() if key not in hidden}
