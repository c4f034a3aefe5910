from __future__ import annotations

import re

from ..action import Action
from ..state import State, deref_value


def _assign(state: State, name: str, value: str) -> None:
    state[name] = deref_value(state, value)


# ``NAME = value`` stores a quoted literal, a referenced state value or plain text.
assign_variable = Action(re.compile(r"^(.*) = (.*)$"), _assign, deref=False)
