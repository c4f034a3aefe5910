"""
Built-in actions that skip blank and commented lines.
"""

import re

from ..action import DONE, Action

COMMENT_ACTIONS = [
    Action(re.compile(r"^\s*$"), DONE, deref=False),
    Action(re.compile(r"^\s*(?:#|REM )", re.IGNORECASE), DONE, deref=False),
]
