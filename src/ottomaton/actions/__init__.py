"""
Actions shipped with Ottomaton.

``COMMENT_ACTIONS`` are registered by every engine unless ``common`` is off;
``BUNDLED_ACTIONS`` are opt-in and registered by the ``otto`` command.
"""

from .assign import assign_variable
from .comment import COMMENT_ACTIONS
from .delay import sleep
from .keystroke import wait_for_keystroke

BUNDLED_ACTIONS = [assign_variable, sleep, wait_for_keystroke]

__all__ = ["BUNDLED_ACTIONS", "COMMENT_ACTIONS", "assign_variable", "sleep", "wait_for_keystroke"]
