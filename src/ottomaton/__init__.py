"""
Ottomaton: a rule-driven interpreter for line-oriented automation scripts.
"""

from .action import DONE, FINISH, Action, ActionOptions, Sentinel, normalize_matcher
from .config import OttomatonOptions, load_options
from .engine import Ottomaton
from .errors import (
    InvalidHandlerError,
    InvalidMatcherError,
    InvalidRegistrationError,
    LineError,
    OttomatonError,
    UnknownReferenceError,
    UnrecognizedLineError,
)
from .state import deref, deref_value
from .version import __version__  # noqa: F401

__all__ = [
    "Ottomaton",
    "OttomatonOptions",
    "load_options",
    "Action",
    "ActionOptions",
    "Sentinel",
    "DONE",
    "FINISH",
    "normalize_matcher",
    "deref",
    "deref_value",
    "OttomatonError",
    "InvalidMatcherError",
    "InvalidRegistrationError",
    "InvalidHandlerError",
    "LineError",
    "UnrecognizedLineError",
    "UnknownReferenceError",
    "__version__",
]
