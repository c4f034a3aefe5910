"""
Custom error types for the Ottomaton engine.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional


@dataclass
class OttomatonError(Exception):
    """Base error with optional script line metadata."""

    message: str
    line: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        location = ""
        if self.line is not None:
            location = f" (line {self.line})"
        return f"{self.message}{location}"


class InvalidMatcherError(OttomatonError):
    """Matcher spec is not a string, pattern, callable, sentinel or list of those."""


class InvalidRegistrationError(OttomatonError):
    """Registration cannot be resolved into actions."""


class InvalidHandlerError(InvalidRegistrationError):
    """Handler is neither callable nor a literal replacement."""


@dataclass
class UnrecognizedLineError(OttomatonError):
    """Raised when no action recognizes a line at execution time."""

    text: str | None = None


@dataclass
class UnknownReferenceError(OttomatonError):
    """Raised when an ALL_CAPS argument names a missing state entry."""

    name: str | None = None


class LineError(OttomatonError):
    """
    Aggregate of unrecognized-line diagnostics found before execution.

    ``lines`` holds one diagnostic per offending line; the message joins them so
    a caller can report every problem of a script at once.
    """

    def __init__(self, lines: str | Iterable[str]) -> None:
        if isinstance(lines, str):
            lines = [lines]
        self.lines: list[str] = list(lines)
        super().__init__("Line Errors:\n" + "\n".join(self.lines))

    def __reduce__(self) -> tuple[Any, ...]:  # pragma: no cover - pickling support
        return (type(self), (self.lines,))
