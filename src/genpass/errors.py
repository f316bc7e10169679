"""Exception types raised by the pattern compiler."""

from __future__ import annotations

from typing import Optional


class GenpassError(Exception):
    """Base class for all genpass errors.

    Attributes:
        message: Human readable description of the problem.
        index: Zero-based character index the error refers to, if known.
    """

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.index = index

    def __str__(self) -> str:
        return self.message


class SyntaxFault(GenpassError):
    """Raised by the pattern parser when the pattern text is malformed.

    The index always points into the pattern text, so callers can draw a caret
    under the offending character.
    """

    def __init__(self, message: str, index: int):
        super().__init__(message, index)

    def __repr__(self) -> str:
        return f"SyntaxFault({self.message!r}, {self.index})"


class EvaluationFault(GenpassError):
    """Raised while evaluating lowered source text.

    The index, when present, points into the lowered source rather than the
    pattern.
    """

    def __repr__(self) -> str:
        return f"EvaluationFault({self.message!r}, {self.index})"
