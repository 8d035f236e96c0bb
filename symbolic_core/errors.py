"""
Exception types raised by symbolic_core.

Every failure is reported synchronously at the offending call and is
recoverable by the caller. A constructor that raises leaves no object behind.
"""

from typing import Optional


class SymbolicCoreError(Exception):
    """Base class for all symbolic_core errors"""


class ShapeError(SymbolicCoreError, ValueError):
    """Input is not exactly two-dimensional, or a tree/name list has the wrong shape"""


class FormatError(SymbolicCoreError, ValueError):
    """Malformed delimited file, non-numeric cell, or invalid variable naming"""


class NotFoundError(SymbolicCoreError, KeyError):
    """Unknown variable name, hash, index or identifier"""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ''


class ExpressionSyntaxError(SymbolicCoreError, ValueError):
    """Malformed infix expression text"""

    def __init__(self, message: str, position: Optional[int] = None):
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)
        self.position = position
