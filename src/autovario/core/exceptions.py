"""Custom exceptions for autovario package."""

from __future__ import annotations


class AutoVarioError(Exception):
    """Base exception for all autovario errors."""

    pass


class InvalidInputError(AutoVarioError, ValueError):
    """Error raised for degenerate inputs (too few samples, bad lags, ...)."""

    pass


class FitFailureError(AutoVarioError):
    """Error raised when a variogram model cannot be fitted."""

    def __init__(self, message: str, model: str | None = None) -> None:
        super().__init__(message)
        self.model = model


class SingularSystemError(AutoVarioError):
    """Error raised when the kriging system cannot be factorised."""

    def __init__(self, message: str, condition: float | None = None) -> None:
        super().__init__(message)
        self.condition = condition


class ParseError(AutoVarioError):
    """Error raised when tabular input cannot be converted to samples."""

    def __init__(
        self, message: str, row: int | None = None, column: str | None = None
    ) -> None:
        super().__init__(message)
        self.row = row
        self.column = column
