"""ASO_Scores - Error taxonomy shared by scorers, strategies and adapters."""

from __future__ import annotations


class AsoError(Exception):
    """Base exception for all scoring and suggestion errors."""
    pass


class InvalidStrategyError(AsoError, ValueError):
    """Raised when a suggestion strategy name is not recognised."""
    pass


class InvalidInputError(AsoError, ValueError):
    """Raised when a strategy seed has the wrong shape (scalar vs list)."""
    pass


class NoDataError(AsoError):
    """Raised when an averaging step receives an empty app list."""
    pass


class UpstreamError(AsoError):
    """Raised when a marketplace or extractor call fails.

    The original exception is kept on ``cause`` (and chained as
    ``__cause__`` by the raiser); it is never interpreted here.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class UnsupportedOperationError(UpstreamError):
    """Raised when a marketplace adapter does not expose an operation."""
    pass
