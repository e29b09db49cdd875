"""Errors raised by the price-list import pipeline."""


class PriceImportError(Exception):
    """Base class for price-list import failures."""


class ParseError(PriceImportError, ValueError):
    """The uploaded file is unreadable or holds no data rows."""


class ValidationInputError(PriceImportError, ValueError):
    """Upload or mapping input was rejected before any background work."""


class FileTooLargeError(ValidationInputError):
    """The upload exceeds the configured size ceiling."""


class RowError(PriceImportError):
    """A single row cannot be interpreted.

    Recorded as a validation error on the row; never fails the import.
    """


class PipelineError(PriceImportError):
    """Unexpected failure inside a background validation or commit pass."""


class ConflictError(PriceImportError):
    """The operation is not allowed in the import's current phase."""


class ErrorRowsPresentError(ConflictError):
    """Commit refused because the import still has rows with errors."""

    def __init__(self, error_count: int) -> None:
        self.error_count = error_count
        super().__init__(
            f"Import has {error_count} error rows. Set skip_errors to import "
            "valid rows only, or fix the errors first."
        )


class PriceImportNotFoundError(PriceImportError, LookupError):
    """No import exists with the requested identifier."""


__all__ = [
    "ConflictError",
    "ErrorRowsPresentError",
    "FileTooLargeError",
    "ParseError",
    "PipelineError",
    "PriceImportError",
    "PriceImportNotFoundError",
    "RowError",
    "ValidationInputError",
]
