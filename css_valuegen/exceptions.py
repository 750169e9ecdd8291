"""
Custom exceptions for the CSS value generator.

Error philosophy:
  - ConfigConflictError → FAIL HARD: an override table disagrees with inference
    or with another override table.
  - ConfigDriftError    → FAIL HARD: an override table names a property that the
    drafts no longer define.
  - DocumentShapeError  → FAIL HARD: a draft does not have the single property
    index table we know how to read.
  - FetchError          → FAIL HARD: network or cache failure, no retry.
  - UsageError          → FAIL HARD: bad family name on the command line.

Nothing is recovered locally. Partially generated declarations are worse than
none, because downstream code trusts them at face value.
"""

from typing import Optional


class ValueGenError(Exception):
    """Base exception for all generator errors."""

    def __init__(
        self,
        message: str,
        family: Optional[str] = None,
        property_name: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message)
        self.message = message
        self.family = family
        self.property_name = property_name
        self.details = details or {}

    def to_response(self) -> dict:
        """Convert to a JSON-friendly dict for the CLI report."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "family": self.family,
            "property": self.property_name,
            "details": self.details
        }


# --- Configuration errors (override tables) ---

class ConfigConflictError(ValueGenError):
    """
    Raised when an override table contradicts inference or another table.

    Keeps the override tables minimal: an entry that inference already agrees
    with is cruft, and an entry in two opposing tables is meaningless.
    """


class ConfigDriftError(ValueGenError):
    """
    Raised when ignore/todo entries were never matched during extraction.
    """

    def __init__(
        self,
        message: str,
        family: str,
        pending: list[str],
        table: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            message,
            family=family,
            property_name=",".join(pending),
            details=details
        )
        self.pending = pending
        self.table = table  # "ignore" or "todo"


# --- Input errors ---

class DocumentShapeError(ValueGenError):
    """Raised when a draft's property index does not have the expected shape."""

    def __init__(
        self,
        message: str,
        family: str,
        revision: int,
        details: Optional[dict] = None
    ):
        super().__init__(message, family=family, details=details)
        self.revision = revision


class FetchError(ValueGenError):
    """Raised when a remote resource cannot be retrieved."""

    def __init__(
        self,
        message: str,
        url: str,
        details: Optional[dict] = None
    ):
        super().__init__(message, details=details)
        self.url = url


class UsageError(ValueGenError):
    """Raised when the CLI is given an unknown or empty family name."""
