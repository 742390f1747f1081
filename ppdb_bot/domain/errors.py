# ppdb_bot/domain/errors.py
"""
Error taxonomy of the intake flow.

Validation failures are values (``ValidationFailure``), never raised.
Collaborator failures are exceptions raised by adapters and caught by the
engine or the commit coordinator before they reach the message boundary.
"""

from __future__ import annotations

from enum import Enum


class ValidationFailure(str, Enum):
    """User-correctable answer problems. The step is re-prompted."""

    EMPTY = "empty"
    BAD_FORMAT = "bad_format"
    BAD_DATE = "bad_date"
    BAD_CATEGORY = "bad_category"
    BAD_IDENTIFIER = "bad_identifier"
    UNKNOWN = "unknown"
    WRONG_KIND = "wrong_kind"
    CATEGORY_LOCKED = "category_locked"


class IntakeError(Exception):
    """Base class for collaborator failures in the intake flow."""


class LookupInconsistency(IntakeError):
    """The catalog has no definition for a step the user is sitting on."""

    def __init__(self, step: int, category: str | None):
        super().__init__(f"no instruction for step={step} category={category}")
        self.step = step
        self.category = category


class UploadError(IntakeError):
    """Fetching or storing an uploaded file failed."""


class PersistFailure(IntakeError):
    """Inserting a record or updating a counter failed."""


class CategoryLockedError(IntakeError):
    """A session tried to switch to a different category."""
