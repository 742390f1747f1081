"""Answer validation for the intake flow.

Each validator is a pure function returning ``Ok(value)`` with the
normalised value or ``Err(reason)`` with a :class:`ValidationFailure`.
Nothing here raises on bad user input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from ppdb_bot.domain.errors import ValidationFailure
from ppdb_bot.domain.models.intake import Category, InputKind, MessageKind

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

COMPOSITE_DELIMITER = "#"
COMPOSITE_PARTS = 4
FAMILY_ID_LENGTH = 16

_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
_FAMILY_ID_RE = re.compile(r"^[0-9]{%d}$" % FAMILY_ID_LENGTH)
_CATEGORY_RE = re.compile(
    r"\b(%s)\b" % "|".join(c.value for c in Category), re.IGNORECASE
)

# Which inbound message kinds satisfy which expected input kind
_ACCEPTED_KINDS: dict[InputKind, frozenset[MessageKind]] = {
    InputKind.TEXT: frozenset({MessageKind.TEXT}),
    InputKind.IMAGE: frozenset({MessageKind.IMAGE}),
    InputKind.DOCUMENT: frozenset({MessageKind.DOCUMENT}),
    InputKind.FILE: frozenset({MessageKind.IMAGE, MessageKind.DOCUMENT}),
}


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Ok:
    value: Any = None


@dataclass(frozen=True)
class Err:
    reason: ValidationFailure


ValidationResult = Union[Ok, Err]


@dataclass(frozen=True)
class Identity:
    """Normalised combined identity answer."""

    name: str
    birthdate: str
    category: Category
    family_id: str

    def as_fields(self) -> dict[str, str]:
        return {
            "name": self.name,
            "birthdate": self.birthdate,
            "category": self.category.value,
            "family_id": self.family_id,
        }


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------

def validate_text(raw: Optional[str]) -> ValidationResult:
    value = (raw or "").strip()
    if not value:
        return Err(ValidationFailure.EMPTY)
    return Ok(value)


def parse_category(raw: Optional[str]) -> Optional[Category]:
    """Return the first category token found in *raw*, or None."""
    match = _CATEGORY_RE.search(raw or "")
    if not match:
        return None
    return Category(match.group(1).upper())


def validate_category(raw: Optional[str]) -> ValidationResult:
    category = parse_category(raw)
    if category is None:
        return Err(ValidationFailure.UNKNOWN)
    return Ok(category)


def _is_calendar_date(value: str) -> bool:
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def validate_composite_identity(raw: Optional[str]) -> ValidationResult:
    """Validate ``Name#YYYY-MM-DD#Category#FamilyId``.

    Leading or doubled delimiters are tolerated; only the first four
    non-empty segments are used.
    """
    parts = [p.strip() for p in (raw or "").split(COMPOSITE_DELIMITER)]
    parts = [p for p in parts if p]
    if len(parts) < COMPOSITE_PARTS:
        return Err(ValidationFailure.BAD_FORMAT)

    name, birthdate, category_token, family_id = parts[:COMPOSITE_PARTS]

    if not _DATE_RE.match(birthdate) or not _is_calendar_date(birthdate):
        return Err(ValidationFailure.BAD_DATE)

    category = parse_category(category_token)
    if category is None:
        return Err(ValidationFailure.BAD_CATEGORY)

    family_id = re.sub(r"\s+", "", family_id)
    if not _FAMILY_ID_RE.match(family_id):
        return Err(ValidationFailure.BAD_IDENTIFIER)

    return Ok(Identity(name=name, birthdate=birthdate, category=category, family_id=family_id))


def validate_file(received_kind: MessageKind, expected_kind: InputKind) -> ValidationResult:
    if received_kind not in _ACCEPTED_KINDS.get(expected_kind, frozenset()):
        return Err(ValidationFailure.WRONG_KIND)
    return Ok(None)
