# ppdb_bot/domain/models/intake.py
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field

from ppdb_bot.domain.errors import CategoryLockedError


class Category(str, Enum):
    """School level the applicant registers for."""

    TK = "TK"
    SD = "SD"
    SMP = "SMP"
    SMA = "SMA"


class InputKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    DOCUMENT = "document"
    # either an image or a document
    FILE = "file"


class MessageKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    DOCUMENT = "document"
    VIDEO = "video"


class InboundMessage(BaseModel):
    """One message received from the transport, already classified."""

    user_id: str
    kind: MessageKind
    text: str = ""
    file_ref: Optional[str] = None
    mime_type: Optional[str] = None
    push_name: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return self.kind != MessageKind.TEXT


class StepDefinition(BaseModel):
    step: int
    category: Optional[Category] = None
    instruction: str
    input_kind: InputKind = InputKind.TEXT
    field_key: str
    is_terminal: bool = False


class Session(BaseModel):
    """Live state of one in-progress intake.

    ``step`` only moves forward, ``category`` is write-once and
    ``fields`` only grows with values of completed steps.
    """

    user_id: str
    step: int = 1
    category: Optional[Category] = None
    fields: Dict[str, str] = Field(default_factory=dict)

    def complete_step(self, values: Dict[str, str], category: Optional[Category] = None) -> None:
        """Store the values of the current step in one go.

        The category check happens before anything is written so a
        rejected answer leaves the session untouched.
        """
        if category is not None:
            if self.category is not None and self.category != category:
                raise CategoryLockedError(
                    f"session {self.user_id} is locked to {self.category.value}"
                )
            self.category = category
        self.fields.update(values)

    def advance(self) -> None:
        self.step += 1


class CompletedRecord(BaseModel):
    user_id: str
    name: str
    birthdate: str
    category: Optional[Category] = None
    family_id: str
    documents: Dict[str, str] = Field(default_factory=dict)
    status: str = "pending"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_row(self) -> dict:
        row = self.model_dump()
        row["category"] = self.category.value if self.category else None
        return row
