import uuid
from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, JSON, text
from sqlalchemy.dialects.postgresql import UUID
from ppdb_bot.infrastructure.db.base import Base

class WaContact(Base):
    __tablename__ = "wa_contacts"
    number = Column(String(20), primary_key=True)
    name = Column(String(120), nullable=False, default="Tanpa Nama")
    updated_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))

class FormStep(Base):
    """One instruction of the intake flow; category NULL rows are fallbacks."""
    __tablename__ = "form_steps"
    id = Column(Integer, primary_key=True, autoincrement=True)
    step = Column(Integer, nullable=False, index=True)
    category = Column(String(10), nullable=True, index=True)
    instruction = Column(Text, nullable=False)
    input_kind = Column(String(20), nullable=False, default="text")
    field_key = Column(String(50), nullable=False)
    is_terminal = Column(Boolean, nullable=False, default=False, server_default=text("false"))

class FaqEntry(Base):
    __tablename__ = "faq"
    id = Column(Integer, primary_key=True, autoincrement=True)
    keyword = Column(String(50), nullable=False, index=True)
    subkey = Column(String(20), nullable=True)
    content = Column(Text, nullable=False)

class IntakeRecord(Base):
    __tablename__ = "intake_records"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(20), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    birthdate = Column(String(10), nullable=False)
    category = Column(String(10), nullable=True)
    family_id = Column(String(16), nullable=False)
    documents = Column(JSON, nullable=False, default=dict)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))

class Quota(Base):
    __tablename__ = "quota"
    category = Column(String(10), primary_key=True)
    remaining = Column(Integer, nullable=False, default=0)
