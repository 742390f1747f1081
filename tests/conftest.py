"""Shared test fixtures for the PPDB bot test suite."""

import asyncio
from types import SimpleNamespace

import pytest

from ppdb_bot.domain.errors import PersistFailure, UploadError
from ppdb_bot.domain.models.intake import InboundMessage, MessageKind
from ppdb_bot.domain.services.commit_coordinator import CommitCoordinator
from ppdb_bot.domain.services.default_flow import default_flow
from ppdb_bot.domain.services.intake_engine import IntakeEngine
from ppdb_bot.domain.services.responder import Responder
from ppdb_bot.domain.services.step_catalog import InMemoryStepSource, StepCatalog
from ppdb_bot.infrastructure.cache.session_store import InMemorySessionStore

WA_ID = "6281234567890"
IDENTITY_SD = "#Ana Putri #2016-05-02 #SD #1234567890123456"
IDENTITY_SMP = "#Budi Santoso #2012-01-20 #SMP #6543210987654321"


@pytest.fixture(scope="session")
def event_loop():
    """Use a single event loop for the entire test session."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


class FakeRecords:
    def __init__(self, fail: bool = False):
        self.rows: list[dict] = []
        self.fail = fail

    async def insert(self, row: dict) -> str:
        if self.fail:
            raise PersistFailure("database unavailable")
        self.rows.append(row)
        return f"rec-{len(self.rows)}"


class FakeCounter:
    def __init__(self, quotas: dict | None = None, fail: bool = False):
        self.quotas = dict(quotas or {"TK": 10, "SD": 10, "SMP": 10, "SMA": 10})
        self.calls: list[str] = []
        self.fail = fail

    async def decrement(self, category: str):
        self.calls.append(category)
        if self.fail:
            raise PersistFailure("quota table locked")
        self.quotas[category] -= 1
        return self.quotas[category]


class FakeUploader:
    def __init__(self, fail: bool = False):
        self.calls: list[tuple] = []
        self.fail = fail

    async def upload(self, file_kind, file_ref, key_prefix, mime_type=None):
        self.calls.append((file_kind, file_ref, key_prefix))
        if self.fail:
            raise UploadError("storage unreachable")
        return f"https://files.test/{key_prefix}.jpg"


def text_msg(text: str, user_id: str = WA_ID) -> InboundMessage:
    return InboundMessage(user_id=user_id, kind=MessageKind.TEXT, text=text)


def image_msg(user_id: str = WA_ID, ref: str = "media-1") -> InboundMessage:
    return InboundMessage(
        user_id=user_id, kind=MessageKind.IMAGE, file_ref=ref, mime_type="image/jpeg"
    )


def build_intake(definitions=None, faq=None, records=None, counter=None, uploader=None):
    """Wire an engine against in-memory collaborators."""
    source = InMemoryStepSource(default_flow() if definitions is None else definitions)
    store = InMemorySessionStore()
    records = records or FakeRecords()
    counter = counter or FakeCounter()
    uploader = uploader or FakeUploader()
    committer = CommitCoordinator(records=records, counter=counter, sessions=store)
    engine = IntakeEngine(
        catalog=StepCatalog(source),
        store=store,
        uploader=uploader,
        committer=committer,
        responder=Responder(),
        faq=faq,
    )
    return SimpleNamespace(
        engine=engine,
        source=source,
        store=store,
        records=records,
        counter=counter,
        uploader=uploader,
        responder=Responder(),
    )


@pytest.fixture
def intake():
    return build_intake()
