# tests/test_intake_engine.py
"""Tests for the step-driven intake engine."""

import asyncio

import pytest

from conftest import (
    IDENTITY_SD,
    IDENTITY_SMP,
    WA_ID,
    FakeCounter,
    FakeRecords,
    FakeUploader,
    build_intake,
    image_msg,
    text_msg,
)
from ppdb_bot.domain.errors import ValidationFailure
from ppdb_bot.domain.models.intake import Category, InputKind, MessageKind, StepDefinition
from ppdb_bot.domain.models.intake import InboundMessage
from ppdb_bot.domain.services.default_flow import IDENTITY_INSTRUCTION
from ppdb_bot.domain.services.faq_service import FaqService
from ppdb_bot.domain.services.intake_engine import Outcome


def _run(event_loop, intake, *messages):
    replies = []
    for message in messages:
        replies.append(event_loop.run_until_complete(intake.engine.handle(message)))
    return replies


def _session(event_loop, intake, user_id=WA_ID):
    return event_loop.run_until_complete(intake.store.get(user_id))


# ── Reset / help ─────────────────────────────────────────


def test_menu_without_session_returns_help(event_loop, intake):
    """Scenario A: MENU with no session gives help and creates nothing."""
    (reply,) = _run(event_loop, intake, text_msg("menu"))

    assert reply.outcome == Outcome.HELP
    assert reply.text == intake.responder.help()
    assert _session(event_loop, intake) is None


@pytest.mark.parametrize("command", ["MENU", "help", "Start", " mulai "])
def test_reset_commands_are_case_insensitive(event_loop, intake, command):
    (reply,) = _run(event_loop, intake, text_msg(command))
    assert reply.outcome == Outcome.HELP


def test_reset_is_idempotent(event_loop, intake):
    first, second = _run(event_loop, intake, text_msg("menu"), text_msg("menu"))

    assert first.text == second.text
    assert _session(event_loop, intake) is None


def test_reset_mid_flow_clears_session(event_loop, intake):
    _run(event_loop, intake, text_msg("daftar"), text_msg(IDENTITY_SD))
    assert _session(event_loop, intake) is not None

    (reply,) = _run(event_loop, intake, text_msg("menu"))

    assert reply.outcome == Outcome.HELP
    assert _session(event_loop, intake) is None


def test_every_reply_has_menu_footer(event_loop, intake):
    replies = _run(
        event_loop, intake,
        text_msg("halo"), text_msg("daftar"), text_msg("salah"), text_msg(IDENTITY_SD),
    )
    for reply in replies:
        assert "Ketik *MENU*" in reply.text


# ── Starting ─────────────────────────────────────────────


def test_daftar_starts_session_at_step_one(event_loop, intake):
    """Scenario B: the first instruction is the category-less step 1."""
    (reply,) = _run(event_loop, intake, text_msg("Saya mau daftar"))

    assert reply.outcome == Outcome.INSTRUCTION
    assert IDENTITY_INSTRUCTION in reply.text
    session = _session(event_loop, intake)
    assert session.step == 1
    assert session.category is None
    assert session.fields == {}


def test_start_uses_category_less_definition(event_loop):
    intake = build_intake(
        definitions=[
            StepDefinition(step=1, category=Category.SD, instruction="SD only", field_key="x"),
            StepDefinition(step=1, category=None, instruction="generic", field_key="data_diri"),
        ]
    )
    (reply,) = _run(event_loop, intake, text_msg("daftar"))
    assert "generic" in reply.text


def test_start_without_first_step_creates_no_session(event_loop):
    intake = build_intake(definitions=[])

    (reply,) = _run(event_loop, intake, text_msg("daftar"))

    assert reply.outcome == Outcome.STEP_UNAVAILABLE
    assert "Langkah 1" in reply.text
    assert _session(event_loop, intake) is None


def test_unrelated_text_without_session_is_not_an_answer(event_loop, intake):
    (reply,) = _run(event_loop, intake, text_msg(IDENTITY_SD))

    assert reply.outcome == Outcome.HELP
    assert _session(event_loop, intake) is None


def test_file_without_session_falls_through_to_help(event_loop, intake):
    (reply,) = _run(event_loop, intake, image_msg())

    assert reply.outcome == Outcome.HELP
    assert intake.uploader.calls == []


# ── Answering ────────────────────────────────────────────


def test_identity_answer_sets_category_and_advances(event_loop, intake):
    _, reply = _run(event_loop, intake, text_msg("daftar"), text_msg(IDENTITY_SD))

    assert reply.outcome == Outcome.INSTRUCTION
    assert "Kartu Keluarga" in reply.text
    session = _session(event_loop, intake)
    assert session.step == 2
    assert session.category == Category.SD
    assert session.fields == {
        "name": "Ana Putri",
        "birthdate": "2016-05-02",
        "category": "SD",
        "family_id": "1234567890123456",
    }


@pytest.mark.parametrize(
    "answer, failure, snippet",
    [
        ("#Ana #2016-05-02 #SD", ValidationFailure.BAD_FORMAT, "Format salah"),
        ("#Ana #02-05-2016 #SD #1234567890123456", ValidationFailure.BAD_DATE, "tanggal"),
        ("#Ana #2016-05-02 #SMK #1234567890123456", ValidationFailure.BAD_CATEGORY, "Jenjang"),
        ("#Ana #2016-05-02 #SD #123456789012345", ValidationFailure.BAD_IDENTIFIER, "16 digit"),
    ],
)
def test_invalid_identity_does_not_advance(event_loop, intake, answer, failure, snippet):
    _, reply = _run(event_loop, intake, text_msg("daftar"), text_msg(answer))

    assert reply.outcome == Outcome.VALIDATION_FAILED
    assert reply.failure == failure
    assert snippet in reply.text
    session = _session(event_loop, intake)
    assert session.step == 1
    assert session.category is None
    assert session.fields == {}


def test_image_on_text_step_is_wrong_kind(event_loop, intake):
    _, reply = _run(event_loop, intake, text_msg("daftar"), image_msg())

    assert reply.failure == ValidationFailure.WRONG_KIND
    assert _session(event_loop, intake).step == 1
    assert intake.uploader.calls == []


def test_upload_is_stored_under_url_key(event_loop, intake):
    _run(event_loop, intake, text_msg("daftar"), text_msg(IDENTITY_SD), image_msg(ref="kk-media"))

    session = _session(event_loop, intake)
    assert session.step == 3
    assert session.fields["kk_url"] == f"https://files.test/{WA_ID}/kk.jpg"
    assert intake.uploader.calls == [("image", "kk-media", f"{WA_ID}/kk")]


def test_upload_failure_reprompts_same_step(event_loop):
    intake = build_intake(uploader=FakeUploader(fail=True))

    *_, reply = _run(event_loop, intake, text_msg("daftar"), text_msg(IDENTITY_SD), image_msg())

    assert reply.outcome == Outcome.UPLOAD_FAILED
    session = _session(event_loop, intake)
    assert session.step == 2
    assert "kk_url" not in session.fields


def test_text_on_terminal_upload_step_is_rejected(event_loop, intake):
    """Scenario C: text at the photo step re-prompts the same instruction."""
    _run(
        event_loop, intake,
        text_msg("daftar"), text_msg(IDENTITY_SD), image_msg(), image_msg(),
    )
    before = _session(event_loop, intake)
    assert before.step == 4

    (reply,) = _run(event_loop, intake, text_msg("ini fotonya"))

    assert reply.outcome == Outcome.VALIDATION_FAILED
    assert reply.failure == ValidationFailure.WRONG_KIND
    assert "pas foto" in reply.text
    assert "gambar" in reply.text
    after = _session(event_loop, intake)
    assert after == before


def test_free_text_step_stores_trimmed_answer(event_loop):
    intake = build_intake(
        definitions=[
            StepDefinition(step=1, instruction="Alamat?", field_key="alamat"),
            StepDefinition(step=2, instruction="Foto", input_kind=InputKind.IMAGE, field_key="foto", is_terminal=True),
        ]
    )
    _, empty, ok = _run(
        event_loop, intake, text_msg("daftar"), text_msg("   "), text_msg("  Jl. Merdeka 10 "),
    )

    assert empty.failure == ValidationFailure.EMPTY
    assert ok.outcome == Outcome.INSTRUCTION
    assert _session(event_loop, intake).fields == {"alamat": "Jl. Merdeka 10"}


# ── Category lock ────────────────────────────────────────


def _flow_with_level_step():
    return [
        StepDefinition(step=1, instruction="Data diri", field_key="data_diri"),
        StepDefinition(step=2, instruction="Konfirmasi jenjang", field_key="jenjang"),
        StepDefinition(step=3, instruction="Foto", input_kind=InputKind.IMAGE, field_key="foto", is_terminal=True),
    ]


def test_category_cannot_change_within_session(event_loop):
    intake = build_intake(definitions=_flow_with_level_step())

    *_, reply = _run(event_loop, intake, text_msg("daftar"), text_msg(IDENTITY_SD), text_msg("SMP"))

    assert reply.failure == ValidationFailure.CATEGORY_LOCKED
    assert "SD" in reply.text
    session = _session(event_loop, intake)
    assert session.category == Category.SD
    assert session.step == 2


def test_same_category_confirmation_is_accepted(event_loop):
    intake = build_intake(definitions=_flow_with_level_step())

    *_, reply = _run(event_loop, intake, text_msg("daftar"), text_msg(IDENTITY_SD), text_msg("sd"))

    assert reply.outcome == Outcome.INSTRUCTION
    assert _session(event_loop, intake).step == 3


def test_committed_record_has_single_category(event_loop):
    intake = build_intake(definitions=_flow_with_level_step())

    _run(
        event_loop, intake,
        text_msg("daftar"), text_msg(IDENTITY_SD), text_msg("SMA"), text_msg("SD"), image_msg(),
    )

    assert len(intake.records.rows) == 1
    assert intake.records.rows[0]["category"] == "SD"
    assert intake.counter.calls == ["SD"]


# ── Completion ───────────────────────────────────────────


def test_full_sd_flow_commits_once(event_loop, intake):
    """Scenario D: complete SD flow inserts one pending record."""
    replies = _run(
        event_loop, intake,
        text_msg("daftar"), text_msg(IDENTITY_SD), image_msg(), image_msg(), image_msg(),
    )

    final = replies[-1]
    assert final.outcome == Outcome.COMMITTED
    assert final.record_id == "rec-1"
    assert final.text == intake.responder.commit_success()

    assert len(intake.records.rows) == 1
    row = intake.records.rows[0]
    assert row["status"] == "pending"
    assert row["user_id"] == WA_ID
    assert row["category"] == "SD"
    assert row["name"] == "Ana Putri"
    assert set(row["documents"]) == {"kk_url", "akta_url", "foto_url"}

    assert intake.counter.calls == ["SD"]
    assert intake.counter.quotas["SD"] == 9
    assert _session(event_loop, intake) is None


def test_message_after_commit_starts_from_scratch(event_loop, intake):
    _run(
        event_loop, intake,
        text_msg("daftar"), text_msg(IDENTITY_SD), image_msg(), image_msg(), image_msg(),
    )
    (reply,) = _run(event_loop, intake, image_msg())

    assert reply.outcome == Outcome.HELP
    assert len(intake.records.rows) == 1


def test_older_levels_get_extra_document_steps(event_loop, intake):
    replies = _run(
        event_loop, intake,
        text_msg("daftar"), text_msg(IDENTITY_SMP),
        image_msg(), image_msg(), image_msg(), image_msg(),
    )
    assert [r.outcome for r in replies[2:]] == [Outcome.INSTRUCTION] * 4
    assert "Rapor" in replies[3].text
    assert "Ijazah" in replies[4].text

    (final,) = _run(event_loop, intake, image_msg())
    assert final.outcome == Outcome.COMMITTED
    assert set(intake.records.rows[0]["documents"]) == {
        "kk_url", "akta_url", "rapor_url", "ijazah_url", "foto_url",
    }


def test_fields_only_hold_completed_steps(event_loop, intake):
    expected_after_step = {
        1: set(),
        2: {"name", "birthdate", "category", "family_id"},
        3: {"name", "birthdate", "category", "family_id", "kk_url"},
        4: {"name", "birthdate", "category", "family_id", "kk_url", "akta_url"},
    }
    _run(event_loop, intake, text_msg("daftar"))
    for message in [text_msg(IDENTITY_SD), image_msg(), image_msg()]:
        _run(event_loop, intake, message)
        session = _session(event_loop, intake)
        assert set(session.fields) == expected_after_step[session.step]


def test_commit_failure_clears_session(event_loop):
    intake = build_intake(records=FakeRecords(fail=True))

    *_, final = _run(
        event_loop, intake,
        text_msg("daftar"), text_msg(IDENTITY_SD), image_msg(), image_msg(), image_msg(),
    )

    assert final.outcome == Outcome.COMMIT_FAILED
    assert "Hubungi admin" in final.text
    assert intake.counter.calls == []
    assert _session(event_loop, intake) is None


def test_counter_failure_does_not_undo_commit(event_loop):
    intake = build_intake(counter=FakeCounter(fail=True))

    *_, final = _run(
        event_loop, intake,
        text_msg("daftar"), text_msg(IDENTITY_SD), image_msg(), image_msg(), image_msg(),
    )

    assert final.outcome == Outcome.COMMITTED
    assert len(intake.records.rows) == 1
    assert _session(event_loop, intake) is None


# ── Catalog inconsistencies ──────────────────────────────


def test_current_step_vanishing_aborts_session(event_loop, intake):
    """Scenario E: the current step no longer resolves."""
    _run(event_loop, intake, text_msg("daftar"), text_msg(IDENTITY_SD))
    intake.source.remove(2, Category.SD)

    (reply,) = _run(event_loop, intake, image_msg())

    assert reply.outcome == Outcome.INSTRUCTION_MISSING
    assert reply.text == intake.responder.instruction_missing()
    assert _session(event_loop, intake) is None
    assert intake.records.rows == []
    assert intake.uploader.calls == []


def test_missing_next_step_before_terminal_does_not_commit(event_loop, intake):
    _run(
        event_loop, intake,
        text_msg("daftar"), text_msg(IDENTITY_SMP), image_msg(), image_msg(),
    )
    intake.source.remove(5, Category.SMP)

    (reply,) = _run(event_loop, intake, image_msg())

    assert reply.outcome == Outcome.INSTRUCTION_MISSING
    assert reply.text == intake.responder.next_instruction_missing()
    assert intake.records.rows == []
    assert intake.counter.calls == []
    assert _session(event_loop, intake) is None


def test_catalog_errors_are_treated_as_missing_steps(event_loop, intake):
    _run(event_loop, intake, text_msg("daftar"))

    async def broken(step):
        raise ConnectionError("catalog offline")

    intake.source.rows_for_step = broken
    (reply,) = _run(event_loop, intake, text_msg(IDENTITY_SD))

    assert reply.outcome == Outcome.INSTRUCTION_MISSING
    assert _session(event_loop, intake) is None


# ── FAQ ──────────────────────────────────────────────────


class _FaqTable:
    def __init__(self, entries):
        self.entries = entries
        self.calls = []

    async def __call__(self, keyword, subkey):
        self.calls.append((keyword, subkey))
        return self.entries.get((keyword, subkey))


def test_faq_keyword_without_session(event_loop):
    table = _FaqTable({("biaya", "SD"): "Biaya SD: Rp 500.000"})
    intake = build_intake(faq=FaqService(table))

    (reply,) = _run(event_loop, intake, text_msg("Berapa biaya SD?"))

    assert reply.outcome == Outcome.FAQ
    assert "Rp 500.000" in reply.text
    assert table.calls == [("biaya", "SD")]


def test_faq_missing_entry(event_loop):
    intake = build_intake(faq=FaqService(_FaqTable({})))

    (reply,) = _run(event_loop, intake, text_msg("jadwal"))

    assert reply.outcome == Outcome.FAQ
    assert "Info belum tersedia" in reply.text


def test_pendaftaran_is_answered_as_faq(event_loop):
    table = _FaqTable({("pendaftaran", None): "Ketik DAFTAR untuk mulai."})
    intake = build_intake(faq=FaqService(table))

    (reply,) = _run(event_loop, intake, text_msg("info pendaftaran"))

    assert reply.outcome == Outcome.FAQ
    assert _session(event_loop, intake) is None


def test_faq_keywords_inside_answers_are_not_intercepted(event_loop):
    table = _FaqTable({("alamat", None): "Jl. Sekolah 1"})
    intake = build_intake(
        definitions=[
            StepDefinition(step=1, instruction="Alamat rumah?", field_key="alamat"),
            StepDefinition(step=2, instruction="Foto", input_kind=InputKind.IMAGE, field_key="foto", is_terminal=True),
        ],
        faq=FaqService(table),
    )

    _, reply = _run(event_loop, intake, text_msg("daftar"), text_msg("alamat: Jl. Mawar 3"))

    assert reply.outcome == Outcome.INSTRUCTION
    assert table.calls == []
    assert _session(event_loop, intake).fields == {"alamat": "alamat: Jl. Mawar 3"}


# ── Concurrency ──────────────────────────────────────────


class _SlowFirstUploader(FakeUploader):
    async def upload(self, file_kind, file_ref, key_prefix, mime_type=None):
        if not self.calls:
            await asyncio.sleep(0.05)
        return await super().upload(file_kind, file_ref, key_prefix, mime_type)


def test_same_user_messages_are_processed_in_order(event_loop):
    intake = build_intake(uploader=_SlowFirstUploader())
    _run(event_loop, intake, text_msg("daftar"), text_msg(IDENTITY_SD))

    async def double_send():
        return await asyncio.gather(
            intake.engine.handle(image_msg(ref="first")),
            intake.engine.handle(image_msg(ref="second")),
        )

    first, second = event_loop.run_until_complete(double_send())

    assert "Akta" in first.text
    assert "pas foto" in second.text
    assert [c[1:] for c in intake.uploader.calls] == [
        ("first", f"{WA_ID}/kk"),
        ("second", f"{WA_ID}/akta"),
    ]
    assert _session(event_loop, intake).step == 4


class _GatedUploader(FakeUploader):
    def __init__(self, gate):
        super().__init__()
        self.gate = gate

    async def upload(self, file_kind, file_ref, key_prefix, mime_type=None):
        await self.gate.wait()
        return await super().upload(file_kind, file_ref, key_prefix, mime_type)


def test_other_users_are_not_blocked(event_loop):
    other = "6289999999999"

    async def scenario():
        gate = asyncio.Event()
        intake = build_intake(uploader=_GatedUploader(gate))
        await intake.engine.handle(text_msg("daftar"))
        await intake.engine.handle(text_msg(IDENTITY_SD))

        pending = asyncio.ensure_future(intake.engine.handle(image_msg()))
        await asyncio.sleep(0)
        reply_other = await asyncio.wait_for(
            intake.engine.handle(text_msg("daftar", user_id=other)), timeout=1
        )
        still_waiting = not pending.done()
        gate.set()
        reply_first = await pending
        return intake, reply_other, still_waiting, reply_first

    intake, reply_other, still_waiting, reply_first = event_loop.run_until_complete(scenario())

    assert reply_other.outcome == Outcome.INSTRUCTION
    assert still_waiting
    assert reply_first.outcome == Outcome.INSTRUCTION
    assert len(intake.engine._locks) == 0


def test_video_is_never_uploaded(event_loop, intake):
    _run(event_loop, intake, text_msg("daftar"), text_msg(IDENTITY_SD))
    video = InboundMessage(user_id=WA_ID, kind=MessageKind.VIDEO, file_ref="v1", mime_type="video/mp4")

    (reply,) = _run(event_loop, intake, video)

    assert reply.failure == ValidationFailure.WRONG_KIND
    assert intake.uploader.calls == []


class _UnreachableRecords(FakeRecords):
    async def insert(self, row):
        raise ConnectionRefusedError(111, "Connect call failed")


def test_unreachable_database_reports_commit_failure(event_loop):
    intake = build_intake(records=_UnreachableRecords())

    *_, final = _run(
        event_loop, intake,
        text_msg("daftar"), text_msg(IDENTITY_SD), image_msg(), image_msg(), image_msg(),
    )

    assert final.outcome == Outcome.COMMIT_FAILED
    assert final.text == intake.responder.commit_failure()
    assert intake.counter.calls == []
    assert _session(event_loop, intake) is None


def test_document_on_text_step_is_wrong_kind(event_loop, intake):
    pdf = InboundMessage(
        user_id=WA_ID, kind=MessageKind.DOCUMENT, text="menu", file_ref="d1", mime_type="application/pdf"
    )
    _, reply = _run(event_loop, intake, text_msg("daftar"), pdf)

    assert reply.failure == ValidationFailure.WRONG_KIND
    assert _session(event_loop, intake).step == 1
