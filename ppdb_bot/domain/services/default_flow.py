# ppdb_bot/domain/services/default_flow.py
"""
Registration flow shipped with the bot, used to seed ``form_steps``.

TK and SD applicants upload the family card, the birth certificate and a
photo. SMP and SMA applicants additionally upload their last report card
and their previous diploma, so their step numbers diverge after step 3.
"""

from __future__ import annotations

from ppdb_bot.domain.models.intake import Category, InputKind, StepDefinition

IDENTITY_INSTRUCTION = (
    "📝 Kirim data diri siswa dalam satu pesan dengan format:\n"
    "#Nama #YYYY-MM-DD #Jenjang #NomorKK\n\n"
    "Contoh: #Ana Putri #2016-05-02 #SD #1234567890123456"
)

_DOCUMENTS = {
    "kk": "📎 Kirim foto *Kartu Keluarga*.",
    "akta": "📎 Kirim foto *Akta Kelahiran*.",
    "rapor": "📎 Kirim foto *Rapor* semester terakhir.",
    "ijazah": "📎 Kirim foto *Ijazah* jenjang sebelumnya.",
    "foto": "📷 Terakhir, kirim *pas foto* siswa.",
}

_DOCUMENTS_BY_CATEGORY = {
    Category.TK: ["kk", "akta", "foto"],
    Category.SD: ["kk", "akta", "foto"],
    Category.SMP: ["kk", "akta", "rapor", "ijazah", "foto"],
    Category.SMA: ["kk", "akta", "rapor", "ijazah", "foto"],
}


def default_flow() -> list[StepDefinition]:
    steps = [
        StepDefinition(
            step=1,
            category=None,
            instruction=IDENTITY_INSTRUCTION,
            input_kind=InputKind.TEXT,
            field_key="data_diri",
        )
    ]
    for category, documents in _DOCUMENTS_BY_CATEGORY.items():
        for offset, key in enumerate(documents):
            steps.append(
                StepDefinition(
                    step=offset + 2,
                    category=category,
                    instruction=_DOCUMENTS[key],
                    input_kind=InputKind.IMAGE,
                    field_key=key,
                    is_terminal=key == "foto",
                )
            )
    return steps
