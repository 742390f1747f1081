SUPPORTED_LANGS = ["id", "en"]
DEFAULT_LANG = "id"

FOOTER = {
    "id": "👉 Ketik *MENU* untuk kembali ke menu utama.",
    "en": "👉 Type *MENU* to return to the main menu.",
}

MESSAGES = {
    "HELP": {
        "id": (
            "⚡ Hi! Selamat datang di *Chatbot PPDB* 🎉\n\n"
            "📌 *Ketik salah satu kata kunci berikut ini:*\n\n"
            "1️⃣ *KUOTA* → Lihat kuota semua jenjang\n"
            "2️⃣ *BIAYA* → Info biaya per jenjang\n"
            "3️⃣ *SYARAT* → Persyaratan pendaftaran\n"
            "4️⃣ *JADWAL* → Jadwal PPDB terbaru\n"
            "5️⃣ *DAFTAR* → Daftar PPDB\n"
            "6️⃣ *KONTAK* → Hubungi admin\n"
            "7️⃣ *BEASISWA* → Info beasiswa"
        ),
        "en": (
            "⚡ Hi! Welcome to the *PPDB Chatbot* 🎉\n\n"
            "📌 *Send one of these keywords:*\n\n"
            "1️⃣ *KUOTA* → Seats per level\n"
            "2️⃣ *BIAYA* → Fees per level\n"
            "3️⃣ *SYARAT* → Requirements\n"
            "4️⃣ *JADWAL* → Latest schedule\n"
            "5️⃣ *DAFTAR* → Register\n"
            "6️⃣ *KONTAK* → Contact an admin\n"
            "7️⃣ *BEASISWA* → Scholarships"
        ),
    },

    "FAQ_UNAVAILABLE": {
        "id": "❌ Info belum tersedia.",
        "en": "❌ This information is not available yet.",
    },

    "STEP_UNAVAILABLE": {
        "id": "⚠️ Langkah {step} belum tersedia.",
        "en": "⚠️ Step {step} is not available yet.",
    },

    "INSTRUCTION_MISSING": {
        "id": "⚠️ Instruksi step tidak ditemukan. Hubungi admin.",
        "en": "⚠️ The instruction for this step was not found. Please contact an admin.",
    },

    "NEXT_INSTRUCTION_MISSING": {
        "id": "⚠️ Instruksi berikutnya tidak ditemukan. Hubungi admin.",
        "en": "⚠️ The next instruction was not found. Please contact an admin.",
    },

    "INVALID_EMPTY": {
        "id": "❌ Jawaban tidak boleh kosong.\n\n{instruction}",
        "en": "❌ The answer cannot be empty.\n\n{instruction}",
    },

    "INVALID_BAD_FORMAT": {
        "id": "❌ Format salah. Gunakan: #Nama #YYYY-MM-DD #Jenjang #NomorKK",
        "en": "❌ Wrong format. Use: #Name #YYYY-MM-DD #Level #FamilyCardNumber",
    },

    "INVALID_BAD_DATE": {
        "id": "❌ Format tanggal salah (YYYY-MM-DD).",
        "en": "❌ Wrong date format (YYYY-MM-DD).",
    },

    "INVALID_BAD_CATEGORY": {
        "id": "❌ Jenjang tidak valid. Pilih TK/SD/SMP/SMA.",
        "en": "❌ Invalid level. Choose TK/SD/SMP/SMA.",
    },

    "INVALID_UNKNOWN": {
        "id": "❌ Jenjang tidak dikenali. Pilih TK/SD/SMP/SMA.",
        "en": "❌ Level not recognised. Choose TK/SD/SMP/SMA.",
    },

    "INVALID_BAD_IDENTIFIER": {
        "id": "❌ Nomor KK harus 16 digit.",
        "en": "❌ The family card number must be 16 digits.",
    },

    "INVALID_WRONG_KIND": {
        "id": "❌ Tolong kirim *{expected}* untuk {instruction}",
        "en": "❌ Please send an *{expected}* for {instruction}",
    },

    "INVALID_CATEGORY_LOCKED": {
        "id": "❌ Jenjang sudah dipilih ({category}) dan tidak bisa diubah. Ketik *MENU* untuk mengulang.",
        "en": "❌ The level is already set ({category}) and cannot change. Type *MENU* to start over.",
    },

    "UPLOAD_FAILED": {
        "id": "❌ Gagal upload file. Coba lagi.",
        "en": "❌ Upload failed. Please try again.",
    },

    "COMMIT_SUCCESS": {
        "id": "✅ Pendaftaran berhasil! Terima kasih.",
        "en": "✅ Registration complete! Thank you.",
    },

    "COMMIT_FAILURE": {
        "id": "❌ Gagal simpan pendaftaran. Hubungi admin.",
        "en": "❌ Could not save the registration. Please contact an admin.",
    },

    "INTERNAL_ERROR": {
        "id": "⚠️ Terjadi kesalahan. Coba lagi atau hubungi admin.",
        "en": "⚠️ Something went wrong. Try again or contact an admin.",
    },
}

EXPECTED_KIND_LABEL = {
    "text": {"id": "teks", "en": "text"},
    "image": {"id": "gambar", "en": "image"},
    "document": {"id": "dokumen", "en": "document"},
    "file": {"id": "gambar atau dokumen", "en": "image or document"},
}


def t(key: str, lang: str = DEFAULT_LANG, **kwargs) -> str:
    lang = lang if lang in SUPPORTED_LANGS else DEFAULT_LANG
    text = MESSAGES[key][lang]
    return text.format(**kwargs) if kwargs else text


def with_footer(text: str, lang: str = DEFAULT_LANG) -> str:
    lang = lang if lang in SUPPORTED_LANGS else DEFAULT_LANG
    return f"{text}\n\n{FOOTER[lang]}"


def expected_kind_label(kind: str, lang: str = DEFAULT_LANG) -> str:
    lang = lang if lang in SUPPORTED_LANGS else DEFAULT_LANG
    return EXPECTED_KIND_LABEL.get(kind, EXPECTED_KIND_LABEL["file"])[lang]
