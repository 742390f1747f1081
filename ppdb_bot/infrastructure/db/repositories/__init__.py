from .contact_repository import ContactRepository
from .faq_repository import FaqRepository
from .quota_repository import QuotaRepository
from .record_repository import IntakeRecordRepository
from .step_repository import SqlStepSource

__all__ = [
    "ContactRepository",
    "FaqRepository",
    "QuotaRepository",
    "IntakeRecordRepository",
    "SqlStepSource",
]
