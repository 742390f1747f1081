"""Maps engine outcomes to the user-facing message text.

Every reply carries the navigational footer. No decisions are made here.
"""

from __future__ import annotations

from typing import Optional

from ppdb_bot.domain.errors import ValidationFailure
from ppdb_bot.domain.i18n import DEFAULT_LANG, expected_kind_label, t, with_footer
from ppdb_bot.domain.models.intake import StepDefinition


class Responder:
    def __init__(self, lang: str = DEFAULT_LANG):
        self.lang = lang

    def _render(self, key: str, **kwargs) -> str:
        return with_footer(t(key, self.lang, **kwargs), self.lang)

    def help(self) -> str:
        return self._render("HELP")

    def faq(self, content: Optional[str]) -> str:
        if not content:
            return self._render("FAQ_UNAVAILABLE")
        return with_footer(content, self.lang)

    def instruction(self, definition: StepDefinition) -> str:
        return with_footer(definition.instruction, self.lang)

    def step_unavailable(self, step: int) -> str:
        return self._render("STEP_UNAVAILABLE", step=step)

    def instruction_missing(self) -> str:
        return self._render("INSTRUCTION_MISSING")

    def next_instruction_missing(self) -> str:
        return self._render("NEXT_INSTRUCTION_MISSING")

    def validation_failure(
        self,
        reason: ValidationFailure,
        definition: StepDefinition,
        category: Optional[str] = None,
    ) -> str:
        return self._render(
            f"INVALID_{reason.name}",
            instruction=definition.instruction,
            expected=expected_kind_label(definition.input_kind.value, self.lang),
            category=category or "-",
        )

    def upload_failed(self) -> str:
        return self._render("UPLOAD_FAILED")

    def commit_success(self) -> str:
        return self._render("COMMIT_SUCCESS")

    def commit_failure(self) -> str:
        return self._render("COMMIT_FAILURE")

    def internal_error(self) -> str:
        return self._render("INTERNAL_ERROR")
