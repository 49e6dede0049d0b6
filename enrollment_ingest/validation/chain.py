from collections.abc import Sequence

from enrollment_ingest.logging.logger import Log
from enrollment_ingest.parsing.models import ParsedDocument
from enrollment_ingest.validation.checks import ValidationCheck
from enrollment_ingest.validation.exceptions import ValidationFailure
from enrollment_ingest.validation.models import (
    ValidationContext,
    ValidationOutcome,
    ValidationState,
    ValidationSummary,
)


class ValidationChain:
    """Runs validation checks in order and stops at the first terminal failure.

    A failing check is reported in the outcome rather than raised, so the
    caller can tell a rejected receipt (``outcome.rejected``) from one that
    was accepted with some unmapped subjects.
    """

    def __init__(self, checks: Sequence[ValidationCheck]) -> None:
        self._checks = tuple(checks)

    def validate(self, parsed: ParsedDocument, context: ValidationContext) -> ValidationOutcome:
        state = ValidationState(
            parsed=parsed,
            context=context,
            summary=ValidationSummary(
                registration_number=parsed.registration_number,
                student_name=parsed.student_name,
                total_subjects=len(parsed.subjects),
            ),
        )
        failure: ValidationFailure | None = None
        for check in self._checks:
            try:
                state = check.run(state)
            except ValidationFailure as exc:
                Log.info(
                    f"Validation stopped at {type(check).__name__} "
                    f"for {context.identity_id}: {exc}"
                )
                state.errors.append(str(exc))
                failure = exc
                break

        return ValidationOutcome(
            summary=state.summary,
            errors=state.errors,
            mapped_subjects=state.mapped_subjects,
            failure=failure,
        )
