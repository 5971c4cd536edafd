"""
Submission facade: validate a form payload and store it.

Every outcome is returned as a SubmissionResult; callers never have to
catch validation or duplicate errors themselves.
"""

from typing import Any

from survey_stats.core.models import SubmissionResult
from survey_stats.core.rules import SubmissionValidator
from survey_stats.core.validators import ValidationError
from survey_stats.observability.logger import get_logger
from survey_stats.observability.metrics import record_submission
from survey_stats.warehouse import (
    BaseRecordStore,
    ConstraintError,
    DuplicateKeyError,
    StoreUnavailable,
)

logger = get_logger(__name__)

DUPLICATE_EMAIL_MESSAGE = "This email has already been used to submit a survey."


class SubmissionService:
    """
    Admits survey submissions into the record store.

    Args:
        store: Record store receiving accepted submissions
        validator: Submission validator (default survey rules if omitted)
    """

    def __init__(self, store: BaseRecordStore, validator: SubmissionValidator | None = None):
        self.store = store
        self.validator = validator or SubmissionValidator()

    def submit(self, payload: dict[str, Any]) -> SubmissionResult:
        """
        Validate and persist one survey.

        Args:
            payload: Form fields (name, email, age, dob, favoriteFoods and
                     the four *Rating fields)

        Returns:
            SubmissionResult describing the outcome; nothing is stored
            unless ``accepted`` is True
        """
        try:
            submission = self.validator.validate(payload)
        except ValidationError as e:
            record_submission("invalid")
            return SubmissionResult(
                accepted=False,
                status_code=400,
                error_type="missing_field" if e.is_missing else "invalid_field",
                field_name=e.field_name,
                message=f"{e.field_name}: {e.message}",
            )

        try:
            record = self.store.insert(submission)
        except DuplicateKeyError:
            record_submission("duplicate")
            logger.info("Duplicate survey email rejected")
            return SubmissionResult(
                accepted=False,
                status_code=409,
                error_type="duplicate_email",
                field_name="email",
                message=DUPLICATE_EMAIL_MESSAGE,
            )
        except ConstraintError as e:
            # Validation passed but the table refused the row: rules and
            # schema disagree.
            record_submission("constraint")
            logger.error(
                "Storage constraint rejected a validated survey",
                extra={"constraint": e.constraint, "error_message": e.message},
            )
            return SubmissionResult(
                accepted=False,
                status_code=500,
                error_type="constraint_violation",
                message="Failed to save survey",
            )
        except StoreUnavailable as e:
            record_submission("unavailable")
            logger.error("Record store unavailable", extra={"error_message": str(e)}, exc_info=True)
            return SubmissionResult(
                accepted=False,
                status_code=503,
                error_type="store_unavailable",
                message="Failed to save survey, please try again later",
            )

        record_submission("accepted")
        logger.info("Survey submitted", extra={"record_id": record.id})
        return SubmissionResult(
            accepted=True,
            status_code=200,
            record_id=record.id,
            message="Survey submitted successfully",
        )
