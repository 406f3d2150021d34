"""Submission service for handling form responses"""

import logging
import uuid
from typing import Any, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ez_forms.auth.models import User
from ez_forms.errors import InternalError, ValidationFailed
from ez_forms.models.submission import Submission
from ez_forms.services.field_validator import clean_submission, validate_submission
from ez_forms.services.form_service import FormService

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


class SubmissionService:
    """Service for recording and reading form submissions"""

    def __init__(self, db_session: Session, form_service: Optional[FormService] = None):
        self.db = db_session
        self.form_service = form_service or FormService(db_session)

    def submit(
        self,
        slug: str,
        user: Optional[User],
        data: Mapping[str, Any],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Submission:
        """
        Record a response to the form published under ``slug``.

        Access and validation are checked before anything is written, so a
        failed call leaves no trace in the database.

        Args:
            slug: Public slug of the form
            user: Requester identity, or None for anonymous visitors
            data: Submitted values keyed by field id
            ip_address: Client address from the transport layer, if known
            user_agent: Client user agent, if known

        Returns:
            Submission: The stored submission

        Raises:
            NotFound: If the form is missing or inactive
            AccessDenied: If the privacy tier excludes the requester
            ValidationFailed: With one message per rejected field
            InternalError: If the submission could not be stored
        """
        form = self.form_service.get_readable_form(slug, user)

        fields = form.field_specs()
        errors = validate_submission(fields, data)
        if errors:
            logger.info(f"Rejected submission for form {form.id}: {errors}")
            raise ValidationFailed(errors)

        submission = Submission(
            form_id=form.id,
            data=clean_submission(fields, data),
            ip_address=ip_address or UNKNOWN_CLIENT,
            user_agent=user_agent or UNKNOWN_CLIENT,
        )

        self.db.add(submission)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error storing submission for form {form.id}: {e}")
            raise InternalError("Failed to store submission")
        self.db.refresh(submission)

        logger.info(f"Created submission {submission.id} for form {form.id}")
        return submission

    def get_submission_by_id(self, submission_id: uuid.UUID) -> Optional[Submission]:
        """Get a submission by ID"""
        return self.db.get(Submission, submission_id)

    def get_submissions_for_form(self, form_id: uuid.UUID) -> List[Submission]:
        """Get all submissions for a form, newest first"""
        stmt = (
            select(Submission)
            .where(Submission.form_id == form_id)
            .order_by(Submission.submitted_at.desc())
        )
        return list(self.db.exec(stmt).all())

    def get_submission_count_for_form(self, form_id: uuid.UUID) -> int:
        """Get the total number of submissions for a form"""
        return len(self.get_submissions_for_form(form_id))
