"""Form Service - Handles form definition database operations"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from ez_forms.auth.models import User, normalize_email
from ez_forms.config import config
from ez_forms.errors import AccessDenied, Conflict, InternalError, NotFound, ValidationFailed
from ez_forms.models.form import Form, PrivacyTier
from ez_forms.models.form_field import BaseField, dump_fields, duplicate_field_ids
from ez_forms.models.submission import Submission
from ez_forms.services.access_control import AccessDecision, can_manage, evaluate_access
from ez_forms.utils.slug_utils import current_millis, generate_slug

logger = logging.getLogger(__name__)


def _check_fields(fields: List[BaseField]):
    duplicates = duplicate_field_ids(fields)
    if duplicates:
        raise ValidationFailed(
            [f"Field id '{field_id}' is used more than once" for field_id in duplicates]
        )


def _allowed_emails_for(
    privacy_tier: PrivacyTier, allowed_emails: Optional[List[str]]
) -> List[str]:
    """Normalised, de-duplicated list; empty unless the tier uses it"""
    if privacy_tier != PrivacyTier.RESTRICTED_EMAILS:
        return []
    normalized = (normalize_email(email) for email in allowed_emails or [])
    return list(dict.fromkeys(email for email in normalized if email))


class FormService:
    """Service for handling form definition operations"""

    def __init__(
        self,
        db_session: Session,
        slug_generator: Callable[[str, Optional[int]], str] = generate_slug,
        max_slug_attempts: Optional[int] = None,
    ):
        self.db = db_session
        self.slug_generator = slug_generator
        self.max_slug_attempts = max_slug_attempts or config["slug_max_attempts"]

    def _commit(self, action: str, form_id=None):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error {action} form {form_id}: {e}")
            raise InternalError(f"Failed {action} form")

    def create_form(
        self,
        creator: User,
        title: str,
        fields: List[BaseField],
        description: str = "",
        privacy_tier: PrivacyTier = PrivacyTier.PUBLIC,
        allowed_emails: Optional[List[str]] = None,
    ) -> Form:
        """
        Create a new form with a freshly generated slug.

        A slug collision reported by the database is retried with a new
        time-based suffix, up to ``max_slug_attempts`` times.

        Args:
            creator: Identity that will own the form
            title: Form title, also the basis of the slug
            fields: Ordered field definitions
            description: Optional description
            privacy_tier: Who may view and submit the form
            allowed_emails: Emails admitted under RESTRICTED_EMAILS

        Returns:
            The persisted Form

        Raises:
            ValidationFailed: If field ids are not unique
            Conflict: If every slug attempt collided
            InternalError: On any other persistence failure
        """
        _check_fields(fields)
        stored_fields = dump_fields(fields)
        stored_emails = _allowed_emails_for(privacy_tier, allowed_emails)

        for attempt in range(self.max_slug_attempts):
            slug = self.slug_generator(title, current_millis() + attempt)
            now = datetime.now(timezone.utc)
            form = Form(
                creator_id=creator.user_id,
                title=title,
                description=description or "",
                fields=stored_fields,
                slug=slug,
                privacy_tier=privacy_tier,
                allowed_emails=stored_emails,
                created_at=now,
                updated_at=now,
            )
            self.db.add(form)

            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                logger.warning(
                    f"Slug collision on '{slug}' (attempt {attempt + 1}/{self.max_slug_attempts}): {e.orig}"
                )
                continue
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error creating form: {e}")
                raise InternalError("Failed to create form")

            self.db.refresh(form)
            logger.info(f"Form created successfully: {form.id} ({form.slug})")
            return form

        logger.error(
            f"Could not allocate a unique slug for '{title}' after {self.max_slug_attempts} attempts"
        )
        raise Conflict("Could not generate a unique address for this form, please retry")

    def get_form_by_id(self, form_id: uuid.UUID) -> Optional[Form]:
        """Retrieve a form by id regardless of whether it is active"""
        return self.db.get(Form, form_id)

    def get_form_by_slug(self, slug: str) -> Optional[Form]:
        """
        Retrieve an active form by its slug

        Args:
            slug: Public slug of the form

        Returns:
            Form if found and active, None otherwise
        """
        logger.info(f"Retrieving form by slug: {slug}")
        statement = select(Form).where(Form.slug == slug, Form.is_active == True)
        return self.db.exec(statement).first()

    def get_readable_form(self, slug: str, user: Optional[User]) -> Form:
        """
        Resolve a form for a visitor, applying the privacy tier.

        Raises:
            NotFound: If the slug is unknown or the form is inactive
            AccessDenied: If the privacy tier excludes the requester
        """
        form = self.get_form_by_slug(slug)
        if not form:
            raise NotFound("Form not found")

        if evaluate_access(user, form) != AccessDecision.ALLOW:
            logger.info(
                f"Access denied to form {form.id} for {user.user_id if user else 'anonymous'}"
            )
            raise AccessDenied("You do not have access to this form")
        return form

    def get_managed_form(self, form_id: uuid.UUID, user: User) -> Form:
        """
        Resolve a form for an owner-only operation.

        Raises:
            NotFound: If no form has this id
            AccessDenied: If the requester is not the creator
        """
        form = self.get_form_by_id(form_id)
        if not form:
            raise NotFound("Form not found")
        if not can_manage(user, form):
            raise AccessDenied("You can only manage your own forms")
        return form

    def list_forms_for_creator(self, creator_id: str) -> List[Form]:
        """All forms owned by a creator, most recently updated first"""
        statement = (
            select(Form)
            .where(Form.creator_id == creator_id)
            .order_by(Form.updated_at.desc())
        )
        return list(self.db.exec(statement).all())

    def update_form(
        self,
        form: Form,
        title: str,
        fields: List[BaseField],
        description: str = "",
        privacy_tier: PrivacyTier = PrivacyTier.PUBLIC,
        allowed_emails: Optional[List[str]] = None,
        is_active: Optional[bool] = None,
    ) -> Form:
        """
        Replace a form's editable content.

        The slug and creator are never changed. ``is_active`` is left alone
        when None.
        """
        _check_fields(fields)

        form.title = title
        form.description = description or ""
        form.fields = dump_fields(fields)
        form.privacy_tier = privacy_tier
        form.allowed_emails = _allowed_emails_for(privacy_tier, allowed_emails)
        if is_active is not None:
            form.is_active = is_active
        form.updated_at = datetime.now(timezone.utc)

        self.db.add(form)
        self._commit("updating", form.id)
        self.db.refresh(form)

        logger.info(f"Form updated successfully: {form.id}")
        return form

    def delete_form(self, form: Form) -> int:
        """
        Delete a form together with all of its submissions.

        Submissions are removed first, in the same transaction, so the
        foreign key never points at a missing form.

        Returns:
            Number of submissions removed
        """
        form_id = form.id
        result = self.db.execute(delete(Submission).where(Submission.form_id == form_id))
        self.db.delete(form)
        self._commit("deleting", form_id)

        logger.info(f"Form {form_id} deleted with {result.rowcount} submissions")
        return result.rowcount

    def get_stats(self, creator_id: str) -> Dict[str, int]:
        """Form and submission counts for a creator"""
        total_forms = self.db.exec(
            select(func.count()).select_from(Form).where(Form.creator_id == creator_id)
        ).one()
        active_forms = self.db.exec(
            select(func.count())
            .select_from(Form)
            .where(Form.creator_id == creator_id, Form.is_active == True)
        ).one()
        total_submissions = self.db.exec(
            select(func.count())
            .select_from(Submission)
            .join(Form, Form.id == Submission.form_id)
            .where(Form.creator_id == creator_id)
        ).one()

        return {
            "total_forms": total_forms,
            "active_forms": active_forms,
            "total_submissions": total_submissions,
        }
