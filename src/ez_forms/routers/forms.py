"""Form definition, publishing and submission endpoints"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field, field_validator
from sqlmodel import Session

from ez_forms.auth.dependencies import get_current_user, get_current_user_optional
from ez_forms.auth.models import User
from ez_forms.models.database import get_db
from ez_forms.models.form import Form, PrivacyTier
from ez_forms.models.form_field import FieldSpec
from ez_forms.routers.request_context import client_ip, user_agent
from ez_forms.services.form_service import FormService
from ez_forms.services.submission_service import SubmissionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/forms", tags=["Forms"])


class FormWriteRequest(BaseModel):
    title: str = Field(..., description="Form title; also the basis of the slug")
    description: Optional[str] = Field(default="", description="Optional description")
    fields: List[FieldSpec] = Field(..., description="Ordered field definitions")
    privacy_tier: PrivacyTier = Field(
        default=PrivacyTier.PUBLIC, description="Who may view and submit the form"
    )
    allowed_emails: List[str] = Field(
        default_factory=list,
        description="Emails admitted when privacy_tier is restricted_emails",
    )

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value


class FormUpdateRequest(FormWriteRequest):
    is_active: Optional[bool] = Field(
        default=None, description="Deactivate or reactivate the form"
    )


class SubmitRequest(BaseModel):
    data: Dict[str, Any] = Field(..., description="Submitted values keyed by field id")


class PublicFormResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    fields: List[dict]
    slug: str


class FormDetailResponse(PublicFormResponse):
    creator_id: str
    privacy_tier: PrivacyTier
    allowed_emails: List[str]
    is_active: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class SubmissionResponse(BaseModel):
    id: uuid.UUID
    form_id: uuid.UUID
    data: dict
    ip_address: str
    user_agent: str
    submitted_at: Optional[datetime]


def _public_view(form: Form) -> PublicFormResponse:
    """Schema only; privacy settings and ownership stay private"""
    return PublicFormResponse(
        id=form.id,
        title=form.title,
        description=form.description,
        fields=form.fields,
        slug=form.slug,
    )


def _detail_view(form: Form) -> FormDetailResponse:
    return FormDetailResponse(
        id=form.id,
        title=form.title,
        description=form.description,
        fields=form.fields,
        slug=form.slug,
        creator_id=form.creator_id,
        privacy_tier=form.privacy_tier,
        allowed_emails=form.allowed_emails or [],
        is_active=form.is_active,
        created_at=form.created_at,
        updated_at=form.updated_at,
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=FormDetailResponse,
    summary="Create a form",
)
async def create_form(
    request: FormWriteRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    form_service = FormService(db)
    form = form_service.create_form(
        creator=user,
        title=request.title,
        description=request.description or "",
        fields=request.fields,
        privacy_tier=request.privacy_tier,
        allowed_emails=request.allowed_emails,
    )
    return _detail_view(form)


@router.get("", response_model=List[FormDetailResponse], summary="List my forms")
async def list_forms(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    forms = FormService(db).list_forms_for_creator(user.user_id)
    return [_detail_view(form) for form in forms]


@router.get("/stats", summary="Form and submission counts for my forms")
async def form_stats(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return FormService(db).get_stats(user.user_id)


@router.get(
    "/manage/{form_id}",
    response_model=FormDetailResponse,
    summary="Get a form for management",
)
async def get_managed_form(
    form_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    form = FormService(db).get_managed_form(form_id, user)
    return _detail_view(form)


@router.put("/manage/{form_id}", summary="Replace a form's content and privacy")
async def update_form(
    form_id: uuid.UUID,
    request: FormUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    form_service = FormService(db)
    form = form_service.get_managed_form(form_id, user)
    form = form_service.update_form(
        form,
        title=request.title,
        description=request.description or "",
        fields=request.fields,
        privacy_tier=request.privacy_tier,
        allowed_emails=request.allowed_emails,
        is_active=request.is_active,
    )
    return {"message": "Form updated successfully", "form": _detail_view(form)}


@router.delete("/manage/{form_id}", summary="Delete a form and its submissions")
async def delete_form(
    form_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    form_service = FormService(db)
    form = form_service.get_managed_form(form_id, user)
    deleted_submissions = form_service.delete_form(form)
    return {
        "message": "Form deleted successfully",
        "deleted_submissions": deleted_submissions,
    }


@router.get(
    "/manage/{form_id}/submissions",
    response_model=List[SubmissionResponse],
    summary="List a form's submissions",
)
async def list_submissions(
    form_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    form_service = FormService(db)
    form = form_service.get_managed_form(form_id, user)
    submissions = SubmissionService(db, form_service).get_submissions_for_form(form.id)
    return [SubmissionResponse.model_validate(s, from_attributes=True) for s in submissions]


@router.get("/{slug}", response_model=PublicFormResponse, summary="Get a published form")
async def get_form(
    slug: str,
    user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    form = FormService(db).get_readable_form(slug, user)
    return _public_view(form)


@router.post(
    "/{slug}",
    status_code=status.HTTP_201_CREATED,
    summary="Submit a response to a form",
)
async def submit_form(
    slug: str,
    body: SubmitRequest,
    request: Request,
    user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    submission = SubmissionService(db).submit(
        slug,
        user,
        body.data,
        ip_address=client_ip(request),
        user_agent=user_agent(request),
    )
    return {
        "message": "Form submitted successfully",
        "submissionId": str(submission.id),
    }
