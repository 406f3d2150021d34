"""SQLModel Form model"""

import enum
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from ez_forms.models.form_field import BaseField, parse_fields


class PrivacyTier(str, enum.Enum):
    PUBLIC = "public"
    CREATOR_ONLY = "creator_only"
    RESTRICTED_EMAILS = "restricted_emails"


class Form(SQLModel, table=True):
    """A published form definition"""

    __tablename__ = "forms"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    creator_id: str = Field(index=True)  # Identity provider subject
    title: str
    description: str = Field(default="")
    # Ordered FieldSpec dicts; order is display and submission order
    fields: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    slug: str = Field(unique=True, index=True)
    privacy_tier: PrivacyTier = Field(
        default=PrivacyTier.PUBLIC,
        sa_column=Column(
            SAEnum(
                PrivacyTier,
                name="form_privacy_tier",
                values_callable=lambda enum: [e.value for e in enum],
            ),
            nullable=False,
            server_default=PrivacyTier.PUBLIC.value,
        ),
    )
    # Only meaningful for RESTRICTED_EMAILS; stored lower-cased
    allowed_emails: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    is_active: bool = Field(default=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def field_specs(self) -> List[BaseField]:
        """Typed view of the stored field definitions"""
        return parse_fields(self.fields)
