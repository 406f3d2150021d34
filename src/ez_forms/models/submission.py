"""SQLModel Submission model"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class Submission(SQLModel, table=True):
    """One immutable response to a form"""

    __tablename__ = "form_submissions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    form_id: uuid.UUID = Field(foreign_key="forms.id", ondelete="CASCADE", index=True)
    # Field id -> string, or list of strings for checkbox fields
    data: dict = Field(default_factory=dict, sa_column=Column(JSON))
    ip_address: str = Field(default="unknown")
    user_agent: str = Field(default="unknown")
    submitted_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc), index=True
    )
