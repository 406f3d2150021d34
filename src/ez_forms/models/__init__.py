"""Database models for EZ Forms"""

from ez_forms.models.form import Form, PrivacyTier
from ez_forms.models.submission import Submission

__all__ = [
    "Form",
    "PrivacyTier",
    "Submission",
]
