"""Privacy-tier access decisions for forms"""

import enum
from typing import Optional

from ez_forms.auth.models import User, normalize_email
from ez_forms.models.form import Form, PrivacyTier


class AccessDecision(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"


def is_creator(user: Optional[User], form: Form) -> bool:
    return user is not None and user.user_id == form.creator_id


def evaluate_access(user: Optional[User], form: Form) -> AccessDecision:
    """
    Decide whether a requester may read or submit to a form.

    Callers must treat inactive forms as missing before asking; activity is
    not an access question. Management operations additionally require
    ``can_manage``.

    Args:
        user: Requester identity, or None for anonymous requests
        form: The form being accessed

    Returns:
        AccessDecision.ALLOW or AccessDecision.DENY
    """
    tier = form.privacy_tier

    if tier == PrivacyTier.PUBLIC:
        return AccessDecision.ALLOW

    if is_creator(user, form):
        return AccessDecision.ALLOW

    if tier == PrivacyTier.CREATOR_ONLY:
        return AccessDecision.DENY

    if tier == PrivacyTier.RESTRICTED_EMAILS:
        email = normalize_email(user.email) if user is not None else None
        allowed = {normalize_email(e) for e in (form.allowed_emails or [])}
        if email is not None and email in allowed:
            return AccessDecision.ALLOW
        return AccessDecision.DENY

    # Unknown tier: fail closed
    return AccessDecision.DENY


def can_manage(user: Optional[User], form: Form) -> bool:
    """Edit and delete are reserved for the creator whatever the privacy tier"""
    return is_creator(user, form)
