"""Identity introspection routes"""

from fastapi import APIRouter, Depends

from ez_forms.auth.dependencies import get_current_user
from ez_forms.auth.models import User

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    """Return the identity resolved from the Bearer token"""
    return {"user_id": user.user_id, "email": user.email}
