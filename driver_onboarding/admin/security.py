# driver_onboarding/admin/security.py
from fastapi import Depends

from ..deps import get_current_user, is_admin_user
from ..errors import Forbidden


def require_admin(user: dict = Depends(get_current_user)) -> dict:
    if not is_admin_user(user):
        raise Forbidden("admin only")
    return user
