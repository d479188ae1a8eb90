# Authentication module

from app.modules.auth.dependencies import (
    get_current_user,
    get_current_admin,
    get_optional_user,
    require_roles,
    is_admin,
)

__all__ = [
    "get_current_user",
    "get_current_admin",
    "get_optional_user",
    "require_roles",
    "is_admin",
]
