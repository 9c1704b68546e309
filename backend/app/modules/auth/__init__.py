# Authentication and authorization module

from app.modules.auth.dependencies import (
    get_current_user,
    get_org_project,
)

from app.modules.auth.permissions import (
    Permission,
    ROLE_PERMISSIONS,
    has_permission,
    require_permission,
)

__all__ = [
    # User authentication
    "get_current_user",
    "get_org_project",
    # Role permissions
    "Permission",
    "ROLE_PERMISSIONS",
    "has_permission",
    "require_permission",
]
