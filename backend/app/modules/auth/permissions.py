"""
Role-based permissions for StudioTrack.

Every role check goes through ROLE_PERMISSIONS; endpoints never compare
roles directly. Use `require_permission` as a route dependency:

    @router.post("/{project_id}/tasks")
    async def create_task(user: User = Depends(require_permission(Permission.TASK_MANAGE))):
        ...
"""
import enum
from typing import Dict, FrozenSet, Union

from fastapi import Depends

from app.core.exceptions import PermissionDeniedError
from app.core.logging_config import logger
from app.models.user import User, UserRole
from app.modules.auth.dependencies import get_current_user


class Permission(str, enum.Enum):
    PROJECT_VIEW = "project:view"
    PROJECT_CREATE = "project:create"
    PROJECT_UPDATE = "project:update"
    PROJECT_DELETE = "project:delete"
    PHASE_RECALCULATE = "phase:recalculate"
    TASK_MANAGE = "task:manage"
    MATERIAL_MANAGE = "material:manage"
    REVISION_CREATE = "revision:create"
    REVISION_DECIDE = "revision:decide"
    REVISION_DELETE = "revision:delete"


_STUDIO_WORK = frozenset({
    Permission.PROJECT_VIEW,
    Permission.PHASE_RECALCULATE,
    Permission.TASK_MANAGE,
    Permission.MATERIAL_MANAGE,
    Permission.REVISION_CREATE,
})

_PROJECT_ADMIN = frozenset({
    Permission.PROJECT_CREATE,
    Permission.PROJECT_UPDATE,
    Permission.PROJECT_DELETE,
    Permission.REVISION_DECIDE,
    Permission.REVISION_DELETE,
})

ROLE_PERMISSIONS: Dict[UserRole, FrozenSet[Permission]] = {
    UserRole.ADMIN: _STUDIO_WORK | _PROJECT_ADMIN,
    UserRole.PM: _STUDIO_WORK | _PROJECT_ADMIN,
    UserRole.DESIGNER: _STUDIO_WORK,
    # Clients follow their project and sign off on revisions
    UserRole.CLIENT: frozenset({Permission.PROJECT_VIEW, Permission.REVISION_DECIDE}),
}


def has_permission(role: Union[UserRole, str], permission: Permission) -> bool:
    """Check the role table; unknown roles have no permissions"""
    try:
        role = UserRole(role)
    except ValueError:
        return False
    return permission in ROLE_PERMISSIONS.get(role, frozenset())


def require_permission(permission: Permission):
    """Dependency factory: authenticated user holding `permission`, else 403"""

    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not has_permission(current_user.role, permission):
            role = getattr(current_user.role, "value", current_user.role)
            logger.warning(f"[Permissions] {current_user.email} ({role}) denied {permission.value}")
            raise PermissionDeniedError(permission.value, role)
        return current_user

    return dependency
