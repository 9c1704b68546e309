"""
Custom Exceptions for StudioTrack
=================================

Services raise these instead of HTTPException so the same rules apply
whether they are called from an endpoint, the seed script or a test.
`app.main` maps every StudioTrackError to its `http_status`.

Usage:
    from app.core.exceptions import ProjectNotFoundError

    if not project:
        raise ProjectNotFoundError(project_id)
"""

from typing import Optional, Any, Dict


class StudioTrackError(Exception):
    """Base exception for all StudioTrack errors"""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(StudioTrackError):
    """User authentication failed"""

    http_status = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidCredentialsError(AuthenticationError):
    """Email/password pair rejected"""

    def __init__(self):
        super().__init__("Invalid email or password")
        self.code = "INVALID_CREDENTIALS"


class InvalidTokenError(AuthenticationError):
    """JWT token is invalid"""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)
        self.code = "INVALID_TOKEN"


class AuthorizationError(StudioTrackError):
    """User not authorized for this action"""

    http_status = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


class PermissionDeniedError(AuthorizationError):
    """Role lacks the permission required by an endpoint"""

    def __init__(self, permission: str, role: str):
        super().__init__("Insufficient permissions")
        self.code = "PERMISSION_DENIED"
        self.details = {"permission": permission, "role": role}


class InactiveUserError(AuthorizationError):
    """User account is disabled"""

    def __init__(self):
        super().__init__("User account is inactive")
        self.code = "USER_INACTIVE"


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(StudioTrackError):
    """Base class for not found errors"""

    http_status = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": str(resource_id)}
        )


class ProjectNotFoundError(ResourceNotFoundError):
    def __init__(self, project_id: str):
        super().__init__("Project", project_id)


class PhaseNotFoundError(ResourceNotFoundError):
    def __init__(self, phase_id: str):
        super().__init__("Phase", phase_id)


class TaskNotFoundError(ResourceNotFoundError):
    def __init__(self, task_id: str):
        super().__init__("Task", task_id)


class RevisionNotFoundError(ResourceNotFoundError):
    def __init__(self, revision_id: str):
        super().__init__("Revision", revision_id)


class MaterialNotFoundError(ResourceNotFoundError):
    def __init__(self, material_id: str):
        super().__init__("Material", material_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(StudioTrackError):
    """Input validation failed"""

    http_status = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class DuplicateEmailError(ValidationError):
    """Registration with an email that already exists"""

    def __init__(self, email: str):
        super().__init__("User already exists", field="email")
        self.code = "USER_EXISTS"
        self.details["email"] = email


class PhaseProjectMismatchError(ValidationError):
    """Task references a phase from another project"""

    def __init__(self, phase_id: str, project_id: str):
        super().__init__("Phase does not belong to this project", field="phase_id")
        self.code = "PHASE_PROJECT_MISMATCH"
        self.details.update({"phase_id": phase_id, "project_id": project_id})


class RevisionNotDeletableError(ValidationError):
    """Only draft revisions can be removed"""

    def __init__(self, status: str):
        super().__init__("Can only delete draft revisions")
        self.code = "REVISION_NOT_DRAFT"
        self.details["status"] = status


# ============================================
# Conflict Errors (409-type)
# ============================================

class ConflictError(StudioTrackError):
    """State conflict, e.g. duplicate unique key"""

    http_status = 409

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFLICT", details=details)


class DuplicateProjectCodeError(ConflictError):
    def __init__(self, code: str):
        super().__init__(f"Project code '{code}' already exists", details={"project_code": code})
        self.code = "PROJECT_CODE_EXISTS"


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: StudioTrackError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
