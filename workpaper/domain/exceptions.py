"""Domain exceptions for workpaper.

Business rule violations raised by the workflow core. Independent of
infrastructure; the presentation layer maps error_code to HTTP status in
workpaper.core.exception_handlers.
"""

from typing import Any


class WorkpaperException(Exception):
    """Base exception for all workpaper errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(WorkpaperException):
    """Raised when input is malformed or a required value is missing."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidStateException(WorkpaperException):
    """Raised when an action is not legal from the entity's current state."""

    def __init__(
        self,
        message: str,
        current_state: str | None = None,
        action: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if current_state is not None:
            details["current_state"] = current_state
        if action is not None:
            details["action"] = action
        super().__init__(message, "INVALID_STATE", details)


class ProjectNotActiveException(WorkpaperException):
    """Raised when a mutation targets a project that is not In Progress."""

    def __init__(self, project_id: str, status: str) -> None:
        super().__init__(
            f"Project {project_id} is '{status}'; only projects in progress accept changes",
            "PROJECT_NOT_ACTIVE",
            {"project_id": project_id, "status": status},
        )


class AuthenticationException(WorkpaperException):
    """Raised when the bearer token is missing, invalid or expired."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(WorkpaperException):
    """Raised when the actor's role or membership does not allow the action."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'task', 'notification').
            action: Optional action that was attempted (e.g. 'approve').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(WorkpaperException):
    """Raised when a resource does not exist or is not visible to the caller."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'task', 'assignment').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class SqlNotConfiguredException(WorkpaperException):
    """Raised when an operation requires Postgres but the backend is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
