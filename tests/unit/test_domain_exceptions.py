"""Tests for domain exceptions (error_code, message, details)."""

from workpaper.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    InvalidStateException,
    ProjectNotActiveException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    ValidationException,
    WorkpaperException,
)


def test_workpaper_exception_default_error_code() -> None:
    """Base WorkpaperException uses class name as error_code when not provided."""
    exc = WorkpaperException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "WorkpaperException"
    assert exc.details == {}
    assert str(exc) == "Something failed"


def test_to_dict() -> None:
    exc = WorkpaperException("Oops", "CUSTOM", {"k": 1})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"k": 1}}


def test_validation_exception_field() -> None:
    assert ValidationException("bad", field="comment").details == {"field": "comment"}
    assert ValidationException("bad").details == {}
    assert ValidationException("bad").error_code == "VALIDATION_ERROR"


def test_invalid_state_exception_details() -> None:
    exc = InvalidStateException("nope", current_state="Draft", action="approve")
    assert exc.error_code == "INVALID_STATE"
    assert exc.details == {"current_state": "Draft", "action": "approve"}
    assert InvalidStateException("nope").details == {}


def test_project_not_active_exception() -> None:
    exc = ProjectNotActiveException("p1", "Suspended")
    assert exc.error_code == "PROJECT_NOT_ACTIVE"
    assert exc.details == {"project_id": "p1", "status": "Suspended"}
    assert "Suspended" in exc.message


def test_authorization_exception_message() -> None:
    exc = AuthorizationException("task", "approve")
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.message == "Permission denied: approve on task"
    assert exc.details == {"resource": "task", "action": "approve"}
    assert AuthorizationException().message == "Permission denied"


def test_resource_not_found_and_auth() -> None:
    exc = ResourceNotFoundException("task", "task-1")
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.message == "task not found: task-1"
    assert AuthenticationException().error_code == "AUTHENTICATION_ERROR"
    assert SqlNotConfiguredException().error_code == "SERVICE_UNAVAILABLE"
