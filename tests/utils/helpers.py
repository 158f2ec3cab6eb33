from typing import Any

from helpdesk.auth.actor import Actor
from helpdesk.directory.models.identity import Identity
from helpdesk.directory.models.student import Student
from helpdesk.employees.models.employee import Worker


def create_auth_headers(token: str) -> dict[str, str]:
    """Create Authorization headers with Bearer token."""
    return {"Authorization": f"Bearer {token}"}


def student_actor(student: Student) -> Actor:
    return Actor(id=student.id, role="student", admission_number=student.admission_number)


def identity_actor(identity: Identity) -> Actor:
    return Actor(id=identity.id, role=identity.role)


def worker_actor(worker: Worker) -> Actor:
    return Actor(id=worker.id, role="worker", is_worker=True)


def assert_success_envelope(body: dict[str, Any]) -> Any:
    assert body["success"] is True
    assert "data" in body
    return body["data"]


def assert_error_envelope(body: dict[str, Any], code: str) -> None:
    assert body["success"] is False
    assert body["error"]["code"] == code
    assert body["message"]
