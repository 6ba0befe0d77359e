from dataclasses import replace
from datetime import date

import pytest
from werkzeug.security import generate_password_hash

from src.hr_backoffice.hr_backoffice.auth.assignment import RepositoryAssignmentLookup
from src.hr_backoffice.hr_backoffice.auth.service import AuthService, IdentityService
from src.hr_backoffice.hr_backoffice.clients.service import ClientService
from src.hr_backoffice.hr_backoffice.container import Container
from src.hr_backoffice.hr_backoffice.core.enums import EmployeeStatus, Role
from src.hr_backoffice.hr_backoffice.departments.model import Department
from src.hr_backoffice.hr_backoffice.departments.position_model import Position
from src.hr_backoffice.hr_backoffice.departments.service import DepartmentService, PositionService
from src.hr_backoffice.hr_backoffice.employees.service import EmployeeService
from src.hr_backoffice.hr_backoffice.main import create_app
from src.hr_backoffice.hr_backoffice.projects.service import ProjectService
from src.hr_backoffice.hr_backoffice.workspaces.service import MessageService, WorkspaceService
from tests.fakes import (
    FakeClients,
    FakeDepartments,
    FakeEmployees,
    FakeMessages,
    FakePositions,
    FakeProjects,
    FakeWorkspaces,
    make_client,
    make_employee,
)


class BrokenDepartments(FakeDepartments):
    def list_all(self):
        raise RuntimeError("database went away")


def _container(departments=None):
    employees = FakeEmployees(
        make_employee(1, email="admin@hr.test", role=Role.ADMIN, password_hash=generate_password_hash("admin12345")),
        make_employee(2, email="nurse@hr.test", password_hash=generate_password_hash("employee123")),
    )
    departments = departments or FakeDepartments(Department(department_id=10, code="CARD", name="Cardiology"))
    positions = FakePositions(Position(position_id=20, title="Nurse", code="CARD-NURSE", department_id=10))
    clients = FakeClients(make_client(1, password_hash=generate_password_hash("client12345")))
    projects = FakeProjects()
    workspaces = FakeWorkspaces()
    projects.workspaces = workspaces
    messages = FakeMessages()
    assignments = RepositoryAssignmentLookup(projects, workspaces)
    return Container(
        conn=None,
        employees_repo=employees,
        departments_repo=departments,
        positions_repo=positions,
        clients_repo=clients,
        projects_repo=projects,
        workspaces_repo=workspaces,
        messages_repo=messages,
        auth_service=AuthService(employees, clients),
        identity_service=IdentityService(employees, clients),
        employee_service=EmployeeService(employees, departments, positions, clock=lambda: date(2024, 3, 1)),
        department_service=DepartmentService(departments),
        position_service=PositionService(positions, departments),
        client_service=ClientService(clients),
        project_service=ProjectService(projects, clients, departments, employees, assignments),
        workspace_service=WorkspaceService(workspaces, projects, employees, clients, assignments),
        message_service=MessageService(messages, workspaces, assignments),
    )


@pytest.fixture
def container(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return _container()


@pytest.fixture
def client(container):
    return create_app(container).test_client()


def _login(client, email, password):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def test_login_me_logout(client):
    resp = _login(client, "nurse@hr.test", "employee123")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["role"] == "employee"

    me = client.get("/api/v1/auth/me").get_json()
    assert me["data"]["id"] == 2
    assert me["data"]["user_type"] == "employee"

    client.post("/api/v1/auth/logout")
    assert client.get("/api/v1/auth/me").status_code == 401


def test_bad_credentials_are_401_with_generic_message(client):
    resp = _login(client, "nurse@hr.test", "nope-nope")
    assert resp.status_code == 401
    assert resp.get_json() == {
        "success": False,
        "error": "Invalid email or password",
        "code": "AUTHENTICATION_REQUIRED",
    }


def test_anonymous_calls_are_rejected(client):
    resp = client.get("/api/v1/hr/employees")
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "AUTHENTICATION_REQUIRED"


def test_validation_errors_are_422_with_details(client):
    _login(client, "admin@hr.test", "admin12345")
    resp = client.post("/api/v1/hr/employees", json={"first_name": "A"})
    body = resp.get_json()
    assert resp.status_code == 422
    assert body["code"] == "VALIDATION_ERROR"
    assert any(d["field"] == "first_name" for d in body["details"])


def test_forbidden_is_403(client):
    _login(client, "nurse@hr.test", "employee123")
    resp = client.get("/api/v1/hr/employees/1")
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "INSUFFICIENT_PERMISSIONS"
    assert client.get("/api/v1/hr/employees/2").status_code == 200


def test_admin_creates_employee_and_changes_status(client):
    _login(client, "admin@hr.test", "admin12345")
    payload = {
        "first_name": "Marie",
        "last_name": "Curie",
        "email": "marie@hr.test",
        "phone": "0601020304",
        "date_of_birth": "1990-05-01",
        "address": {"street": "1 rue de la Paix", "city": "Paris", "postal_code": "75001"},
        "emergency_contact": {"name": "Pierre Curie", "relationship": "spouse", "phone": "0605060708"},
        "department_id": 10,
        "position_id": 20,
        "hire_date": "2024-03-01",
    }
    created = client.post("/api/v1/hr/employees", json=payload)
    assert created.status_code == 201
    data = created.get_json()["data"]
    # Fixture staff already hold CARD20240001 and CARD20240002.
    assert data["employee_number"] == "CARD20240003"
    assert "password_hash" not in data

    emp_id = data["id"]
    resp = client.post(f"/api/v1/hr/employees/{emp_id}/status", json={"status": "retired"})
    assert resp.get_json()["data"]["status"] == "retired"

    again = client.post(f"/api/v1/hr/employees/{emp_id}/status", json={"status": "active"})
    assert again.status_code == 409
    assert again.get_json()["code"] == "INVALID_TRANSITION"

    duplicate = client.post("/api/v1/hr/employees", json=payload)
    assert duplicate.status_code == 409
    assert duplicate.get_json()["code"] == "ALREADY_EXISTS"


def test_employee_list_is_paginated(client):
    _login(client, "admin@hr.test", "admin12345")
    body = client.get("/api/v1/hr/employees?limit=1&page=2&search=").get_json()
    assert [e["id"] for e in body["data"]["items"]] == [2]
    assert body["data"]["pagination"] == {"page": 2, "limit": 1, "total": 2, "pages": 2}


def test_session_of_a_suspended_employee_is_dropped(client, container):
    _login(client, "nurse@hr.test", "employee123")
    repo = container.employees_repo
    repo.items[2] = replace(repo.items[2], status=EmployeeStatus.SUSPENDED)
    assert client.get("/api/v1/auth/me").status_code == 401


def test_client_login_and_own_record(client):
    resp = _login(client, "client1@acme.test", "client12345")
    assert resp.get_json()["data"]["user_type"] == "client"
    assert client.get("/api/v1/clients/1").status_code == 200
    assert client.get("/api/v1/clients").status_code == 403


def test_unknown_routes_and_methods_render_json(client):
    resp = client.get("/api/v1/nowhere")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False
    assert resp.get_json()["code"] == "NOT_FOUND"
    assert client.put("/api/v1/auth/login").status_code == 405


def test_unexpected_errors_are_500_without_details(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(_container(departments=BrokenDepartments(Department(department_id=10, code="CARD", name="C"))))
    client = app.test_client()
    _login(client, "admin@hr.test", "admin12345")
    resp = client.get("/api/v1/hr/departments")
    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "error": "Internal error", "code": "INTERNAL_ERROR"}


def test_null_in_a_partial_update_is_422(client):
    _login(client, "admin@hr.test", "admin12345")
    resp = client.patch("/api/v1/hr/employees/2", json={"role": None, "first_name": None})
    body = resp.get_json()
    assert resp.status_code == 422
    assert {d["field"] for d in body["details"]} == {"role", "first_name"}
    assert client.get("/api/v1/hr/employees/2").get_json()["data"]["first_name"] == "Julie"


def test_terminate_validates_reason(client, container):
    _login(client, "admin@hr.test", "admin12345")
    repo = container.employees_repo
    repo.items[1] = replace(repo.items[1], role=Role.SUPER_ADMIN)

    too_long = client.delete("/api/v1/hr/employees/2", json={"reason": "x" * 501})
    assert too_long.status_code == 422
    assert too_long.get_json()["details"][0]["field"] == "reason"

    resp = client.delete("/api/v1/hr/employees/2", json={"reason": "contract end"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "terminated"
    assert repo.history[-1].reason == "contract end"
