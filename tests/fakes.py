"""In-memory repositories shared by the service and HTTP tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from src.hr_backoffice.hr_backoffice.auth.principal import Principal
from src.hr_backoffice.hr_backoffice.clients.model import Client
from src.hr_backoffice.hr_backoffice.core.enums import EmployeeStatus, ProjectStatus, Role, UserType, WorkspaceMemberRole
from src.hr_backoffice.hr_backoffice.core.exceptions import ConflictError
from src.hr_backoffice.hr_backoffice.departments.model import Department
from src.hr_backoffice.hr_backoffice.departments.position_model import Position
from src.hr_backoffice.hr_backoffice.employees.model import Employee, StatusChange
from src.hr_backoffice.hr_backoffice.employees.numbering import in_sequence
from src.hr_backoffice.hr_backoffice.projects.model import Project
from src.hr_backoffice.hr_backoffice.workspaces.message_model import Message
from src.hr_backoffice.hr_backoffice.workspaces.model import Workspace, WorkspaceMember

NOW = datetime(2024, 3, 1, 9, 0, 0)


def employee_principal(employee_id=1, role=Role.EMPLOYEE, department_id=10, is_active=True) -> Principal:
    return Principal.for_employee(employee_id=employee_id, role=role, department_id=department_id, is_active=is_active)


def client_principal(client_id=1, is_active=True) -> Principal:
    return Principal.for_client(client_id=client_id, is_active=is_active)


SUPER_ADMIN = employee_principal(100, Role.SUPER_ADMIN, department_id=None)
ADMIN = employee_principal(101, Role.ADMIN, department_id=None)


class FakeDepartments:
    def __init__(self, *departments: Department):
        self.items = {d.department_id: d for d in departments}
        self._next_id = max(self.items, default=0) + 1

    def get_by_id(self, department_id):
        return self.items.get(int(department_id)) if department_id is not None else None

    def list_all(self):
        return sorted(self.items.values(), key=lambda d: d.name)

    def create_department(self, *, code, name, description):
        if any(d.code == code for d in self.items.values()):
            raise ConflictError("A department with this code already exists", constraint="uq_departments_code")
        did = self._next_id
        self._next_id += 1
        self.items[did] = Department(department_id=did, code=code, name=name, description=description)
        return did

    def update_fields(self, department_id, values):
        d = self.items.get(int(department_id))
        if not d:
            return False
        self.items[d.department_id] = replace(d, **values)
        return True


class FakePositions:
    def __init__(self, *positions: Position):
        self.items = {p.position_id: p for p in positions}
        self._next_id = max(self.items, default=0) + 1

    def get_by_id(self, position_id):
        return self.items.get(int(position_id)) if position_id is not None else None

    def list_all(self, *, department_id=None):
        return [p for p in self.items.values() if department_id is None or p.department_id == department_id]

    def create_position(self, *, title, code, department_id, description, is_manager, is_medical):
        pid = self._next_id
        self._next_id += 1
        self.items[pid] = Position(
            position_id=pid,
            title=title,
            code=code,
            department_id=department_id,
            description=description,
            is_manager=is_manager,
            is_medical=is_medical,
        )
        return pid

    def update_fields(self, position_id, values):
        p = self.items.get(int(position_id))
        if not p:
            return False
        self.items[p.position_id] = replace(p, **values)
        return True


class FakeEmployees:
    """Behaves like the MySQL repository, unique keys and compare-and-set included."""

    def __init__(self, *employees: Employee):
        self.items = {e.employee_id: e for e in employees}
        self.history: list[StatusChange] = []
        self._next_id = max(self.items, default=0) + 1
        self.logins: list[int] = []
        # Numbers another writer grabs right before our insert (simulated race).
        self.stolen_numbers: list[str] = []

    def get_by_id(self, employee_id):
        return self.items.get(int(employee_id)) if employee_id is not None else None

    def get_by_email(self, email):
        return next((e for e in self.items.values() if e.email == email.lower()), None)

    def email_exists(self, email, *, exclude_id=None):
        return any(e.email == email.lower() and e.employee_id != exclude_id for e in self.items.values())

    def last_employee_number(self, prefix):
        numbers = sorted(e.employee_number for e in self.items.values() if in_sequence(e.employee_number, prefix))
        return numbers[-1] if numbers else None

    def create_employee(self, *, employee_number, values, created_by):
        if self.stolen_numbers:
            stolen = self.stolen_numbers.pop(0)
            self._insert(make_employee(self._next_id, employee_number=stolen, email=f"other{self._next_id}@x.test"))
        if any(e.employee_number == employee_number for e in self.items.values()):
            raise ConflictError("dup", constraint="uq_employees_employee_number")
        if any(e.email == values["email"] for e in self.items.values()):
            raise ConflictError("dup", constraint="uq_employees_email")
        eid = self._next_id
        fields = {k: v for k, v in values.items() if k in Employee.__dataclass_fields__}
        self._insert(Employee(employee_id=eid, employee_number=employee_number, **fields))
        return eid

    def _insert(self, employee: Employee) -> None:
        self.items[employee.employee_id] = employee
        self._next_id = max(self._next_id, employee.employee_id + 1)

    def search(self, *, search=None, department_id=None, position_id=None, status=None, limit=20, offset=0):
        rows = self._filter(search, department_id, position_id, status)
        return rows[offset : offset + limit]

    def count(self, *, search=None, department_id=None, position_id=None, status=None):
        return len(self._filter(search, department_id, position_id, status))

    def _filter(self, search, department_id, position_id, status):
        rows = list(self.items.values())
        if search:
            s = search.lower()
            rows = [e for e in rows if s in f"{e.first_name} {e.last_name} {e.email} {e.employee_number}".lower()]
        if department_id is not None:
            rows = [e for e in rows if e.department_id == department_id]
        if position_id is not None:
            rows = [e for e in rows if e.position_id == position_id]
        if status is not None:
            rows = [e for e in rows if e.status == status]
        return sorted(rows, key=lambda e: e.employee_id)

    def update_fields(self, employee_id, values, *, updated_by):
        e = self.items.get(int(employee_id))
        if not e:
            return False
        self.items[e.employee_id] = replace(e, version=e.version + 1, **values)
        return True

    def change_status(
        self,
        *,
        employee_id,
        expected_status,
        expected_version,
        new_status,
        termination_date,
        effective_date,
        changed_by,
        reason,
    ):
        e = self.items.get(int(employee_id))
        if not e or e.status != expected_status or e.version != expected_version:
            return False
        self.items[e.employee_id] = replace(
            e, status=new_status, termination_date=termination_date, version=e.version + 1
        )
        self.history.append(
            StatusChange(
                history_id=len(self.history) + 1,
                employee_id=e.employee_id,
                from_status=expected_status,
                to_status=new_status,
                effective_date=effective_date,
                changed_by=changed_by,
                reason=reason,
            )
        )
        return True

    def list_status_history(self, employee_id):
        return [h for h in reversed(self.history) if h.employee_id == int(employee_id)]

    def count_by_status(self):
        counts = {s: 0 for s in EmployeeStatus}
        for e in self.items.values():
            counts[e.status] += 1
        return counts

    def list_available_managers(self, *, department_id=None):
        return [
            e
            for e in self.items.values()
            if e.status == EmployeeStatus.ACTIVE
            and e.role in (Role.DEPT_MANAGER, Role.ADMIN)
            and (department_id is None or e.department_id == department_id)
        ]

    def set_password_hash(self, employee_id, password_hash):
        e = self.items.get(int(employee_id))
        if not e:
            return False
        self.items[e.employee_id] = replace(e, password_hash=password_hash)
        return True

    def touch_last_login(self, employee_id):
        self.logins.append(int(employee_id))


def make_employee(employee_id=1, **overrides) -> Employee:
    data = dict(
        employee_id=employee_id,
        employee_number=f"CARD2024{employee_id:04d}",
        first_name="Julie",
        last_name="Bernard",
        email=f"user{employee_id}@hr.test",
        hire_date=date(2024, 1, 15),
        department_id=10,
        position_id=20,
    )
    data.update(overrides)
    return Employee(**data)


class FakeClients:
    def __init__(self, *clients: Client):
        self.items = {c.client_id: c for c in clients}
        self._next_id = max(self.items, default=0) + 1
        self.project_counts: dict[int, int] = {}
        self.logins: list[int] = []

    def get_by_id(self, client_id):
        return self.items.get(int(client_id)) if client_id is not None else None

    def get_by_email(self, email):
        return next((c for c in self.items.values() if c.contact_email == email.lower()), None)

    def list_all(self, *, search=None, is_active=None):
        rows = list(self.items.values())
        if search:
            rows = [c for c in rows if search.lower() in c.company_name.lower()]
        if is_active is not None:
            rows = [c for c in rows if c.is_active == is_active]
        return rows

    def create_client(self, *, values, created_by):
        cid = self._next_id
        self._next_id += 1
        fields = {k: v for k, v in values.items() if k in Client.__dataclass_fields__}
        self.items[cid] = Client(client_id=cid, created_by=created_by, **fields)
        return cid

    def update_fields(self, client_id, values):
        c = self.items[int(client_id)]
        self.items[c.client_id] = replace(c, **values)
        return True

    def set_active(self, client_id, *, is_active):
        c = self.items[int(client_id)]
        self.items[c.client_id] = replace(c, is_active=is_active)
        return True

    def delete_by_id(self, client_id):
        return self.items.pop(int(client_id), None) is not None

    def count_projects(self, client_id):
        return self.project_counts.get(int(client_id), 0)

    def set_password_hash(self, client_id, password_hash):
        c = self.items[int(client_id)]
        self.items[c.client_id] = replace(c, password_hash=password_hash)
        return True

    def touch_last_login(self, client_id):
        self.logins.append(int(client_id))


def make_client(client_id=1, **overrides) -> Client:
    data = dict(client_id=client_id, company_name="Acme Health", contact_email=f"client{client_id}@acme.test")
    data.update(overrides)
    return Client(**data)


class FakeProjects:
    def __init__(self, *projects: Project):
        self.items = {p.project_id: p for p in projects}
        self._next_id = max(self.items, default=0) + 1
        self.workspaces: Optional["FakeWorkspaces"] = None

    def get_by_id(self, project_id):
        return self.items.get(int(project_id)) if project_id is not None else None

    def search(self, *, status=None, search=None, department_id=None, client_id=None, assigned_employee=None):
        rows = list(self.items.values())
        if status is not None:
            rows = [p for p in rows if p.status == status]
        if search:
            rows = [p for p in rows if search.lower() in p.name.lower()]
        if department_id is not None:
            rows = [p for p in rows if p.department_id == department_id]
        if client_id is not None:
            rows = [p for p in rows if p.client_id == client_id]
        if assigned_employee is not None:
            eid, dept = assigned_employee
            rows = [p for p in rows if p.manager_id == eid or (dept is not None and p.department_id == dept)]
        return rows

    def create_with_workspace(self, *, values, workspace_name, workspace_description, created_by):
        pid = self._next_id
        self._next_id += 1
        fields = {k: v for k, v in values.items() if k in Project.__dataclass_fields__}
        workspace_id = None
        if self.workspaces is not None:
            workspace_id = self.workspaces.create_workspace(
                name=workspace_name, project_id=pid, description=workspace_description, settings={}
            )
        self.items[pid] = Project(project_id=pid, created_by=created_by, workspace_id=workspace_id, **fields)
        return pid, workspace_id

    def update_fields(self, project_id, values):
        p = self.items[int(project_id)]
        self.items[p.project_id] = replace(p, **values)
        return True

    def delete_by_id(self, project_id):
        return self.items.pop(int(project_id), None) is not None


def make_project(project_id=1, **overrides) -> Project:
    data = dict(
        project_id=project_id,
        name="Cardio portal",
        status=ProjectStatus.ACTIVE,
        client_id=1,
        department_id=10,
        manager_id=50,
    )
    data.update(overrides)
    return Project(**data)


class FakeWorkspaces:
    def __init__(self, *workspaces: Workspace):
        self.items = {w.workspace_id: w for w in workspaces}
        self.members: dict[int, WorkspaceMember] = {}
        self._next_id = max(self.items, default=0) + 1
        self._next_member = 1

    def get_by_id(self, workspace_id):
        return self.items.get(int(workspace_id)) if workspace_id is not None else None

    def list_for_member(self, *, user_id, user_type):
        out = []
        for m in self.members.values():
            if m.user_id == user_id and m.user_type == user_type:
                out.append(replace(self.items[m.workspace_id], member_role=m.role))
        return out

    def create_workspace(self, *, name, project_id, description, settings, creator=None):
        wid = self._next_id
        self._next_id += 1
        self.items[wid] = Workspace(
            workspace_id=wid, name=name, project_id=project_id, description=description, settings=dict(settings)
        )
        if creator is not None:
            self.add_member(workspace_id=wid, user_id=creator[0], user_type=creator[1], role=WorkspaceMemberRole.ADMIN)
        return wid

    def get_member(self, *, workspace_id, user_id, user_type):
        return next(
            (
                m
                for m in self.members.values()
                if m.workspace_id == int(workspace_id) and m.user_id == int(user_id) and m.user_type == user_type
            ),
            None,
        )

    def get_member_by_id(self, member_id):
        return self.members.get(int(member_id))

    def list_members(self, workspace_id):
        return [m for m in self.members.values() if m.workspace_id == int(workspace_id)]

    def add_member(self, *, workspace_id, user_id, user_type, role):
        if self.get_member(workspace_id=workspace_id, user_id=user_id, user_type=user_type):
            raise ConflictError("dup", constraint="uq_workspace_members_user")
        mid = self._next_member
        self._next_member += 1
        self.members[mid] = WorkspaceMember(
            member_id=mid, workspace_id=int(workspace_id), user_id=int(user_id), user_type=UserType(user_type), role=role
        )
        return mid

    def remove_member(self, *, workspace_id, member_id):
        m = self.members.get(int(member_id))
        if not m or m.workspace_id != int(workspace_id):
            return False
        del self.members[m.member_id]
        return True


class FakeMessages:
    def __init__(self):
        self.items: dict[int, Message] = {}
        self._next_id = 1

    def get_by_id(self, message_id):
        return self.items.get(int(message_id)) if message_id is not None else None

    def list_messages(self, *, workspace_id, thread_id=None, limit=50, offset=0):
        rows = [
            m
            for m in self.items.values()
            if m.workspace_id == int(workspace_id) and not m.is_deleted and m.thread_id == thread_id
        ]
        rows.sort(key=lambda m: m.message_id, reverse=True)
        return rows[offset : offset + limit]

    def create_message(self, *, workspace_id, sender_id, sender_type, content, message_type, thread_id, attachments):
        mid = self._next_id
        self._next_id += 1
        self.items[mid] = Message(
            message_id=mid,
            workspace_id=int(workspace_id),
            sender_id=int(sender_id),
            sender_type=UserType(sender_type),
            content=content,
            message_type=message_type,
            thread_id=thread_id,
            attachments=list(attachments),
            created_at=NOW,
        )
        return mid

    def update_content(self, message_id, content):
        m = self.items[int(message_id)]
        self.items[m.message_id] = replace(m, content=content, is_edited=True)
        return True

    def soft_delete(self, message_id, placeholder):
        m = self.items[int(message_id)]
        self.items[m.message_id] = replace(m, content=placeholder, is_deleted=True)
        return True


class StaticAssignments:
    """AssignmentLookup answering from a fixed set of (principal id, project/workspace) pairs."""

    def __init__(self, projects=(), workspaces=()):
        self.projects = set(projects)
        self.workspaces = set(workspaces)
        self.calls = 0

    def is_assigned(self, principal, *, project_id=None, workspace_id=None):
        self.calls += 1
        if workspace_id is not None:
            return (principal.id, int(workspace_id)) in self.workspaces
        return (principal.id, int(project_id)) in self.projects
