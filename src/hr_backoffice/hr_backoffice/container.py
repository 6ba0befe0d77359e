from __future__ import annotations

from dataclasses import dataclass

from .auth.assignment import RepositoryAssignmentLookup
from .auth.service import AuthService, IdentityService
from .clients.mysql_client_repository import MySQLClientRepository
from .clients.service import ClientService
from .core.constants import EMPLOYEE_NUMBER_MAX_ATTEMPTS
from .database.connection import DBConfig, DatabaseConnection
from .departments.mysql_department_repository import MySQLDepartmentRepository
from .departments.mysql_position_repository import MySQLPositionRepository
from .departments.service import DepartmentService, PositionService
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.service import EmployeeService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.service import ProjectService
from .workspaces.mysql_message_repository import MySQLMessageRepository
from .workspaces.mysql_workspace_repository import MySQLWorkspaceRepository
from .workspaces.service import MessageService, WorkspaceService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    departments_repo: MySQLDepartmentRepository
    positions_repo: MySQLPositionRepository
    clients_repo: MySQLClientRepository
    projects_repo: MySQLProjectRepository
    workspaces_repo: MySQLWorkspaceRepository
    messages_repo: MySQLMessageRepository

    auth_service: AuthService
    identity_service: IdentityService
    employee_service: EmployeeService
    department_service: DepartmentService
    position_service: PositionService
    client_service: ClientService
    project_service: ProjectService
    workspace_service: WorkspaceService
    message_service: MessageService


def build_container(*, db_config: dict, employee_number_attempts: int = EMPLOYEE_NUMBER_MAX_ATTEMPTS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    employees_repo = MySQLEmployeeRepository(conn)
    departments_repo = MySQLDepartmentRepository(conn)
    positions_repo = MySQLPositionRepository(conn)
    clients_repo = MySQLClientRepository(conn)
    projects_repo = MySQLProjectRepository(conn)
    workspaces_repo = MySQLWorkspaceRepository(conn)
    messages_repo = MySQLMessageRepository(conn)

    assignments = RepositoryAssignmentLookup(projects_repo, workspaces_repo)

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        departments_repo=departments_repo,
        positions_repo=positions_repo,
        clients_repo=clients_repo,
        projects_repo=projects_repo,
        workspaces_repo=workspaces_repo,
        messages_repo=messages_repo,
        auth_service=AuthService(employees_repo, clients_repo),
        identity_service=IdentityService(employees_repo, clients_repo),
        employee_service=EmployeeService(
            employees_repo, departments_repo, positions_repo, max_number_attempts=employee_number_attempts
        ),
        department_service=DepartmentService(departments_repo),
        position_service=PositionService(positions_repo, departments_repo),
        client_service=ClientService(clients_repo),
        project_service=ProjectService(projects_repo, clients_repo, departments_repo, employees_repo, assignments),
        workspace_service=WorkspaceService(workspaces_repo, projects_repo, employees_repo, clients_repo, assignments),
        message_service=MessageService(messages_repo, workspaces_repo, assignments),
    )
