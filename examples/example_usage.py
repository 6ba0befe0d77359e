"""Example: calling the service layer directly, without Flask.

Controllers are thin; business rules live in the services, so a script can
drive them with a Principal of its choosing.
"""

import importlib

from dotenv import load_dotenv

from config import get_settings_module

from src.hr_backoffice.hr_backoffice.auth.principal import Principal
from src.hr_backoffice.hr_backoffice.container import build_container
from src.hr_backoffice.hr_backoffice.core.enums import Role


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    admin = Principal.for_employee(employee_id=1, role=Role.SUPER_ADMIN, department_id=None)
    print(container.employee_service.stats(principal=admin))
    for department in container.department_service.list(principal=admin):
        print(department.code, department.name, department.employee_count)


if __name__ == "__main__":
    main()
