from helpdesk.employees.models.employee import Employee, EmployeeKind, Manager, Worker

__all__ = ["Employee", "EmployeeKind", "Manager", "Worker"]
