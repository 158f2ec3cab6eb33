from helpdesk.rbac.models.role import Role

__all__ = ["Role"]
