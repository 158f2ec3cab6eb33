from helpdesk.categories.models.category import Category

__all__ = ["Category"]
