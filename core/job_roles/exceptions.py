"""
Validation errors raised while editing a role's page hierarchy.

They subclass Django's ValidationError so views handle them the same way as
model validation failures (HTTP 400 with an error message).
"""
from django.core.exceptions import ValidationError


class HierarchyError(ValidationError):
    default_code = 'invalid_hierarchy'

    def __init__(self, message, code=None, params=None):
        super().__init__(message, code=code or self.default_code, params=params)


class NotLoaded(HierarchyError):
    """A mutating editor operation was attempted before load()."""
    default_code = 'not_loaded'

    def __init__(self, message='The page hierarchy has not been loaded.'):
        super().__init__(message)


class DuplicateAssignment(HierarchyError):
    """The page is already assigned to the role."""
    default_code = 'duplicate_assignment'


class InvalidParent(HierarchyError):
    """The requested parent would make the page its own ancestor, or is not allowed."""
    default_code = 'invalid_parent'


class UnknownPage(HierarchyError):
    """The page is not part of the catalog (or of the working tree)."""
    default_code = 'unknown_page'
