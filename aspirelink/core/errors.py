class NotFoundError(Exception):
    """A referenced row does not exist."""


class ConflictError(Exception):
    """A write would break an application-level uniqueness rule."""
