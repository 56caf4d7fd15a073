"""Custom exceptions for telesto."""


class TelestoError(Exception):
    """Base exception for telesto."""

    pass


class DatabaseError(TelestoError):
    """Database operation errors."""

    pass


class NotFoundError(DatabaseError):
    """Resource not found."""

    pass
