"""Failure kinds raised by the core services.

Routers are the only place these are translated into HTTP status codes.
"""


class TaskVaultError(Exception):
    """Base class for every error raised by the core."""


class ValidationError(TaskVaultError):
    """Malformed or missing input, e.g. a blank title or empty credentials."""


class AuthenticationError(TaskVaultError):
    """No resolvable session, or a wrong password."""


class NotFoundError(TaskVaultError):
    """Record absent, or not owned by the caller. Both look the same."""


class ConflictError(TaskVaultError):
    """A unique constraint rejected the record, e.g. a duplicate username."""


class InfrastructureError(TaskVaultError):
    """The backing store is unavailable or failed mid-operation."""
