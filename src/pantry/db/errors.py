"""
Data-access error taxonomy.

Backend failures are translated at the repository boundary into a small
closed set of error kinds, so callers match on a class instead of
probing codes and messages.
"""

from postgrest.exceptions import APIError

from pantry.errors import PantryError

NOT_FOUND_CODES = frozenset({"PGRST116"})
CONFLICT_CODES = frozenset({"23505"})
NOT_FOUND_MESSAGE = "multiple (or no) rows returned"


class DataAccessError(PantryError):
    """Base class for backend failures."""

    def __init__(self, message: str, *, table: str | None = None, code: str | None = None) -> None:
        self.table = table
        self.code = code
        super().__init__(message)


class NotFoundError(DataAccessError):
    """The requested row does not exist (or is not visible to this user)."""


class ConflictError(DataAccessError):
    """A unique constraint rejected the write."""


class BackendError(DataAccessError):
    """Any other backend or transport failure."""


def translate_error(exc: Exception, *, table: str | None = None) -> DataAccessError:
    """Map a raised backend exception to a DataAccessError."""
    if isinstance(exc, DataAccessError):
        return exc

    if isinstance(exc, APIError):
        code = exc.code
        message = exc.message or str(exc)
        if code in NOT_FOUND_CODES or NOT_FOUND_MESSAGE in message:
            return NotFoundError(message, table=table, code=code)
        if code in CONFLICT_CODES:
            return ConflictError(message, table=table, code=code)
        return BackendError(message, table=table, code=code)

    return BackendError(str(exc) or type(exc).__name__, table=table)
