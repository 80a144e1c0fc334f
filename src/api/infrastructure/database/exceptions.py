"""Database-specific exceptions shared across bounded contexts."""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class DatabaseConnectionError(DatabaseError):
    """Raised when a database connection cannot be established."""

    def __init__(self, message: str, host: str | None = None):
        super().__init__(message)
        self.host = host
