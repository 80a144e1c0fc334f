"""Exceptions for the tenancy bounded context.

Messages are safe to return to clients. Failure detail is recorded by the
probes at the point of failure and never carried in the message.
"""


class TenancyError(Exception):
    """Base class for tenant routing failures."""

    pass


class TenantNotFoundError(TenancyError):
    """Raised when an identifier does not resolve to an active tenant.

    Missing and inactive tenants are deliberately indistinguishable to
    the caller.
    """

    def __init__(self, message: str = "Invalid tenant") -> None:
        super().__init__(message)


class TenantIdentifierMissingError(TenancyError):
    """Raised when a unit of work carries no tenant identifier."""

    def __init__(self, message: str = "Tenant identifier missing") -> None:
        super().__init__(message)


class TenantResolutionError(TenancyError):
    """Raised when the registry lookup itself fails.

    Covers store and driver errors, credential decryption failures and
    lookup timeouts.
    """

    def __init__(self, message: str = "Failed to resolve tenant") -> None:
        super().__init__(message)


class MissingDatabaseConfigError(TenancyError):
    """Raised when a descriptor lacks the fields its mode requires."""

    pass


class TenantConnectionError(TenancyError):
    """Raised when a tenant pool cannot be created or verified."""

    def __init__(
        self, message: str = "Failed to connect to tenant database"
    ) -> None:
        super().__init__(message)
