"""Service-level exceptions shared by services and routers."""


class NotFoundError(ValueError):
    """Raised when a referenced record does not exist."""


class PermissionDeniedError(Exception):
    """Raised when the caller may not act on a record."""
