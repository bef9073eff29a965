class NotFoundError(ValueError):
    """Requested record does not exist (or is not visible to the caller)."""


class PermissionDeniedError(ValueError):
    pass


class ConflictError(ValueError):
    pass


class InvalidCredentialsError(ValueError):
    pass
