"""Domain exceptions shared by every feature package."""


class DomainError(Exception):
    kind = 'domain_error'

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(DomainError):
    kind = 'validation_error'

    def __init__(self, message: str):
        super().__init__(message, 400)


class ForbiddenError(DomainError):
    kind = 'forbidden'

    def __init__(self, message: str):
        super().__init__(message, 403)


class NotFoundError(DomainError):
    kind = 'not_found'

    def __init__(self, message: str):
        super().__init__(message, 404)


class ConflictError(DomainError):
    """Seat already claimed, screening overlap or seats already initialized."""

    kind = 'conflict'

    def __init__(self, message: str):
        super().__init__(message, 409)


class InvalidStateError(DomainError):
    kind = 'invalid_state'

    def __init__(self, message: str):
        super().__init__(message, 409)
