# app/domain/errors.py


class DomainError(Exception):
    """Bazowy wyjatek domeny, router tlumaczy go na odpowiedz HTTP."""

    status_code = 400
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError, ValueError):
    status_code = 400
    code = "validation_error"


class NotFoundError(DomainError, LookupError):
    status_code = 404
    code = "not_found"


class ForbiddenError(DomainError, PermissionError):
    status_code = 403
    code = "forbidden"


class UnauthorizedError(DomainError):
    status_code = 401
    code = "unauthorized"


class InvalidStateError(DomainError, ValueError):
    status_code = 400
    code = "invalid_state"


ConflictError = InvalidStateError


class InsufficientStockError(InvalidStateError):
    code = "insufficient_stock"
