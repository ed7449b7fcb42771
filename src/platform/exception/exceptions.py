class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class InvalidInputError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class InvalidStateError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class InsufficientInventoryError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class AuthenticationError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


class GatewayUnavailableError(CustomBaseError):
    """Payment provider unreachable, timed out or answered 5xx. Safe to retry."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)


class GatewayRejectedError(CustomBaseError):
    """Payment provider refused the request (4xx)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 502)
