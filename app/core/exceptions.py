from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DuplicateEntity(ServiceError):
    """A record with the same unique key already exists."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class NotFound(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class Conflict(ServiceError):
    """The operation would break a business rule (e.g. deleting the current year)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class InvalidCredentials(ServiceError):
    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class ServerError(ServiceError):
    def __init__(self, message: str = "Server Error") -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
