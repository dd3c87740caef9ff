from typing import Optional
from fastapi import HTTPException, status


class AppException(HTTPException):
    """Domain error carrying its own HTTP status and error code."""
    status_code_default: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, detail: str, headers: Optional[dict] = None):
        super().__init__(status_code=self.status_code_default, detail=detail, headers=headers)


class ValidationError(AppException):
    status_code_default = status.HTTP_400_BAD_REQUEST
    error_code = "BAD_REQUEST"


class AuthenticationError(AppException):
    status_code_default = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class UnauthorizedError(AppException):
    status_code_default = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"


class NotFoundError(AppException):
    status_code_default = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"


class AlreadyExistsError(AppException):
    status_code_default = status.HTTP_409_CONFLICT
    error_code = "ALREADY_EXISTS"


class ConflictError(AppException):
    status_code_default = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"
