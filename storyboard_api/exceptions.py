from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception"""

    def to_content(self) -> Dict[str, Any]:
        return {"detail": self.detail}


class NotFoundError(AppException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class BadRequestError(AppException):
    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UnauthorizedError(AppException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(AppException):
    def __init__(self, detail: str = "Access denied"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class ScheduleConflictError(AppException):
    """Raised when a schedule entry overlaps another entry of the same project and date."""

    def __init__(self, conflicts: Optional[List[Dict[str, Any]]] = None, detail: str = "Schedule conflict detected"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
        self.conflicts = conflicts or []

    def to_content(self) -> Dict[str, Any]:
        return {"detail": self.detail, "conflicts": self.conflicts}


class InternalServerError(AppException):
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
