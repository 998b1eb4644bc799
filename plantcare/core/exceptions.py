"""
Custom application exceptions.
"""

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""
    
    def __init__(self, detail: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(status_code=status_code, detail=detail)


class NotFoundException(AppException):
    """Resource not found exception."""
    
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(detail=detail, status_code=status.HTTP_404_NOT_FOUND)


class BadRequestException(AppException):
    """Bad request exception."""
    
    def __init__(self, detail: str = "Bad request"):
        super().__init__(detail=detail, status_code=status.HTTP_400_BAD_REQUEST)


class RoutineStateError(AppException):
    """Care routine action not allowed in the routine's current state."""
    
    def __init__(self, detail: str = "Care routine is not in progress"):
        super().__init__(detail=detail, status_code=status.HTTP_409_CONFLICT)


class AIServiceError(AppException):
    """The AI collaborator failed or returned something unusable."""
    
    def __init__(self, detail: str = "AI service error"):
        super().__init__(detail=detail, status_code=status.HTTP_502_BAD_GATEWAY)


class PersistenceError(AppException):
    """Snapshot could not be loaded or saved."""
    
    def __init__(self, detail: str = "Storage error"):
        super().__init__(detail=detail, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
