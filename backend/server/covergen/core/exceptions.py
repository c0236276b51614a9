"""
Custom exceptions for the application
"""


class AppException(Exception):
    """Base application exception"""
    pass


class NotFoundError(AppException):
    """Raised when a resource is not found or is not owned by the caller"""
    pass


class ForbiddenError(AppException):
    """Raised when access to a resource or action is forbidden"""
    pass


class ValidationError(AppException):
    """Raised when validation fails"""
    pass


class AuthenticationError(AppException):
    """Raised when authentication fails"""
    pass


class InvalidStateError(AppException):
    """Raised when a job transition is not legal from its current status"""

    def __init__(self, message: str, current_status: str = None):
        super().__init__(message)
        self.current_status = current_status


class StorageError(AppException):
    """Raised when a blob storage operation fails"""
    pass
