"""Service layer exceptions"""

from typing import Optional


class ServiceError(Exception):
    """Base exception for service layer errors"""

    def __init__(self, message: str, original_error: Optional[Exception] = None, error_code: str = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.error_code = error_code or "SERVICE_ERROR"


class TokenError(ServiceError):
    """Exception for tokens that are malformed, tampered, expired or of the wrong type"""

    def __init__(self, message: str, token_type: str = None, original_error: Optional[Exception] = None):
        super().__init__(message, original_error=original_error, error_code="INVALID_TOKEN")
        self.token_type = token_type
