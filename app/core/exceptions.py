"""
Custom exceptions for the application
"""

class BaseAppException(Exception):
    """Base application exception"""
    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class NotFoundError(BaseAppException):
    """Raised when a resource is not found"""
    pass


class ValidationError(BaseAppException):
    """Raised when validation fails"""
    def __init__(self, message: str, details: str = None, error_code: str = None):
        super().__init__(message, details)
        self.error_code = error_code


class AuthorizationError(BaseAppException):
    """Raised when the shop's plan does not grant access to a feature"""
    def __init__(self, message: str, current_plan: str = None, current_status: str = None):
        super().__init__(message)
        self.current_plan = current_plan
        self.current_status = current_status


class BusinessLogicError(BaseAppException):
    """Raised when business logic constraints are violated"""
    pass


class LimitExceededError(BusinessLogicError):
    """Raised when a plan quota (pre-orders, waitlist emails) is reached"""
    def __init__(self, message: str, resource: str, limit: int, current: int, plan: str):
        super().__init__(message)
        self.resource = resource
        self.limit = limit
        self.current = current
        self.plan = plan


class ExternalServiceError(BaseAppException):
    """Raised when external service calls fail"""
    pass
