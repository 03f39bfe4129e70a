"""Custom exceptions - SoC principle"""

class OnboardingError(Exception):
    """Base exception for the onboarding backend"""

    def __init__(self, message, details=None):
        super().__init__(message)
        self.details = details

class ValidationError(OnboardingError):
    """Missing or malformed request field"""
    pass

class NotFoundError(OnboardingError):
    """Identifier absent from the identity or report store"""
    pass

class ConflictError(OnboardingError):
    """Duplicate unique field"""
    pass

class AccessDeniedError(OnboardingError):
    """Actor may not touch the requested record"""
    pass

class UpstreamFormatError(OnboardingError):
    """Remote spreadsheet returned an unexpected shape"""
    pass

class PersistenceError(OnboardingError):
    """Storage operation failed"""
    pass
