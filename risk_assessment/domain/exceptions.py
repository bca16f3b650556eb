"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class CentralBankAPIError(DomainException):
    """Central bank credit-check API returned an error or is unavailable"""

    def __init__(self, message: str, status_code: int = 503):
        super().__init__(message)
        self.status_code = status_code


class AssessmentTimeoutError(DomainException):
    """Risk assessment pipeline exceeded its overall deadline"""

    pass


class ReassessmentNotSupportedError(DomainException):
    """Reassessment of an existing application is not supported yet"""

    pass
