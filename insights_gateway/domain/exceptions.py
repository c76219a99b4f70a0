"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class FinanceAPIError(DomainException):
    """Finance data API returned an error or is unavailable"""

    pass


class InvalidFinanceDataError(DomainException):
    """Finance records are malformed or missing required fields"""

    pass


class InsightNotFoundError(DomainException):
    """Insight does not exist or belongs to another user"""

    pass
