"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidLoanRequestError(DomainException):
    """Amount, term or income failed validation"""

    pass


class RequestedAmountExceedsMaxError(DomainException):
    """Requested principal is above the computed maximum for this borrower"""

    def __init__(self, requested: float, max_principal: float):
        super().__init__(f"Requested amount {requested} exceeds maximum {max_principal}")
        self.requested = requested
        self.max_principal = max_principal


class ApplicationNotFoundError(DomainException):
    """Loan application does not exist"""

    pass


class LoanNotFoundError(DomainException):
    """Loan does not exist"""

    pass


class InvalidStatusTransitionError(DomainException):
    """Application is not in a state that allows the requested decision"""

    pass


class DisbursementError(DomainException):
    """Crediting approved funds to the borrower failed"""

    pass
