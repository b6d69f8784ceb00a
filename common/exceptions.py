"""
LedgerPOS - Custom Exceptions
==============================
Business-level exceptions that can be caught and converted to HTTP responses.
"""

from fastapi import HTTPException, status


class LedgerError(Exception):
    """Base exception for all business logic errors."""
    def __init__(self, message: str = "Internal ledger error."):
        self.message = message
        super().__init__(self.message)


class InvalidAmountError(LedgerError):
    """Raised when an amount must be positive (or non-negative) and is not."""
    def __init__(self, amount=None):
        msg = f"Invalid amount: {amount}" if amount is not None else "Invalid amount."
        self.amount = amount
        super().__init__(msg)


class UnassignedLoanError(LedgerError):
    """Raised when settlement would leave a loan with no customer to carry it."""
    def __init__(self, total: int, loan: int):
        self.total = total
        self.loan = loan
        super().__init__(f"Loan of {loan} on total {total} requires a customer.")


class UnknownEntityError(LedgerError):
    """Raised when a customer/product/actor/transaction id does not exist."""
    def __init__(self, entity: str, entity_id=None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"Unknown {entity}: {entity_id}")


class EmptyCartError(LedgerError):
    """Raised when checking out a cart with no lines."""
    def __init__(self):
        super().__init__("Cart is empty.")


class InvalidTransferKindError(LedgerError):
    """Raised for a cash transfer kind outside the known set."""
    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unknown transfer kind: {kind}")


def status_for(error: LedgerError) -> int:
    if isinstance(error, UnknownEntityError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, UnassignedLoanError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def raise_http(error: LedgerError, status_code: int = None):
    """Convert a business exception to an HTTP exception."""
    detail = {"error": type(error).__name__, "message": error.message}
    if isinstance(error, UnassignedLoanError):
        detail.update(total=error.total, loan=error.loan)
    raise HTTPException(status_code=status_code or status_for(error), detail=detail)
