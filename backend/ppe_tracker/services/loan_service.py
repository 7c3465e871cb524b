# Overview: Service-layer operations for equipment loans.

"""
Loan Service

LIFECYCLE: ON_LOAN -> RETURNED (terminal)

Borrowing takes one unit out of stock into on_loan_quantity; returning puts
it back. Both the loan row and the item counters change in one transaction.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import update

from ..extensions import db
from ..models import LoanTransaction
from ..models.loans import LOAN_ON_LOAN, LOAN_RETURNED
from ..validation import to_int, to_text
from .errors import InvalidInputError, InvalidStateError, NotFoundError
from .sequence_service import next_id
from .stock_service import adjust_loanable_stock, BORROW, RETURN
from ppe_tracker.time_utils import utcnow, parse_iso_datetime


def _parse_due_date(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return parse_iso_datetime(str(value))
    except ValueError:
        raise InvalidInputError("Invalid dueDate format")


def get_loan(loan_id: int) -> LoanTransaction:
    loan = db.session.get(LoanTransaction, loan_id)
    if loan is None:
        raise NotFoundError(f"Loan {loan_id} not found")
    return loan


def list_loans() -> list[LoanTransaction]:
    return db.session.query(LoanTransaction).order_by(LoanTransaction.loan_id).all()


def borrow_item(
    *,
    item_id,
    borrower_name: str,
    employee_id: str | None = None,
    user_id: str | None = None,
    department: str | None = None,
    due_date: datetime | str | None = None,
    notes: str | None = None,
) -> dict:
    """
    Lend one unit of an item.

    Returns:
        {newLoan, updatedItem}

    Raises:
        InvalidInputError: If item_id or borrower_name is missing
        NotFoundError: If the item does not exist
        OutOfStockError: If the item has no stock
    """
    item_id = to_int(item_id, "itemId")
    borrower_name = to_text(borrower_name)
    if not borrower_name:
        raise InvalidInputError("borrowerName is required")
    due_dt = _parse_due_date(due_date)

    loan_id = next_id(LoanTransaction.__tablename__, "loanId")
    updated_item = adjust_loanable_stock(item_id, BORROW)

    loan = LoanTransaction(
        loan_id=loan_id,
        item_id=item_id,
        borrower_name=borrower_name,
        employee_id=to_text(employee_id) or "",
        user_id=to_text(user_id) or "",
        department=to_text(department) or "",
        borrow_date=utcnow(),
        due_date=due_dt,
        return_date=None,
        status=LOAN_ON_LOAN,
        notes=to_text(notes) or "",
    )
    db.session.add(loan)
    db.session.commit()

    return {"newLoan": loan.to_dict(), "updatedItem": updated_item}


def return_item(loan_id) -> dict:
    """
    Return a borrowed unit to stock.

    Returns:
        {returnedLoanId, updatedItem}

    Raises:
        NotFoundError: If the loan does not exist
        InvalidStateError: If the loan is not on loan
    """
    loan_id = to_int(loan_id, "loanId")
    loan = get_loan(loan_id)
    if loan.status != LOAN_ON_LOAN:
        raise InvalidStateError(f"Loan {loan_id} has already been {loan.status}")

    result = db.session.execute(
        update(LoanTransaction)
        .where(LoanTransaction.loan_id == loan_id, LoanTransaction.status == LOAN_ON_LOAN)
        .values(status=LOAN_RETURNED, return_date=utcnow())
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        raise InvalidStateError(f"Loan {loan_id} was returned by another request")

    updated_item = adjust_loanable_stock(loan.item_id, RETURN)
    db.session.commit()

    return {"returnedLoanId": loan_id, "updatedItem": updated_item}
