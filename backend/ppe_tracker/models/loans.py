from __future__ import annotations

from ..extensions import db
from ppe_tracker.time_utils import to_utc_z


LOAN_ON_LOAN = "on_loan"
LOAN_RETURNED = "returned"


class LoanTransaction(db.Model):
    """
    One unit of loanable equipment lent to a borrower.

    LIFECYCLE: on_loan -> returned (terminal). return_date is set exactly
    once, by the return.
    """
    __tablename__ = "loan_transactions"

    loan_id = db.Column("loanId", db.Integer, primary_key=True, autoincrement=False)
    item_id = db.Column(db.Integer, nullable=False, index=True)

    borrower_name = db.Column(db.String(255), nullable=False)
    employee_id = db.Column(db.String(64), nullable=False, default="")
    user_id = db.Column(db.String(128), nullable=False, default="")
    department = db.Column(db.String(120), nullable=False, default="")

    borrow_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    due_date = db.Column(db.DateTime(timezone=True), nullable=True)
    return_date = db.Column(db.DateTime(timezone=True), nullable=True)

    status = db.Column(db.String(16), nullable=False, default=LOAN_ON_LOAN, index=True)
    notes = db.Column(db.Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<LoanTransaction loanId={self.loan_id} item_id={self.item_id} status={self.status!r}>"

    def to_dict(self) -> dict:
        return {
            "loanId": self.loan_id,
            "itemId": self.item_id,
            "borrowerName": self.borrower_name,
            "employeeId": self.employee_id,
            "userId": self.user_id,
            "department": self.department,
            "borrowDate": to_utc_z(self.borrow_date),
            "dueDate": to_utc_z(self.due_date) if self.due_date else None,
            "returnDate": to_utc_z(self.return_date) if self.return_date else None,
            "status": self.status,
            "notes": self.notes,
        }
