from __future__ import annotations

from ..extensions import db
from ppe_tracker.time_utils import to_utc_z


VOUCHER_PENDING = "pending"
VOUCHER_APPROVED = "approved"
VOUCHER_PARTIALLY_APPROVED = "partially_approved"
VOUCHER_REJECTED = "rejected"
VOUCHER_STATUSES = {
    VOUCHER_PENDING,
    VOUCHER_APPROVED,
    VOUCHER_PARTIALLY_APPROVED,
    VOUCHER_REJECTED,
}
ISSUED_STATUSES = {VOUCHER_APPROVED, VOUCHER_PARTIALLY_APPROVED}

RECEIVED = "received"


class IssueVoucher(db.Model):
    """
    Request to issue PPE items to an employee.

    LIFECYCLE:
    - status: pending -> approved | partially_approved | rejected (terminal)
    - status_received: NULL -> received (terminal, independent of status)

    items_json is the ordered list of requested lines, [{itemId, quantity}],
    embedded in the row rather than kept in a child table. Partial approval
    does not rewrite it; the approved quantities go into admin_notes.
    """
    __tablename__ = "issue_vouchers"

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    user = db.Column(db.String(255), nullable=False)
    department = db.Column(db.String(120), nullable=True)
    employee_id = db.Column(db.String(64), nullable=False, default="")
    user_id = db.Column(db.String(128), nullable=False, default="")

    status = db.Column(db.String(32), nullable=False, default=VOUCHER_PENDING, index=True)
    admin_notes = db.Column(db.Text, nullable=False, default="")
    items_json = db.Column(db.JSON, nullable=False, default=list)

    status_received = db.Column(db.String(16), nullable=True)
    received_at = db.Column(db.DateTime(timezone=True), nullable=True)
    received_by = db.Column(db.String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<IssueVoucher id={self.id} status={self.status!r} user={self.user!r}>"

    @property
    def lines(self) -> list[dict]:
        return list(self.items_json or [])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": to_utc_z(self.timestamp),
            "user": self.user,
            "department": self.department,
            "employeeId": self.employee_id,
            "userId": self.user_id,
            "status": self.status,
            "adminNotes": self.admin_notes,
            "itemsJson": self.lines,
            "status_received": self.status_received,
            "received_at": to_utc_z(self.received_at) if self.received_at else None,
            "received_by": self.received_by,
        }
