# Overview: Service-layer operations for issue vouchers; encapsulates the approval workflow.

"""
Issue Voucher Service

LIFECYCLE:
1. PENDING: Created by an employee's issue request
2. APPROVED: All requested lines issued; stock deducted
3. PARTIALLY_APPROVED: Some lines issued below the requested quantity
4. REJECTED: Nothing issued

status leaves PENDING exactly once. The transition is a conditional
UPDATE ... WHERE status = 'pending'; a request that finds zero affected rows
lost the race (or the voucher was already handled) and fails with
InvalidStateError. The stock deduction is written in the same transaction,
so stock moves at most once per voucher.

status_received is a separate axis set by confirm_receive, idempotently.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import or_, update

from ..extensions import db
from ..models import IssueVoucher
from ..models.vouchers import (
    VOUCHER_PENDING,
    VOUCHER_APPROVED,
    VOUCHER_PARTIALLY_APPROVED,
    VOUCHER_REJECTED,
    RECEIVED,
)
from ..validation import parse_lines, to_int, to_text
from .errors import InvalidInputError, InvalidStateError, NotFoundError
from .notification_service import notify_admin
from .sequence_service import next_id
from .stock_service import adjust_stock, DECREASE
from ppe_tracker.time_utils import utcnow, to_utc_z


APPROVED_NOTE = "Approved by admin"
REJECTED_NOTE = "Rejected by admin"
PARTIAL_NOTE_PREFIX = "Partially approved:"


def get_voucher(voucher_id: int) -> IssueVoucher:
    voucher = db.session.get(IssueVoucher, voucher_id)
    if voucher is None:
        raise NotFoundError(f"Voucher {voucher_id} not found")
    return voucher


def list_vouchers() -> list[IssueVoucher]:
    return db.session.query(IssueVoucher).order_by(IssueVoucher.id).all()


def create_voucher(
    *,
    user: str,
    department: str | None,
    lines: list[dict],
    employee_id: str | None = None,
    user_id: str | None = None,
) -> IssueVoucher:
    """
    Create a pending issue voucher.

    Args:
        user: Requesting employee's display name
        department: Requesting department
        lines: [{itemId, quantity}] in request order
        employee_id: Optional employee number
        user_id: Optional chat-platform user id of the requester

    Raises:
        InvalidInputError: If user is blank or lines are empty/invalid
    """
    user = to_text(user)
    if not user:
        raise InvalidInputError("user is required")
    parsed = parse_lines(lines)
    if not parsed:
        raise InvalidInputError("A voucher needs at least one item")

    voucher = IssueVoucher(
        id=next_id(IssueVoucher.__tablename__),
        timestamp=utcnow(),
        user=user,
        department=to_text(department),
        employee_id=to_text(employee_id) or "",
        user_id=to_text(user_id) or "",
        status=VOUCHER_PENDING,
        admin_notes="",
        items_json=[{"itemId": line["itemId"], "quantity": line["quantity"]} for line in parsed],
    )
    db.session.add(voucher)
    db.session.commit()
    return voucher


def _claim_pending(voucher_id: int, status: str, admin_notes: str) -> None:
    """
    Move a voucher out of PENDING, or fail.

    Raises:
        NotFoundError: If no such voucher
        InvalidStateError: If it is no longer pending
    """
    voucher = get_voucher(voucher_id)
    if voucher.status != VOUCHER_PENDING:
        raise InvalidStateError(f"Voucher {voucher_id} has already been {voucher.status}")

    result = db.session.execute(
        update(IssueVoucher)
        .where(IssueVoucher.id == voucher_id, IssueVoucher.status == VOUCHER_PENDING)
        .values(status=status, admin_notes=admin_notes)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        raise InvalidStateError(f"Voucher {voucher_id} was handled by another request")
    db.session.refresh(voucher)


def approve_voucher(voucher_id: int) -> dict:
    """
    Approve every line of a pending voucher and deduct stock.

    Raises:
        NotFoundError: If not found
        InvalidStateError: If not pending
        OutOfStockError: If a line exceeds available stock
    """
    voucher = get_voucher(voucher_id)
    lines = voucher.lines

    _claim_pending(voucher_id, VOUCHER_APPROVED, APPROVED_NOTE)
    updated_stock_items = adjust_stock(lines, DECREASE)
    db.session.commit()

    current_app.logger.info("Voucher %s approved (%s lines)", voucher_id, len(lines))
    return {
        "updatedVoucherId": voucher_id,
        "status": VOUCHER_APPROVED,
        "updatedStockItems": updated_stock_items,
    }


def approve_partial_voucher(voucher_id: int, approved_lines: list[dict]) -> dict:
    """
    Approve a pending voucher with per-line quantities.

    Lines with quantity 0 are declined. Stock is deducted by the approved
    quantities only. Quantities are totalled per item on both sides, so an
    item requested or approved on several lines is compared as one sum. The
    final status is APPROVED when no approved item total is below its
    requested total, otherwise PARTIALLY_APPROVED.

    Args:
        voucher_id: Voucher to approve
        approved_lines: [{itemId, itemName, quantity}]

    Raises:
        NotFoundError: If not found
        InvalidStateError: If not pending
        InvalidInputError: If no line has a positive quantity, or an item
            total exceeds what was requested
    """
    voucher = get_voucher(voucher_id)
    if voucher.status != VOUCHER_PENDING:
        raise InvalidStateError(f"Voucher {voucher_id} has already been {voucher.status}")

    # Totals per item; either side may list an item on several lines
    requested: dict[int, int] = {}
    for line in voucher.lines:
        item_id = int(line["itemId"])
        requested[item_id] = requested.get(item_id, 0) + int(line["quantity"])

    approved: dict[int, int] = {}
    names: dict[int, str] = {}
    for line in parse_lines(approved_lines or [], allow_zero=True):
        item_id = line["itemId"]
        approved[item_id] = approved.get(item_id, 0) + line["quantity"]
        if line.get("itemName"):
            names.setdefault(item_id, line["itemName"])

    all_approved_fully = True
    notes = [PARTIAL_NOTE_PREFIX]
    to_deduct = []

    for item_id, quantity in approved.items():
        original_quantity = requested.get(item_id)

        if original_quantity is not None and quantity > original_quantity:
            raise InvalidInputError(
                f"Approved quantity {quantity} for item {item_id} exceeds requested {original_quantity}"
            )

        if quantity > 0:
            to_deduct.append({"itemId": item_id, "quantity": quantity})
            name = names.get(item_id) or f"Item {item_id}"
            shown = original_quantity if original_quantity is not None else "?"
            notes.append(f"- {name}: {quantity}/{shown}")

        if original_quantity is not None and quantity < original_quantity:
            all_approved_fully = False

    if not to_deduct:
        raise InvalidInputError("Cannot approve a voucher with no items. Reject it instead.")

    new_status = VOUCHER_APPROVED if all_approved_fully else VOUCHER_PARTIALLY_APPROVED
    _claim_pending(voucher_id, new_status, " ".join(notes))
    updated_stock_items = adjust_stock(to_deduct, DECREASE)
    db.session.commit()

    current_app.logger.info("Voucher %s %s", voucher_id, new_status)
    return {
        "updatedVoucherId": voucher_id,
        "status": new_status,
        "updatedStockItems": updated_stock_items,
    }


def reject_voucher(voucher_id: int) -> dict:
    """
    Reject a pending voucher. Stock is untouched.

    Raises:
        NotFoundError: If not found
        InvalidStateError: If not pending
    """
    _claim_pending(voucher_id, VOUCHER_REJECTED, REJECTED_NOTE)
    db.session.commit()

    current_app.logger.info("Voucher %s rejected", voucher_id)
    return {"updatedVoucherId": voucher_id, "status": VOUCHER_REJECTED}


def confirm_receive(voucher_id, confirmer_id, confirmer_name: str | None = None) -> dict:
    """
    Record that the requester picked up the items.

    Idempotent: a second call returns already_received and changes nothing.
    After a successful confirmation the admin is notified; a failed
    notification is logged and does not fail the confirmation.

    Raises:
        InvalidInputError: If voucher_id or confirmer_id is missing
        NotFoundError: If not found
    """
    if not voucher_id or not confirmer_id:
        raise InvalidInputError("voucherId and userId are required")
    voucher_id = to_int(voucher_id, "voucherId")
    voucher = get_voucher(voucher_id)

    received_by = to_text(confirmer_name) or str(confirmer_id)
    received_at = utcnow()

    result = db.session.execute(
        update(IssueVoucher)
        .where(
            IssueVoucher.id == voucher_id,
            or_(IssueVoucher.status_received.is_(None), IssueVoucher.status_received != RECEIVED),
        )
        .values(status_received=RECEIVED, received_at=received_at, received_by=received_by)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        db.session.rollback()
        return {"status": "already_received", "voucherId": voucher_id}
    db.session.commit()

    message = (
        "Receipt confirmed\n\n"
        f"Voucher #{voucher.id}\n"
        f"Received by: {received_by}\n"
        f"Time: {to_utc_z(received_at)}"
    )
    try:
        if not notify_admin(message):
            current_app.logger.warning("Admin was not notified of receipt for voucher %s", voucher_id)
    except Exception:
        current_app.logger.exception("Admin notification failed for voucher %s", voucher_id)

    return {"status": RECEIVED, "voucherId": voucher_id}
