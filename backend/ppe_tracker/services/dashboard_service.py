# Overview: Dashboard metrics computed from full-table snapshots.

"""
Dashboard aggregation.

The metric functions are pure: they take serialized rows (the dicts returned
by each model's to_dict) and never touch the database. get_initial_data
loads the snapshots once per request and feeds them through.
"""

from __future__ import annotations

import json
from datetime import datetime

from flask import current_app

from ..extensions import db
from ..models import (
    Category,
    Department,
    Feedback,
    MatrixRule,
    PpeDocument,
)
from ..models.loans import LOAN_ON_LOAN, LOAN_RETURNED
from ..models.vouchers import ISSUED_STATUSES
from . import catalog_service, loan_service, receive_service, voucher_service
from ppe_tracker.time_utils import parse_iso_datetime, start_of_day, utcnow


STATUS_TEXT = {
    "pending": "Pending",
    "approved": "Approved",
    "partially_approved": "Partially approved",
    "rejected": "Rejected",
    "completed": "Completed",
    "on_loan": "On loan",
    "returned": "Returned",
}


def _number(value) -> int | float:
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0
    return int(number) if number.is_integer() else number


def _parse_time(value) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return parse_iso_datetime(str(value))
    except ValueError:
        return None


def _voucher_lines(voucher: dict) -> list[dict]:
    items = voucher.get("itemsJson")
    if isinstance(items, list):
        return items
    try:
        items = json.loads(items or "[]")
    except (TypeError, ValueError):
        return []
    return items if isinstance(items, list) else []


def _names_by_id(items: list[dict]) -> dict:
    return {_number(i.get("id")): i.get("name") for i in items}


def status_text(status: str | None) -> str:
    return STATUS_TEXT.get(status or "", "Unknown")


def total_stock_value(items: list[dict]) -> int | float:
    """Sum of stock x price over all items."""
    total = sum(_number(i.get("stock")) * _number(i.get("price")) for i in items)
    return _number(total)


def top_issued_items(items: list[dict], vouchers: list[dict], n: int) -> list[dict]:
    """
    Most-issued items by requested quantity on approved and partially
    approved vouchers, highest first.

    Ties keep the order in which items were first seen while scanning the
    vouchers.
    """
    totals: dict = {}
    for voucher in vouchers:
        if voucher.get("status") not in ISSUED_STATUSES:
            continue
        for line in _voucher_lines(voucher):
            item_id = _number(line.get("itemId"))
            totals[item_id] = totals.get(item_id, 0) + _number(line.get("quantity"))

    names = _names_by_id(items)
    ranked = [
        {
            "itemId": item_id,
            "itemName": names.get(item_id) or "Unknown",
            "totalQuantity": total,
        }
        for item_id, total in totals.items()
    ]
    ranked.sort(key=lambda row: row["totalQuantity"], reverse=True)
    return ranked[:max(n, 0)]


def loan_status_summary(loans: list[dict]) -> dict:
    summary = {"onLoan": 0, "returned": 0}
    for loan in loans:
        status = str(loan.get("status") or "").strip()
        if status == LOAN_ON_LOAN:
            summary["onLoan"] += 1
        elif status == LOAN_RETURNED:
            summary["returned"] += 1
    return summary


def recent_activities(
    vouchers: list[dict],
    loans: list[dict],
    receives: list[dict],
    items: list[dict],
    limit: int,
) -> list[dict]:
    """
    Voucher creations, borrows, returns, and receives merged newest first.

    Entries without a timestamp sort last.
    """
    names = _names_by_id(items)
    activities = []

    for v in vouchers:
        activities.append({
            "type": "issue_voucher",
            "id": v.get("id"),
            "timestamp": v.get("timestamp"),
            "description": f"Voucher #{v.get('id')} by {v.get('user')} ({status_text(v.get('status'))})",
            "status": v.get("status"),
        })

    for loan in loans:
        item_name = names.get(_number(loan.get("itemId"))) or "Unknown"
        activities.append({
            "type": "loan_transaction",
            "id": loan.get("loanId"),
            "timestamp": loan.get("borrowDate"),
            "description": f"Borrowed: {item_name} by {loan.get('borrowerName')}",
            "status": loan.get("status"),
        })
        if loan.get("returnDate"):
            activities.append({
                "type": "return_transaction",
                "id": loan.get("loanId"),
                "timestamp": loan.get("returnDate"),
                "description": f"Returned: {item_name} by {loan.get('borrowerName')}",
                "status": LOAN_RETURNED,
            })

    for r in receives:
        activities.append({
            "type": "receive_transaction",
            "id": r.get("id"),
            "timestamp": r.get("timestamp"),
            "description": f"Received: {r.get('itemName')} x{r.get('quantity')}",
            "status": "completed",
        })

    activities.sort(key=lambda a: _parse_time(a["timestamp"]) or datetime.min, reverse=True)
    return activities[:max(limit, 0)]


def low_stock_items(items: list[dict]) -> list[dict]:
    """Items at or below their reorder point, emptiest first."""
    low = [
        i for i in items
        if _number(i.get("reorderPoint")) > 0 and _number(i.get("stock")) <= _number(i.get("reorderPoint"))
    ]
    return sorted(low, key=lambda i: _number(i.get("stock")))


def overdue_loans(loans: list[dict], now: datetime | None = None) -> list[dict]:
    """Loans still out whose due date is before today, oldest due first."""
    today = start_of_day(now or utcnow())
    overdue = []
    for loan in loans:
        if loan.get("status") != LOAN_ON_LOAN:
            continue
        due = _parse_time(loan.get("dueDate"))
        if due is not None and due < today:
            overdue.append((due, loan))
    overdue.sort(key=lambda pair: pair[0])
    return [loan for _, loan in overdue]


def get_initial_data() -> dict:
    """Every table the admin panel shows, plus dashboard metrics."""
    ppe_items = [i.to_dict() for i in catalog_service.list_items()]
    issue_vouchers = [v.to_dict() for v in voucher_service.list_vouchers()]
    receive_transactions = [r.to_dict() for r in receive_service.list_receive_transactions()]
    loan_transactions = [loan.to_dict() for loan in loan_service.list_loans()]
    categories = [c.to_dict() for c in db.session.query(Category).order_by(Category.id).all()]
    departments = [d.to_dict() for d in db.session.query(Department).order_by(Department.name).all()]
    feedback = [f.to_dict() for f in db.session.query(Feedback).order_by(Feedback.created_at.desc()).all()]
    matrix = [m.to_dict() for m in db.session.query(MatrixRule).order_by(MatrixRule.id).all()]
    documents = [d.to_dict() for d in db.session.query(PpeDocument).order_by(PpeDocument.created_at.desc()).all()]

    top_n = current_app.config.get("DASHBOARD_TOP_ITEMS", 5)
    recent_limit = current_app.config.get("DASHBOARD_RECENT_LIMIT", 10)

    return {
        "ppeItems": ppe_items,
        "issueVouchers": issue_vouchers,
        "receiveTransactions": receive_transactions,
        "loanTransactions": loan_transactions,
        "categories": categories,
        "departments": departments,
        "feedbackData": feedback,
        "ppeMatrix": matrix,
        "ppeDocuments": documents,
        "dashboardMetrics": {
            "totalStockValue": total_stock_value(ppe_items),
            "topIssuedItems": top_issued_items(ppe_items, issue_vouchers, top_n),
            "loanStatusSummary": loan_status_summary(loan_transactions),
            "recentActivities": recent_activities(
                issue_vouchers,
                loan_transactions,
                receive_transactions,
                ppe_items,
                recent_limit,
            ),
            "lowStockItems": low_stock_items(ppe_items),
            "overdueLoans": overdue_loans(loan_transactions),
        },
    }
