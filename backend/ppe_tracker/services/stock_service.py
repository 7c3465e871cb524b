# Overview: Service-layer stock adjustments for issue, receive, and loan flows.

"""
PPE Stock Invariants (authoritative)

- stock >= 0 and on_loan_quantity >= 0 for every item.
- Stock is a mutable counter on PpeItem, changed only through this module.
- Voucher approvals DECREASE stock; receive transactions INCREASE it.
- Borrow moves one unit from stock to on_loan_quantity; return moves it back.

Floor policy:
- A decrease that would take stock below zero raises OutOfStockError unless
  ALLOW_NEGATIVE_STOCK is enabled, in which case the negative value is
  written as-is.
- Return does not floor on_loan_quantity; a negative result is logged.

Nothing here commits. Callers commit once per request so the stock writes
land in the same transaction as the voucher/loan/receive row they belong to.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import update

from ..extensions import db
from ..models import PpeItem
from .concurrency import lock_for_update
from .errors import InvalidInputError, NotFoundError, OutOfStockError


INCREASE = "increase"
DECREASE = "decrease"
DIRECTIONS = {INCREASE, DECREASE}

BORROW = "borrow"
RETURN = "return"


def get_item(item_id: int, *, lock: bool = False) -> PpeItem:
    query = db.session.query(PpeItem).filter_by(id=item_id)
    if lock:
        query = lock_for_update(query)
    item = query.first()
    if item is None:
        raise NotFoundError(f"Item {item_id} not found")
    return item


def adjust_stock(lines: list[dict], direction: str = DECREASE) -> list[dict]:
    """
    Apply a batch of {itemId, quantity} lines to item stock.

    All referenced items are fetched in one query. Lines are applied in order
    and cumulatively, so two lines for the same item both count.

    Lines whose item no longer exists are skipped with a warning.

    Returns:
        [{id, stock}] for each applied line, in line order
    """
    if direction not in DIRECTIONS:
        raise InvalidInputError(f"direction must be one of: {', '.join(sorted(DIRECTIONS))}")
    if not lines:
        return []

    ids = sorted({int(line["itemId"]) for line in lines})
    query = lock_for_update(db.session.query(PpeItem).filter(PpeItem.id.in_(ids)))
    items = {item.id: item for item in query.all()}

    allow_negative = current_app.config.get("ALLOW_NEGATIVE_STOCK", False)
    updated = []

    for line in lines:
        item = items.get(int(line["itemId"]))
        if item is None:
            current_app.logger.warning("Stock line skipped: item %s not found", line["itemId"])
            continue

        quantity = int(line.get("quantity") or 0)
        current = int(item.stock or 0)
        new_stock = current - quantity if direction == DECREASE else current + quantity

        if new_stock < 0 and not allow_negative:
            raise OutOfStockError(
                f"Not enough stock for {item.name}: {current} available, {quantity} requested"
            )

        item.stock = new_stock
        updated.append({"id": item.id, "stock": new_stock})

    db.session.flush()
    return updated


def adjust_loanable_stock(item_id: int, direction: str) -> dict:
    """
    Move one unit between stock and on_loan_quantity.

    Borrow uses a conditional UPDATE ... WHERE stock >= 1, so concurrent
    borrows of the last unit cannot both succeed.

    Returns:
        {id, stock, onLoanQuantity} after the move
    """
    if direction not in (BORROW, RETURN):
        raise InvalidInputError("direction must be borrow or return")

    item = get_item(item_id)

    if direction == BORROW:
        result = db.session.execute(
            update(PpeItem)
            .where(PpeItem.id == item_id, PpeItem.stock >= 1)
            .values(
                stock=PpeItem.stock - 1,
                on_loan_quantity=PpeItem.on_loan_quantity + 1,
            )
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            raise OutOfStockError(f"{item.name} is out of stock")
    else:
        db.session.execute(
            update(PpeItem)
            .where(PpeItem.id == item_id)
            .values(
                stock=PpeItem.stock + 1,
                on_loan_quantity=PpeItem.on_loan_quantity - 1,
            )
            .execution_options(synchronize_session=False)
        )

    db.session.refresh(item)
    if item.on_loan_quantity < 0:
        current_app.logger.warning(
            "Item %s on-loan quantity is negative (%s) after return",
            item.id,
            item.on_loan_quantity,
        )
    return item.stock_dict()
