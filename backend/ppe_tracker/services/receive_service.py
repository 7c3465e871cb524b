# Overview: Service-layer operations for receiving stock into the store.

from __future__ import annotations

from ..extensions import db
from ..models import ReceiveTransaction
from ..validation import to_int, to_text
from .errors import InvalidInputError
from .sequence_service import next_id
from .stock_service import adjust_stock, get_item, INCREASE
from ppe_tracker.time_utils import utcnow


RECEIVE_STATUS_COMPLETED = "completed"


def list_receive_transactions() -> list[ReceiveTransaction]:
    return db.session.query(ReceiveTransaction).order_by(ReceiveTransaction.id).all()


def add_receive_transaction(
    *,
    item_id,
    quantity,
    item_name: str | None = None,
    receive_type: str | None = None,
    user: str | None = None,
    department: str | None = None,
) -> dict:
    """
    Log a receive and add its quantity to the item's stock.

    The log row and the stock increase commit together.

    Returns:
        {updatedStockItems: [{id, stock}]}

    Raises:
        InvalidInputError: If quantity is not positive
        NotFoundError: If the item does not exist
    """
    item_id = to_int(item_id, "itemId")
    quantity = to_int(quantity, "quantity")
    if quantity <= 0:
        raise InvalidInputError("quantity must be positive")

    tx_id = next_id(ReceiveTransaction.__tablename__)
    item = get_item(item_id)

    tx = ReceiveTransaction(
        id=tx_id,
        timestamp=utcnow(),
        item_id=item_id,
        item_name=to_text(item_name) or item.name,
        type=to_text(receive_type),
        quantity=quantity,
        user=to_text(user),
        department=to_text(department),
        status=RECEIVE_STATUS_COMPLETED,
    )
    db.session.add(tx)

    updated_stock_items = adjust_stock([{"itemId": item_id, "quantity": quantity}], INCREASE)
    db.session.commit()

    return {"updatedStockItems": updated_stock_items}
