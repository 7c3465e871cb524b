from __future__ import annotations

from ..extensions import db
from ppe_tracker.time_utils import to_utc_z


class PpeItem(db.Model):
    """
    PPE item master data with its current stock.

    STOCK MODEL:
    - stock is the quantity on the shelf, available to issue or lend.
    - on_loan_quantity counts units currently out on loan; a unit moves
      between the two on borrow/return.
    - Approved vouchers and receive transactions change stock only.

    category holds the category NAME, not an id. Renaming or deleting a
    Category does not touch items.
    """
    __tablename__ = "ppe_items"

    # Allocated by sequence_service.next_id
    id = db.Column(db.Integer, primary_key=True, autoincrement=False)

    code = db.Column(db.String(64), nullable=True, index=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(120), nullable=True, index=True)
    unit = db.Column(db.String(32), nullable=True)

    reorder_point = db.Column(db.Integer, nullable=False, default=0)
    stock = db.Column(db.Integer, nullable=False, default=0)
    on_loan_quantity = db.Column(db.Integer, nullable=False, default=0)

    price = db.Column(db.Float, nullable=False, default=0)
    image_url = db.Column(db.String(1024), nullable=False, default="")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<PpeItem id={self.id} code={self.code!r} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "category": self.category,
            "unit": self.unit,
            "reorderPoint": self.reorder_point,
            "stock": self.stock,
            "onLoanQuantity": self.on_loan_quantity,
            "price": self.price,
            "imageUrl": self.image_url,
        }

    def stock_dict(self) -> dict:
        """Short form returned by stock-changing actions."""
        return {
            "id": self.id,
            "stock": self.stock,
            "onLoanQuantity": self.on_loan_quantity,
        }


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name = db.Column(db.String(120), nullable=False)

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


class Department(db.Model):
    """Lookup list used by the request forms."""
    __tablename__ = "departments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False, unique=True)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


class ReceiveTransaction(db.Model):
    """
    Append-only record of stock received into the store.

    Rows are never updated after insert; the matching stock increase is
    written in the same DB transaction.
    """
    __tablename__ = "receive_transactions"

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    item_id = db.Column(db.Integer, nullable=True, index=True)
    item_name = db.Column(db.String(255), nullable=True)
    type = db.Column(db.String(32), nullable=True)
    quantity = db.Column(db.Integer, nullable=False)

    user = db.Column(db.String(255), nullable=True)
    department = db.Column(db.String(120), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="completed")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": to_utc_z(self.timestamp),
            "itemId": self.item_id,
            "itemName": self.item_name,
            "type": self.type,
            "quantity": self.quantity,
            "user": self.user,
            "department": self.department,
            "status": self.status,
        }


class IdSequence(db.Model):
    """
    Atomic per-table id sequences.

    next_value is the id the NEXT allocation will hand out. Rows are seeded
    from the table's current maximum on first use.
    """
    __tablename__ = "id_sequences"

    table_name = db.Column(db.String(64), primary_key=True)
    column_name = db.Column(db.String(64), nullable=False, default="id")
    next_value = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "table_name": self.table_name,
            "column_name": self.column_name,
            "next_value": self.next_value,
            "updated_at": to_utc_z(self.updated_at),
        }
