# Overview: Service-layer CRUD for PPE items and categories.

from __future__ import annotations

from ..extensions import db
from ..models import PpeItem, Category
from ..validation import to_float, to_int, to_text
from .errors import InvalidInputError, NotFoundError
from .sequence_service import next_id


def save_category(data: dict | None) -> Category:
    """
    Create a category, or rename it when data carries an id.

    Items keep the old name on rename; there is no cascade.
    """
    name = to_text((data or {}).get("name"))
    if not name:
        raise InvalidInputError("Category name cannot be empty.")

    category_id = to_int(data.get("id"), "id", required=False)
    if category_id:
        category = db.session.get(Category, category_id)
        if category is None:
            raise NotFoundError(f"Category {category_id} not found")
        category.name = name
    else:
        category = Category(id=next_id(Category.__tablename__), name=name)
        db.session.add(category)

    db.session.commit()
    return category


def delete_category(category_id) -> int:
    category_id = to_int(category_id, "categoryId")
    db.session.query(Category).filter_by(id=category_id).delete()
    db.session.commit()
    return category_id


def _item_fields(data: dict) -> dict:
    name = to_text(data.get("name"))
    if not name:
        raise InvalidInputError("Item name cannot be empty.")

    fields = {
        "code": to_text(data.get("code")),
        "name": name,
        "category": to_text(data.get("category")),
        "unit": to_text(data.get("unit")),
        "reorder_point": to_int(data.get("reorderPoint"), "reorderPoint", required=False) or 0,
        "stock": to_int(data.get("stock"), "stock", required=False) or 0,
        "on_loan_quantity": to_int(data.get("onLoanQuantity"), "onLoanQuantity", required=False) or 0,
        "price": to_float(data.get("price"), "price"),
        "image_url": to_text(data.get("imageUrl")) or "",
    }
    for key in ("reorder_point", "stock", "on_loan_quantity", "price"):
        if fields[key] < 0:
            raise InvalidInputError(f"{key} cannot be negative")
    return fields


def save_item(data: dict | None) -> dict:
    """
    Create an item, or overwrite every field of an existing one.

    Returns:
        {item, isNew}
    """
    if not data:
        raise InvalidInputError("Missing item data")
    fields = _item_fields(data)

    item_id = to_int(data.get("id"), "id", required=False)
    if item_id:
        item = db.session.get(PpeItem, item_id)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found")
        for key, value in fields.items():
            setattr(item, key, value)
        is_new = False
    else:
        item = PpeItem(id=next_id(PpeItem.__tablename__), **fields)
        db.session.add(item)
        is_new = True

    db.session.commit()
    return {"item": item.to_dict(), "isNew": is_new}


def delete_item(data: dict | None) -> dict:
    """Hard-delete an item. Vouchers and loans that reference it are kept."""
    item_id = (data or {}).get("id")
    if not item_id:
        raise InvalidInputError("Missing Item ID")
    item_id = to_int(item_id, "id")

    db.session.query(PpeItem).filter_by(id=item_id).delete()
    db.session.commit()
    return {"status": "success", "message": "Deleted successfully"}


def list_items() -> list[PpeItem]:
    return db.session.query(PpeItem).order_by(PpeItem.id).all()
