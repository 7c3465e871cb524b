from __future__ import annotations

from typing import Any

from ppe_tracker.services.errors import InvalidInputError


def to_int(value: Any, field: str, *, required: bool = True) -> int | None:
    """
    Coerce a payload value to int.

    Accepts ints, integral floats (3.0) and numeric strings ("3", "3.0").
    Booleans and fractional values are rejected.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise InvalidInputError(f"{field} is required")
        return None
    if isinstance(value, bool):
        raise InvalidInputError(f"{field} must be a number")
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip()) if not isinstance(value, float) else value
    except ValueError:
        raise InvalidInputError(f"{field} must be a number")
    if number != number or number in (float("inf"), float("-inf")):
        raise InvalidInputError(f"{field} must be a number")
    if not number.is_integer():
        raise InvalidInputError(f"{field} must be a whole number")
    return int(number)


def to_float(value: Any, field: str, *, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise InvalidInputError(f"{field} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{field} must be a number")
    if number != number or number in (float("inf"), float("-inf")):
        raise InvalidInputError(f"{field} must be a number")
    return number


def to_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def parse_lines(lines: Any, *, field: str = "items", allow_zero: bool = False) -> list[dict]:
    """
    Validate a list of {itemId, quantity} lines.

    Returns new dicts holding int itemId/quantity plus any other keys the
    caller sent (itemName on partial approvals). Order is preserved.
    """
    if not isinstance(lines, list):
        raise InvalidInputError(f"{field} must be a list")

    parsed = []
    for index, line in enumerate(lines):
        if not isinstance(line, dict):
            raise InvalidInputError(f"{field}[{index}] must be an object")
        item_id = to_int(line.get("itemId"), f"{field}[{index}].itemId")
        quantity = to_int(line.get("quantity"), f"{field}[{index}].quantity")
        if quantity < 0 or (quantity == 0 and not allow_zero):
            raise InvalidInputError(f"{field}[{index}].quantity must be positive")
        parsed.append({**line, "itemId": item_id, "quantity": quantity})
    return parsed
