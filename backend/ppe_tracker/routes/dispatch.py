# Overview: Single action endpoint; maps {action, payload} onto service calls.

"""
Action Dispatch

POST /api/ppe with a JSON body {"action": "...", "payload": {...}}. The body
is read raw, so clients may send it as text/plain to avoid CORS preflight.

Every action is a member of Action and has exactly one handler in HANDLERS;
the module refuses to import if a member is left unmapped.

Responses:
- 200 {"status": "success", "data": ..., "version": API_VERSION}
- 400 {"status": "error", "message": "Invalid action"} for unknown actions
- 400 {"status": "error", "message": ...} for malformed bodies and workflow errors
- 500 {"status": "error", "message": ...} for anything unexpected
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Callable

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..services import (
    auth_service,
    auxiliary_service,
    catalog_service,
    dashboard_service,
    loan_service,
    receive_service,
    voucher_service,
)
from ..services.errors import InvalidActionError, PpeError, UpstreamFailureError
from ..validation import to_int


dispatch_bp = Blueprint("dispatch", __name__, url_prefix="/api")


class Action(str, Enum):
    GET_INITIAL_DATA = "getInitialData"
    SAVE_CATEGORY = "saveCategory"
    DELETE_CATEGORY = "deleteCategory"
    SAVE_PPE_ITEM = "savePpeItem"
    DELETE_PPE_ITEM = "deletePpeItem"
    ADD_NEW_VOUCHER = "addNewVoucher"
    APPROVE_VOUCHER = "approveVoucher"
    APPROVE_PARTIAL_VOUCHER = "approvePartialVoucher"
    REJECT_VOUCHER = "rejectVoucher"
    CONFIRM_RECEIVE = "confirmReceive"
    BORROW_ITEM = "borrowItem"
    RETURN_ITEM = "returnItem"
    ADD_RECEIVE_TRANSACTION = "addReceiveTransaction"
    CHECK_ADMIN_CREDENTIALS = "checkAdminCredentials"
    SAVE_FEEDBACK = "saveFeedback"
    SAVE_MATRIX_RULE = "saveMatrixRule"
    DELETE_MATRIX_RULE = "deleteMatrixRule"
    UPLOAD_DOCUMENT = "uploadDocument"
    DELETE_DOCUMENT = "deleteDocument"


def _add_new_voucher(payload: dict) -> dict:
    voucher = voucher_service.create_voucher(
        user=payload.get("user"),
        department=payload.get("department"),
        lines=payload.get("items") or [],
        employee_id=payload.get("employeeId"),
        user_id=payload.get("userId"),
    )
    return voucher.to_dict()


def _approve_partial_voucher(payload: dict) -> dict:
    return voucher_service.approve_partial_voucher(
        to_int(payload.get("voucherId"), "voucherId"),
        payload.get("items") or [],
    )


def _borrow_item(payload: dict) -> dict:
    return loan_service.borrow_item(
        item_id=payload.get("itemId"),
        borrower_name=payload.get("borrowerName"),
        employee_id=payload.get("employeeId"),
        user_id=payload.get("userId"),
        department=payload.get("department"),
        due_date=payload.get("dueDate"),
        notes=payload.get("notes"),
    )


def _add_receive_transaction(payload: dict) -> dict:
    return receive_service.add_receive_transaction(
        item_id=payload.get("itemId"),
        quantity=payload.get("quantity"),
        item_name=payload.get("itemName"),
        receive_type=payload.get("type"),
        user=payload.get("user"),
        department=payload.get("department"),
    )


HANDLERS: dict[Action, Callable[[dict], Any]] = {
    Action.GET_INITIAL_DATA: lambda p: dashboard_service.get_initial_data(),
    Action.SAVE_CATEGORY: lambda p: catalog_service.save_category(p).to_dict(),
    Action.DELETE_CATEGORY: lambda p: catalog_service.delete_category(p.get("categoryId")),
    Action.SAVE_PPE_ITEM: catalog_service.save_item,
    Action.DELETE_PPE_ITEM: catalog_service.delete_item,
    Action.ADD_NEW_VOUCHER: _add_new_voucher,
    Action.APPROVE_VOUCHER: lambda p: voucher_service.approve_voucher(to_int(p.get("voucherId"), "voucherId")),
    Action.APPROVE_PARTIAL_VOUCHER: _approve_partial_voucher,
    Action.REJECT_VOUCHER: lambda p: voucher_service.reject_voucher(to_int(p.get("voucherId"), "voucherId")),
    Action.CONFIRM_RECEIVE: lambda p: voucher_service.confirm_receive(
        p.get("voucherId"), p.get("userId"), p.get("userName")
    ),
    Action.BORROW_ITEM: _borrow_item,
    Action.RETURN_ITEM: lambda p: loan_service.return_item(p.get("loanId")),
    Action.ADD_RECEIVE_TRANSACTION: _add_receive_transaction,
    Action.CHECK_ADMIN_CREDENTIALS: lambda p: auth_service.check_admin_credentials(
        p.get("username"), p.get("password")
    ),
    Action.SAVE_FEEDBACK: auxiliary_service.save_feedback,
    Action.SAVE_MATRIX_RULE: auxiliary_service.save_matrix_rule,
    Action.DELETE_MATRIX_RULE: auxiliary_service.delete_matrix_rule,
    Action.UPLOAD_DOCUMENT: auxiliary_service.upload_document,
    Action.DELETE_DOCUMENT: auxiliary_service.delete_document,
}

_unhandled = [a.value for a in Action if a not in HANDLERS]
if _unhandled:
    raise RuntimeError(f"No handler registered for actions: {', '.join(_unhandled)}")


def _error(message: str, status: int):
    return jsonify({"status": "error", "message": message}), status


def resolve_action(name) -> Action:
    try:
        return Action(name)
    except ValueError:
        raise InvalidActionError("Invalid action")


def run_action(action: Action, payload: dict) -> Any:
    """Invoke the handler; store failures surface as UpstreamFailureError."""
    try:
        return HANDLERS[action](payload)
    except SQLAlchemyError as e:
        raise UpstreamFailureError("Database error") from e


@dispatch_bp.post("/ppe")
def dispatch_route():
    """
    Run one action.

    Request body:
    {
        "action": "approveVoucher",   // required, see Action
        "payload": {"voucherId": 3}   // action-specific, may be omitted
    }
    """
    raw = request.get_data(as_text=True)
    try:
        body = json.loads(raw or "{}")
    except ValueError:
        return _error("Request body must be JSON", 400)
    if not isinstance(body, dict):
        return _error("Request body must be a JSON object", 400)

    try:
        action = resolve_action(body.get("action"))
    except InvalidActionError as e:
        current_app.logger.info("Rejected action %r", body.get("action"))
        return _error(str(e), 400)

    payload = body.get("payload") or {}
    if not isinstance(payload, dict):
        return _error("payload must be an object", 400)

    try:
        result = run_action(action, payload)
    except UpstreamFailureError as e:
        db.session.rollback()
        current_app.logger.exception("Action %s failed in the row store", action.value)
        return _error(str(e), 500)
    except PpeError as e:
        db.session.rollback()
        current_app.logger.info("Action %s refused: %s", action.value, e)
        return _error(str(e), 400)
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Action %s failed", action.value)
        return _error(str(e) or "Internal error", 500)

    return jsonify({
        "status": "success",
        "data": result,
        "version": current_app.config.get("API_VERSION"),
    })
