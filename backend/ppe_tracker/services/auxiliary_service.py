# Overview: Service-layer CRUD for feedback, the PPE matrix, and reference documents.

from __future__ import annotations

import base64
import binascii
import os
import time

from flask import current_app
from werkzeug.utils import secure_filename

from ..extensions import db
from ..models import Feedback, MatrixRule, PpeDocument
from ..validation import to_int, to_text
from .errors import InvalidInputError, NotFoundError


MIN_RATING = 1
MAX_RATING = 5


def save_feedback(data: dict) -> dict:
    rating = to_int(data.get("rating"), "rating", required=False)
    if not rating:
        raise InvalidInputError("Rating is required")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidInputError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")

    feedback = Feedback(
        transaction_id=to_text(data.get("transactionId")),
        item_id=to_int(data.get("itemId"), "itemId", required=False),
        item_name=to_text(data.get("itemName")),
        feedback_type=to_text(data.get("type")),
        rating=rating,
        comment=to_text(data.get("comment")),
        user_name=to_text(data.get("user")),
    )
    db.session.add(feedback)
    db.session.commit()
    return {"status": "success", "data": [feedback.to_dict()]}


def save_matrix_rule(data: dict) -> dict:
    job_function = to_text(data.get("jobFunction"))
    if not job_function:
        raise InvalidInputError("jobFunction is required")
    items = data.get("itemsJson") or []
    if not isinstance(items, list):
        raise InvalidInputError("itemsJson must be a list")

    fields = {
        "job_function": job_function,
        "items_json": items,
        "lifespan": to_text(data.get("lifespan")),
        "remark": to_text(data.get("remark")),
        "properties": to_text(data.get("properties")),
        "department": to_text(data.get("department")),
    }

    rule_id = to_int(data.get("id"), "id", required=False)
    if rule_id:
        rule = db.session.get(MatrixRule, rule_id)
        if rule is None:
            raise NotFoundError(f"Matrix rule {rule_id} not found")
        for key, value in fields.items():
            setattr(rule, key, value)
    else:
        rule = MatrixRule(**fields)
        db.session.add(rule)

    db.session.commit()
    return rule.to_dict()


def delete_matrix_rule(data: dict) -> dict:
    rule_id = to_int(data.get("id"), "id")
    db.session.query(MatrixRule).filter_by(id=rule_id).delete()
    db.session.commit()
    return {"status": "success"}


def documents_dir() -> str:
    path = current_app.config.get("DOCUMENTS_DIR", "documents")
    if not os.path.isabs(path):
        path = os.path.join(current_app.instance_path, path)
    os.makedirs(path, exist_ok=True)
    return path


def upload_document(data: dict) -> dict:
    """
    Store a base64-encoded PDF and record it.

    Files are saved as <epoch-ms>_<filename> so repeated uploads of the same
    name do not collide.
    """
    title = to_text(data.get("title"))
    file_name = secure_filename(data.get("fileName") or "")
    encoded = data.get("fileBase64")
    if not title:
        raise InvalidInputError("title is required")
    if not file_name:
        raise InvalidInputError("fileName is required")
    if not encoded:
        raise InvalidInputError("fileBase64 is required")

    try:
        content = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidInputError("fileBase64 is not valid base64")

    stored_name = f"{int(time.time() * 1000)}_{file_name}"
    path = os.path.join(documents_dir(), stored_name)

    doc = PpeDocument(
        title=title,
        file_name=stored_name,
        file_url=f"/documents/{stored_name}",
        file_type="pdf",
        uploaded_by=to_text(data.get("user")),
    )
    db.session.add(doc)
    db.session.flush()

    with open(path, "wb") as fh:
        fh.write(content)
    try:
        db.session.commit()
    except Exception:
        # No row, no file
        os.remove(path)
        raise
    return doc.to_dict()


def delete_document(data: dict) -> dict:
    """Delete the record and its stored file. A missing file is not an error."""
    doc_id = to_int(data.get("id"), "id")
    doc = db.session.get(PpeDocument, doc_id)
    if doc is not None:
        path = os.path.join(documents_dir(), doc.file_name)
        db.session.delete(doc)
        db.session.commit()
        if os.path.exists(path):
            os.remove(path)
    return {"status": "success"}
