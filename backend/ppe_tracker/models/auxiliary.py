from __future__ import annotations

from ..extensions import db
from ppe_tracker.time_utils import to_utc_z


class Feedback(db.Model):
    """User rating of an issued or borrowed item."""
    __tablename__ = "feedback"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.String(64), nullable=True)
    item_id = db.Column(db.Integer, nullable=True, index=True)
    item_name = db.Column(db.String(255), nullable=True)
    feedback_type = db.Column(db.String(32), nullable=True)
    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text, nullable=True)
    user_name = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transactionId": self.transaction_id,
            "itemId": self.item_id,
            "itemName": self.item_name,
            "type": self.feedback_type,
            "rating": self.rating,
            "comment": self.comment,
            "user": self.user_name,
            "created_at": to_utc_z(self.created_at),
        }


class MatrixRule(db.Model):
    """Which PPE a job function requires, and how long each piece lasts."""
    __tablename__ = "ppe_matrix"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    job_function = db.Column(db.String(255), nullable=False)
    items_json = db.Column(db.JSON, nullable=False, default=list)
    lifespan = db.Column(db.String(64), nullable=True)
    remark = db.Column(db.Text, nullable=True)
    properties = db.Column(db.Text, nullable=True)
    department = db.Column(db.String(120), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "jobFunction": self.job_function,
            "itemsJson": list(self.items_json or []),
            "lifespan": self.lifespan,
            "remark": self.remark,
            "properties": self.properties,
            "department": self.department,
        }


class PpeDocument(db.Model):
    """Uploaded reference document (safety sheets, procedures)."""
    __tablename__ = "ppe_documents"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    file_name = db.Column(db.String(255), nullable=False)
    file_url = db.Column(db.String(1024), nullable=False)
    file_type = db.Column(db.String(16), nullable=False, default="pdf")
    uploaded_by = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "fileUrl": self.file_url,
            "fileType": self.file_type,
            "uploadedBy": self.uploaded_by,
            "created_at": to_utc_z(self.created_at),
        }
