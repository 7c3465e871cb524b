# Overview: Download route for uploaded reference documents.

from flask import Blueprint, send_from_directory

from ..services.auxiliary_service import documents_dir


documents_bp = Blueprint("documents", __name__)


@documents_bp.get("/documents/<path:filename>")
def get_document_route(filename: str):
    return send_from_directory(documents_dir(), filename, mimetype="application/pdf")
