# Overview: Flask API route for sending a LINE push message directly.

from flask import Blueprint, current_app, jsonify, request

from ..services.notification_service import get_notifier


push_bp = Blueprint("push", __name__, url_prefix="/api")


@push_bp.post("/push")
def push_route():
    """
    Push a text message to one LINE user.

    Request body:
    {
        "userId": "U123...",  // required, LINE user id
        "message": "..."      // required
    }

    Returns:
        {success: true}; 502 with success false when LINE refuses
    """
    data = request.get_json(silent=True) or {}
    user_id = data.get("userId")
    message = data.get("message")

    if not user_id or not message:
        return jsonify({"error": "Missing userId or message"}), 400

    notifier = get_notifier()
    if not notifier.is_configured:
        current_app.logger.error("LINE_CHANNEL_ACCESS_TOKEN is not configured")
        return jsonify({"error": "Server Configuration Error: Missing Token"}), 500

    if not notifier.push(user_id, message):
        return jsonify({"success": False, "error": "LINE push failed"}), 502

    return jsonify({"success": True})
