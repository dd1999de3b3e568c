# Overview: Flask API route for sending messages to agents through the (simulated) gateway.

from flask import Blueprint, current_app, jsonify, request

from ..extensions import db
from ..services import messaging_service
from ..validation import ValidationError, NotFoundError

messaging_bp = Blueprint("messaging", __name__, url_prefix="/api/messaging")


def _optional_int(data: dict, key: str):
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    return value


@messaging_bp.post("/send")
def send_route():
    """
    Body: {agent_id, message, photo?, pdf?, case_id?}

    photo / pdf are opaque base64 payloads; only their presence is reported.
    """
    data = request.get_json(silent=True) or {}

    try:
        agent_id = _optional_int(data, "agent_id")
        if agent_id is None:
            raise ValidationError("agent_id is required")
        message = data.get("message")
        if message is not None and not isinstance(message, str):
            raise ValidationError("message must be a string")

        result = messaging_service.send_message(
            db.session,
            agent_id=agent_id,
            message=message,
            photo=data.get("photo"),
            pdf=data.get("pdf"),
            case_id=_optional_int(data, "case_id"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to send message")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result), 200
