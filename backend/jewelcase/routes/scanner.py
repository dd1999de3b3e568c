# Overview: Flask API routes for the item scanner; photos or text in, candidate case items out.

# backend/jewelcase/routes/scanner.py
"""
Scanner routes.

The response never creates anything: the operator reviews the candidates and
submits them through the case routes.

Response:
    {items: [{name, category, price_cents, quantity, product_id, matched}],
     count, total_cents}
"""
from flask import Blueprint, current_app, jsonify, request

from ..extensions import db
from ..services.scanner_service import (
    AdapterFailure,
    ItemScanner,
    match_to_catalog,
    scanned_total_cents,
)
from ..validation import ValidationError

scanner_bp = Blueprint("scanner", __name__, url_prefix="/api/scanner")


def get_item_scanner() -> ItemScanner:
    """App-wide scanner; tests register their own under app.extensions."""
    scanner = current_app.extensions.get("item_scanner")
    if scanner is None:
        scanner = ItemScanner(
            api_key=current_app.config.get("OPENAI_API_KEY"),
            model=current_app.config.get("SCANNER_MODEL", "gpt-4o-mini"),
        )
        current_app.extensions["item_scanner"] = scanner
    return scanner


def _scan_response(scan):
    try:
        items = scan(get_item_scanner())
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except AdapterFailure as e:
        current_app.logger.warning("Scanner failed: %s", e)
        return jsonify({"error": "Could not process the scan. Please try again."}), 502

    rows = match_to_catalog(db.session, items)
    return jsonify({
        "items": rows,
        "count": len(rows),
        "total_cents": scanned_total_cents(rows),
    }), 200


@scanner_bp.post("/images")
def scan_images_route():
    """Body: {images: [base64 or data URI, ...]}"""
    data = request.get_json(silent=True) or {}
    images = data.get("images")
    if not isinstance(images, list) or not all(isinstance(i, str) for i in images):
        return jsonify({"error": "images must be a list of base64 strings"}), 400
    if not images:
        return jsonify({"error": "images must be a non-empty list"}), 400

    return _scan_response(lambda scanner: scanner.scan_images(images))


@scanner_bp.post("/text")
def scan_text_route():
    """Body: {text: "..."}"""
    data = request.get_json(silent=True) or {}
    text = data.get("text")
    if not isinstance(text, str):
        return jsonify({"error": "text must be a string"}), 400
    if not text.strip():
        return jsonify({"error": "text is required"}), 400

    return _scan_response(lambda scanner: scanner.scan_text(text))
