# routes/verses_api.py
"""
API endpoints for scripture reference detection and verse text.

Provides access to:
- Reference detection and segmentation of note text
- Cache-aside verse resolution (single reference or whole note body)
- Verse cache statistics and clearing
"""

from flask import Blueprint, current_app, jsonify, request

from services.references import (
    NetworkError,
    UnresolvedBookError,
    detect,
    parse_reference,
    segment,
)
from utils.errors import invalid_field, missing_field, not_found, service_unavailable

verses_bp = Blueprint("verses_api", __name__, url_prefix="/api/verses")


def _components():
    return current_app.extensions["rooted"]


# =============================================================================
# Detection
# =============================================================================

@verses_bp.post("/detect")
def detect_references():
    """
    Find references in text.

    Body:
        {"text": "Read John 3:16 today"}

    Returns:
        {
            "references": [{"raw": "John 3:16", "book_id": "JHN", ...}],
            "segments": [{"type": "text", "content": "Read "}, ...]
        }
    """
    data = request.get_json(silent=True) or {}
    text = data.get("text")
    if text is None:
        return missing_field("text")
    if not isinstance(text, str):
        return invalid_field("text", "text must be a string")

    return jsonify({
        "references": [parsed.to_dict() for _, parsed in detect(text)],
        "segments": [s.to_dict() for s in segment(text)],
    })


# =============================================================================
# Resolution
# =============================================================================

@verses_bp.get("/resolve")
def resolve_reference():
    """
    Resolve one reference to text.

    Query params:
        ref: Reference string (required) e.g., "John 3:16-18"
        translation: Translation code (optional, default BSB)
    """
    ref = request.args.get("ref")
    if not ref:
        return missing_field("ref")

    parsed = parse_reference(ref)
    if parsed is None:
        return invalid_field("ref", f"Not a scripture reference: {ref}")

    translation = request.args.get("translation")

    try:
        result = _components().resolver.resolve(parsed, translation)
    except NetworkError as e:
        return service_unavailable(detail=str(e))
    except UnresolvedBookError as e:
        return not_found("verse", str(e))

    return jsonify(result.to_dict())


@verses_bp.post("/resolve-text")
def resolve_text():
    """
    Resolve every reference found in a note body.

    Body:
        {"text": "...", "translation": "NKJV"}
    """
    data = request.get_json(silent=True) or {}
    text = data.get("text")
    if text is None:
        return missing_field("text")
    if not isinstance(text, str):
        return invalid_field("text", "text must be a string")

    results = _components().resolver.resolve_text(text, data.get("translation"))
    return jsonify({"results": results})


# =============================================================================
# Cache management
# =============================================================================

@verses_bp.get("/cache/stats")
def cache_stats():
    return jsonify(_components().cache.get_stats())


@verses_bp.post("/cache/clear")
def cache_clear():
    """
    Clear cached verse text.

    Body (optional):
        {"translation": "BSB"}  - only clear that translation
    """
    data = request.get_json(silent=True) or {}
    cleared = _components().cache.clear(data.get("translation"))
    return jsonify({"cleared": cleared})
