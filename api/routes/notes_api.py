# routes/notes_api.py
from flask import Blueprint, current_app, jsonify, request

from utils.errors import invalid_field, missing_field, not_found

notes_bp = Blueprint("notes_api", __name__, url_prefix="/api/notes")


def _notes():
    return current_app.extensions["rooted"].notes


def _invalid_text_field(data, *fields, nullable=()):
    """Return an error response for the first provided field that is not a string."""
    for field in fields:
        value = data.get(field)
        if value is None and field in nullable:
            continue
        if field in data and not isinstance(value, str):
            return invalid_field(field, f"{field} must be a string")
    return None


@notes_bp.get("")
def list_notes():
    return jsonify({"notes": _notes().list_notes()})


@notes_bp.post("")
def create_note():
    """Create a note; accountability reminders are scheduled in the background."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return missing_field("title")

    fields = ("title", "content", "event_name")
    error = _invalid_text_field(data, *fields, nullable=fields)
    if error:
        return error

    title = (data.get("title") or "").strip()
    if not title:
        return missing_field("title")

    note = _notes().create_note(title, data.get("content") or "", event_name=data.get("event_name"))
    return jsonify({"note": note}), 201


@notes_bp.get("/<note_id>")
def get_note(note_id):
    note = _notes().get_note(note_id)
    if not note:
        return not_found("note")
    return jsonify({"note": note})


@notes_bp.put("/<note_id>")
def update_note(note_id):
    notes = _notes()
    existing = notes.get_note(note_id)
    if not existing:
        return not_found("note")

    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        data = {}

    error = _invalid_text_field(data, "title", "content", "event_name", nullable=("title", "event_name"))
    if error:
        return error

    title = (data.get("title") or "").strip() or existing["title"]
    content = data.get("content", existing["content"])
    event_name = data.get("event_name", existing["event_name"])

    notes.update_note(note_id, title, content, event_name)
    return jsonify({"note": notes.get_note(note_id)})


@notes_bp.delete("/<note_id>")
def delete_note(note_id):
    """Delete a note after soft-cancelling its pending reminders."""
    if not _notes().delete_note(note_id):
        return not_found("note")
    return jsonify({"ok": True})
