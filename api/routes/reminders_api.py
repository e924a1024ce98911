# routes/reminders_api.py
from flask import Blueprint, current_app, jsonify, request

from services.reminders import ValidationError
from utils.errors import missing_field, not_found, validation_error

reminders_bp = Blueprint("reminders_api", __name__, url_prefix="/api/reminders")


def _components():
    return current_app.extensions["rooted"]


@reminders_bp.get("/intervals")
def get_intervals():
    return jsonify({"intervals": _components().intervals.get()})


@reminders_bp.put("/intervals")
def set_intervals():
    """
    Replace the interval set.

    Body:
        {"intervals": [3, 7, 30]}
    """
    data = request.get_json(silent=True) or {}
    if "intervals" not in data:
        return missing_field("intervals")

    try:
        intervals = _components().intervals.set(data["intervals"])
    except ValidationError as e:
        return validation_error("invalid_intervals", str(e))

    return jsonify({"intervals": intervals})


@reminders_bp.get("/pending")
def pending_reminders():
    reminders = _components().scheduler.pending_reminders()
    return jsonify({"reminders": [r.to_dict() for r in reminders]})


@reminders_bp.get("/note/<note_id>")
def reminders_for_note(note_id):
    reminders = _components().scheduler.reminders_for_note(note_id)
    return jsonify({"note_id": note_id, "reminders": [r.to_dict() for r in reminders]})


@reminders_bp.post("/<reminder_id>/triggered")
def mark_triggered(reminder_id):
    scheduler = _components().scheduler
    reminder = scheduler.get_reminder(reminder_id)
    if reminder is None:
        return not_found("reminder")

    changed = scheduler.mark_triggered(reminder_id)
    return jsonify({
        "changed": changed,
        "reminder": scheduler.get_reminder(reminder_id).to_dict(),
    })
