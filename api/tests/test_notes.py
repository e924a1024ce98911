# api/tests/test_notes.py
"""
Tests for NoteStore lifecycle hooks and the background reminder queue.
"""

import logging
import os
import sys

# Add api directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.notes import NoteStore
from services.reminders import ReminderIntervalSettings, ReminderScheduler, ReminderTaskQueue
from fakes import FakeNotifier
from utils.db import Database


def _make_db(tmp_path):
    db = Database(str(tmp_path / "rooted.db"))
    db.init_schema()
    return db


class RecordingQueue:
    def __init__(self):
        self.submitted = []

    def submit(self, note_id):
        self.submitted.append(note_id)


def test_note_crud(tmp_path):
    notes = NoteStore(_make_db(tmp_path))

    note = notes.create_note("Grace", "Read Eph 2:8", event_name="Sunday")
    assert notes.get_note(note["id"]) == note

    assert notes.update_note(note["id"], "Grace alone", "Eph 2:8-9") is True
    updated = notes.get_note(note["id"])
    assert updated["title"] == "Grace alone"
    assert updated["created_at"] == note["created_at"]

    assert [n["id"] for n in notes.list_notes()] == [note["id"]]

    assert notes.delete_note(note["id"]) is True
    assert notes.get_note(note["id"]) is None
    assert notes.delete_note(note["id"]) is False


def test_create_submits_scheduling(tmp_path):
    """Creating a note hands its id to the task queue."""
    queue = RecordingQueue()
    notes = NoteStore(_make_db(tmp_path), task_queue=queue)

    note = notes.create_note("Grace")

    assert queue.submitted == [note["id"]]


def test_background_scheduling(tmp_path):
    """The task queue runs the scheduler off the caller's thread."""
    db = _make_db(tmp_path)
    settings = ReminderIntervalSettings(db)
    settings.set([1, 2])
    scheduler = ReminderScheduler(db, settings, FakeNotifier(), NoteStore(db))
    queue = ReminderTaskQueue(scheduler, max_workers=1)
    notes = NoteStore(db, scheduler=scheduler, task_queue=queue)

    note = notes.create_note("Grace")
    queue.shutdown(wait=True)

    assert len(scheduler.reminders_for_note(note["id"])) == 2


def test_delete_soft_cancels_reminders(tmp_path):
    """Deleting a note stamps its open reminders but keeps the rows."""
    db = _make_db(tmp_path)
    notifier = FakeNotifier()
    scheduler = ReminderScheduler(db, ReminderIntervalSettings(db), notifier, NoteStore(db))
    notes = NoteStore(db, scheduler=scheduler)

    note = notes.create_note("Grace")
    scheduler.schedule_for_note(note["id"])

    notes.delete_note(note["id"])

    reminders = scheduler.reminders_for_note(note["id"])
    assert len(reminders) == 1
    assert reminders[0].triggered_at is not None
    assert scheduler.pending_reminders() == []
    assert notifier.withdrawn == []


class ExplodingScheduler:
    def schedule_for_note(self, note_id):
        raise RuntimeError("database is locked")


def test_task_failure_is_logged(caplog):
    """Scheduling failures are logged and never raised to the submitter."""
    queue = ReminderTaskQueue(ExplodingScheduler(), max_workers=1)

    with caplog.at_level(logging.ERROR, logger="services.reminders.task_queue"):
        future = queue.submit("note-1")
        queue.shutdown(wait=True)

    assert isinstance(future.exception(), RuntimeError)
    messages = [r.getMessage() for r in caplog.records]
    assert any("note-1" in m and "database is locked" in m for m in messages)
