# api/tests/test_reminder_scheduler.py
"""
Tests for the accountability reminder scheduler.

Notes are stored through NoteStore; the notification capability is a
fake that records registrations.
"""

import os
import random
import sys
from datetime import timedelta

# Add api directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.notes import NoteStore
from services.reminders import (
    ACCOUNTABILITY_QUESTIONS,
    ReminderIntervalSettings,
    ReminderScheduler,
)
from fakes import FakeNotifier
from utils.db import Database
from utils.timestamps import parse_iso, utcnow


def _setup(tmp_path, intervals=None, notifier=None, **kwargs):
    db = Database(str(tmp_path / "rooted.db"))
    db.init_schema()

    settings = ReminderIntervalSettings(db)
    if intervals is not None:
        settings.set(intervals)

    notifier = notifier or FakeNotifier()
    notes = NoteStore(db)
    scheduler = ReminderScheduler(
        db, settings, notifier, notes, rng=random.Random(7), **kwargs
    )
    return notes, scheduler, notifier


def _note(notes, title="Sunday sermon", days_ago=0):
    return notes.create_note(title, "Read John 3:16", created_at=utcnow() - timedelta(days=days_ago))


def test_past_interval_skipped(tmp_path):
    """A note created 10 days ago gets nothing for the default 5-day interval."""
    notes, scheduler, notifier = _setup(tmp_path)
    note = _note(notes, days_ago=10)

    assert scheduler.schedule_for_note(note["id"]) == []
    assert scheduler.reminders_for_note(note["id"]) == []
    assert notifier.registered == []


def test_only_future_intervals_scheduled(tmp_path):
    """With {5, 20} and a 10-day-old note only the day-20 reminder exists."""
    notes, scheduler, notifier = _setup(tmp_path, intervals=[5, 20])
    note = _note(notes, days_ago=10)

    reminders = scheduler.schedule_for_note(note["id"])

    assert len(reminders) == 1
    reminder = reminders[0]
    assert reminder.reminder_index == 1
    assert reminder.scheduled_for == parse_iso(note["created_at"]) + timedelta(days=20)
    assert reminder.triggered_at is None
    assert reminder.notification_id == "notif-0"

    stored = scheduler.reminders_for_note(note["id"])
    assert [r.id for r in stored] == [reminder.id]


def test_notification_content(tmp_path):
    """Title names the note; body is one of the prompts; payload links back."""
    notes, scheduler, notifier = _setup(tmp_path, intervals=[1])
    note = _note(notes, title="Grace")

    reminder = scheduler.schedule_for_note(note["id"])[0]

    _, when, content = notifier.registered[0]
    assert when == reminder.scheduled_for
    assert content.title == "Time to Reflect: Grace"
    assert content.body in ACCOUNTABILITY_QUESTIONS
    assert content.payload == {
        "noteId": note["id"],
        "reminderId": reminder.id,
        "type": "accountability",
    }


def test_one_reminder_per_interval(tmp_path):
    """A fresh note gets one reminder per interval, soonest first."""
    notes, scheduler, _ = _setup(tmp_path, intervals=[30, 3, 7])
    note = _note(notes)

    reminders = scheduler.schedule_for_note(note["id"])

    assert [r.reminder_index for r in reminders] == [0, 1, 2]
    created_at = parse_iso(note["created_at"])
    assert [r.scheduled_for - created_at for r in reminders] == [
        timedelta(days=3), timedelta(days=7), timedelta(days=30)
    ]
    pending = scheduler.pending_reminders()
    assert [r.id for r in pending] == [r.id for r in reminders]


def test_interval_landing_on_now_is_skipped(tmp_path):
    """A reminder due exactly now is not strictly in the future."""
    db = Database(str(tmp_path / "rooted.db"))
    db.init_schema()
    settings = ReminderIntervalSettings(db)
    settings.set([5, 6])

    notes = NoteStore(db)
    note = _note(notes)
    now = parse_iso(note["created_at"]) + timedelta(days=5)

    scheduler = ReminderScheduler(db, settings, FakeNotifier(), notes, clock=lambda: now)
    reminders = scheduler.schedule_for_note(note["id"])

    assert [r.reminder_index for r in reminders] == [1]


def test_missing_note(tmp_path):
    _, scheduler, notifier = _setup(tmp_path)
    assert scheduler.schedule_for_note("no-such-note") == []
    assert notifier.registered == []


def test_registration_failure_skips_row(tmp_path):
    """A refused registration is not recorded; siblings still are."""
    notifier = FakeNotifier(refuse_calls={0})
    notes, scheduler, _ = _setup(tmp_path, intervals=[1, 2, 3], notifier=notifier)
    note = _note(notes)

    reminders = scheduler.schedule_for_note(note["id"])

    assert [r.reminder_index for r in reminders] == [1, 2]
    assert len(scheduler.reminders_for_note(note["id"])) == 2


def test_cancel_only_touches_that_note(tmp_path):
    """cancel_for_note stamps every open reminder of that note and nothing else."""
    notes, scheduler, notifier = _setup(tmp_path, intervals=[1, 2])
    doomed = _note(notes, title="Doomed")
    kept = _note(notes, title="Kept")
    scheduler.schedule_for_note(doomed["id"])
    scheduler.schedule_for_note(kept["id"])

    assert scheduler.cancel_for_note(doomed["id"]) == 2

    assert all(r.triggered_at is not None for r in scheduler.reminders_for_note(doomed["id"]))
    assert all(r.triggered_at is None for r in scheduler.reminders_for_note(kept["id"]))
    assert {r.note_id for r in scheduler.pending_reminders()} == {kept["id"]}

    # soft cancellation leaves registered deliveries alone
    assert notifier.withdrawn == []

    assert scheduler.cancel_for_note(doomed["id"]) == 0


def test_cancel_keeps_earlier_trigger_time(tmp_path):
    """Already-triggered reminders keep their original timestamp."""
    notes, scheduler, _ = _setup(tmp_path, intervals=[1, 2])
    note = _note(notes)
    first, second = scheduler.schedule_for_note(note["id"])

    scheduler.mark_triggered(first.id)
    triggered_at = scheduler.get_reminder(first.id).triggered_at

    assert scheduler.cancel_for_note(note["id"]) == 1
    assert scheduler.get_reminder(first.id).triggered_at == triggered_at
    assert scheduler.get_reminder(second.id).triggered_at is not None


def test_cancel_with_withdraw(tmp_path):
    """withdraw_on_cancel also withdraws the registered deliveries."""
    notes, scheduler, notifier = _setup(tmp_path, intervals=[1, 2], withdraw_on_cancel=True)
    note = _note(notes)
    reminders = scheduler.schedule_for_note(note["id"])

    scheduler.cancel_for_note(note["id"])

    assert sorted(notifier.withdrawn) == sorted(r.notification_id for r in reminders)


def test_mark_triggered_is_idempotent(tmp_path):
    notes, scheduler, _ = _setup(tmp_path, intervals=[1])
    note = _note(notes)
    reminder = scheduler.schedule_for_note(note["id"])[0]

    assert scheduler.mark_triggered(reminder.id) is True
    first = scheduler.get_reminder(reminder.id).triggered_at

    assert scheduler.mark_triggered(reminder.id) is False
    assert scheduler.get_reminder(reminder.id).triggered_at == first
    assert scheduler.mark_triggered("unknown") is False
    assert scheduler.pending_reminders() == []


def test_delivery_callback_marks_triggered(tmp_path):
    """A delivered accountability notification marks its reminder and opens the note."""
    opened = []
    notes, scheduler, notifier = _setup(tmp_path, intervals=[1], on_tap=opened.append)
    note = _note(notes)
    reminder = scheduler.schedule_for_note(note["id"])[0]

    notifier.fire({"type": "other", "noteId": note["id"], "reminderId": reminder.id})
    assert scheduler.get_reminder(reminder.id).triggered_at is None
    assert opened == []

    _, _, content = notifier.registered[0]
    notifier.fire(content.payload)

    assert scheduler.get_reminder(reminder.id).triggered_at is not None
    assert opened == [note["id"]]


def test_close_unsubscribes(tmp_path):
    _, scheduler, notifier = _setup(tmp_path)
    assert len(notifier.callbacks) == 1
    scheduler.close()
    assert notifier.callbacks == []


def test_to_dict(tmp_path):
    notes, scheduler, _ = _setup(tmp_path, intervals=[1])
    note = _note(notes)
    data = scheduler.schedule_for_note(note["id"])[0].to_dict()

    assert data["note_id"] == note["id"]
    assert data["reminder_index"] == 0
    assert data["triggered_at"] is None
    assert parse_iso(data["scheduled_for"]) > utcnow()
