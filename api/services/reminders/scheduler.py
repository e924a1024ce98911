# api/services/reminders/scheduler.py
"""
Accountability reminder scheduling.

When a note is created, one reminder is derived per configured interval
(note created_at + N days). Each future reminder is registered with the
notification capability and recorded in accountability_reminders.

A reminder row moves once from triggered_at NULL to a timestamp, either
when its notification is delivered/tapped or when its note is deleted
(soft cancellation). Rows are never deleted.
"""

import logging
import random
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from services.notifications.base import NotificationCapability, NotificationContent
from utils.db import Database
from utils.timestamps import parse_iso, to_iso, utcnow

from .intervals import ReminderIntervalSettings

logger = logging.getLogger(__name__)

REMINDER_TYPE = "accountability"

ACCOUNTABILITY_QUESTIONS = [
    "What do you plan to change concerning what you have learnt?",
    "How are you going to improve in this area of your life following what you have learnt?",
    "What specific action will you take based on this note?",
    "How has this learning impacted your perspective?",
    "What steps will you take to apply this learning?",
    "How will you grow in this area of your life?",
]


@dataclass
class AccountabilityReminder:
    """
    One scheduled reflection reminder for a note.

    Attributes:
        id: Reminder id (also carried in the notification payload)
        note_id: Note the reminder belongs to
        scheduled_for: When the notification fires
        reminder_index: Position of the interval in the interval set
        created_at: When the reminder was scheduled
        triggered_at: When it fired or was cancelled; None while pending
        notification_id: Registration id from the notification capability
    """
    id: str
    note_id: str
    scheduled_for: datetime
    reminder_index: int
    created_at: datetime
    triggered_at: Optional[datetime] = None
    notification_id: Optional[str] = None

    @property
    def is_triggered(self) -> bool:
        return self.triggered_at is not None

    @classmethod
    def from_row(cls, row) -> "AccountabilityReminder":
        return cls(
            id=row["id"],
            note_id=row["note_id"],
            scheduled_for=parse_iso(row["scheduled_for"]),
            reminder_index=row["reminder_index"],
            created_at=parse_iso(row["created_at"]),
            triggered_at=parse_iso(row["triggered_at"]) if row["triggered_at"] else None,
            notification_id=row["notification_id"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "note_id": self.note_id,
            "scheduled_for": to_iso(self.scheduled_for),
            "reminder_index": self.reminder_index,
            "created_at": to_iso(self.created_at),
            "triggered_at": to_iso(self.triggered_at) if self.triggered_at else None,
            "notification_id": self.notification_id,
        }


class ReminderScheduler:
    """
    Derives, registers and tracks accountability reminders.

    cancel_for_note() only updates bookkeeping by default: a delivery the
    notification capability already accepted will still fire. Pass
    withdraw_on_cancel=True to also withdraw those registrations.

    Usage:
        scheduler = ReminderScheduler(db, ReminderIntervalSettings(db), notifier, NoteStore(db))
        scheduler.schedule_for_note(note_id)
        scheduler.cancel_for_note(note_id)
    """

    def __init__(
        self,
        db: Database,
        intervals: ReminderIntervalSettings,
        notifier: NotificationCapability,
        notes,
        withdraw_on_cancel: bool = False,
        on_tap: Optional[Callable[[str], None]] = None,
        clock: Callable[[], datetime] = utcnow,
        rng: Optional[random.Random] = None,
    ):
        self.db = db
        self.intervals = intervals
        self.notifier = notifier
        self.notes = notes
        self.withdraw_on_cancel = withdraw_on_cancel
        self.on_tap = on_tap
        self.clock = clock
        self._rng = rng or random.Random()
        self._unsubscribe = notifier.on_delivery_or_tap(self.handle_notification)

    def close(self):
        """Stop listening for deliveries."""
        self._unsubscribe()

    def _random_question(self) -> str:
        return self._rng.choice(ACCOUNTABILITY_QUESTIONS)

    # -----------------------------
    # Scheduling
    # -----------------------------

    def schedule_for_note(self, note_id: str) -> List[AccountabilityReminder]:
        """
        Create reminders for a note from the current interval set.

        Intervals whose date is not strictly in the future are skipped.
        A reminder whose notification could not be registered is not
        recorded; the remaining intervals are still scheduled.

        Returns:
            The reminders that were registered and recorded
        """
        note = self.notes.get_note(note_id)
        if not note:
            logger.error(f"Note {note_id} not found for scheduling reminders")
            return []

        intervals = self.intervals.get()
        note_created_at = parse_iso(note["created_at"])
        now = self.clock()
        scheduled = []

        for index, days in enumerate(intervals):
            scheduled_for = note_created_at + timedelta(days=days)

            if scheduled_for <= now:
                logger.debug(f"Skipping day-{days} reminder for note {note_id}: already past")
                continue

            reminder_id = str(uuid.uuid4())
            content = NotificationContent(
                title=f"Time to Reflect: {note['title']}",
                body=self._random_question(),
                payload={"noteId": note_id, "reminderId": reminder_id, "type": REMINDER_TYPE},
            )

            try:
                notification_id = self.notifier.schedule_at(scheduled_for, content)
            except Exception as e:
                logger.error(
                    f"Failed to schedule day-{days} notification for note {note_id}: {e}"
                )
                continue

            reminder = AccountabilityReminder(
                id=reminder_id,
                note_id=note_id,
                scheduled_for=scheduled_for,
                reminder_index=index,
                created_at=self.clock(),
                notification_id=notification_id,
            )
            self._insert(reminder)
            scheduled.append(reminder)

        logger.info(f"Scheduled {len(scheduled)} reminder(s) for note {note_id}")
        return scheduled

    def _insert(self, reminder: AccountabilityReminder):
        conn = self.db.connect()
        try:
            conn.execute(
                """
                INSERT INTO accountability_reminders
                    (id, note_id, scheduled_for, reminder_index, created_at,
                     triggered_at, notification_id)
                VALUES (?, ?, ?, ?, ?, NULL, ?)
                """,
                (
                    reminder.id,
                    reminder.note_id,
                    to_iso(reminder.scheduled_for),
                    reminder.reminder_index,
                    to_iso(reminder.created_at),
                    reminder.notification_id,
                ),
            )
            conn.commit()
        finally:
            conn.close()

    # -----------------------------
    # Cancellation / triggering
    # -----------------------------

    def cancel_for_note(self, note_id: str) -> int:
        """
        Soft-cancel every untriggered reminder of a note.

        Returns:
            Number of reminders marked
        """
        conn = self.db.connect()
        try:
            cur = conn.execute(
                """
                SELECT id, notification_id FROM accountability_reminders
                WHERE note_id = ? AND triggered_at IS NULL
                """,
                (note_id,),
            )
            rows = cur.fetchall()

            cancelled = 0
            for row in rows:
                cur = conn.execute(
                    """
                    UPDATE accountability_reminders SET triggered_at = ?
                    WHERE id = ? AND triggered_at IS NULL
                    """,
                    (to_iso(self.clock()), row["id"]),
                )
                conn.commit()
                cancelled += cur.rowcount
        finally:
            conn.close()

        if self.withdraw_on_cancel:
            for row in rows:
                if not row["notification_id"]:
                    continue
                try:
                    self.notifier.withdraw(row["notification_id"])
                except Exception as e:
                    logger.warning(f"Could not withdraw notification {row['notification_id']}: {e}")

        return cancelled

    def mark_triggered(self, reminder_id: str) -> bool:
        """
        Record that a reminder fired. Repeated calls leave the first
        timestamp in place.

        Returns:
            True if the reminder was pending and is now triggered
        """
        conn = self.db.connect()
        try:
            cur = conn.execute(
                """
                UPDATE accountability_reminders SET triggered_at = ?
                WHERE id = ? AND triggered_at IS NULL
                """,
                (to_iso(self.clock()), reminder_id),
            )
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    def handle_notification(self, payload: Dict[str, Any]) -> None:
        """Delivery/tap callback registered with the notification capability."""
        if not payload or payload.get("type") != REMINDER_TYPE or not payload.get("noteId"):
            return

        if payload.get("reminderId"):
            self.mark_triggered(payload["reminderId"])

        if self.on_tap is not None:
            self.on_tap(payload["noteId"])

    # -----------------------------
    # Queries
    # -----------------------------

    def pending_reminders(self) -> List[AccountabilityReminder]:
        """Untriggered reminders still in the future, soonest first."""
        conn = self.db.connect()
        try:
            cur = conn.execute(
                """
                SELECT * FROM accountability_reminders
                WHERE triggered_at IS NULL AND scheduled_for > ?
                ORDER BY scheduled_for ASC
                """,
                (to_iso(self.clock()),),
            )
            return [AccountabilityReminder.from_row(row) for row in cur.fetchall()]
        finally:
            conn.close()

    def reminders_for_note(self, note_id: str) -> List[AccountabilityReminder]:
        conn = self.db.connect()
        try:
            cur = conn.execute(
                """
                SELECT * FROM accountability_reminders
                WHERE note_id = ?
                ORDER BY scheduled_for ASC
                """,
                (note_id,),
            )
            return [AccountabilityReminder.from_row(row) for row in cur.fetchall()]
        finally:
            conn.close()

    def get_reminder(self, reminder_id: str) -> Optional[AccountabilityReminder]:
        conn = self.db.connect()
        try:
            cur = conn.execute(
                "SELECT * FROM accountability_reminders WHERE id = ?",
                (reminder_id,),
            )
            row = cur.fetchone()
            return AccountabilityReminder.from_row(row) if row else None
        finally:
            conn.close()
