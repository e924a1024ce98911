# services/notes.py
"""Minimal note storage plus the lifecycle hooks that drive reminders.

Creating a note hands reminder scheduling to the background task queue
(the caller never waits on it); deleting a note soft-cancels the note's
outstanding reminders before the row is removed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from utils.db import Database
from utils.timestamps import to_iso, utcnow

logger = logging.getLogger(__name__)


class NoteStore:
    def __init__(self, db: Database, scheduler=None, task_queue=None):
        self.db = db
        self.scheduler = scheduler
        self.task_queue = task_queue

    def get_note(self, note_id: str) -> Optional[Dict[str, Any]]:
        """Return the note as a dict, or None."""
        if not note_id:
            return None

        conn = self.db.connect()
        try:
            cur = conn.execute("SELECT * FROM notes WHERE id = ?", (note_id,))
            row = cur.fetchone()
            return dict(row) if row else None
        finally:
            conn.close()

    def list_notes(self) -> List[Dict[str, Any]]:
        conn = self.db.connect()
        try:
            cur = conn.execute("SELECT * FROM notes ORDER BY updated_at DESC")
            return [dict(row) for row in cur.fetchall()]
        finally:
            conn.close()

    def create_note(
        self,
        title: str,
        content: str = "",
        event_name: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Insert a note and queue its accountability reminders."""
        note_id = str(uuid.uuid4())
        now = to_iso(created_at or utcnow())

        conn = self.db.connect()
        try:
            conn.execute(
                """
                INSERT INTO notes (id, title, content, created_at, updated_at, event_name)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (note_id, title, content, now, now, event_name),
            )
            conn.commit()
        finally:
            conn.close()

        note = {
            "id": note_id,
            "title": title,
            "content": content,
            "created_at": now,
            "updated_at": now,
            "event_name": event_name,
        }

        if self.task_queue is not None:
            self.task_queue.submit(note_id)

        return note

    def update_note(
        self,
        note_id: str,
        title: str,
        content: str,
        event_name: Optional[str] = None,
    ) -> bool:
        conn = self.db.connect()
        try:
            cur = conn.execute(
                """
                UPDATE notes SET title = ?, content = ?, updated_at = ?, event_name = ?
                WHERE id = ?
                """,
                (title, content, to_iso(utcnow()), event_name, note_id),
            )
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    def delete_note(self, note_id: str) -> bool:
        """Soft-cancel the note's pending reminders, then delete it."""
        if self.scheduler is not None:
            cancelled = self.scheduler.cancel_for_note(note_id)
            if cancelled:
                logger.info(f"Cancelled {cancelled} reminder(s) for note {note_id}")

        conn = self.db.connect()
        try:
            cur = conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()
