# api/services/notifications/local_queue.py
"""
Local notification queue.

Implements the notification capability over the scheduled_notifications
table. schedule_at() only records the delivery; deliver_due(), run by the
dispatcher worker, claims due rows, hands them to a sender and reports
each delivery to subscribers.

Row status: pending -> sending -> delivered, or pending -> withdrawn.
A failed send puts the row back to pending.
"""

import json
import logging
import threading
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from utils.db import Database
from utils.timestamps import to_iso, utcnow

from .base import (
    DeliveryCallback,
    NotificationCapability,
    NotificationContent,
    NotificationRegistrationError,
)
from .senders import Sender, log_sender

logger = logging.getLogger(__name__)


def _row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "fire_at": row["fire_at"],
        "title": row["title"],
        "body": row["body"],
        "payload": json.loads(row["payload"] or "{}"),
        "status": row["status"],
        "created_at": row["created_at"],
        "delivered_at": row["delivered_at"],
        "error_text": row["error_text"],
    }


class LocalNotificationQueue(NotificationCapability):
    """SQLite-backed notification capability."""

    def __init__(self, db: Database, sender: Optional[Sender] = None):
        self.db = db
        self.sender = sender or log_sender
        self._callbacks: List[DeliveryCallback] = []
        self._lock = threading.Lock()

    # -----------------------------
    # Capability
    # -----------------------------

    def schedule_at(self, when: datetime, content: NotificationContent) -> str:
        if when <= utcnow():
            raise NotificationRegistrationError(f"Trigger time {to_iso(when)} is in the past")

        try:
            payload = json.dumps(content.payload or {})
        except (TypeError, ValueError) as e:
            raise NotificationRegistrationError(f"Payload is not serializable: {e}") from e

        registration_id = str(uuid.uuid4())
        conn = self.db.connect()
        try:
            conn.execute(
                """
                INSERT INTO scheduled_notifications
                    (id, fire_at, title, body, payload, status, created_at)
                VALUES (?, ?, ?, ?, ?, 'pending', ?)
                """,
                (registration_id, to_iso(when), content.title, content.body, payload, to_iso(utcnow())),
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug(f"Registered notification {registration_id} for {to_iso(when)}")
        return registration_id

    def on_delivery_or_tap(self, callback: DeliveryCallback) -> Callable[[], None]:
        with self._lock:
            self._callbacks.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def withdraw(self, registration_id: str) -> bool:
        conn = self.db.connect()
        try:
            cur = conn.execute(
                """
                UPDATE scheduled_notifications
                SET status = 'withdrawn'
                WHERE id = ? AND status = 'pending'
                """,
                (registration_id,),
            )
            conn.commit()
            withdrawn = cur.rowcount == 1
        finally:
            conn.close()

        if withdrawn:
            logger.info(f"Withdrew notification {registration_id}")
        return withdrawn

    # -----------------------------
    # Queue access
    # -----------------------------

    def get(self, registration_id: str) -> Optional[Dict[str, Any]]:
        conn = self.db.connect()
        try:
            cur = conn.execute(
                "SELECT * FROM scheduled_notifications WHERE id = ?",
                (registration_id,),
            )
            row = cur.fetchone()
        finally:
            conn.close()
        return _row_to_dict(row) if row else None

    def pending(self) -> List[Dict[str, Any]]:
        """All notifications still waiting to fire, soonest first."""
        conn = self.db.connect()
        try:
            cur = conn.execute(
                """
                SELECT * FROM scheduled_notifications
                WHERE status = 'pending'
                ORDER BY fire_at ASC
                """
            )
            return [_row_to_dict(row) for row in cur.fetchall()]
        finally:
            conn.close()

    def deliver_due(self, now: Optional[datetime] = None, limit: int = 50) -> Dict[str, Any]:
        """
        Deliver every pending notification whose fire time has passed.

        Returns:
            {'processed': int, 'delivered': int, 'failed': int}
        """
        now_iso = to_iso(now or utcnow())
        results = {"processed": 0, "delivered": 0, "failed": 0}

        conn = self.db.connect()
        try:
            cur = conn.execute(
                """
                SELECT * FROM scheduled_notifications
                WHERE status = 'pending' AND fire_at <= ?
                ORDER BY fire_at ASC
                LIMIT ?
                """,
                (now_iso, limit),
            )
            due = cur.fetchall()

            for row in due:
                cur = conn.execute(
                    """
                    UPDATE scheduled_notifications
                    SET status = 'sending'
                    WHERE id = ? AND status = 'pending'
                    """,
                    (row["id"],),
                )
                conn.commit()
                if cur.rowcount != 1:
                    continue

                results["processed"] += 1
                notification = _row_to_dict(row)

                try:
                    self.sender(notification)
                except Exception as e:
                    logger.exception(f"Notification {row['id']} failed to send")
                    conn.execute(
                        """
                        UPDATE scheduled_notifications
                        SET status = 'pending', error_text = ?
                        WHERE id = ?
                        """,
                        (str(e), row["id"]),
                    )
                    conn.commit()
                    results["failed"] += 1
                    continue

                conn.execute(
                    """
                    UPDATE scheduled_notifications
                    SET status = 'delivered', delivered_at = ?, error_text = NULL
                    WHERE id = ?
                    """,
                    (to_iso(utcnow()), row["id"]),
                )
                conn.commit()
                results["delivered"] += 1

                self._notify(notification["payload"])
        finally:
            conn.close()

        return results

    def tap(self, registration_id: str) -> bool:
        """Report a user tap on a delivered notification."""
        notification = self.get(registration_id)
        if not notification or notification["status"] != "delivered":
            return False
        self._notify(notification["payload"])
        return True

    def _notify(self, payload: Dict[str, Any]) -> None:
        with self._lock:
            callbacks = list(self._callbacks)

        for callback in callbacks:
            try:
                callback(payload)
            except Exception:
                logger.exception("Notification callback failed")
