# api/services/notifications/senders.py
"""
Delivery senders for the local notification queue.

A sender receives one notification dict ({id, title, body, payload,
fire_at}) and raises if it could not be delivered.
"""

import logging
from typing import Any, Callable, Dict

import requests

logger = logging.getLogger(__name__)

Sender = Callable[[Dict[str, Any]], None]

_WEBHOOK_TIMEOUT = 8


def log_sender(notification: Dict[str, Any]) -> None:
    """Deliver by writing the notification to the log."""
    logger.info(f"[notify] {notification['title']}: {notification['body']}")


def webhook_sender(url: str, timeout: int = _WEBHOOK_TIMEOUT) -> Sender:
    """
    Build a sender that POSTs each notification as JSON to url.

    Non-2xx responses and transport errors raise, leaving the
    notification pending for the next poll.
    """

    def send(notification: Dict[str, Any]) -> None:
        payload = {
            "id": notification["id"],
            "title": notification["title"],
            "body": notification["body"],
            "data": notification.get("payload") or {},
            "fire_at": notification.get("fire_at"),
        }
        response = requests.post(url, json=payload, timeout=timeout)
        response.raise_for_status()
        logger.debug(f"Webhook delivered {notification['id']} ({response.status_code})")

    return send
