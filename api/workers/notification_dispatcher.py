import logging
import time

from core.config import NOTIFICATION_POLL_INTERVAL

log = logging.getLogger(__name__)


# -----------------------------
# Dispatcher loop
# -----------------------------

def dispatch_once(queue) -> dict:
    """Deliver everything currently due and return the counts."""
    results = queue.deliver_due()
    if results["processed"]:
        log.info(
            f"Dispatched {results['processed']} notification(s): "
            f"{results['delivered']} delivered, {results['failed']} failed"
        )
    return results


def run_notification_dispatcher(queue, poll_interval: int = NOTIFICATION_POLL_INTERVAL):
    log.info("Notification dispatcher started")

    while True:
        try:
            dispatch_once(queue)
        except Exception:
            log.exception("Dispatcher loop error")
        time.sleep(poll_interval)
