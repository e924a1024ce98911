#!/usr/bin/env python3
"""
Notification Worker Runner

Delivers due accountability notifications from the local queue and
marks the matching reminders as triggered.

Usage:
    python -m scripts.run_notification_worker [--interval SECONDS]

Options:
    --interval    Poll interval in seconds (default: NOTIFICATION_POLL_INTERVAL)
    --once        Deliver what is due now and exit
    --db          Database path (default: ROOTED_DB_PATH)
"""

import sys
import os
import argparse
import logging

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.components import build_components
from core.config import LOG_LEVEL, NOTIFICATION_POLL_INTERVAL
from utils.db import Database
from workers.notification_dispatcher import dispatch_once, run_notification_dispatcher


def main():
    parser = argparse.ArgumentParser(description='Run notification worker')
    parser.add_argument(
        '--interval',
        type=int,
        default=NOTIFICATION_POLL_INTERVAL,
        help=f'Poll interval in seconds (default: {NOTIFICATION_POLL_INTERVAL})'
    )
    parser.add_argument(
        '--once',
        action='store_true',
        help='Deliver due notifications once and exit'
    )
    parser.add_argument(
        '--db',
        default=None,
        help='Path to the SQLite database'
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db = Database(args.db)
    db.init_schema()
    components = build_components(db)

    try:
        if args.once:
            result = dispatch_once(components.notifier)
            print(f"Processed: {result['processed']}, Delivered: {result['delivered']}, Failed: {result['failed']}")
            return

        # Run continuously
        run_notification_dispatcher(components.notifier, poll_interval=args.interval)
    finally:
        components.shutdown()


if __name__ == '__main__':
    main()
