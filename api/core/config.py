# core/config.py
import os

from dotenv import load_dotenv

# Load .env
load_dotenv()

# ---- PATHS ----
# BASE_DIR is the /api folder
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

ROOTED_DB_PATH = os.getenv("ROOTED_DB_PATH", os.path.join(BASE_DIR, "rooted.db"))
MIGRATIONS_DIR = os.path.join(BASE_DIR, "migrations")

# ---- BIBLE TEXT PROVIDERS ----
DEFAULT_TRANSLATION = os.getenv("DEFAULT_TRANSLATION", "BSB")
BIBLE_API_BASE = os.getenv("BIBLE_API_BASE", "https://bible.helloao.org/api")
BOLLS_API_BASE = os.getenv("BOLLS_API_BASE", "https://bolls.life")

# Translations served by Bolls.life instead of helloao
BOLLS_TRANSLATIONS = [
    t.strip().upper()
    for t in os.getenv("BOLLS_TRANSLATIONS", "NKJV").split(",")
    if t.strip()
]

BIBLE_REQUEST_TIMEOUT = int(os.getenv("BIBLE_REQUEST_TIMEOUT", "15"))

# ---- REMINDERS ----
REMINDER_WORKERS = int(os.getenv("REMINDER_WORKERS", "2"))

# Soft cancellation leaves registered deliveries in place unless enabled
WITHDRAW_ON_CANCEL = os.getenv("WITHDRAW_ON_CANCEL", "false").lower() == "true"

NOTIFICATION_POLL_INTERVAL = int(os.getenv("NOTIFICATION_POLL_INTERVAL", "30"))
NOTIFICATION_WEBHOOK_URL = os.getenv("NOTIFICATION_WEBHOOK_URL")

# ---- APP ----
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
