import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///data/stay_sync.db")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must not be empty")

# Sync scheduler timing (seconds)
SYNC_INTERVAL_SECONDS = float(os.getenv("SYNC_INTERVAL_SECONDS", "30"))
SYNC_INITIAL_DELAY_SECONDS = float(os.getenv("SYNC_INITIAL_DELAY_SECONDS", "5"))
START_SCHEDULER = os.getenv("START_SCHEDULER", "true").lower() == "true"

# Deadline applied to every Google Calendar HTTP call
REMOTE_TIMEOUT_SECONDS = float(os.getenv("REMOTE_TIMEOUT_SECONDS", "20"))

# Reservations whose check-out is at most this many days ago still get their
# check-in/check-out events pushed
OPERATIONS_LOOKBACK_DAYS = int(os.getenv("OPERATIONS_LOOKBACK_DAYS", "1"))

GOOGLE_TOKEN_PATH = os.getenv(
    "GOOGLE_TOKEN_PATH",
    str(Path.home() / ".local" / "share" / "stay_sync" / "token.json"),
)
GOOGLE_OAUTH_PORT = int(os.getenv("GOOGLE_OAUTH_PORT", "8888"))

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
]
