import os
from pathlib import Path
from dotenv import load_dotenv

# Override=True so changes in .env take effect on process reload.
#
# For automated tests (SQLite), we need to prevent .env from overriding the
# test DATABASE_URL. Set DISABLE_DOTENV=1 to skip loading .env.
if os.getenv("DISABLE_DOTENV") != "1":
    load_dotenv(override=True)


def _env_bool(name: str, default: str = "1") -> bool:
    v = (os.getenv(name, default) or default).strip().lower()
    return v in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw else default


_raw_database_url = (os.getenv("DATABASE_URL") or "").strip()
# Default to a local SQLite DB for dev so the service can start out-of-the-box.
# Use an absolute path so it works regardless of current working directory.
_default_sqlite_path = (Path(__file__).resolve().parent.parent / "dev.db").as_posix()
DATABASE_URL = _raw_database_url or f"sqlite:///{_default_sqlite_path}"

# Auth / JWT
# NOTE: keep a default for local dev so the server can boot even if SECRET_KEY isn't set.
SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret_change_me")
ACCESS_TOKEN_EXPIRE_MINUTES = _env_int("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7)

# -------------------- Scheduling --------------------
# Used when HR asks for bookable slots without choosing a duration,
# and as the default stored on newly submitted availability blocks.
DEFAULT_SLOT_MINUTES = _env_int("DEFAULT_SLOT_MINUTES", 60)
MAX_SLOT_MINUTES = _env_int("MAX_SLOT_MINUTES", 480)
DEFAULT_MAX_INTERVIEWS_PER_DAY = _env_int("DEFAULT_MAX_INTERVIEWS_PER_DAY", 5)

# -------------------- Notifications (SMTP) --------------------
NOTIFICATIONS_ENABLED = _env_bool("NOTIFICATIONS_ENABLED", "1")
SMTP_HOST = (os.getenv("SMTP_HOST") or "").strip()
SMTP_PORT = _env_int("SMTP_PORT", 587)
SMTP_USER = (os.getenv("SMTP_USER") or "").strip()
SMTP_PASS = (os.getenv("SMTP_PASS") or "").strip()
SMTP_FROM = (os.getenv("SMTP_FROM") or SMTP_USER).strip()
SMTP_TLS = _env_bool("SMTP_TLS", "1")

LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
