import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower().strip() in ("1", "true", "yes", "on")


# "production" forces MySQL even without DB_HOST
APP_ENV = os.getenv("APP_ENV", "development").lower().strip()
IS_PRODUCTION = APP_ENV == "production"

# MySQL
DB_HOST = os.getenv("DB_HOST", "").strip()
DB_USER = os.getenv("DB_USER", "user").strip()
DB_PASSWORD = os.getenv("DB_PASSWORD", "pass123")
DB_NAME = os.getenv("DB_NAME", "convites_db").strip()
DB_PORT = int((os.getenv("DB_PORT", "3306").strip() or "3306"))
DB_POOL_SIZE = int((os.getenv("DB_POOL_SIZE", "10").strip() or "10"))

USE_MYSQL = bool(DB_HOST) or IS_PRODUCTION

# SQLite (development)
SQLITE_PATH = os.getenv("SQLITE_PATH", os.path.join("data", "smart-invite.db")).strip()

# Prefix for generated invite links, e.g. "/convites"
BASE_PATH = os.getenv("BASE_PATH", "").strip().rstrip("/")

# Uploads
UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join("public", "uploads")).strip()
MAX_UPLOAD_FILES = int(os.getenv("MAX_UPLOAD_FILES", "10"))
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", str(5 * 1024 * 1024)))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEBUG_SQL = _flag("DEBUG_SQL")
