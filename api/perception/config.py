import os
from pathlib import Path

_default_data_file = Path(__file__).resolve().parents[2] / "feedback.json"
DATA_FILE = Path(os.getenv("DATA_FILE", str(_default_data_file)))
STORE_BACKEND = os.getenv("STORE_BACKEND", "file").strip().lower()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./feedback.db")

ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

DEFAULT_SESSION_NAME = os.getenv("DEFAULT_SESSION_NAME", "Anonymous")
CONFIDENCE_KEY = os.getenv("CONFIDENCE_KEY", "confidence")

PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
