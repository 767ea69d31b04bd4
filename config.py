import os
from dotenv import load_dotenv

load_dotenv()

MEDIA_API_URL = (os.environ.get("MEDIA_API_URL", "http://localhost:8000/api/v1") or "").rstrip("/")
API_TIMEOUT_SEC = float(os.environ.get("API_TIMEOUT_SEC", "30"))
UPLOAD_TIMEOUT_SEC = float(os.environ.get("UPLOAD_TIMEOUT_SEC", "300"))
POLL_INTERVAL_SEC = float(os.environ.get("POLL_INTERVAL_SEC", "2"))
POLL_MAX_ATTEMPTS = int(os.environ.get("POLL_MAX_ATTEMPTS", "300"))
SESSION_ID_HEADER = os.environ.get("SESSION_ID_HEADER", "X-Session-ID")
