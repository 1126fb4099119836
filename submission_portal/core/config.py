import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# DEV defaults: override through env vars in any real deployment.
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE = timedelta(days=int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7")))

DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR}/submission_portal.db")

# Upload policy
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(BASE_DIR / "uploads")))
MAX_FILES_PER_SUBMISSION = 5
MAX_ATTACHMENTS_PER_ASSIGNMENT = 3
MAX_UPLOAD_BYTES = 50 * 1024 * 1024  # 50MB per file
ALLOWED_UPLOAD_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "application/zip",
    "application/x-zip-compressed",
    "image/jpeg",
    "image/png",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
}

# Assignment defaults
DEFAULT_ALLOWED_FILE_TYPES = ["pdf", "doc", "docx", "txt", "zip"]
DEFAULT_MAX_FILE_SIZE_MB = 10
