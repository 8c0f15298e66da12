"""Defines constants for source file classification and upload limits."""

import logging

from reportdeck.core.config import settings

logger = logging.getLogger(__name__)

XLSX_MIME: str = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MIME: str = "text/csv"
GENERIC_MIME: str = "application/octet-stream"

SPREADSHEET_EXTENSIONS: set[str] = {".xlsx"}
CSV_EXTENSIONS: set[str] = {".csv"}

# Limits are read from settings so deployments can tune them
MAX_FILE_SIZE: int = settings.max_file_size
MAX_FILES: int = settings.max_files
MAX_TOTAL_SIZE: int = settings.max_total_size

# Fallback MIME types by extension, used when neither the client nor libmagic gives one
MIME_MAPPING: dict[str, str] = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".txt": "text/plain",
    ".csv": CSV_MIME,
    ".xlsx": XLSX_MIME,
}
