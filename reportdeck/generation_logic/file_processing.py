"""Turns the files attached to a report request into content parts.

This module provides the functionality to:
- Read uploaded files into immutable ``SourceFile`` values.
- Enforce the per-file, per-request count and total size limits.
- Normalize all files concurrently into content parts for the generation call.

Normalization is all-or-nothing: if a single file fails, the whole batch
fails with ``FileProcessingError`` and no partial list is returned.
"""

import asyncio
import logging

from fastapi import UploadFile

from reportdeck.core.exceptions import FileProcessingError
from reportdeck.core.exceptions import UploadLimitExceeded
from reportdeck.core.validation import MAX_FILE_SIZE
from reportdeck.core.validation import MAX_FILES
from reportdeck.core.validation import MAX_TOTAL_SIZE
from reportdeck.models.report_models import ContentPart
from reportdeck.models.report_models import SourceFile
from reportdeck.services.extractor import normalize_file

__all__ = [
    "normalize_files",
    "read_uploads",
]

logger = logging.getLogger(__name__)


async def _read_single_upload(f_obj: UploadFile, request_id: str) -> SourceFile:
    filename = f_obj.filename or "unknown_file"
    try:
        await f_obj.seek(0)
        contents = await f_obj.read()
    except Exception as read_err:
        logger.error("[%s] Failed to read file content for %s: %s", request_id, filename, read_err, exc_info=True)
        raise FileProcessingError(filename, f"Could not read '{filename}'.") from read_err
    return SourceFile(filename=filename, mime_type=f_obj.content_type or "", data=contents)


async def read_uploads(uploads: list[UploadFile], request_id: str) -> list[SourceFile]:
    """Read every upload into memory, preserving order."""
    return list(await asyncio.gather(*(_read_single_upload(f, request_id) for f in uploads)))


def _check_limits(files: list[SourceFile], request_id: str) -> None:
    if len(files) > MAX_FILES:
        logger.warning("[%s] Request rejected: too many files (%d > %d)", request_id, len(files), MAX_FILES)
        raise UploadLimitExceeded(f"At most {MAX_FILES} files can be attached to one report.")

    total_size = 0
    for source in files:
        size = len(source.data)
        if size > MAX_FILE_SIZE:
            logger.warning("[%s] Rejected file exceeding size limit: %s (%d bytes)", request_id, source.filename, size)
            raise UploadLimitExceeded(
                f"File '{source.filename}' is too large ({size // (1024 * 1024)}MB). Limit per file: {MAX_FILE_SIZE // (1024 * 1024)}MB",
            )
        total_size += size

    if total_size > MAX_TOTAL_SIZE:
        logger.warning("[%s] Total data size exceeds limit: %d bytes > %d bytes", request_id, total_size, MAX_TOTAL_SIZE)
        raise UploadLimitExceeded(f"Total file size ({total_size // (1024 * 1024)}MB) exceeds the {MAX_TOTAL_SIZE // (1024 * 1024)}MB limit.")


async def normalize_files(files: list[SourceFile], request_id: str) -> list[ContentPart]:
    """Validate limits, then normalize every file concurrently, keeping input order."""
    if not files:
        logger.info("[%s] No files attached to the request.", request_id)
        return []

    _check_limits(files, request_id)

    results = await asyncio.gather(
        *(normalize_file(f.filename, f.mime_type, f.data, request_id) for f in files),
        return_exceptions=True,
    )

    parts: list[ContentPart] = []
    for source, result in zip(files, results, strict=True):
        if isinstance(result, FileProcessingError):
            logger.error("[%s] Aborting request: '%s' could not be normalized.", request_id, result.filename)
            raise result
        if isinstance(result, BaseException):
            logger.error("[%s] Unexpected error normalizing '%s': %s", request_id, source.filename, result)
            raise FileProcessingError(source.filename) from result
        parts.append(result)

    logger.info("[%s] Normalized %d files into content parts.", request_id, len(parts))
    return parts
