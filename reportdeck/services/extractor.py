import asyncio
import base64
import csv
import io
import logging
from pathlib import Path

import magic
import openpyxl

from reportdeck.core.exceptions import FileProcessingError
from reportdeck.core.validation import CSV_EXTENSIONS
from reportdeck.core.validation import CSV_MIME
from reportdeck.core.validation import GENERIC_MIME
from reportdeck.core.validation import MIME_MAPPING
from reportdeck.core.validation import SPREADSHEET_EXTENSIONS
from reportdeck.core.validation import XLSX_MIME
from reportdeck.models.report_models import ContentPart
from reportdeck.models.report_models import InlineBinaryPart
from reportdeck.models.report_models import TextPart

# Configure module logger
logger = logging.getLogger(__name__)

SHEET_START = "--- START OF SHEET: {name} ---"
SHEET_END = "--- END OF SHEET: {name} ---"


def _is_spreadsheet(filename: str, mime_type: str) -> bool:
    return mime_type == XLSX_MIME or Path(filename).suffix.lower() in SPREADSHEET_EXTENSIONS


def _is_csv(filename: str, mime_type: str) -> bool:
    return mime_type == CSV_MIME or Path(filename).suffix.lower() in CSV_EXTENSIONS


def _sync_excel_extraction(file_bytes: bytes, filename: str, request_id: str) -> str:
    """
    Serializes every sheet of an .xlsx workbook as CSV text, in workbook order,
    each block framed by START/END OF SHEET markers.
    """
    logger.debug("[%s] EXCEL_SYNC: Extracting sheets from '%s'", request_id, filename)
    workbook = openpyxl.load_workbook(io.BytesIO(file_bytes), read_only=True, data_only=True)
    blocks: list[str] = []
    try:
        for sheet_name in workbook.sheetnames:
            sheet = workbook[sheet_name]
            buffer = io.StringIO()
            writer = csv.writer(buffer, lineterminator="\n")
            for row in sheet.iter_rows(values_only=True):
                writer.writerow(["" if value is None else value for value in row])
            blocks.append("\n".join([SHEET_START.format(name=sheet_name), buffer.getvalue().rstrip("\n"), SHEET_END.format(name=sheet_name)]))
    finally:
        workbook.close()

    text = "\n\n".join(blocks)
    logger.debug("[%s] EXCEL_SYNC: Extracted %d sheets (%d chars) from '%s'", request_id, len(blocks), len(text), filename)
    return text


def _decode_text(file_bytes: bytes) -> str:
    try:
        return file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError:
        return file_bytes.decode("latin-1")


def _resolve_mime_type(filename: str, declared: str, file_bytes: bytes, request_id: str) -> str:
    """Declared type wins; otherwise sniff the bytes, then fall back to the extension."""
    if declared and declared != GENERIC_MIME:
        return declared
    try:
        sniffed = magic.from_buffer(file_bytes, mime=True)
    except Exception as e:
        logger.warning("[%s] MIME detection failed for '%s': %s", request_id, filename, e)
        sniffed = ""
    if sniffed and sniffed != GENERIC_MIME:
        return sniffed
    return MIME_MAPPING.get(Path(filename).suffix.lower(), GENERIC_MIME)


def _sync_normalize(filename: str, mime_type: str, file_bytes: bytes, request_id: str) -> ContentPart:
    if _is_spreadsheet(filename, mime_type):
        sheets_text = _sync_excel_extraction(file_bytes, filename, request_id)
        return TextPart(value=f'Content of Excel file "{filename}":\n\n{sheets_text}')

    if _is_csv(filename, mime_type):
        return TextPart(value=f'Content of CSV file "{filename}":\n\n{_decode_text(file_bytes)}')

    resolved = _resolve_mime_type(filename, mime_type, file_bytes, request_id)
    logger.debug("[%s] BINARY: Encoding '%s' inline as %s (%d bytes)", request_id, filename, resolved, len(file_bytes))
    return InlineBinaryPart(mime_type=resolved, base64_data=base64.b64encode(file_bytes).decode("ascii"))


async def normalize_file(filename: str, mime_type: str, file_bytes: bytes, request_id: str) -> ContentPart:
    """Convert one source file into exactly one content part.

    Spreadsheets and CSV files become text prefixed with the filename so the
    model can cite them; everything else is sent as inline base64 data.
    """
    logger.info("[%s] NORMALIZE: Starting normalization for '%s' (declared type: %s)", request_id, filename, mime_type or "-")
    if not file_bytes:
        raise FileProcessingError(filename, f"File '{filename}' is empty and cannot be processed.")
    try:
        return await asyncio.to_thread(_sync_normalize, filename, mime_type, file_bytes, request_id)
    except Exception as e:
        logger.error("[%s] NORMALIZE: Failed to process '%s': %s", request_id, filename, str(e), exc_info=True)
        raise FileProcessingError(filename) from e
