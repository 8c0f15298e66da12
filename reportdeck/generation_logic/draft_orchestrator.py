import logging
from uuid import uuid4

from reportdeck.models.reference_data import resolve_client_name
from reportdeck.models.report_models import ReportDraft
from reportdeck.models.report_models import ReportRequest
from reportdeck.models.report_models import SourceFile
from reportdeck.services import llm
from reportdeck.services.prompt_composer import compose_prompt

from .file_processing import normalize_files

__all__ = [
    "build_report_draft",
]

logger = logging.getLogger(__name__)


async def build_report_draft(
    request: ReportRequest,
    files: list[SourceFile],
    request_id: str | None = None,
) -> ReportDraft:
    """Run one report request end to end: normalize files, compose the
    prompts, then issue the single draft generation call.

    FileProcessingError and DraftGenerationFailed propagate to the caller;
    nothing is sent to the backend unless every file normalized.
    """
    request_id = request_id or str(uuid4())
    logger.info(
        "[%s] Building draft for client=%s theme=%s tone=%s files=%d",
        request_id,
        request.client_id,
        request.theme,
        request.tone,
        len(files),
    )

    parts = await normalize_files(files, request_id)
    prompt = compose_prompt(
        theme=request.theme,
        tone=request.tone,
        briefing=request.brief,
        client_name=resolve_client_name(request.client_id),
        file_names=[f.filename for f in files],
        campaign_name=request.campaign_name,
    )
    draft = await llm.generate_draft(
        prompt.system_instruction,
        prompt.user_prompt,
        parts,
        request.search_enabled,
        request_id=request_id,
    )
    logger.info("[%s] Draft ready (%d web / %d maps citations)", request_id, len(draft.web_citations), len(draft.maps_citations))
    return draft
