import logging
from uuid import uuid4

from fastapi import APIRouter
from fastapi import File
from fastapi import Form
from fastapi import Header
from fastapi import HTTPException
from fastapi import UploadFile
from fastapi import status
from pydantic import ValidationError

from reportdeck.core.security import Depends
from reportdeck.core.security import verify_api_key
from reportdeck.generation_logic import ReportSession
from reportdeck.generation_logic import SessionRegistry
from reportdeck.generation_logic import build_report_draft
from reportdeck.generation_logic import read_uploads
from reportdeck.models.reference_data import CLIENT_GROUPS
from reportdeck.models.reference_data import DEFAULT_TONE
from reportdeck.models.reference_data import IMAGE_STYLE_PRESETS
from reportdeck.models.reference_data import THEMES
from reportdeck.models.reference_data import TONES
from reportdeck.models.report_models import CatalogEntry
from reportdeck.models.report_models import ExportJob
from reportdeck.models.report_models import ExportPayload
from reportdeck.models.report_models import ImagePayload
from reportdeck.models.report_models import ReportDraft
from reportdeck.models.report_models import ReportRequest
from reportdeck.models.report_models import SuggestionPair
from reportdeck.models.report_models import SuggestionPayload
from reportdeck.models.wizard import AdvanceRequest
from reportdeck.models.wizard import AdvanceResult
from reportdeck.models.wizard import advance
from reportdeck.services import llm
from reportdeck.services.prompt_composer import cover_image_prompt
from reportdeck.services.suggestion_service import SuggestionService

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", dependencies=[Depends(verify_api_key)])

sessions = SessionRegistry()
suggestion_service = SuggestionService()


async def get_session(x_session_id: str | None = Header(default=None)) -> ReportSession:
    """Resolve the caller's report session from the optional X-Session-Id header."""
    return await sessions.get(x_session_id)


# NOTE: Heavy lifting lives in `reportdeck.generation_logic` and
# `reportdeck.services`; this file only maps HTTP onto those calls.


@router.get("/options", tags=["Report"])
async def list_options() -> dict:
    """Closed sets the client can offer when defining a report."""
    return {
        "client_groups": CLIENT_GROUPS,
        "themes": THEMES,
        "tones": TONES,
        "default_tone": DEFAULT_TONE,
        "image_style_presets": IMAGE_STYLE_PRESETS,
    }


@router.post("/wizard/advance", tags=["Report"])
async def advance_wizard(payload: AdvanceRequest) -> AdvanceResult:
    return advance(payload.state, payload.target)


@router.post("/drafts", tags=["Report"])
async def create_draft(
    client_id: str = Form(...),
    theme: str = Form(...),
    tone: str = Form(DEFAULT_TONE),
    brief: str = Form(""),
    campaign_name: str | None = Form(None),
    search_enabled: bool = Form(False),
    files: list[UploadFile] = File(default=[]),
    session: ReportSession = Depends(get_session),
) -> ReportDraft:
    """
    Generates a report draft from the briefing and the attached files.

    Starting a draft begins a new report session: the cached presentation
    theme catalog is dropped and any export still being followed is abandoned.
    """
    request_id = str(uuid4())
    logger.info("[%s] /drafts called for client %s with %d files", request_id, client_id, len(files))

    try:
        report_request = ReportRequest(
            client_id=client_id,
            theme=theme,
            tone=tone,
            brief=brief,
            campaign_name=campaign_name or None,
            search_enabled=search_enabled,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.errors(include_url=False, include_context=False)) from e

    await session.reset()
    source_files = await read_uploads(files, request_id)
    return await build_report_draft(report_request, source_files, request_id=request_id)


@router.post("/suggestions", tags=["Report"])
async def create_suggestions(payload: SuggestionPayload) -> SuggestionPair:
    """Best-effort image prompt and style hints; never fails because of the backend."""
    return await suggestion_service.suggest(payload.draft_text, request_id=str(uuid4()))


@router.post("/images", tags=["Report"])
async def create_cover_image(payload: ImagePayload) -> dict[str, str]:
    image_url = await llm.generate_image_from_text(cover_image_prompt(payload.draft_text, payload.prompt))
    return {"image_url": image_url}


@router.get("/themes", tags=["Export"])
async def list_presentation_themes(session: ReportSession = Depends(get_session)) -> list[CatalogEntry]:
    return await session.catalog.fetch_all()


@router.delete("/themes/cache", status_code=status.HTTP_204_NO_CONTENT, tags=["Export"])
async def reset_presentation_themes(session: ReportSession = Depends(get_session)) -> None:
    session.catalog.reset()


@router.post("/exports", status_code=status.HTTP_202_ACCEPTED, tags=["Export"])
async def start_export(payload: ExportPayload, session: ReportSession = Depends(get_session)) -> ExportJob:
    """Submits the draft for PPTX export. Poll `/exports/current` for the outcome."""
    return await session.exports.submit(payload.draft_text, payload.theme_id, payload.image_style)


@router.get("/exports/current", tags=["Export"])
async def current_export(session: ReportSession = Depends(get_session)) -> ExportJob:
    job = session.exports.job
    if job is None:
        raise HTTPException(status_code=404, detail="No export has been started in this session.")
    return job


@router.post("/exports/wait", tags=["Export"])
async def export_and_wait(payload: ExportPayload, session: ReportSession = Depends(get_session)) -> dict[str, str]:
    """Submits the draft and blocks until the PPTX is ready, failed or timed out."""
    pptx_url = await session.exports.export(payload.draft_text, payload.theme_id, payload.image_style)
    return {"pptx_url": pptx_url}
