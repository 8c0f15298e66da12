import base64
import logging
from typing import Any
from uuid import uuid4

from google import genai
from google.genai import types

from reportdeck.core.config import settings
from reportdeck.core.exceptions import DraftGenerationFailed
from reportdeck.core.exceptions import ImageGenerationFailed
from reportdeck.models.report_models import Citation
from reportdeck.models.report_models import CitationOrigin
from reportdeck.models.report_models import ContentPart
from reportdeck.models.report_models import InlineBinaryPart
from reportdeck.models.report_models import ReportDraft
from reportdeck.models.report_models import TextPart

# Configure module logger
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------
# Gemini client, created on first use so a missing key only
# disables the features that need it
# ---------------------------------------------------------------
_client: genai.Client | None = None


def get_client() -> genai.Client:
    global _client
    if _client is None:
        _client = genai.Client(api_key=settings.require("gemini_api_key"))
    return _client


def to_genai_part(part: ContentPart) -> types.Part:
    """Convert a normalized content part into the SDK's part type."""
    if isinstance(part, TextPart):
        return types.Part.from_text(text=part.value)
    if isinstance(part, InlineBinaryPart):
        return types.Part.from_bytes(data=base64.b64decode(part.base64_data), mime_type=part.mime_type)
    raise TypeError(f"Unsupported content part: {type(part).__name__}")


def extract_citations(response: Any) -> list[Citation]:
    """Lift the grounding chunks of the first candidate into citations, in order."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    citations: list[Citation] = []
    for chunk in chunks:
        for origin in CitationOrigin:
            source = getattr(chunk, origin.value, None)
            if source is not None and getattr(source, "uri", None):
                citations.append(Citation(uri=source.uri, title=getattr(source, "title", None) or "", origin=origin))
    return citations


# ---------------------------------------------------------------
# Draft generation
# ---------------------------------------------------------------
async def generate_draft(
    system_instruction: str,
    user_prompt: str,
    parts: list[ContentPart],
    search_enabled: bool,
    request_id: str | None = None,
) -> ReportDraft:
    """Issue the deep-analysis generation call and return the draft with its citations.

    Transport and backend failures surface as DraftGenerationFailed; there is
    no partial draft to recover. A missing credential raises ConfigurationError.
    """
    request_id = request_id or str(uuid4())
    logger.info(
        "[%s] Making draft call with model: %s (parts=%d, search=%s)",
        request_id,
        settings.draft_model_id,
        len(parts),
        search_enabled,
    )

    config_params: dict[str, Any] = {
        "system_instruction": system_instruction,
        "thinking_config": types.ThinkingConfig(thinking_budget=settings.draft_thinking_budget),
    }
    if search_enabled:
        config_params["tools"] = [types.Tool(google_search=types.GoogleSearch())]

    client = get_client()
    try:
        contents = [types.Part.from_text(text=user_prompt), *(to_genai_part(p) for p in parts)]
        response = await client.aio.models.generate_content(
            model=settings.draft_model_id,
            contents=contents,
            config=types.GenerateContentConfig(**config_params),
        )
    except Exception as e:
        logger.error("[%s] Error generating report draft: %s", request_id, str(e), exc_info=True)
        raise DraftGenerationFailed(str(e)) from e

    text = (response.text or "").strip() if response is not None else ""
    if not text:
        logger.error("[%s] Draft response contained no text: %s", request_id, str(response)[:500])
        raise DraftGenerationFailed("Empty response from the generation backend.")

    citations = extract_citations(response)
    logger.info("[%s] Draft received: %d chars, %d citations", request_id, len(text), len(citations))
    return ReportDraft(text=text, citations=citations)


# ---------------------------------------------------------------
# Short completions (suggestions)
# ---------------------------------------------------------------
async def generate_short_text(prompt: str, temperature: float, max_output_tokens: int, request_id: str | None = None) -> str:
    """Low-temperature, length-capped call on the fast model."""
    request_id = request_id or str(uuid4())
    logger.info("[%s] Making short call with model: %s (max_tokens=%d)", request_id, settings.fast_model_id, max_output_tokens)
    client = get_client()
    response = await client.aio.models.generate_content(
        model=settings.fast_model_id,
        contents=prompt,
        config=types.GenerateContentConfig(temperature=temperature, max_output_tokens=max_output_tokens),
    )
    return response.text or ""


# ---------------------------------------------------------------
# Cover image
# ---------------------------------------------------------------
async def generate_image_from_text(prompt: str, request_id: str | None = None) -> str:
    """Render an image from a text prompt and return it as a PNG data URL."""
    request_id = request_id or str(uuid4())
    logger.info("[%s] Making image call with model: %s", request_id, settings.image_model_id)
    client = get_client()
    try:
        response = await client.aio.models.generate_content(
            model=settings.image_model_id,
            contents=prompt,
            config=types.GenerateContentConfig(response_modalities=["IMAGE"]),
        )
    except Exception as e:
        logger.error("[%s] Error generating image: %s", request_id, str(e), exc_info=True)
        raise ImageGenerationFailed("Failed to generate the image. Please try again.") from e

    candidates = response.candidates or []
    content = candidates[0].content if candidates else None
    for part in (content.parts if content and content.parts else []):
        if part.inline_data and part.inline_data.data:
            encoded = base64.b64encode(part.inline_data.data).decode("ascii")
            return f"data:image/png;base64,{encoded}"

    logger.error("[%s] No image was returned in the response.", request_id)
    raise ImageGenerationFailed("No image was generated in the response.")
