from __future__ import annotations

import asyncio
import logging

from reportdeck.core.exceptions import SuggestionFailed
from reportdeck.models.report_models import SuggestionPair
from reportdeck.services import llm
from reportdeck.services.prompt_composer import render_template

logger = logging.getLogger(__name__)

IMAGE_PROMPT_TEMPERATURE = 0.8
IMAGE_PROMPT_MAX_TOKENS = 50
IMAGE_STYLE_TEMPERATURE = 0.7
IMAGE_STYLE_MAX_TOKENS = 30


def _clean(text: str) -> str:
    return text.strip().replace('"', "")


class SuggestionService:
    """Derives an image prompt and an image style from a finished draft.

    Both calls are best-effort: they run concurrently, and a failing call
    yields an empty string instead of an error.
    """

    async def _suggest(self, kind: str, template_name: str, draft_text: str, temperature: float, max_tokens: int, request_id: str) -> str:
        try:
            prompt = render_template(template_name, report=draft_text)
            return _clean(await llm.generate_short_text(prompt, temperature, max_tokens, request_id=request_id))
        except Exception as e:
            raise SuggestionFailed(f"{kind} suggestion failed: {e}") from e

    async def suggest_image_prompt(self, draft_text: str, request_id: str = "-") -> str:
        return await self._suggest(
            "Image prompt",
            "image_prompt_suggestion.jinja2",
            draft_text,
            IMAGE_PROMPT_TEMPERATURE,
            IMAGE_PROMPT_MAX_TOKENS,
            request_id,
        )

    async def suggest_image_style(self, draft_text: str, request_id: str = "-") -> str:
        return await self._suggest(
            "Image style",
            "image_style_suggestion.jinja2",
            draft_text,
            IMAGE_STYLE_TEMPERATURE,
            IMAGE_STYLE_MAX_TOKENS,
            request_id,
        )

    async def suggest(self, draft_text: str, request_id: str = "-") -> SuggestionPair:
        logger.info("[%s] Generating suggestions for prompts", request_id)
        prompt_task = asyncio.create_task(self.suggest_image_prompt(draft_text, request_id))
        style_task = asyncio.create_task(self.suggest_image_style(draft_text, request_id))
        results = await asyncio.gather(prompt_task, style_task, return_exceptions=True)

        values: list[str] = []
        for result in results:
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.warning("[%s] %s", request_id, result)
                values.append("")
            else:
                values.append(result)

        pair = SuggestionPair(image_prompt=values[0], image_style=values[1])
        logger.info("[%s] Suggestions generated: %s", request_id, pair.model_dump())
        return pair
