import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from reportdeck.core.config import settings
from reportdeck.core.exceptions import ConfigurationError
from reportdeck.core.exceptions import DraftGenerationFailed
from reportdeck.core.exceptions import ImageGenerationFailed
from reportdeck.models.report_models import CitationOrigin
from reportdeck.models.report_models import InlineBinaryPart
from reportdeck.models.report_models import TextPart
from reportdeck.services import llm

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fake_client(monkeypatch, response=None, side_effect=None) -> AsyncMock:
    generate = AsyncMock(return_value=response, side_effect=side_effect)
    client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate)))
    monkeypatch.setattr(llm, "get_client", lambda: client)
    return generate


def _response(text: str, chunks=None):
    metadata = SimpleNamespace(grounding_chunks=chunks or [])
    return SimpleNamespace(text=text, candidates=[SimpleNamespace(grounding_metadata=metadata)])


def _web(uri, title):
    return SimpleNamespace(web=SimpleNamespace(uri=uri, title=title), maps=None)


def _maps(uri, title):
    return SimpleNamespace(web=None, maps=SimpleNamespace(uri=uri, title=title))


# ---------------------------------------------------------------------------
# generate_draft
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_generate_draft_returns_text_and_partitioned_citations(monkeypatch):
    chunks = [_web("https://a.example", "A"), _maps("https://maps.example/1", "Store"), _web("https://b.example", "B")]
    generate = _fake_client(monkeypatch, _response("  # Report\nBody  ", chunks))

    draft = await llm.generate_draft("sys", "user", [TextPart(value="csv text")], search_enabled=False)

    assert draft.text == "# Report\nBody"
    assert [c.uri for c in draft.web_citations] == ["https://a.example", "https://b.example"]
    assert [c.title for c in draft.maps_citations] == ["Store"]
    assert draft.maps_citations[0].origin is CitationOrigin.MAPS
    generate.assert_awaited_once()


@pytest.mark.asyncio
async def test_generate_draft_uses_deep_model_and_thinking_budget(monkeypatch):
    generate = _fake_client(monkeypatch, _response("ok"))

    await llm.generate_draft("system text", "user text", [], search_enabled=False)

    kwargs = generate.await_args.kwargs
    assert kwargs["model"] == settings.draft_model_id
    config = kwargs["config"]
    assert config.system_instruction == "system text"
    assert config.thinking_config.thinking_budget == settings.draft_thinking_budget
    assert not config.tools


@pytest.mark.asyncio
async def test_generate_draft_attaches_search_tool_when_enabled(monkeypatch):
    generate = _fake_client(monkeypatch, _response("ok"))

    await llm.generate_draft("s", "u", [], search_enabled=True)

    tools = generate.await_args.kwargs["config"].tools
    assert len(tools) == 1
    assert tools[0].google_search is not None


@pytest.mark.asyncio
async def test_generate_draft_sends_prompt_then_parts_in_order(monkeypatch):
    generate = _fake_client(monkeypatch, _response("ok"))
    raw = b"\x89PNG"
    parts = [TextPart(value="first"), InlineBinaryPart(mime_type="image/png", base64_data=base64.b64encode(raw).decode())]

    await llm.generate_draft("s", "the prompt", parts, search_enabled=False)

    contents = generate.await_args.kwargs["contents"]
    assert [c.text for c in contents[:2]] == ["the prompt", "first"]
    assert contents[2].inline_data.data == raw
    assert contents[2].inline_data.mime_type == "image/png"


@pytest.mark.asyncio
async def test_generate_draft_wraps_backend_errors(monkeypatch):
    _fake_client(monkeypatch, side_effect=RuntimeError("503 overloaded"))

    with pytest.raises(DraftGenerationFailed) as exc:
        await llm.generate_draft("s", "u", [], search_enabled=False)
    assert "503 overloaded" in exc.value.detail
    assert "503" not in str(exc.value)


@pytest.mark.asyncio
async def test_generate_draft_empty_text_fails(monkeypatch):
    _fake_client(monkeypatch, _response("   "))

    with pytest.raises(DraftGenerationFailed):
        await llm.generate_draft("s", "u", [], search_enabled=False)


@pytest.mark.asyncio
async def test_missing_credential_is_a_configuration_error(monkeypatch):
    monkeypatch.setattr(llm, "_client", None)
    monkeypatch.setattr(settings, "gemini_api_key", None, raising=False)

    with pytest.raises(ConfigurationError):
        await llm.generate_draft("s", "u", [], search_enabled=False)


# ---------------------------------------------------------------------------
# extract_citations
# ---------------------------------------------------------------------------


def test_extract_citations_without_metadata():
    response = SimpleNamespace(candidates=[SimpleNamespace(grounding_metadata=None)])
    assert llm.extract_citations(response) == []


def test_extract_citations_skips_chunks_without_uri():
    response = _response("t", [_web(None, "no link"), _web("https://ok.example", None)])

    citations = llm.extract_citations(response)

    assert len(citations) == 1
    assert citations[0].title == ""


# ---------------------------------------------------------------------------
# generate_short_text / generate_image_from_text
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_generate_short_text_uses_fast_model(monkeypatch):
    generate = _fake_client(monkeypatch, SimpleNamespace(text="A fox"))

    result = await llm.generate_short_text("prompt", temperature=0.7, max_output_tokens=30)

    assert result == "A fox"
    kwargs = generate.await_args.kwargs
    assert kwargs["model"] == settings.fast_model_id
    assert kwargs["config"].temperature == 0.7
    assert kwargs["config"].max_output_tokens == 30


@pytest.mark.asyncio
async def test_generate_short_text_logs_request_id(monkeypatch, app_logs):
    _fake_client(monkeypatch, SimpleNamespace(text="A fox"))

    with app_logs.at_level("INFO"):
        await llm.generate_short_text("prompt", temperature=0.2, max_output_tokens=10, request_id="req-9")

    assert "[req-9]" in app_logs.text
    assert settings.fast_model_id in app_logs.text


@pytest.mark.asyncio
async def test_generate_image_returns_data_url(monkeypatch):
    image_part = SimpleNamespace(inline_data=SimpleNamespace(data=b"PNGDATA"))
    text_part = SimpleNamespace(inline_data=None)
    response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[text_part, image_part]))])
    _fake_client(monkeypatch, response)

    url = await llm.generate_image_from_text("a cover")

    assert url == "data:image/png;base64," + base64.b64encode(b"PNGDATA").decode()


@pytest.mark.asyncio
async def test_generate_image_without_image_fails(monkeypatch):
    _fake_client(monkeypatch, SimpleNamespace(candidates=[]))

    with pytest.raises(ImageGenerationFailed):
        await llm.generate_image_from_text("a cover")
