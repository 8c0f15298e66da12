from enum import Enum
from typing import Annotated
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from reportdeck.models.reference_data import TONES


class TextPart(BaseModel):
    """Inline text sent to the generation backend."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: str


class InlineBinaryPart(BaseModel):
    """Base64-encoded file content sent to the generation backend with its MIME type."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["inline_binary"] = "inline_binary"
    mime_type: str
    base64_data: str


ContentPart = Annotated[TextPart | InlineBinaryPart, Field(discriminator="kind")]


class SourceFile(BaseModel):
    """One user-supplied file as received, before normalization."""

    model_config = ConfigDict(frozen=True)

    filename: str
    mime_type: str = ""
    data: bytes


class ReportRequest(BaseModel):
    """Everything the user chose when defining a report."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    theme: str
    tone: str
    brief: str
    campaign_name: str | None = None
    search_enabled: bool = False

    @field_validator("tone")
    @classmethod
    def tone_must_be_known(cls, v: str) -> str:
        if v not in TONES:
            raise ValueError(f"Unknown tone '{v}'. Allowed tones: {', '.join(TONES)}")
        return v


class CitationOrigin(str, Enum):
    WEB = "web"
    MAPS = "maps"


class Citation(BaseModel):
    """A grounding source the generation backend reports having consulted."""

    uri: str
    title: str = ""
    origin: CitationOrigin = CitationOrigin.WEB


class ReportDraft(BaseModel):
    """Markdown draft produced by one successful generation call."""

    text: str
    citations: list[Citation] = Field(default_factory=list)

    @property
    def web_citations(self) -> list[Citation]:
        return [c for c in self.citations if c.origin is CitationOrigin.WEB]

    @property
    def maps_citations(self) -> list[Citation]:
        return [c for c in self.citations if c.origin is CitationOrigin.MAPS]


class SuggestionPair(BaseModel):
    """Optional creative hints derived from a draft. Empty strings mean "no suggestion"."""

    image_prompt: str = ""
    image_style: str = ""


class CatalogEntry(BaseModel):
    """A presentation theme offered by the export backend."""

    id: str
    name: str


class ExportStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not ExportStatus.PENDING


class ExportJob(BaseModel):
    """State of the export job owned by one ExportJobManager."""

    job_id: str
    status: ExportStatus = ExportStatus.PENDING
    result_url: str | None = None
    error_message: str | None = None
    attempt_count: int = 0


# --- API payloads ---------------------------------------------------------


class SuggestionPayload(BaseModel):
    draft_text: str = Field(..., min_length=1)


class ImagePayload(BaseModel):
    draft_text: str = Field(..., min_length=1)
    prompt: str | None = Field(default=None, description="Explicit image prompt; derived from the draft when omitted.")


class ExportPayload(BaseModel):
    draft_text: str = Field(..., min_length=1)
    theme_id: str = Field(..., min_length=1)
    image_style: str | None = None
