"""Response bodies of the export backend.

Only the fields this service reads are declared; anything else in a payload
is ignored. A 2xx body that does not match is treated as an API error by
``GammaClient``.
"""

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from reportdeck.models.report_models import CatalogEntry


class ThemePage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: list[CatalogEntry] | None = None
    has_more: bool = Field(default=False, alias="hasMore")
    next_cursor: str | None = Field(default=None, alias="nextCursor")


class GenerationAccepted(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    generation_id: str = Field(..., min_length=1, alias="generationId")
    status: str | None = None


class GenerationState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str | None = None
    pptx_url: str | None = Field(default=None, alias="pptxUrl")
    error: str | None = None
