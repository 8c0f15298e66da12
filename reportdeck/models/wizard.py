"""Step state for clients that present report definition as a multi-step form.

The core never stores this value: callers send the current state and get the
validated next one back.
"""

from enum import IntEnum

from pydantic import BaseModel
from pydantic import Field

from reportdeck.models.reference_data import THEMES
from reportdeck.models.reference_data import TONES


class WizardStep(IntEnum):
    DEFINITION = 1
    CONTENT = 2
    GENERATION = 3


class WizardState(BaseModel):
    step: WizardStep = WizardStep.DEFINITION
    client_id: str = ""
    theme: str = ""
    tone: str = ""
    campaign_name: str = ""
    brief: str = ""
    file_names: list[str] = Field(default_factory=list)
    search_enabled: bool = False


class AdvanceRequest(BaseModel):
    state: WizardState
    target: WizardStep


class AdvanceResult(BaseModel):
    state: WizardState
    errors: list[str] = Field(default_factory=list)


def validate_step(state: WizardState, step: WizardStep) -> list[str]:
    """Return the problems that prevent leaving ``step``."""
    errors: list[str] = []
    if step is WizardStep.DEFINITION:
        if not state.client_id:
            errors.append("A client must be selected.")
        if state.theme not in THEMES:
            errors.append("A report theme must be selected.")
        if state.tone not in TONES:
            errors.append("A report tone must be selected.")
    elif step is WizardStep.CONTENT:
        if not state.brief.strip() and not state.file_names:
            errors.append("Provide a briefing or attach at least one file.")
    return errors


def advance(state: WizardState, target: WizardStep) -> AdvanceResult:
    """Move to ``target``. Going back is always allowed; going forward requires
    every step in between to validate."""
    if target <= state.step:
        return AdvanceResult(state=state.model_copy(update={"step": target}))

    for step in WizardStep:
        if state.step <= step < target:
            errors = validate_step(state, step)
            if errors:
                return AdvanceResult(state=state.model_copy(update={"step": step}), errors=errors)
    return AdvanceResult(state=state.model_copy(update={"step": target}))
