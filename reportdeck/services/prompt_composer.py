"""Builds the instruction payload for the report draft.

Composition is pure: no network, no file I/O beyond loading the bundled
Jinja2 templates, and the same inputs always give the same prompts.
"""

import logging
import pathlib
from typing import Any
from typing import NamedTuple

import jinja2

logger = logging.getLogger(__name__)

PROMPT_DIR = pathlib.Path(__file__).parent / "prompt_templates"
env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(PROMPT_DIR),
    undefined=jinja2.StrictUndefined,
    autoescape=False,
)

FALLBACK_THEME_BRIEF = "Analyse the data provided and produce a concise, strategic report."

THEME_BRIEFS: dict[str, str] = {
    "Growth Strategy": """
**Report Focus: Growth Strategy**
The goal is to identify the main growth levers. Analyse the data to find:
- Best-performing channels (ROI, CPA, etc.) and their optimization potential.
- Audience segments with the highest engagement or conversion.
- Untapped market opportunities based on the data and web context.
- Competitive analysis, when there is data for it.
Structure the "Implications and Opportunities" section with clear recommendations to drive growth.""",
    "Brand Awareness": """
**Report Focus: Brand Awareness**
The goal is to measure and understand brand visibility and perception. Analyse the data to find:
- Evolution of Share of Voice, reach and impressions.
- Sentiment analysis and brand mentions (when social listening data exists).
- Performance of top-of-funnel campaigns (views, clicks, etc.).
- Insights on how the audience perceives the brand.
Highlight in the "Strategic Summary" the main KPIs that show the brand's health in the period.""",
    "Market Analysis": """
**Report Focus: Market Analysis**
The goal is to give an overview of the market and the client's position. Analyse the data to:
- Map the main competitors and their performance.
- Identify consumption trends and consumer behaviour (TGI data, when available).
- Assess market share and positioning opportunities.
- Use web search (when enabled) to contextualize the data with recent news and sector moves.
The conclusion must present a clear diagnosis of the client's competitive position.""",
    "Media Planning": """
**Report Focus: Media Planning**
The goal is to analyse data to inform a future media plan. Look for:
- Historical performance of different channels and formats.
- Audience insights (TGI, etc.) to guide channel selection.
- Seasonality and interest peaks (Google Trends, when applicable).
- Channel mix and budget recommendations based on the data.
The "Implications and Opportunities" section must be a tactical pre-plan.""",
    "Social Media Analysis": """
**Report Focus: Social Media Analysis**
The goal is to evaluate the performance and impact of social networks. Analyse:
- Engagement metrics (likes, comments, shares) per platform.
- Follower base growth.
- Content analysis: which formats and topics perform best?
- Sentiment analysis and main conversation topics.
- Social ads campaign performance (when data exists).""",
    "Performance Report (Post-Campaign)": """
**Report Focus: Campaign Performance**
The goal is a detailed analysis of the results of a finished campaign. Focus on:
- Comparing results with the KPIs and targets set in the briefing.
- Analysing the conversion funnel (impressions, clicks, leads, sales).
- Computing key metrics such as CPA, CPL, ROAS (when data is available).
- Identifying the main learnings and the optimizations made.
The "Strategic Summary" must answer clearly: "Did the campaign reach its goals?\"""",
    "Branding & Positioning": """
**Report Focus: Branding & Positioning**
The goal is to analyse how the brand is being perceived. Analyse:
- Brand Lift, Health Tracking and brand survey data.
- Media mentions and sentiment analysis.
- Communication territories associated with the brand.
- Perception benchmarks against competitors.
The report must close with a diagnosis of the brand's current strength and positioning.""",
    "Competitor Analysis": """
**Report Focus: Competitor Analysis**
The goal is to monitor and analyse competitors' actions. Look for:
- Examples of competitors' campaigns and creative pieces.
- Media investment estimates (when data exists).
- Share of Voice and Share of Mind.
- Positioning and communication territories of the competitors.
The "Implications and Opportunities" section must focus on how the client can differentiate or react.""",
}


class ComposedPrompt(NamedTuple):
    system_instruction: str
    user_prompt: str


def render_template(template_name: str, **context: Any) -> str:
    """Render one of the bundled prompt templates."""
    return env.get_template(template_name).render(**context)


def theme_brief(theme: str) -> str:
    """Analytical brief for a theme; unknown themes get the generic brief."""
    brief = THEME_BRIEFS.get(theme)
    if brief is None:
        logger.debug("No specific brief for theme '%s', using the generic one.", theme)
        return FALLBACK_THEME_BRIEF
    return brief


def compose_prompt(
    theme: str,
    tone: str,
    briefing: str,
    client_name: str,
    file_names: list[str],
    campaign_name: str | None = None,
) -> ComposedPrompt:
    """Merge persona, theme, tone and briefing into the draft instructions.

    The file names are listed for the model's own bookkeeping; the file
    contents travel separately as content parts.
    """
    system_instruction = render_template("system_instruction.jinja2", tone=tone)
    user_prompt = render_template(
        "user_prompt.jinja2",
        theme_brief=theme_brief(theme),
        client_name=client_name,
        campaign_name=campaign_name or "Not specified",
        brief=briefing,
        file_names=", ".join(file_names) if file_names else "None",
    )
    return ComposedPrompt(system_instruction=system_instruction, user_prompt=user_prompt)


def cover_image_prompt(draft_text: str, prompt: str | None = None) -> str:
    """Prompt for the cover image; derived from the draft unless one is given."""
    return render_template("cover_image.jinja2", prompt=(prompt or "").strip(), report=draft_text)
