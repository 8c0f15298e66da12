"""Generation logic package.

This package groups the helpers that orchestrate one report request (file
normalization, prompt composition, the draft call) and the per-session export
state. Keeping them here allows `reportdeck/api/routes.py` to stay minimal and
focused on HTTP routing while core business logic lives in composable modules.
"""

from .draft_orchestrator import build_report_draft  # noqa: F401
from .file_processing import normalize_files  # noqa: F401
from .file_processing import read_uploads  # noqa: F401
from .session import ReportSession  # noqa: F401
from .session import SessionRegistry  # noqa: F401
