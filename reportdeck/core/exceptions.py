"""Core custom exceptions for the application."""


class PipelineError(Exception):
    """Base exception for pipeline-related errors."""


class ConfigurationError(PipelineError):
    """Exception for configuration-related errors (e.g., a missing API credential)."""


class FileProcessingError(PipelineError):
    """Raised when an input file cannot be read or parsed."""

    def __init__(self, filename: str, message: str | None = None):
        self.filename = filename
        super().__init__(message or f"Could not process file '{filename}'.")


class DraftGenerationFailed(PipelineError):
    """Raised when the generation backend does not produce a draft.

    ``detail`` keeps the underlying cause for the logs; it is not meant for end users.
    """

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__("Failed to generate the report draft. Please try again.")


class ImageGenerationFailed(PipelineError):
    """Raised when the image model returns no image."""


class SuggestionFailed(PipelineError):
    """Raised by a single suggestion call; always absorbed by the suggestion engine."""


class ExportServiceError(PipelineError):
    """Base exception for errors coming from the presentation export boundary."""


class ProxyAccessRequired(ExportServiceError):
    """The CORS-bridging intermediary requires a one-time manual activation."""

    def __init__(self, activation_url: str = ""):
        self.activation_url = activation_url
        super().__init__("Proxy access required. Please activate it and try again.")


class ApiError(ExportServiceError):
    """Non-success response from the export backend. The body is kept as opaque text."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"Export API error: {status} {body}")


class ExportFailed(ExportServiceError):
    """The export backend reported that the job failed."""

    def __init__(self, detail: str | None = None):
        self.detail = detail or "Unknown error"
        super().__init__(f"The export backend failed to generate the presentation: {self.detail}")


class ExportTimedOut(ExportServiceError):
    """The job did not reach a terminal state within the poll ceiling."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__("Presentation export took too long. Please try again later.")


class ExportCancelled(ExportServiceError):
    """The job being awaited was superseded by a newer export or cancelled."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Export {job_id} was cancelled before it finished.")


class UploadLimitExceeded(PipelineError):
    """Raised when the attached files exceed the count or size limits."""
