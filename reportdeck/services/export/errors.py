"""Maps export-backend responses to the shared error taxonomy.

Every export call goes through the CORS-bridging intermediary, which may answer
in place of the real backend. Its "activation required" answer is a 403 whose
body carries a known marker; that case gets its own error so callers can offer
the activation link instead of a dead end.
"""

import logging

import httpx

from reportdeck.core.config import settings
from reportdeck.core.exceptions import ApiError
from reportdeck.core.exceptions import ProxyAccessRequired

logger = logging.getLogger(__name__)


def classify_response(
    response: httpx.Response,
    marker: str | None = None,
    activation_url: str | None = None,
) -> httpx.Response:
    """Return ``response`` untouched on success, raise the matching error otherwise.

    The body of a failed response is treated as opaque text.
    """
    if response.is_success:
        return response

    marker = (marker if marker is not None else settings.proxy_activation_marker).lower()
    body = response.text
    if response.status_code == 403 and marker and marker in body.lower():
        logger.warning("Export request blocked: the CORS proxy requires activation.")
        raise ProxyAccessRequired(activation_url if activation_url is not None else settings.proxy_activation_url)

    logger.error("Export API returned %d: %s", response.status_code, body[:500])
    raise ApiError(response.status_code, body)
