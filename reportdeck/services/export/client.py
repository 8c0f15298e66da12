import logging
from typing import Any
from typing import TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError

from reportdeck.core.config import Settings
from reportdeck.core.config import settings as default_settings
from reportdeck.core.exceptions import ApiError
from reportdeck.core.exceptions import ExportServiceError
from reportdeck.services.export.errors import classify_response

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class GammaClient:
    """Thin async client for the presentation export backend.

    Requests are prefixed with the CORS proxy URL and every response is passed
    through ``classify_response``, so callers only ever see parsed JSON (validated against
    ``response_model`` when one is given) or a typed export error.
    """

    def __init__(self, cfg: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.cfg = cfg or default_settings
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(self.cfg.export_connect_timeout, read=self.cfg.export_read_timeout),
            transport=transport,
        )

    def url_for(self, path: str) -> str:
        target = f"{self.cfg.gamma_base_url.rstrip('/')}/{path.lstrip('/')}"
        return f"{self.cfg.cors_proxy_url}{target}"

    def _headers(self) -> dict[str, str]:
        return {"X-API-KEY": self.cfg.require("gamma_api_key"), "Content-Type": "application/json"}

    async def _request(self, method: str, path: str, response_model: type[ModelT] | None = None, **kwargs: Any) -> Any:
        headers = self._headers()
        try:
            response = await self._http.request(method, self.url_for(path), headers=headers, **kwargs)
        except httpx.TransportError as e:
            logger.error("Network error calling export backend %s %s: %s", method, path, e)
            raise ExportServiceError(f"Could not reach the export backend: {e}") from e
        classify_response(
            response,
            marker=self.cfg.proxy_activation_marker,
            activation_url=self.cfg.proxy_activation_url,
        )
        try:
            payload = response.json()
        except ValueError as e:
            logger.error("Export backend returned a non-JSON body for %s %s: %s", method, path, response.text[:200])
            raise ApiError(response.status_code, response.text) from e
        if response_model is None:
            return payload
        try:
            return response_model.model_validate(payload)
        except ValidationError as e:
            logger.error("Unexpected export payload for %s %s: %s", method, path, e)
            raise ApiError(response.status_code, response.text) from e

    async def get(self, path: str, params: dict[str, Any] | None = None, response_model: type[ModelT] | None = None) -> Any:
        return await self._request("GET", path, response_model=response_model, params=params)

    async def post(self, path: str, body: dict[str, Any], response_model: type[ModelT] | None = None) -> Any:
        return await self._request("POST", path, response_model=response_model, json=body)

    async def aclose(self) -> None:
        await self._http.aclose()
