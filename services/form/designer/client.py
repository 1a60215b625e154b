"""HTTP client for the form service's template endpoints."""
from __future__ import annotations

import os
from typing import Any, BinaryIO, Dict, Optional

import requests

FORM_SERVICE_URL = os.environ.get("FORM_SERVICE_URL", "http://localhost:8000")
SERVICE_TIMEOUT = float(os.environ.get("SERVICE_TIMEOUT", "5"))


class TemplateClientError(Exception):
    """Raised when a request to the form service fails or returns garbage."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TemplateClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or FORM_SERVICE_URL).rstrip("/") + "/api/forms/"
        self.timeout = SERVICE_TIMEOUT if timeout is None else timeout
        self.session = session or requests.Session()

    def _request(self, method: str, suffix: str, **kwargs: Any) -> Any:
        url = self.base_url + suffix
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise TemplateClientError(f"Request to {url} failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise TemplateClientError(
                f"{method} {url} returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise TemplateClientError(
                f"{method} {url} returned invalid JSON", status_code=response.status_code
            ) from exc

    def fetch(self, template_id: Any) -> Dict[str, Any]:
        return self._request("GET", f"templates/{template_id}/")

    def save(self, template: Dict[str, Any]) -> Dict[str, Any]:
        """Create the template when it has no id yet, replace it otherwise."""

        template_id = template.get("id")
        if template_id is None:
            return self._request("POST", "templates/", json=template)
        return self._request("PUT", f"templates/{template_id}/", json=template)

    def upload(self, filename: str, fileobj: BinaryIO, content_type: str) -> str:
        """Upload a page background image and return its public URL."""

        payload = self._request(
            "POST", "upload/", files={"file": (filename, fileobj, content_type)}
        )
        try:
            return payload["url"]
        except (KeyError, TypeError) as exc:
            raise TemplateClientError("Upload response did not contain a url") from exc
