"""HTTP client for the wardrobe gateway.

Every call goes through :meth:`WardrobeApiClient._request`, which attaches the
bearer credential, maps transport and status failures onto
:mod:`models.errors` and decodes JSON. Record shapes coming back from the
gateway are normalised with :func:`models.clothing_item.from_remote_record`
so callers only ever see :class:`ClothingItem`.
"""

from __future__ import annotations

import base64
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import requests

from models.clothing_item import ClothingDraft, ClothingItem, ItemAnalysis, from_remote_record
from models.errors import AuthError, RemoteError, ServiceUnavailable, TransportError, ValidationError
from tools.observability import instrument_call

logger = logging.getLogger(__name__)


@dataclass
class SessionCredentials:
    """Holds the bearer token of the signed-in user, if any."""

    access_token: Optional[str] = None

    def auth_header(self) -> Dict[str, str]:
        if not self.access_token:
            raise AuthError("Not authenticated")
        return {"Authorization": f"Bearer {self.access_token}"}

    def sign_out(self) -> None:
        self.access_token = None


def _error_message(response: requests.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or fallback)
    return fallback


class WardrobeApiClient:
    """Typed access to ``/items``, ``/analyze`` and ``/health``."""

    def __init__(
        self,
        base_url: str,
        credentials: Optional[SessionCredentials] = None,
        timeout: Optional[float] = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials or SessionCredentials()
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(
        self,
        method: str,
        path: str,
        *,
        authenticated: bool = True,
        json_body: Optional[Dict[str, Any]] = None,
        failure: str,
    ) -> requests.Response:
        headers = {"Content-Type": "application/json"}
        if authenticated:
            headers.update(self.credentials.auth_header())

        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, headers=headers, json=json_body, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Gateway unreachable", extra={"url": url, "error": str(exc)})
            raise TransportError(f"Network error calling {path}: {exc}") from exc

        if response.status_code == 401:
            raise AuthError(_error_message(response, "Unauthorized"))
        if not 200 <= response.status_code < 300:
            raise RemoteError(_error_message(response, failure), status_code=response.status_code)
        return response

    @staticmethod
    def _json(response: requests.Response, failure: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteError(f"{failure}: response was not JSON", status_code=response.status_code) from exc

    @instrument_call("fetch_wardrobe")
    def fetch_all(self) -> List[ClothingItem]:
        """Return the signed-in user's whole collection."""

        failure = "Failed to fetch wardrobe"
        response = self._request("GET", "/items", failure=failure)
        records = self._json(response, failure)
        if not isinstance(records, list):
            raise RemoteError(f"{failure}: expected a list", status_code=response.status_code)

        items: List[ClothingItem] = []
        for record in records:
            try:
                items.append(from_remote_record(record))
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping malformed wardrobe record", extra={"error": str(exc)})
        return items

    @instrument_call("create_wardrobe_item")
    def create(self, draft: ClothingDraft) -> ClothingItem:
        """Persist a draft and return the server's canonical item."""

        failure = "Failed to add item"
        response = self._request("POST", "/items", json_body=draft.to_payload(), failure=failure)
        record = self._json(response, failure)
        try:
            return from_remote_record(record)
        except (TypeError, ValueError) as exc:
            raise RemoteError(f"{failure}: {exc}", status_code=response.status_code) from exc

    @instrument_call("delete_wardrobe_item")
    def delete(self, item_id: str | int) -> Dict[str, Any]:
        failure = "Failed to delete item"
        response = self._request("DELETE", f"/items/{item_id}", failure=failure)
        return self._json(response, failure)

    @instrument_call("analyze_image")
    def analyze(self, image_base64: str, mime_type: str) -> ItemAnalysis:
        """Classify a garment photo through the gateway.

        This call carries no credential. A gateway without an advisory key
        answers with a server error, surfaced as :class:`ServiceUnavailable`
        so callers can fall back to another classification path.
        """

        failure = "Failed to analyze image"
        try:
            response = self._request(
                "POST",
                "/analyze",
                authenticated=False,
                json_body={"imageBase64": image_base64, "mimetype": mime_type},
                failure=failure,
            )
        except RemoteError as exc:
            if exc.status_code == 400:
                raise ValidationError(exc.message) from exc
            if exc.status_code and exc.status_code >= 500:
                raise ServiceUnavailable(exc.message) from exc
            raise

        payload = self._json(response, failure)
        try:
            return ItemAnalysis.from_payload(payload)
        except (TypeError, ValueError) as exc:
            raise ServiceUnavailable(f"{failure}: {exc}") from exc

    def health(self) -> bool:
        try:
            response = self._request("GET", "/health", authenticated=False, failure="Health check failed")
            body = self._json(response, "Health check failed")
        except (TransportError, RemoteError):
            return False
        return isinstance(body, dict) and body.get("status") == "ok"


def guess_mime_type(path: str | Path) -> str:
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type or "image/jpeg"


def encode_image_file(path: str | Path) -> Tuple[str, str]:
    """Read an image file and return its base64 payload and mime type."""

    data = Path(path).read_bytes()
    return base64.b64encode(data).decode("ascii"), guess_mime_type(path)


__all__ = [
    "SessionCredentials",
    "WardrobeApiClient",
    "encode_image_file",
    "guess_mime_type",
]
