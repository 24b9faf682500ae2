"""Gateway client tests against a scripted requests session."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List

import pytest
import requests

from models.clothing_item import ClothingDraft
from models.errors import AuthError, RemoteError, ServiceUnavailable, TransportError, ValidationError
from tools.wardrobe_api import SessionCredentials, WardrobeApiClient, encode_image_file, guess_mime_type

_NO_JSON = object()


class FakeResponse:
    def __init__(self, status_code: int, body: Any = _NO_JSON) -> None:
        self.status_code = status_code
        self._body = body

    def json(self) -> Any:
        if self._body is _NO_JSON:
            raise ValueError("no JSON body")
        return self._body


class FakeSession:
    """Replays queued responses and records every request."""

    def __init__(self, *responses: Any) -> None:
        self.responses: List[Any] = list(responses)
        self.requests: List[dict] = []

    def request(self, method, url, headers=None, json=None, timeout=None):
        self.requests.append({"method": method, "url": url, "headers": headers, "json": json, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _client(session: FakeSession, token: str | None = "token-abc") -> WardrobeApiClient:
    return WardrobeApiClient("http://gateway.test/", SessionCredentials(token), timeout=5.0, session=session)


def test_fetch_all_normalises_records_and_sends_bearer() -> None:
    session = FakeSession(
        FakeResponse(
            200,
            [
                {
                    "id": 3,
                    "imageurl": "http://gateway.test/images/3.png",
                    "mimetype": "image/png",
                    "category": "dress",
                    "color": "Green",
                    "pattern": "floral",
                    "style": "bohemian",
                    "season": "summer",
                    "description": "Floral Maxi Dress",
                },
                {"category": "tops"},
            ],
        )
    )

    items = _client(session).fetch_all()

    assert [item.id for item in items] == ["3"]
    assert items[0].image_ref == "http://gateway.test/images/3.png"
    assert items[0].mime_type == "image/png"
    sent = session.requests[0]
    assert sent["method"] == "GET"
    assert sent["url"] == "http://gateway.test/items"
    assert sent["headers"]["Authorization"] == "Bearer token-abc"
    assert sent["timeout"] == 5.0


def test_missing_token_fails_before_any_request() -> None:
    session = FakeSession()

    with pytest.raises(AuthError, match="Not authenticated"):
        _client(session, token=None).fetch_all()
    assert session.requests == []


def test_signed_out_credentials_stop_authenticating() -> None:
    credentials = SessionCredentials("token-abc")
    credentials.sign_out()

    with pytest.raises(AuthError):
        credentials.auth_header()


@pytest.mark.parametrize(
    "response, error, message",
    [
        (FakeResponse(401, {"error": "Unauthorized"}), AuthError, "Unauthorized"),
        (FakeResponse(500, {"error": "Failed to fetch items"}), RemoteError, "Failed to fetch items"),
        (FakeResponse(503), RemoteError, "Failed to fetch wardrobe"),
        (FakeResponse(200, {"not": "a list"}), RemoteError, "expected a list"),
    ],
)
def test_fetch_all_status_mapping(response, error, message) -> None:
    with pytest.raises(error, match=message):
        _client(FakeSession(response)).fetch_all()


def test_network_failure_becomes_transport_error() -> None:
    session = FakeSession(requests.ConnectionError("connection refused"))

    with pytest.raises(TransportError, match="/items"):
        _client(session).fetch_all()


def test_remote_error_keeps_status_code() -> None:
    session = FakeSession(FakeResponse(403, {"error": "Unauthorized - you do not own this item"}))

    with pytest.raises(RemoteError) as excinfo:
        _client(session).delete("9")

    assert excinfo.value.status_code == 403
    assert str(excinfo.value) == "Unauthorized - you do not own this item (HTTP 403)"
    assert session.requests[0]["url"] == "http://gateway.test/items/9"


def test_create_posts_draft_and_returns_server_item() -> None:
    draft = ClothingDraft(
        category="shoes",
        color="Tan",
        pattern=None,
        style="casual",
        season="fall",
        description="Suede Boots",
        image_data="aGVsbG8=",
        mime_type="image/jpeg",
    )
    session = FakeSession(
        FakeResponse(
            201,
            {
                "id": 12,
                "image_url": "http://gateway.test/images/12.jpg",
                "mimetype": "image/jpeg",
                **draft.attributes(),
            },
        )
    )

    item = _client(session).create(draft)

    assert item.id == "12"
    assert item.image_is_url
    sent = session.requests[0]
    assert sent["method"] == "POST"
    assert sent["json"]["imageData"] == "aGVsbG8="
    assert sent["json"]["description"] == "Suede Boots"


def test_fetch_all_skips_records_that_are_not_objects() -> None:
    valid = {"id": 1, "category": "tops", "style": "casual", "season": "summer"}
    session = FakeSession(FakeResponse(200, [None, "text", [1, 2], valid]))

    items = _client(session).fetch_all()

    assert [item.id for item in items] == ["1"]


@pytest.mark.parametrize("body", [["unexpected"], "created", None])
def test_create_rejects_a_non_object_response(body) -> None:
    draft = ClothingDraft(
        category="tops",
        color="Red",
        pattern=None,
        style="casual",
        season="summer",
        description="Red Tee",
        image_data="aGVsbG8=",
        mime_type="image/png",
    )

    with pytest.raises(RemoteError) as excinfo:
        _client(FakeSession(FakeResponse(201, body))).create(draft)

    assert excinfo.value.status_code == 201


def test_analyze_is_unauthenticated_and_parses_classification() -> None:
    session = FakeSession(
        FakeResponse(
            200,
            {
                "category": "tops",
                "color": "Navy",
                "pattern": "null",
                "style": "minimalist",
                "season": "all-season",
                "description": "Navy Crewneck",
            },
        )
    )

    analysis = _client(session, token=None).analyze("aGVsbG8=", "image/jpeg")

    assert analysis.pattern is None
    assert analysis.description == "Navy Crewneck"
    sent = session.requests[0]
    assert "Authorization" not in sent["headers"]
    assert sent["json"] == {"imageBase64": "aGVsbG8=", "mimetype": "image/jpeg"}


@pytest.mark.parametrize(
    "response, error",
    [
        (FakeResponse(500, {"error": "Server missing GEMINI_API_KEY environment variable"}), ServiceUnavailable),
        (FakeResponse(400, {"error": "Missing imageBase64 or mimetype"}), ValidationError),
        (FakeResponse(200, {"color": "Red"}), ServiceUnavailable),
        (FakeResponse(200, ["tops"]), ServiceUnavailable),
        (FakeResponse(200, "tops"), ServiceUnavailable),
    ],
)
def test_analyze_failures(response, error) -> None:
    with pytest.raises(error):
        _client(FakeSession(response)).analyze("aGVsbG8=", "image/jpeg")


def test_health_reports_reachability() -> None:
    assert _client(FakeSession(FakeResponse(200, {"status": "ok"}))).health() is True
    assert _client(FakeSession(requests.Timeout("slow"))).health() is False


def test_health_is_false_for_an_unexpected_body() -> None:
    assert _client(FakeSession(FakeResponse(200))).health() is False
    assert _client(FakeSession(FakeResponse(200, ["ok"]))).health() is False
    assert _client(FakeSession(FakeResponse(503, {"error": "down"}))).health() is False


def test_encode_image_file(tmp_path: Path) -> None:
    image = tmp_path / "shirt.png"
    image.write_bytes(b"hello")

    assert encode_image_file(image) == ("aGVsbG8=", "image/png")
    assert guess_mime_type(tmp_path / "unknown") == "image/jpeg"
