import pytest
import requests

from extraction.figma_analysis import analyze_figma_file, analyze_figma_url
from figma_nodes import document, frame, solid, text
from tools.figma_client import FigmaClient, extract_file_key
from utils.errors import FigmaApiError, RateLimitError, ValidationError


class FakeResponse:
    def __init__(self, status_code: int, payload=None, headers=None) -> None:
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.headers = headers or {}

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, responses) -> None:
        self.responses = list(responses)
        self.urls = []
        self.headers = []

    def get(self, url, headers=None, timeout=None):
        self.urls.append(url)
        self.headers.append(headers)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _client(responses, sleeps):
    session = FakeSession(responses)
    client = FigmaClient(token="secret", session=session, base_url="https://api.test/v1", sleep=sleeps.append)
    return client, session


def test_extract_file_key_from_supported_links() -> None:
    assert extract_file_key("https://www.figma.com/design/AbC123/My-File?node-id=1-2") == "AbC123"
    assert extract_file_key("https://figma.com/file/XYZ/x") == "XYZ"
    assert extract_file_key("https://www.figma.com/proto/P1/demo") == "P1"
    assert extract_file_key("https://www.figma.com/board/B2/jam") == "B2"
    assert extract_file_key("https://example.com/design/abc") is None


def test_missing_token_is_rejected() -> None:
    with pytest.raises(FigmaApiError):
        FigmaClient(token="")


def test_rate_limited_request_is_retried() -> None:
    sleeps = []
    client, session = _client(
        [FakeResponse(429, headers={"Retry-After": "5"}), FakeResponse(200, {"name": "File"})],
        sleeps,
    )
    assert client.get_file("KEY")["name"] == "File"
    assert sleeps == [5.0]
    assert session.urls == ["https://api.test/v1/files/KEY"] * 2
    assert session.headers[0]["X-Figma-Token"] == "secret"


def test_retry_waits_are_capped_and_exhaustion_raises() -> None:
    sleeps = []
    limited = FakeResponse(429, headers={"Retry-After": "120", "X-Figma-Plan-Tier": "starter"})
    client, _ = _client([limited, limited, limited], sleeps)
    with pytest.raises(RateLimitError) as excinfo:
        client.get_file("KEY")
    assert sleeps == [30, 30]
    assert excinfo.value.retry_after == 120
    assert excinfo.value.plan_tier == "starter"
    assert "starter" in str(excinfo.value)


def test_missing_retry_after_uses_capped_default() -> None:
    sleeps = []
    client, _ = _client([FakeResponse(429), FakeResponse(200, {})], sleeps)
    client.get_file("KEY")
    assert sleeps == [30]


def test_secondary_endpoints_degrade_to_empty() -> None:
    sleeps = []
    client, _ = _client([FakeResponse(500), FakeResponse(403)], sleeps)
    assert client.get_styles("KEY") == {"meta": {"styles": []}}
    assert client.get_components("KEY") == {"meta": {"components": []}}


def test_network_errors_degrade_secondary_but_fail_file() -> None:
    sleeps = []
    client, _ = _client([
        requests.ConnectionError("offline"),
        requests.Timeout("slow"),
    ], sleeps)
    assert client.get_styles("KEY") == {"meta": {"styles": []}}
    with pytest.raises(FigmaApiError) as excinfo:
        client.get_file("KEY")
    assert excinfo.value.status_code is None


def test_missing_file_raises_figma_api_error() -> None:
    sleeps = []
    client, _ = _client([FakeResponse(404)], sleeps)
    with pytest.raises(FigmaApiError) as excinfo:
        client.get_file("KEY")
    assert excinfo.value.status_code == 404
    assert "404" in str(excinfo.value)


# ============================================================
# 文件分析
# ============================================================


class StubFigma:
    def __init__(self) -> None:
        self.calls = []

    def get_file(self, file_key):
        self.calls.append(("file", file_key))
        return {
            "name": "Marketing Site",
            "document": document(
                frame("01 - Home Page - Desktop", 1440, 2000, fills=[solid(1, 1, 1)], children=[
                    frame("Hero", 1440, 600, children=[text("Welcome aboard", 48)]),
                ]),
                frame("icon", 24, 24),
            ),
        }

    def get_styles(self, file_key):
        self.calls.append(("styles", file_key))
        return {"meta": {"styles": [{"name": "Brand/Primary"}, {"key": "nameless"}]}}

    def get_components(self, file_key):
        self.calls.append(("components", file_key))
        return {"meta": {"components": [{"key": "c1", "name": "Card"}, {"name": ""}]}}


def test_analyze_figma_url_collects_everything() -> None:
    stub = StubFigma()
    analysis = analyze_figma_url("https://www.figma.com/design/AbC123/Site", client=stub)
    assert [c[0] for c in stub.calls] == ["file", "styles", "components"]
    assert analysis.file_key == "AbC123"
    assert analysis.file_name == "Marketing Site"
    assert [p.name for p in analysis.pages] == ["Home"]
    assert [c.name for c in analysis.components] == ["Card"]
    assert analysis.style_names == ["Brand/Primary"]
    assert analysis.design_tokens.colors.background == "#ffffff"
    assert analysis.summary()["pages"] == ["Home"]


def test_analysis_rejects_bad_input() -> None:
    with pytest.raises(ValidationError):
        analyze_figma_url("https://example.com/not-figma", client=StubFigma())
    with pytest.raises(ValidationError):
        analyze_figma_file("KEY", {"name": "No document"})
