"""Tests for mythic_realms.llm: HttpLLM, EchoLLM and HttpPainter."""

import json
import pytest
import httpx
from unittest.mock import AsyncMock, MagicMock, patch

from mythic_realms.llm import EchoLLM, HttpLLM, HttpPainter, LLMError
from mythic_realms.patch import parse_response


def _reply(body: dict, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body
    resp.raise_for_status = MagicMock(
        side_effect=None if status < 400 else httpx.HTTPStatusError(
            "", request=MagicMock(), response=resp
        )
    )
    return resp


@pytest.fixture
def post():
    """httpx.AsyncClient.post replaced by an AsyncMock for the whole test."""
    mock = AsyncMock(return_value=_reply({"results": [{"text": "ok"}]}))
    with patch("httpx.AsyncClient.post", mock):
        yield mock


def _sent_url(post: AsyncMock) -> str:
    return post.call_args[0][0]


# ---------------------------------------------------------------------------
# EchoLLM
# ---------------------------------------------------------------------------

class TestEchoLLM:
    async def test_returns_valid_envelope(self) -> None:
        raw = await EchoLLM()("narrator", 'World: Day 1\nAction: "open the door"\n')
        response = parse_response(raw)
        assert response.narration == "You open the door."
        assert response.resolved_choices()[0].id == "look"

    async def test_without_action_line(self) -> None:
        data = json.loads(await EchoLLM()("narrator", "hello"))
        assert data["narration"] == "Nothing happens."
        assert data["patch"] == {}

    async def test_stage_name_ignored(self) -> None:
        echo = EchoLLM()
        assert await echo("narrator", "x") == await echo("other", "x")


# ---------------------------------------------------------------------------
# HttpLLM: KoboldCpp format
# ---------------------------------------------------------------------------

class TestKoboldCpp:
    @pytest.fixture
    def llm(self) -> HttpLLM:
        return HttpLLM(provider_url="http://localhost:5001")

    async def test_returns_completion_text(self, llm, post) -> None:
        post.return_value = _reply({"results": [{"text": '{"narration": "The road is dark."}'}]})
        assert await llm("narrator", "Describe the road.") == '{"narration": "The road is dark."}'

    async def test_request_shape(self, llm, post) -> None:
        await llm("narrator", "my prompt")
        assert _sent_url(post) == "http://localhost:5001/api/v1/generate"
        assert post.call_args.kwargs["json"] == {"prompt": "my prompt"}
        assert "Authorization" not in post.call_args.kwargs["headers"]

    async def test_optional_bearer_token(self, post) -> None:
        await HttpLLM(provider_url="http://localhost:5001/", api_key="secret")("narrator", "p")
        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer secret"
        assert _sent_url(post) == "http://localhost:5001/api/v1/generate"

    async def test_unreachable_backend(self, llm, post) -> None:
        post.side_effect = httpx.ConnectError("refused")
        with pytest.raises(LLMError, match="Network error: cannot connect"):
            await llm("narrator", "p")

    async def test_timeout(self, llm, post) -> None:
        post.side_effect = httpx.TimeoutException("slow")
        with pytest.raises(LLMError, match="timed out"):
            await llm("narrator", "p")

    @pytest.mark.parametrize(
        "status, pattern",
        [(503, "HTTP 503"), (429, "quota"), (401, "API key"), (403, "API key")],
    )
    async def test_http_status_errors(self, llm, post, status, pattern) -> None:
        post.return_value = _reply({}, status=status)
        with pytest.raises(LLMError, match=pattern):
            await llm("narrator", "p")

    async def test_wrong_response_shape(self, llm, post) -> None:
        post.return_value = _reply({"unexpected": "format"})
        with pytest.raises(LLMError, match="Unexpected response format"):
            await llm("narrator", "p")


# ---------------------------------------------------------------------------
# HttpLLM: OpenAI format
# ---------------------------------------------------------------------------

class TestOpenAI:
    @pytest.fixture
    def llm(self) -> HttpLLM:
        return HttpLLM(
            provider_url="http://localhost:8080",
            api_key="sk-test",
            provider_format="openai",
            model="mistral-7b",
        )

    async def test_request_shape(self, llm, post) -> None:
        post.return_value = _reply({"choices": [{"text": "A stormy night."}]})
        assert await llm("narrator", "p") == "A stormy night."
        assert _sent_url(post) == "http://localhost:8080/v1/completions"
        assert post.call_args.kwargs["json"] == {"prompt": "p", "model": "mistral-7b"}

    async def test_missing_api_key_fails_before_request(self, post) -> None:
        llm = HttpLLM(provider_url="http://localhost:8080", provider_format="openai")
        with pytest.raises(LLMError, match="API key not found"):
            await llm("narrator", "p")
        post.assert_not_awaited()

    async def test_kobold_shaped_reply_rejected(self, llm, post) -> None:
        post.return_value = _reply({"results": [{"text": "kobold format accidentally"}]})
        with pytest.raises(LLMError, match="Unexpected response format"):
            await llm("narrator", "p")


# ---------------------------------------------------------------------------
# HttpLLM: Gemini format
# ---------------------------------------------------------------------------

class TestGemini:
    @pytest.fixture
    def llm(self) -> HttpLLM:
        return HttpLLM(
            provider_url="https://generativelanguage.googleapis.com",
            api_key="g-key",
            provider_format="gemini",
            model="gemini-2.5-flash",
        )

    async def test_model_in_url_and_key_header(self, llm, post) -> None:
        post.return_value = _reply({"candidates": [{"content": {"parts": [{"text": "ok"}]}}]})
        await llm("narrator", "p")
        assert _sent_url(post) == (
            "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent"
        )
        assert post.call_args.kwargs["headers"]["x-goog-api-key"] == "g-key"

    async def test_parts_are_joined(self, llm, post) -> None:
        parts = [{"text": '{"narr'}, {"text": 'ation": "x"}'}]
        post.return_value = _reply({"candidates": [{"content": {"parts": parts}}]})
        assert await llm("narrator", "p") == '{"narration": "x"}'

    async def test_no_candidates(self, llm, post) -> None:
        post.return_value = _reply({"candidates": []})
        with pytest.raises(LLMError, match="Unexpected response format"):
            await llm("narrator", "p")


def test_unknown_provider_format() -> None:
    with pytest.raises(ValueError):
        HttpLLM(provider_url="http://x", provider_format="smoke-signals")


# ---------------------------------------------------------------------------
# HttpPainter
# ---------------------------------------------------------------------------

class TestHttpPainter:
    async def test_returns_data_url(self, post) -> None:
        parts = [{"text": "here"}, {"inlineData": {"data": "QUJD"}}]
        post.return_value = _reply({"candidates": [{"content": {"parts": parts}}]})
        assert await HttpPainter(api_key="g-key")("a misty forest") == "data:image/png;base64,QUJD"
        assert post.call_args.kwargs["json"]["generationConfig"]["imageConfig"]["aspectRatio"] == "16:9"

    async def test_no_key_returns_none(self, post) -> None:
        assert await HttpPainter(api_key="")("x") is None
        post.assert_not_awaited()

    async def test_transport_failure_returns_none(self, post) -> None:
        post.side_effect = httpx.ConnectError("refused")
        assert await HttpPainter(api_key="g-key")("x") is None

    async def test_text_only_reply_returns_none(self, post) -> None:
        post.return_value = _reply({"candidates": [{"content": {"parts": [{"text": "sorry"}]}}]})
        assert await HttpPainter(api_key="g-key")("x") is None
