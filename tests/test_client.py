"""Tests for the chat-completion client and the analyzer."""

import asyncio
import json

import httpx
import pytest

from premiumhelper.core.config import AIConfig
from premiumhelper.santaane.client import AbstractAnalyzer, ChatCompletionClient
from premiumhelper.santaane.errors import AbstractValidationError, AIServiceError


ENDPOINT = "https://ai.example.test/v1/chat/completions"


def make_config(**overrides) -> AIConfig:
    settings = {"endpoint": ENDPOINT, "api_key": "sk-test", "model": "test-model"}
    settings.update(overrides)
    return AIConfig(**settings)


def completion(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_client(handler, **overrides) -> ChatCompletionClient:
    return ChatCompletionClient(make_config(**overrides), transport=httpx.MockTransport(handler))


class TestPayload:
    """Tests for the request body."""

    def test_build_payload(self):
        """Test the body carries model, prompt and sampling settings."""
        client = ChatCompletionClient(make_config(temperature=0.2, max_tokens=500))

        assert client.build_payload("hello") == {
            "model": "test-model",
            "messages": [{"role": "user", "content": "hello"}],
            "temperature": 0.2,
            "max_tokens": 500,
        }


class TestComplete:
    """Tests for a single completion call."""

    def test_posts_with_bearer_token(self):
        """Test the request shape and the returned content."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion("the reply"))

        reply = asyncio.run(make_client(handler).complete("prompt text"))

        assert reply == "the reply"
        assert seen["url"] == ENDPOINT
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"]["messages"][0]["content"] == "prompt text"

    @pytest.mark.parametrize("status", [400, 401, 429, 500, 503])
    def test_non_success_status(self, status):
        """Test every non-2xx status fails the call."""
        client = make_client(lambda request: httpx.Response(status, json={"error": "nope"}))

        with pytest.raises(AIServiceError) as exc_info:
            asyncio.run(client.complete("prompt"))

        assert exc_info.value.status_code == status
        assert str(exc_info.value).startswith("Analysis failed")

    @pytest.mark.parametrize(
        "body",
        [
            {"choices": []},
            {"unexpected": True},
            completion(None),
            completion(42),
        ],
    )
    def test_unexpected_envelope(self, body):
        """Test envelopes without text content fail the call."""
        client = make_client(lambda request: httpx.Response(200, json=body))

        with pytest.raises(AIServiceError, match="unexpected response"):
            asyncio.run(client.complete("prompt"))

    def test_non_json_body(self):
        """Test a non-JSON body fails the call."""
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(AIServiceError):
            asyncio.run(client.complete("prompt"))

    def test_timeout(self):
        """Test timeouts become a service error."""

        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(AIServiceError, match="did not respond in time"):
            asyncio.run(make_client(handler).complete("prompt"))

    def test_connection_error(self):
        """Test network failures become a service error."""

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(AIServiceError, match="Could not reach"):
            asyncio.run(make_client(handler).complete("prompt"))

    def test_single_attempt(self):
        """Test a failing call is not retried."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        with pytest.raises(AIServiceError):
            asyncio.run(make_client(handler).complete("prompt"))

        assert len(calls) == 1


class TestAnalyzer:
    """Tests for the full analysis flow."""

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_text_is_rejected(self, text):
        """Test blank abstracts never reach the endpoint."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=completion("{}"))

        analyzer = AbstractAnalyzer(make_client(handler))

        with pytest.raises(AbstractValidationError, match="Please enter an abstract"):
            asyncio.run(analyzer.analyze(text))
        assert calls == []

    def test_structured_reply(self):
        """Test a JSON reply is parsed into the result."""
        reply = json.dumps({"clarityScore": 91, "aiEnhanced": "Better."})
        analyzer = AbstractAnalyzer(
            make_client(lambda request: httpx.Response(200, json=completion(reply)))
        )

        result = asyncio.run(analyzer.analyze("One sentence here."))

        assert result.status is True
        assert result.clarity_score == 91
        assert result.ai_enhanced == "Better."
        assert result.word_count == 3

    def test_prose_reply(self):
        """Test a prose reply yields the fallback result."""
        analyzer = AbstractAnalyzer(
            make_client(lambda request: httpx.Response(200, json=completion("Rewritten.")))
        )

        result = asyncio.run(analyzer.analyze("Original text."))

        assert result.status is False
        assert result.ai_enhanced == "Rewritten."

    def test_prompt_contains_abstract(self):
        """Test the abstract is sent inside the prompt."""
        prompts = []

        def handler(request):
            prompts.append(json.loads(request.content)["messages"][0]["content"])
            return httpx.Response(200, json=completion("ok"))

        asyncio.run(AbstractAnalyzer(make_client(handler)).analyze("Unique abstract 123."))

        assert "Unique abstract 123." in prompts[0]
