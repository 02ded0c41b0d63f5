"""Client for an OpenAI-compatible chat-completion endpoint."""

from __future__ import annotations

import httpx

from ..core.config import AIConfig
from ..core.logging import analysis_logger as logger
from .analysis import AnalysisResult, build_analysis_prompt, parse_ai_response
from .errors import AbstractValidationError, AIServiceError


class ChatCompletionClient:
    """Sends one prompt, returns the assistant's free text.

    No retries and no caching: every call is a single POST, and any
    non-2xx status is a failure for that call.
    """

    def __init__(self, config: AIConfig, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize the client.

        Args:
            config: Endpoint, credential and sampling settings.
            transport: Optional httpx transport (used by tests).
        """
        self.config = config
        self._transport = transport

    def build_payload(self, prompt: str) -> dict:
        """Request body for a single-message completion."""
        return {
            "model": self.config.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

    async def complete(self, prompt: str) -> str:
        """Send a prompt and return the first choice's message content.

        Raises:
            AIServiceError: On network errors, non-2xx statuses or an
                envelope without message content.
        """
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.config.endpoint,
                    json=self.build_payload(prompt),
                    headers=headers,
                )
        except httpx.TimeoutException:
            raise AIServiceError("The AI service did not respond in time.")
        except httpx.HTTPError as e:
            raise AIServiceError(f"Could not reach the AI service: {e}")

        if not response.is_success:
            logger.warning(f"AI service returned HTTP {response.status_code}")
            raise AIServiceError(
                f"Analysis failed: {response.reason_phrase or response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            raise AIServiceError("The AI service returned an unexpected response.")

        if not isinstance(content, str):
            raise AIServiceError("The AI service returned an unexpected response.")
        return content


class AbstractAnalyzer:
    """Runs the full analysis of one abstract."""

    def __init__(self, client: ChatCompletionClient):
        self.client = client

    async def analyze(self, text: str) -> AnalysisResult:
        """Analyze an abstract.

        Raises:
            AbstractValidationError: If the text is blank.
            AIServiceError: If the endpoint call fails.
        """
        if not text or not text.strip():
            raise AbstractValidationError("Please enter an abstract to analyze.")

        reply = await self.client.complete(build_analysis_prompt(text))
        result = parse_ai_response(reply, text)
        logger.info(
            f"Analyzed abstract ({result.word_count} words, structured={result.status})"
        )
        return result
