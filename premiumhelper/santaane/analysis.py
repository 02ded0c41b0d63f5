"""Prompt construction and best-effort parsing of model replies.

Parsing happens in two independent stages:

1. ``extract_json_object`` finds the balanced ``{...}`` span that starts at
   the first opening brace, and ``parse_ai_response`` validates each
   expected field, replacing missing or invalid ones with defaults.
2. ``synthesize_fallback`` builds a complete result from the raw reply and
   the original text when stage 1 finds nothing usable.

Neither stage raises: a malformed reply always degrades to a result.
"""

import json
import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..core.logging import analysis_logger as logger
from ..core.models import utc_now


DEFAULT_CLARITY_SCORE = 75

DEFAULT_SUGGESTIONS = [
    "Consider clarifying the main research objective in the first sentence.",
    "Break long sentences into shorter ones for better readability.",
    "Add a concluding sentence that summarizes the key findings.",
]

_SENTENCE_SPLIT = re.compile(r"[.!?]")


class AnalysisResult(BaseModel):
    """Outcome of one abstract analysis.

    Serialized with the camelCase names the wizard script reads.
    """

    model_config = ConfigDict(populate_by_name=True)

    word_count: int = Field(alias="wordCount", ge=0)
    sentence_count: int = Field(alias="sentenceCount", ge=0)
    clarity_score: int | float = Field(alias="clarityScore", ge=0, le=100)
    suggestions: list[str] = Field(default_factory=list)
    ai_enhanced: str = Field(alias="aiEnhanced")
    analysis_timestamp: str = Field(alias="analysisTimestamp")
    keyword_check: dict[str, bool] = Field(default_factory=dict, alias="keywordCheck")
    status: bool = False

    @property
    def completed_at(self) -> datetime:
        """The timestamp as a datetime (now, if it cannot be parsed)."""
        return _parse_timestamp(self.analysis_timestamp) or utc_now()

    def display_timestamp(self) -> str:
        """Human-readable completion line."""
        return f"Analysis completed on {self.completed_at.strftime('%Y-%m-%d %H:%M:%S')}"


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len((text or "").split())


def count_sentences(text: str) -> int:
    """Count sentences ending in '.', '!' or '?', ignoring empty segments."""
    return len([s for s in _SENTENCE_SPLIT.split(text or "") if s.strip()])


def build_analysis_prompt(text: str) -> str:
    """Build the chat prompt asking for a JSON analysis of an abstract."""
    return (
        "You are an expert academic editor. Analyze the following scientific "
        "abstract for clarity, structure and academic style, then rewrite it "
        "as an improved version that keeps the original meaning.\n\n"
        f'Abstract:\n"""\n{text}\n"""\n\n'
        "Respond with ONLY one JSON object of this exact shape:\n"
        "{\n"
        '  "wordCount": <integer>,\n'
        '  "sentenceCount": <integer>,\n'
        '  "clarityScore": <number from 0 to 100>,\n'
        '  "keywordCheck": {"<keyword>": <true|false>},\n'
        '  "suggestions": ["<suggestion>", "..."],\n'
        '  "aiEnhanced": "<the improved abstract>",\n'
        '  "analysisTimestamp": "<ISO 8601 timestamp>"\n'
        "}"
    )


def extract_json_object(reply: str) -> str | None:
    """Return the balanced ``{...}`` span starting at the first '{'.

    Braces inside JSON strings are ignored. Returns None when the reply has
    no opening brace or the span never closes.
    """
    start = (reply or "").find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(reply)):
        char = reply[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return reply[start : index + 1]
    return None


def parse_ai_response(reply: str, original_text: str) -> AnalysisResult:
    """Turn a free-text model reply into an analysis result.

    Args:
        reply: The assistant message content.
        original_text: The abstract that was analyzed.

    Returns:
        A result with ``status=True`` when a JSON object was found,
        otherwise the locally synthesized fallback.
    """
    span = extract_json_object(reply)
    if span is None:
        logger.info("Model reply contained no JSON object, using fallback analysis")
        return synthesize_fallback(reply, original_text)

    try:
        data = json.loads(span)
    except json.JSONDecodeError as e:
        logger.info(f"Model reply JSON did not parse ({e}), using fallback analysis")
        return synthesize_fallback(reply, original_text)

    if not isinstance(data, dict):
        return synthesize_fallback(reply, original_text)

    enhanced = data.get("aiEnhanced", data.get("aiEnchanched"))

    return AnalysisResult(
        word_count=_valid_count(data.get("wordCount"), count_words(original_text)),
        sentence_count=_valid_count(data.get("sentenceCount"), count_sentences(original_text)),
        clarity_score=_valid_score(data.get("clarityScore")),
        suggestions=_valid_suggestions(data.get("suggestions")),
        ai_enhanced=enhanced if _is_text(enhanced) else original_text,
        analysis_timestamp=_valid_timestamp(data.get("analysisTimestamp")),
        keyword_check=_valid_keywords(data.get("keywordCheck")),
        status=True,
    )


def synthesize_fallback(reply: str, original_text: str) -> AnalysisResult:
    """Build a complete result without any structured data from the model."""
    return AnalysisResult(
        word_count=count_words(original_text),
        sentence_count=count_sentences(original_text),
        clarity_score=DEFAULT_CLARITY_SCORE,
        suggestions=list(DEFAULT_SUGGESTIONS),
        ai_enhanced=reply.strip() if _is_text(reply) else original_text,
        analysis_timestamp=utc_now().isoformat(),
        status=False,
    )


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _valid_count(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return default
    return value


def _valid_score(value: Any) -> int | float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_CLARITY_SCORE
    if not 0 <= value <= 100:
        return DEFAULT_CLARITY_SCORE
    return value


def _valid_suggestions(value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(s, str) for s in value):
        return list(DEFAULT_SUGGESTIONS)
    return value


def _valid_keywords(value: Any) -> dict[str, bool]:
    if not isinstance(value, dict):
        return {}
    return {str(k): v for k, v in value.items() if isinstance(v, bool)}


def _valid_timestamp(value: Any) -> str:
    if isinstance(value, str) and _parse_timestamp(value) is not None:
        return value
    return utc_now().isoformat()


def _parse_timestamp(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
