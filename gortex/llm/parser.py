"""Response Parser - Turn free-form LLM output into a GenerationResult.

Three independent steps, each raising on failure:
extract_json() -> parse_json() -> validate_response()
"""

import json
import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from gortex import MAX_SUBJECT_LENGTH
from gortex.errors import InvalidAIResponse, MissingOrInvalidSubject, MissingOrInvalidType, SubjectTooLong

DEFAULT_CONFIDENCE = 50

CODE_BLOCK_RE = re.compile(r'```(?:json)?\s*([\s\S]*?)```')


@dataclass
class GenerationResult:
    """Structured commit proposal produced by a provider."""
    type: str
    subject: str
    scope: Optional[str] = None
    body: Optional[str] = None
    breaking: bool = False
    breaking_description: Optional[str] = None
    confidence: int = DEFAULT_CONFIDENCE
    reasoning: Optional[str] = None

    @classmethod
    def from_response(cls, data: dict) -> 'GenerationResult':
        """Build from a validated response dict. Optional fields fall back to defaults."""
        return cls(
            type=data["type"].strip(),
            subject=data["subject"].strip(),
            scope=_optional_str(data.get("scope")),
            body=_optional_str(data.get("body")),
            breaking=_flag(data.get("breaking")),
            breaking_description=_optional_str(data.get("breakingDescription")),
            confidence=_confidence(data.get("confidence")),
            reasoning=_optional_str(data.get("reasoning")),
        )


def _optional_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _flag(value: Any) -> bool:
    return value is True or value == "true"


def _confidence(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_CONFIDENCE
    if isinstance(value, float) and not math.isfinite(value):
        return DEFAULT_CONFIDENCE
    return int(min(max(value, 0), 100))


def extract_json(text: str) -> str:
    """
    Locate the JSON object inside an LLM response.

    Prefers a fenced code block, then the span from the first '{' to the last
    '}'. Falls back to the trimmed text so the parse step reports the failure.
    """
    match = CODE_BLOCK_RE.search(text)
    if match:
        return match.group(1).strip()

    first = text.find('{')
    last = text.rfind('}')
    if first != -1 and last > first:
        return text[first:last + 1]

    return text.strip()


def parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidAIResponse(f"Could not parse JSON response: {e}") from e


def validate_response(parsed: Any, max_subject_length: int = MAX_SUBJECT_LENGTH) -> dict:
    """Check required fields. Unknown fields are ignored."""
    if not isinstance(parsed, dict):
        raise InvalidAIResponse(f"Expected a JSON object, got {type(parsed).__name__}")

    commit_type = parsed.get("type")
    if not isinstance(commit_type, str) or not commit_type.strip():
        raise MissingOrInvalidType('Invalid response: "type" is missing or not a string')

    subject = parsed.get("subject")
    if not isinstance(subject, str) or not subject.strip():
        raise MissingOrInvalidSubject('Invalid response: "subject" is missing or not a string')

    if len(subject) > max_subject_length:
        raise SubjectTooLong(
            f'Invalid response: "subject" too long ({len(subject)} > {max_subject_length} chars)',
            field="subject",
            value=subject,
        )

    return parsed


def parse_response(text: str, max_subject_length: int = MAX_SUBJECT_LENGTH) -> GenerationResult:
    """Run all three steps on raw LLM output."""
    parsed = parse_json(extract_json(text or ""))
    return GenerationResult.from_response(validate_response(parsed, max_subject_length))
