"""
Response normalizer

Turns whatever the quiz master sent back into a QuizState. The agent may
answer with a structured result, with JSON buried in prose or markdown
fences, or with plain prose. Decoders are tried from most to least trusted;
the first one that yields a non-empty message wins.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

from ..transport.base import AgentCallResult
from .schema import QuizState

logger = logging.getLogger(__name__)

FENCE_PATTERN = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)```")

# Keys agents commonly wrap their payload in
ENVELOPE_KEYS = ("result", "response", "data")
MAX_ENVELOPE_DEPTH = 3

_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class ParseFailure:
    """No decoder produced a usable message."""
    reason: str

    def __bool__(self) -> bool:
        return False


NormalizeResult = Union[QuizState, ParseFailure]
Decoder = Callable[[AgentCallResult], Optional[QuizState]]


# =============================================================================
# LENIENT JSON
# =============================================================================

def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return None


def _scan(text: str) -> Any:
    """First balanced object or array in the text, ignoring surrounding prose."""
    for match in re.finditer(r"[\[{]", text):
        try:
            value, _ = _decoder.raw_decode(text, match.start())
        except (ValueError, RecursionError):
            continue
        return value
    return None


def extract_json(text: Any, _nested: bool = False) -> Any:
    """
    Decode a JSON value out of model output.

    Handles markdown fences, leading/trailing prose and one level of
    double encoding. Returns None when nothing decodes.
    """
    if not isinstance(text, str):
        return None
    stripped = text.strip()
    if not stripped:
        return None

    candidates = [m.group(1) for m in FENCE_PATTERN.finditer(stripped)]
    candidates.append(stripped)

    for candidate in candidates:
        value = _loads(candidate.strip())
        if value is None:
            value = _scan(candidate)
        if isinstance(value, str) and not _nested:
            value = extract_json(value, _nested=True)
        if value is not None:
            return value
    return None


def pick_record(value: Any, depth: int = 0) -> Optional[Mapping]:
    """
    Find the mapping that carries the turn.

    A list contributes its first mapping; a mapping without ``message`` is
    searched through common envelope keys.
    """
    if depth > MAX_ENVELOPE_DEPTH:
        return None
    if isinstance(value, list):
        for item in value:
            if isinstance(item, Mapping):
                return pick_record(item, depth + 1)
        return None
    if not isinstance(value, Mapping):
        return None
    if "message" in value:
        return value
    for key in ENVELOPE_KEYS:
        inner = value.get(key)
        if isinstance(inner, str):
            inner = extract_json(inner)
        found = pick_record(inner, depth + 1)
        if found is not None:
            return found
    return None


def _state_from(value: Any) -> Optional[QuizState]:
    record = pick_record(value)
    if record is None:
        return None
    state = QuizState.from_dict(record)
    return state if state.is_valid else None


# =============================================================================
# DECODERS
# =============================================================================

def _result_mapping(raw: AgentCallResult) -> Optional[Mapping]:
    response = raw.response
    if not isinstance(response, Mapping):
        return None
    result = response.get("result")
    return result if isinstance(result, Mapping) else None


def _text_field(raw: AgentCallResult) -> str:
    """``response.result.text``, else ``response.message``."""
    result = _result_mapping(raw)
    text = result.get("text") if result is not None else None
    if not isinstance(text, str) or not text:
        response = raw.response
        text = response.get("message") if isinstance(response, Mapping) else None
    return text if isinstance(text, str) else ""


def from_structured(raw: AgentCallResult) -> Optional[QuizState]:
    """Tier 1: the structured result already carries a message."""
    result = _result_mapping(raw)
    if result is None:
        return None
    message = result.get("message")
    if not isinstance(message, str) or not message:
        return None
    return QuizState.from_dict(result)


def from_raw_response(raw: AgentCallResult) -> Optional[QuizState]:
    """Tier 2: JSON inside the raw text payload."""
    return _state_from(extract_json(raw.raw_response))


def from_text_field(raw: AgentCallResult) -> Optional[QuizState]:
    """Tier 3: JSON inside the generic text field."""
    return _state_from(extract_json(_text_field(raw)))


def from_plain_text(raw: AgentCallResult) -> Optional[QuizState]:
    """Tier 4: any non-empty prose, wrapped as an unnumbered turn."""
    text = _text_field(raw)
    if text:
        return QuizState.from_text(text)
    raw_text = raw.raw_response
    if not isinstance(raw_text, str) or not raw_text.strip():
        return None
    # A JSON object without a message is a malformed turn, not prose
    if isinstance(extract_json(raw_text), Mapping):
        return None
    return QuizState.from_text(raw_text)


DECODERS: tuple = (
    from_structured,
    from_raw_response,
    from_text_field,
    from_plain_text,
)


def _coerce_result(raw: Any) -> Optional[AgentCallResult]:
    if isinstance(raw, AgentCallResult):
        return raw
    if isinstance(raw, Mapping):
        return AgentCallResult.from_dict(raw)
    return None


def normalize(raw: Any, decoders: tuple = DECODERS) -> NormalizeResult:
    """
    Normalize an agent call result into a QuizState.

    Args:
        raw: AgentCallResult, or a mapping shaped like one
        decoders: Decoders to try in order

    Returns:
        The first valid QuizState, or ParseFailure
    """
    result = _coerce_result(raw)
    if result is None:
        return ParseFailure(f"Unsupported agent result type: {type(raw).__name__}")

    for decoder in decoders:
        state = decoder(result)
        if state is not None and state.is_valid:
            logger.debug(f"Agent reply decoded by {decoder.__name__}")
            return state

    logger.warning("No decoder produced a message from the agent reply")
    return ParseFailure("Agent reply contained no usable message")
