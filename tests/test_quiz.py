"""
Tests for quiz schema, response normalization and correctness grading.
"""

import json

import pytest

from nichenerd.quiz.schema import QuizState, ChatMessage, Role, Correctness, SAMPLE_FINAL
from nichenerd.quiz.normalizer import (
    normalize,
    extract_json,
    pick_record,
    ParseFailure,
    from_structured,
    from_raw_response,
    from_text_field,
    from_plain_text,
)
from nichenerd.quiz.classifier import classify
from nichenerd.transport.base import AgentCallResult


FULL_PAYLOAD = {
    "message": "Q1: what is a pod?",
    "question_number": 1,
    "is_complete": False,
    "score": 0,
    "total": 10,
    "level_name": "",
    "tagline": "",
    "topic": "Kubernetes",
}


class TestQuizState:
    """Tests for QuizState coercion."""

    def test_from_dict_full(self):
        """Test a well-formed payload passes through."""
        state = QuizState.from_dict(FULL_PAYLOAD)

        assert state.message == "Q1: what is a pod?"
        assert state.question_number == 1
        assert state.topic == "Kubernetes"
        assert state.is_valid

    def test_wrong_type_score_defaults(self):
        """Test a string score is replaced, not converted."""
        state = QuizState.from_dict({"message": "hi", "score": "8"})

        assert state.score == 0
        assert isinstance(state.score, int)

    def test_defaults_for_missing_fields(self):
        """Test every missing field gets its default."""
        state = QuizState.from_dict({"message": "hi"})

        assert state.to_dict() == {
            "message": "hi",
            "question_number": 0,
            "is_complete": False,
            "score": 0,
            "total": 10,
            "level_name": "",
            "tagline": "",
            "topic": "",
        }

    def test_is_complete_requires_literal_true(self):
        """Test truthy non-booleans do not complete the quiz."""
        assert QuizState.from_dict({"message": "m", "is_complete": "true"}).is_complete is False
        assert QuizState.from_dict({"message": "m", "is_complete": 1}).is_complete is False
        assert QuizState.from_dict({"message": "m", "is_complete": True}).is_complete is True

    def test_booleans_are_not_numbers(self):
        """Test a boolean score falls back to the default."""
        state = QuizState.from_dict({"message": "m", "score": True, "total": False})

        assert state.score == 0
        assert state.total == 10

    def test_non_finite_and_negative_numbers(self):
        """Test NaN, infinity and negatives fall back to defaults."""
        state = QuizState.from_dict({
            "message": "m",
            "question_number": float("nan"),
            "score": -3,
            "total": float("inf"),
        })

        assert state.question_number == 0
        assert state.score == 0
        assert state.total == 10

    def test_zero_total_defaults(self):
        """Test total must be positive."""
        assert QuizState.from_dict({"message": "m", "total": 0}).total == 10

    def test_float_numbers_truncate(self):
        """Test numeric floats become ints."""
        state = QuizState.from_dict({"message": "m", "question_number": 3.0, "score": 2.7})

        assert state.question_number == 3
        assert state.score == 2

    def test_non_string_text_fields(self):
        """Test non-string text fields become empty strings."""
        state = QuizState.from_dict({"message": "m", "level_name": None, "tagline": 5, "topic": ["x"]})

        assert state.level_name == ""
        assert state.tagline == ""
        assert state.topic == ""

    def test_empty_message_invalid(self):
        """Test validity hinges on the message."""
        assert QuizState.from_dict({"message": ""}).is_valid is False
        assert QuizState.from_dict({"message": 42}).is_valid is False

    def test_sample_final(self):
        """Test the sample result is a finished quiz."""
        assert SAMPLE_FINAL.is_complete
        assert SAMPLE_FINAL.level_name == "Keeb Sensei"


class TestChatMessage:
    """Tests for ChatMessage."""

    def test_user_message_to_dict(self):
        msg = ChatMessage(id="msg-1", role=Role.USER, text="an answer")

        assert msg.to_dict() == {"id": "msg-1", "role": "user", "text": "an answer"}
        assert msg.is_agent is False

    def test_agent_message_to_dict(self):
        msg = ChatMessage(id="msg-2", role=Role.AGENT, text="Correct!", question_number=2, is_correct=True)
        data = msg.to_dict()

        assert data["role"] == "agent"
        assert data["question_number"] == 2
        assert data["is_correct"] is True


class TestExtractJson:
    """Tests for lenient JSON extraction."""

    def test_plain_json(self):
        assert extract_json('{"message": "hi"}') == {"message": "hi"}

    def test_markdown_fence(self):
        text = 'Here you go:\n```json\n{"message": "hi", "score": 2}\n```\nEnjoy!'

        assert extract_json(text) == {"message": "hi", "score": 2}

    def test_prose_around_object(self):
        text = 'Sure thing! {"message": "Q2: next?", "question_number": 2} Let me know.'

        assert extract_json(text)["question_number"] == 2

    def test_first_balanced_object_wins(self):
        text = 'a {"message": "one"} b {"message": "two"}'

        assert extract_json(text) == {"message": "one"}

    def test_array(self):
        assert extract_json('result: [{"message": "hi"}]') == [{"message": "hi"}]

    def test_skips_unbalanced_brackets(self):
        text = 'Pick [A] or {B}: {"message": "ok"}'

        assert extract_json(text) == {"message": "ok"}

    def test_double_encoded(self):
        inner = json.dumps({"message": "nested"})

        assert extract_json(json.dumps(inner)) == {"message": "nested"}

    def test_no_json(self):
        assert extract_json("Just some prose.") is None
        assert extract_json("") is None
        assert extract_json(None) is None
        assert extract_json(42) is None


class TestPickRecord:
    """Tests for record selection."""

    def test_envelope(self):
        assert pick_record({"result": {"message": "hi"}}) == {"message": "hi"}

    def test_string_envelope(self):
        assert pick_record({"response": '{"message": "hi"}'}) == {"message": "hi"}

    def test_list(self):
        assert pick_record([1, {"message": "hi"}]) == {"message": "hi"}

    def test_depth_limit(self):
        deep = {"message": "hi"}
        for _ in range(10):
            deep = {"result": deep}

        assert pick_record(deep) is None


class TestDecoders:
    """Tests for each decoding tier in isolation."""

    def test_structured(self):
        raw = AgentCallResult(success=True, response={"result": FULL_PAYLOAD})

        assert from_structured(raw).message == "Q1: what is a pod?"

    def test_structured_rejects_empty_message(self):
        raw = AgentCallResult(success=True, response={"result": {"message": ""}})

        assert from_structured(raw) is None

    def test_raw_response(self):
        raw = AgentCallResult(success=True, raw_response='noise {"message": "from raw", "score": 4} noise')

        state = from_raw_response(raw)
        assert state.message == "from raw"
        assert state.score == 4

    def test_text_field(self):
        raw = AgentCallResult(
            success=True,
            response={"result": {"text": '```json\n{"message": "from text"}\n```'}},
        )

        assert from_text_field(raw).message == "from text"

    def test_text_field_falls_back_to_response_message(self):
        raw = AgentCallResult(success=True, response={"message": '{"message": "inner"}'})

        assert from_text_field(raw).message == "inner"

    def test_plain_text(self):
        raw = AgentCallResult(success=True, response={"result": {"text": "What year was Byzantium founded?"}})

        state = from_plain_text(raw)
        assert state.message == "What year was Byzantium founded?"
        assert state.question_number == 0
        assert state.total == 10

    def test_plain_text_from_raw_prose(self):
        raw = AgentCallResult(success=True, raw_response="Plain prose reply")

        assert from_plain_text(raw).message == "Plain prose reply"

    def test_plain_text_ignores_json_without_message(self):
        raw = AgentCallResult(success=True, raw_response='{"status": "ok"}')

        assert from_plain_text(raw) is None


class TestNormalize:
    """Tests for the tiered normalizer."""

    def test_structured_wins_over_text(self):
        """Test tier 1 output is returned unchanged when text conflicts."""
        raw = AgentCallResult(
            success=True,
            response={"result": dict(FULL_PAYLOAD, text='{"message": "other", "score": 9}')},
            raw_response='{"message": "raw other", "score": 7}',
        )

        state = normalize(raw)

        assert state == QuizState.from_dict(FULL_PAYLOAD)

    def test_raw_response_used_when_structured_empty(self):
        raw = AgentCallResult(
            success=True,
            response={"result": {}},
            raw_response='Here:\n```json\n{"message": "Q3", "question_number": 3}\n```',
        )

        state = normalize(raw)

        assert state.message == "Q3"
        assert state.question_number == 3

    def test_plain_text_last_resort(self):
        raw = AgentCallResult(success=True, response={"result": {"text": "Prose only, no JSON."}})

        state = normalize(raw)

        assert state.message == "Prose only, no JSON."
        assert state.is_complete is False

    def test_accepts_mapping(self):
        state = normalize({"success": True, "response": {"result": {"message": "dict input"}}})

        assert state.message == "dict input"

    def test_failure_when_nothing_usable(self):
        result = normalize(AgentCallResult(success=True, response={"result": {"text": ""}}))

        assert isinstance(result, ParseFailure)
        assert not result

    @pytest.mark.parametrize("raw", [
        None,
        42,
        "a string",
        [],
        {},
        {"response": None},
        {"response": []},
        {"response": {"result": None}},
        {"response": {"result": {"message": None, "text": None}}},
        {"response": {"result": {"message": ["list"]}}},
        {"response": {"result": {"text": {"not": "a string"}}}, "raw_response": 17},
        {"raw_response": "{" * 5000},
        {"raw_response": "[" * 5000 + "]" * 5000},
        {"raw_response": '{"message": {"nested": true}}'},
        {"raw_response": '"just a json string"'},
        {"response": {"message": ""}, "raw_response": ""},
    ])
    def test_totality(self, raw):
        """Test malformed inputs never raise and never produce a partial state."""
        result = normalize(raw)

        assert isinstance(result, (QuizState, ParseFailure))
        if isinstance(result, QuizState):
            assert result.is_valid
            assert isinstance(result.score, int)
            assert isinstance(result.total, int) and result.total > 0


class TestClassify:
    """Tests for the correctness classifier."""

    def test_correct(self):
        assert classify("Correct! Great job") is Correctness.CORRECT

    def test_not_correct(self):
        assert classify("That's not correct, try again") is Correctness.INCORRECT

    def test_unknown(self):
        assert classify("Interesting guess") is Correctness.UNKNOWN

    def test_incorrect(self):
        assert classify("Incorrect. The answer was 1453.") is Correctness.INCORRECT

    def test_wrong_and_not_quite(self):
        assert classify("Wrong, sadly.") is Correctness.INCORRECT
        assert classify("Not quite! Close though.") is Correctness.INCORRECT

    def test_case_insensitive(self):
        assert classify("CORRECT!!!") is Correctness.CORRECT

    def test_non_string(self):
        assert classify(None) is Correctness.UNKNOWN

    def test_as_flag(self):
        assert Correctness.CORRECT.as_flag() is True
        assert Correctness.INCORRECT.as_flag() is False
        assert Correctness.UNKNOWN.as_flag() is None
