# quiz/services.py
import json
import logging
import random
import re

from django.conf import settings
from pydantic import ValidationError

from core.ai_client import ai_client
from core.exceptions import InputValidationError, MalformedLLMOutputError

from .prompts import build_prompt
from .schemas import TestType, dump_question, parse_question

logger = logging.getLogger(__name__)

DEFAULT_TEST_TYPE = TestType.MIXED.value
DEFAULT_QUESTION_COUNT = 10
MIN_QUESTION_COUNT = 1
MAX_QUESTION_COUNT = 30
MIN_TEXT_LENGTH = 50

ALLOWED_TEST_TYPES = frozenset(t.value for t in TestType)

_JSON_OBJECT_RE = re.compile(r'(\{[\s\S]*\})')
_LEADING_INT_RE = re.compile(r'^\s*([+-]?)0*(\d{1,6})')


class QuizService:
    """
    Test generation pipeline:
    - Builds the prompt from study text, test type and question count.
    - Sends one request to the AI provider.
    - Parses the reply as JSON, falling back to the first brace-delimited object.
    - Drops malformed question records, keeping the valid remainder in order.
    - Shuffles mixed tests.
    """

    # -----------------------------
    # Request options
    # -----------------------------
    @staticmethod
    def parse_test_type(raw) -> str:
        if not isinstance(raw, str):
            return DEFAULT_TEST_TYPE
        if raw not in ALLOWED_TEST_TYPES:
            raise InputValidationError("Invalid test type.")
        return raw

    @staticmethod
    def parse_question_count(raw) -> int:
        """Leading-integer parse clamped to 1..30; anything unusable means the default of 10."""
        if raw is None or raw == '' or isinstance(raw, bool):
            return DEFAULT_QUESTION_COUNT
        if isinstance(raw, int):
            count = raw
        else:
            match = _LEADING_INT_RE.match(str(raw))
            if not match:
                return DEFAULT_QUESTION_COUNT
            # at most six significant digits, longer runs still clamp
            sign, digits = match.groups()
            count = -int(digits) if sign == '-' else int(digits)
        return min(max(count, MIN_QUESTION_COUNT), MAX_QUESTION_COUNT)

    @staticmethod
    def validate_source_text(text) -> str:
        min_length = getattr(settings, 'QUIZ_MIN_TEXT_LENGTH', MIN_TEXT_LENGTH)
        if not isinstance(text, str) or len(text.strip()) < min_length:
            raise InputValidationError(f"Text must be at least {min_length} characters long.")
        return text

    # -----------------------------
    # Response handling
    # -----------------------------
    @staticmethod
    def safe_parse_json(raw):
        """
        Parse raw as JSON; if that fails, parse the first brace-delimited
        substring instead. Returns the parsed value or None.
        """
        if not isinstance(raw, str):
            return None
        try:
            return json.loads(raw)
        except ValueError:
            pass

        match = _JSON_OBJECT_RE.search(raw)
        if not match:
            return None
        try:
            return json.loads(match.group(1))
        except ValueError:
            return None

    @staticmethod
    def parse_response(raw) -> list:
        """Return the raw `questions` records, or raise MalformedLLMOutputError."""
        parsed = QuizService.safe_parse_json(raw)
        if not isinstance(parsed, dict):
            logger.error("LLM returned invalid JSON (truncated 300 chars): %s", str(raw)[:300])
            raise MalformedLLMOutputError("LLM returned invalid JSON")

        questions = parsed.get("questions")
        if not isinstance(questions, list):
            logger.error("LLM JSON has no 'questions' list. Keys: %s", list(parsed.keys()))
            raise MalformedLLMOutputError("LLM returned invalid JSON")
        return questions

    @staticmethod
    def validate_questions(records) -> list:
        valid = []
        for idx, record in enumerate(records or []):
            try:
                question = parse_question(record)
            except ValidationError as e:
                reasons = "; ".join(
                    f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}" for err in e.errors()
                )
                logger.warning("Question %d dropped (%s): %r", idx, reasons, record)
                continue
            valid.append(dump_question(question))
        return valid

    @staticmethod
    def shuffle_questions(questions: list, test_type: str, rng: random.Random = None) -> list:
        """Shuffle mixed tests in place (Fisher-Yates); other test types keep their order."""
        if test_type == TestType.MIXED.value:
            logger.info("Shuffling %d questions for a mixed test", len(questions))
            (rng or random).shuffle(questions)
        return questions

    # -----------------------------
    # Pipeline
    # -----------------------------
    @staticmethod
    def generate_test(text: str, test_type: str, question_count: int) -> list:
        prompt = build_prompt(text, test_type, question_count)
        raw = ai_client.generate_json(prompt.as_messages())

        records = QuizService.parse_response(raw)
        questions = QuizService.validate_questions(records)

        if len(questions) < question_count:
            logger.warning(
                "Delivering %d of %d requested questions (%d records received, %d dropped)",
                len(questions), question_count, len(records), len(records) - len(questions),
            )
        else:
            logger.info("Generated %d %s questions", len(questions), test_type)

        return QuizService.shuffle_questions(questions, test_type)
