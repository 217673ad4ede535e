"""
Unit tests for QuizService: option parsing, response parsing, record
validation, shuffling and the generation pipeline.
"""
import json
import random
from unittest.mock import patch

from django.test import SimpleTestCase, override_settings

from core.exceptions import (
    APIIntegrationError,
    InputValidationError,
    MalformedLLMOutputError,
)
from quiz.services import QuizService
from tests.fixtures import STUDY_TEXT, QuizFixtures


class TestRequestOptions(SimpleTestCase):

    def test_test_type_defaults_to_mixed(self):
        self.assertEqual(QuizService.parse_test_type(None), "mixed")
        self.assertEqual(QuizService.parse_test_type(3), "mixed")

    def test_known_test_types_pass(self):
        for test_type in ("multiple_choice", "true_false", "open_ended", "mixed"):
            self.assertEqual(QuizService.parse_test_type(test_type), test_type)

    def test_unknown_test_type_is_rejected(self):
        with self.assertRaises(InputValidationError) as context:
            QuizService.parse_test_type("essay")
        self.assertEqual(context.exception.status_code, 400)

    def test_question_count_defaults_to_ten(self):
        for raw in (None, "", "abc", True, [5]):
            self.assertEqual(QuizService.parse_question_count(raw), 10, raw)

    def test_question_count_parses_leading_integer(self):
        self.assertEqual(QuizService.parse_question_count("12"), 12)
        self.assertEqual(QuizService.parse_question_count(" 7 "), 7)
        self.assertEqual(QuizService.parse_question_count("8.9"), 8)
        self.assertEqual(QuizService.parse_question_count(15), 15)

    def test_question_count_is_clamped(self):
        self.assertEqual(QuizService.parse_question_count(0), 1)
        self.assertEqual(QuizService.parse_question_count("-4"), 1)
        self.assertEqual(QuizService.parse_question_count(31), 30)
        self.assertEqual(QuizService.parse_question_count("500"), 30)

    def test_very_long_digit_runs_are_clamped(self):
        self.assertEqual(QuizService.parse_question_count("9" * 5000), 30)
        self.assertEqual(QuizService.parse_question_count("-" + "9" * 5000), 1)
        self.assertEqual(QuizService.parse_question_count("1234567"), 30)

    def test_leading_zeros_are_ignored(self):
        self.assertEqual(QuizService.parse_question_count("0000000012"), 12)
        self.assertEqual(QuizService.parse_question_count("0"), 1)
        self.assertEqual(QuizService.parse_question_count("+5"), 5)

    def test_short_text_is_rejected(self):
        with self.assertRaises(InputValidationError):
            QuizService.validate_source_text("too short")

    def test_whitespace_does_not_count_towards_length(self):
        with self.assertRaises(InputValidationError):
            QuizService.validate_source_text("   " + "a" * 49 + "   ")

    def test_non_string_text_is_rejected(self):
        with self.assertRaises(InputValidationError):
            QuizService.validate_source_text(None)

    def test_fifty_characters_is_enough(self):
        text = "a" * 50
        self.assertEqual(QuizService.validate_source_text(text), text)

    @override_settings(QUIZ_MIN_TEXT_LENGTH=5)
    def test_minimum_length_comes_from_settings(self):
        self.assertEqual(QuizService.validate_source_text("hello"), "hello")


class TestParseResponse(SimpleTestCase):

    def test_plain_json(self):
        raw = QuizFixtures.llm_reply([QuizFixtures.true_false()])
        self.assertEqual(QuizService.parse_response(raw), [QuizFixtures.true_false()])

    def test_json_surrounded_by_prose(self):
        raw = "Sure! Here is your test:\n```json\n" + QuizFixtures.llm_reply([QuizFixtures.open_ended()]) + "\n```\nGood luck."
        self.assertEqual(QuizService.parse_response(raw), [QuizFixtures.open_ended()])

    def test_unparsable_text_is_malformed(self):
        with self.assertRaises(MalformedLLMOutputError) as context:
            QuizService.parse_response("I cannot help with that.")
        self.assertEqual(context.exception.status_code, 502)

    def test_broken_object_is_malformed(self):
        with self.assertRaises(MalformedLLMOutputError):
            QuizService.parse_response('{"questions": [ {"type": }')

    def test_non_object_json_is_malformed(self):
        with self.assertRaises(MalformedLLMOutputError):
            QuizService.parse_response('[1, 2, 3]')

    def test_missing_questions_list_is_malformed(self):
        with self.assertRaises(MalformedLLMOutputError):
            QuizService.parse_response('{"items": []}')
        with self.assertRaises(MalformedLLMOutputError):
            QuizService.parse_response('{"questions": "none"}')

    def test_safe_parse_json_returns_none_for_non_strings(self):
        self.assertIsNone(QuizService.safe_parse_json(None))


class TestValidateQuestions(SimpleTestCase):

    def test_valid_records_are_kept_in_order(self):
        records = QuizFixtures.mixed_questions()
        self.assertEqual(QuizService.validate_questions(records), records)

    def test_extra_keys_are_not_re_emitted(self):
        record = QuizFixtures.true_false(difficulty="easy")
        result = QuizService.validate_questions([record])
        self.assertNotIn("difficulty", result[0])

    def test_missing_common_fields_are_dropped(self):
        records = [
            QuizFixtures.true_false(question=""),
            QuizFixtures.true_false(explanation="   "),
            {k: v for k, v in QuizFixtures.true_false().items() if k != "type"},
        ]
        with self.assertLogs("quiz.services", level="WARNING"):
            self.assertEqual(QuizService.validate_questions(records), [])

    def test_unknown_type_is_dropped(self):
        self.assertEqual(QuizService.validate_questions([QuizFixtures.open_ended(type="essay")]), [])

    def test_non_object_records_are_dropped(self):
        self.assertEqual(QuizService.validate_questions(["question?", 3, None]), [])

    def test_multiple_choice_index_must_be_within_options(self):
        records = [
            QuizFixtures.multiple_choice(correct_index=0),
            QuizFixtures.multiple_choice(correct_index=2),
            QuizFixtures.multiple_choice(correct_index=3),
            QuizFixtures.multiple_choice(correct_index=-1),
        ]
        result = QuizService.validate_questions(records)
        self.assertEqual([q["correctAnswerIndex"] for q in result], [0, 2])
        for question in result:
            self.assertTrue(0 <= question["correctAnswerIndex"] < len(question["options"]))

    def test_multiple_choice_structure(self):
        records = [
            QuizFixtures.multiple_choice(options=["only one"], correct_index=0),
            QuizFixtures.multiple_choice(options="A, B, C"),
            QuizFixtures.multiple_choice(correct_index="1"),
            QuizFixtures.multiple_choice(correct_index=True),
            QuizFixtures.multiple_choice(correct_index=1.5),
        ]
        self.assertEqual(QuizService.validate_questions(records), [])

    def test_true_false_needs_a_boolean(self):
        records = [
            QuizFixtures.true_false(correctAnswer="true"),
            QuizFixtures.true_false(correctAnswer=1),
            {k: v for k, v in QuizFixtures.true_false().items() if k != "correctAnswer"},
        ]
        self.assertEqual(QuizService.validate_questions(records), [])

    def test_open_ended_needs_an_ideal_answer(self):
        records = [
            QuizFixtures.open_ended(idealAnswer=""),
            QuizFixtures.open_ended(idealAnswer="  "),
            QuizFixtures.open_ended(idealAnswer=["a"]),
        ]
        self.assertEqual(QuizService.validate_questions(records), [])

    def test_partial_success_keeps_the_valid_subset(self):
        records = [
            QuizFixtures.multiple_choice(correct_index=9),
            QuizFixtures.true_false(),
            QuizFixtures.open_ended(idealAnswer=""),
            QuizFixtures.open_ended(),
        ]
        self.assertEqual(
            QuizService.validate_questions(records),
            [QuizFixtures.true_false(), QuizFixtures.open_ended()],
        )


class TestShuffleQuestions(SimpleTestCase):

    def setUp(self):
        self.questions = [QuizFixtures.true_false(question=f"Statement {i}") for i in range(10)]

    def test_non_mixed_order_is_unchanged(self):
        for test_type in ("multiple_choice", "true_false", "open_ended"):
            questions = list(self.questions)
            result = QuizService.shuffle_questions(questions, test_type, rng=random.Random(1))
            self.assertEqual(result, self.questions)

    def test_mixed_is_a_permutation_in_place(self):
        questions = list(self.questions)
        result = QuizService.shuffle_questions(questions, "mixed", rng=random.Random(42))

        self.assertIs(result, questions)
        self.assertEqual(len(result), len(self.questions))
        self.assertCountEqual(
            [q["question"] for q in result],
            [q["question"] for q in self.questions],
        )

    def test_mixed_actually_reorders(self):
        orders = set()
        rng = random.Random(7)
        for _ in range(20):
            result = QuizService.shuffle_questions(list(self.questions), "mixed", rng=rng)
            orders.add(tuple(q["question"] for q in result))
        self.assertGreater(len(orders), 1)

    def test_every_permutation_of_three_appears(self):
        rng = random.Random(0)
        seen = set()
        for _ in range(300):
            result = QuizService.shuffle_questions(["a", "b", "c"], "mixed", rng=rng)
            seen.add(tuple(result))
        self.assertEqual(len(seen), 6)

    def test_empty_list(self):
        self.assertEqual(QuizService.shuffle_questions([], "mixed"), [])


class TestGenerateTest(SimpleTestCase):

    def setUp(self):
        patcher = patch("quiz.services.ai_client")
        self.ai_client = patcher.start()
        self.addCleanup(patcher.stop)

    def test_pipeline_returns_validated_questions(self):
        records = [QuizFixtures.multiple_choice(), QuizFixtures.multiple_choice(correct_index=5)]
        self.ai_client.generate_json.return_value = QuizFixtures.llm_reply(records)

        result = QuizService.generate_test(STUDY_TEXT, "multiple_choice", 2)

        self.assertEqual(result, [QuizFixtures.multiple_choice()])

    def test_prompt_is_built_from_arguments(self):
        self.ai_client.generate_json.return_value = QuizFixtures.llm_reply([])

        QuizService.generate_test(STUDY_TEXT, "open_ended", 4)

        (messages,) = self.ai_client.generate_json.call_args.args
        system, user = messages[0]["content"], messages[1]["content"]
        self.assertEqual([m["role"] for m in messages], ["system", "user"])
        self.assertIn("4 questions", system)
        self.assertIn("open_ended", system)
        self.assertIn(STUDY_TEXT, user)

    def test_shortfall_is_logged(self):
        self.ai_client.generate_json.return_value = QuizFixtures.llm_reply([QuizFixtures.true_false()])

        with self.assertLogs("quiz.services", level="WARNING") as logs:
            result = QuizService.generate_test(STUDY_TEXT, "true_false", 5)

        self.assertEqual(len(result), 1)
        self.assertTrue(any("1 of 5" in line for line in logs.output))

    def test_mixed_tests_are_shuffled(self):
        records = QuizFixtures.mixed_questions()
        self.ai_client.generate_json.return_value = QuizFixtures.llm_reply(records)

        with patch("quiz.services.QuizService.shuffle_questions", side_effect=lambda q, t: list(reversed(q))) as shuffle:
            result = QuizService.generate_test(STUDY_TEXT, "mixed", 3)

        shuffle.assert_called_once()
        self.assertEqual(result, list(reversed(records)))

    def test_malformed_reply_never_yields_a_partial_list(self):
        self.ai_client.generate_json.return_value = "no json here"

        with self.assertRaises(MalformedLLMOutputError):
            QuizService.generate_test(STUDY_TEXT, "mixed", 3)

    def test_provider_failure_propagates(self):
        self.ai_client.generate_json.side_effect = APIIntegrationError("boom")

        with self.assertRaises(APIIntegrationError):
            QuizService.generate_test(STUDY_TEXT, "mixed", 3)

    def test_reply_is_valid_json_text(self):
        self.ai_client.generate_json.return_value = json.dumps({"questions": [QuizFixtures.open_ended()]}, indent=2)
        self.assertEqual(QuizService.generate_test(STUDY_TEXT, "open_ended", 1), [QuizFixtures.open_ended()])
