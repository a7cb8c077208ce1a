import json

from django.test import SimpleTestCase

from main.quiz.answers import (
    PLACEHOLDER_OPTIONS,
    is_truthy_flag,
    normalize_answer,
    normalize_answers,
    parse_options,
    public_options,
    resolve_correct_option_id,
    to_stored_answers,
)


class NormalizeAnswersTests(SimpleTestCase):

    def test_all_submitted_shapes_reduce_to_option_id(self):
        raw = {
            "1": "2",
            "2": 3,
            "3": {"selectedOptionId": "1"},
            "4": {"option": 4},
            "5": {"selectedOptionId": 2},
        }
        self.assertEqual(
            normalize_answers(raw),
            {"1": "2", "2": "3", "3": "1", "4": "4", "5": "2"},
        )

    def test_unanswered_entries_are_dropped(self):
        raw = {"1": None, "2": {}, "3": "", "4": {"selectedOptionId": None}, "5": "1"}
        self.assertEqual(normalize_answers(raw), {"5": "1"})

    def test_integer_question_ids_become_strings(self):
        self.assertEqual(normalize_answers({7: 2}), {"7": "2"})

    def test_float_ids_lose_trailing_zero(self):
        self.assertEqual(normalize_answer(2.0), "2")

    def test_nested_values_are_skipped_for_the_next_usable_one(self):
        self.assertEqual(normalize_answer({"choices": [1, 2], "option": 3}), "3")
        self.assertEqual(normalize_answer({"selectedOptionId": {}, "option": "2"}), "2")
        self.assertIsNone(normalize_answer({"choices": [1], "meta": {"x": None}}))

    def test_non_mapping_input_gives_empty_answers(self):
        self.assertEqual(normalize_answers(None), {})
        self.assertEqual(normalize_answers(["1", "2"]), {})

    def test_normalizing_twice_changes_nothing(self):
        raw = {"1": {"selectedOptionId": 2}, "2": "4", "3": {"x": 1}}
        once = normalize_answers(raw)
        self.assertEqual(normalize_answers(once), once)

    def test_stored_shape_normalizes_back(self):
        answers = {"1": "2", "9": "4"}
        stored = to_stored_answers(answers)
        self.assertEqual(stored, {"1": {"selectedOptionId": "2"}, "9": {"selectedOptionId": "4"}})
        self.assertEqual(normalize_answers(stored), answers)


class OptionResolverTests(SimpleTestCase):

    def test_truthy_flags(self):
        for value in (True, "true", 1, "1"):
            self.assertTrue(is_truthy_flag(value), value)
        for value in (False, "false", 0, "0", None, "yes", 2, []):
            self.assertFalse(is_truthy_flag(value), value)

    def test_first_flagged_option_wins(self):
        options = [
            {"text": "a"},
            {"text": "b", "isCorrect": "true"},
            {"text": "c", "isCorrect": True},
        ]
        self.assertEqual(resolve_correct_option_id(options), "2")

    def test_snake_case_flag(self):
        options = [{"text": "a"}, {"text": "b"}, {"text": "c", "is_correct": 1}]
        self.assertEqual(resolve_correct_option_id(options), "3")

    def test_json_encoded_options(self):
        options = json.dumps([{"text": "a", "isCorrect": False}, {"text": "b", "isCorrect": "1"}])
        self.assertEqual(resolve_correct_option_id(options), "2")

    def test_json_string_with_snake_case_string_flag(self):
        self.assertEqual(resolve_correct_option_id('[{"is_correct":"1","text":"X"}]'), "1")

    def test_no_flag_falls_back_to_first_option(self):
        with self.assertLogs("main.quiz.answers", level="WARNING"):
            self.assertEqual(resolve_correct_option_id([{"text": "a"}, {"text": "b"}], 5), "1")

    def test_corrupt_options_use_placeholder(self):
        with self.assertLogs("main.quiz.answers", level="WARNING") as logs:
            options = parse_options("{not json", question_id=3)
        self.assertEqual(options, [dict(option) for option in PLACEHOLDER_OPTIONS])
        self.assertIn("question 3", logs.output[0])

    def test_empty_options_use_placeholder(self):
        with self.assertLogs("main.quiz.answers", level="WARNING"):
            self.assertEqual(len(parse_options([])), 4)
        with self.assertLogs("main.quiz.answers", level="WARNING"):
            self.assertEqual(resolve_correct_option_id(None), "1")

    def test_public_options_hide_answers_by_default(self):
        options = [{"text": "a", "isCorrect": True}, {"text": "b"}]
        self.assertEqual(public_options(options), [{"id": 1, "text": "a"}, {"id": 2, "text": "b"}])
        self.assertEqual(
            public_options(options, include_answers=True),
            [{"id": 1, "text": "a", "isCorrect": True}, {"id": 2, "text": "b", "isCorrect": False}],
        )
