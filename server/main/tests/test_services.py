from unittest import mock

from django.db import IntegrityError, transaction
from django.test import TestCase, TransactionTestCase

from main.common.managers import QuizAttemptQuerySet
from main.models import Content, Quiz, QuizAttempt
from main.quiz.exceptions import AlreadyCompleted, NotFound
from main.quiz.services import (
    QuizAttemptService,
    QuizRef,
    percentage_of,
    resolve_quiz,
    resolve_quiz_id,
    score_answers,
)

from .helpers import create_class, create_quiz, create_test_user, default_options


class LookupTests(TestCase):

    def setUp(self):
        self.teacher = create_test_user(role="teacher")
        self.school_class = create_class()
        self.quiz = create_quiz(self.school_class, author=self.teacher,
                                questions=[(1, None)])

    def test_quiz_id_resolves_directly(self):
        self.assertEqual(resolve_quiz(self.quiz.pk), self.quiz)
        self.assertEqual(resolve_quiz_id(str(self.quiz.pk)), self.quiz.pk)

    def test_content_id_resolves_to_its_quiz(self):
        self.assertEqual(resolve_quiz(QuizRef.content(self.quiz.content_id)), self.quiz)

    def test_ambiguous_id_falls_back_to_content(self):
        # notes advance the content ids past every quiz id
        for n in range(3):
            Content.objects.create(title=f"Note {n}", content_type=Content.NOTE,
                                   school_class=self.school_class, subject=self.quiz.content.subject)
        other = create_quiz(self.school_class, title="Decimals")
        self.assertFalse(Quiz.objects.filter(pk=other.content_id).exists())

        self.assertEqual(resolve_quiz(other.content_id), other)
        self.assertEqual(resolve_quiz(str(other.content_id)), other)

    def test_typed_quiz_ref_skips_content_probe(self):
        with self.assertRaises(NotFound):
            resolve_quiz(QuizRef.quiz(self.quiz.content_id + 1000))

    def test_unknown_id_raises_not_found(self):
        with self.assertRaises(NotFound):
            resolve_quiz(999999)
        with self.assertRaises(NotFound):
            resolve_quiz("not-a-number")


class ScoringTests(TestCase):

    def setUp(self):
        self.school_class = create_class()

    def test_correct_answer_earns_points(self):
        quiz = create_quiz(self.school_class, questions=[(1, default_options(correct=2))])
        question = quiz.questions.get()

        result = score_answers(quiz.questions.all(), {str(question.pk): "2"})
        self.assertEqual((result.score, result.total_possible_score), (1, 1))
        self.assertEqual(result.percentage, 100)

        result = score_answers(quiz.questions.all(), {str(question.pk): "1"})
        self.assertEqual((result.score, result.total_possible_score), (0, 1))
        self.assertFalse(result.details[0]["isCorrect"])

    def test_unanswered_questions_count_towards_total(self):
        quiz = create_quiz(self.school_class, questions=[(5, None), (10, None)])
        first, _ = quiz.questions.all()

        result = score_answers(quiz.questions.all(), {str(first.pk): "2"})
        self.assertEqual(result.score, 5)
        self.assertEqual(result.total_possible_score, 15)
        self.assertEqual(result.percentage, 33.33)
        self.assertIsNone(result.details[1]["selectedOptionId"])

    def test_no_questions_scores_zero(self):
        quiz = create_quiz(self.school_class)
        result = score_answers(quiz.questions.all(), {"1": "1"})
        self.assertEqual((result.score, result.total_possible_score, result.percentage), (0, 0, 0))

    def test_percentage_of_zero_total(self):
        self.assertEqual(percentage_of(0, 0), 0)
        self.assertEqual(percentage_of(1, 3), 33.33)


class QuizAttemptServiceTests(TestCase):

    def setUp(self):
        self.teacher = create_test_user(role="teacher")
        self.student = create_test_user(role="student")
        self.other_student = create_test_user(role="student", username="other_student")
        self.school_class = create_class(students=[self.student, self.other_student])
        self.quiz = create_quiz(self.school_class, author=self.teacher,
                                questions=[(1, None), (1, None)])
        self.q1, self.q2 = self.quiz.questions.all()

    def test_begin_creates_then_resumes(self):
        attempt, created = QuizAttemptService.begin(self.student, self.quiz.pk)
        self.assertTrue(created)
        self.assertEqual(attempt.status, "in_progress")

        again, created = QuizAttemptService.begin(self.student, self.quiz.pk)
        self.assertFalse(created)
        self.assertEqual(again.pk, attempt.pk)
        self.assertEqual(QuizAttempt.objects.for_pair(self.student, self.quiz).count(), 1)

    def test_begin_by_content_id_targets_same_attempt(self):
        attempt, _ = QuizAttemptService.begin(self.student, QuizRef.quiz(self.quiz.pk))
        again, created = QuizAttemptService.begin(self.student, QuizRef.content(self.quiz.content_id))
        self.assertFalse(created)
        self.assertEqual(again.pk, attempt.pk)

    def test_begin_after_completion_is_rejected(self):
        attempt, _ = QuizAttemptService.begin(self.student, self.quiz.pk)
        QuizAttemptService.complete(attempt.pk, self.student, {})

        with self.assertRaises(AlreadyCompleted) as ctx:
            QuizAttemptService.begin(self.student, self.quiz.pk)
        self.assertEqual(ctx.exception.attempt_id, attempt.pk)

    def test_begin_rejects_quizzes_outside_enrolled_classes(self):
        outsider = create_test_user(role="student", username="outsider")
        draft = create_quiz(self.school_class, author=self.teacher, title="Draft",
                            questions=[(1, None)], status=Content.DRAFT)

        with self.assertRaises(NotFound):
            QuizAttemptService.begin(outsider, self.quiz.pk)
        with self.assertRaises(NotFound):
            QuizAttemptService.begin(self.student, draft.pk)
        self.assertFalse(QuizAttempt.objects.exists())

    def test_database_rejects_second_in_progress_attempt(self):
        QuizAttemptService.begin(self.student, self.quiz.pk)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                QuizAttempt.objects.create(quiz=self.quiz, student=self.student)

    def test_save_progress_overwrites_answers(self):
        attempt, _ = QuizAttemptService.begin(self.student, self.quiz.pk)

        QuizAttemptService.save_progress(attempt.pk, self.student, {str(self.q1.pk): 1})
        attempt = QuizAttemptService.save_progress(
            attempt.pk, self.student, {str(self.q2.pk): {"selectedOptionId": 2}})

        attempt.refresh_from_db()
        self.assertEqual(attempt.answers, {str(self.q2.pk): {"selectedOptionId": "2"}})
        self.assertIsNone(attempt.score)
        self.assertIsNone(attempt.completed_at)

    def test_complete_scores_submitted_answers_only(self):
        attempt, _ = QuizAttemptService.begin(self.student, self.quiz.pk)
        QuizAttemptService.save_progress(attempt.pk, self.student, {str(self.q1.pk): "2"})

        attempt, result = QuizAttemptService.complete(
            attempt.pk, self.student, {str(self.q2.pk): "2"})

        self.assertEqual(result.score, 1)
        self.assertEqual(result.total_possible_score, 2)
        self.assertEqual(result.percentage, 50)
        self.assertEqual(attempt.score, 1)
        self.assertEqual(attempt.answers, {str(self.q2.pk): {"selectedOptionId": "2"}})
        self.assertTrue(attempt.is_completed)

    def test_completed_attempt_is_final(self):
        attempt, _ = QuizAttemptService.begin(self.student, self.quiz.pk)
        QuizAttemptService.complete(attempt.pk, self.student, {str(self.q1.pk): "2"})

        with self.assertRaises(AlreadyCompleted):
            QuizAttemptService.save_progress(attempt.pk, self.student, {})
        with self.assertRaises(AlreadyCompleted):
            QuizAttemptService.complete(attempt.pk, self.student, {})

        attempt.refresh_from_db()
        self.assertEqual(attempt.score, 1)

    def test_other_students_attempt_is_not_found(self):
        attempt, _ = QuizAttemptService.begin(self.student, self.quiz.pk)
        with self.assertRaises(NotFound):
            QuizAttemptService.save_progress(attempt.pk, self.other_student, {})
        with self.assertRaises(NotFound):
            QuizAttemptService.complete(attempt.pk, self.other_student, {})

    def test_evaluate_matches_stored_score(self):
        attempt, _ = QuizAttemptService.begin(self.student, self.quiz.pk)
        attempt, result = QuizAttemptService.complete(
            attempt.pk, self.student, {str(self.q1.pk): "2", str(self.q2.pk): "3"})
        self.assertEqual(QuizAttemptService.evaluate(attempt).score, result.score)

    def test_reset_allows_a_fresh_attempt(self):
        attempt, _ = QuizAttemptService.begin(self.student, self.quiz.pk)
        QuizAttemptService.complete(attempt.pk, self.student, {})

        deleted = QuizAttemptService.reset(self.student, self.quiz)
        self.assertEqual(deleted, 1)

        _, created = QuizAttemptService.begin(self.student, self.quiz.pk)
        self.assertTrue(created)


class QuizAttemptRaceTests(TransactionTestCase):
    """Begin must hand back the winner when a concurrent begin commits first."""

    def setUp(self):
        self.teacher = create_test_user(role="teacher")
        self.student = create_test_user(role="student")
        self.school_class = create_class(students=[self.student])
        self.quiz = create_quiz(self.school_class, author=self.teacher,
                                questions=[(1, None)])

    def test_lost_race_returns_the_committed_attempt(self):
        rival = QuizAttempt.objects.create(quiz=self.quiz, student=self.student)
        for_pair = QuizAttemptQuerySet.for_pair
        calls = []

        def stale_first_read(queryset, student, quiz):
            # the locking read misses the rival, as if it committed just after
            calls.append(quiz.pk)
            if len(calls) == 1:
                return queryset.none()
            return for_pair(queryset, student, quiz)

        with mock.patch.object(QuizAttemptQuerySet, "for_pair", stale_first_read):
            attempt, created = QuizAttemptService.begin(self.student, self.quiz.pk)

        self.assertFalse(created)
        self.assertEqual(attempt.pk, rival.pk)
        self.assertEqual(len(calls), 2)
        self.assertEqual(
            QuizAttempt.objects.filter(quiz=self.quiz, student=self.student).count(), 1)
