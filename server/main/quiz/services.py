"""
Quiz attempt state machine: ``no-attempt -> in-progress -> completed``.

Nothing leaves ``completed``. A student holds at most one in-progress attempt
per quiz (guarded by row locks here and by the ``uniq_in_progress_attempt``
constraint in the database) and a completed attempt blocks new ones.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from django.db import IntegrityError, transaction
from django.utils import timezone

from main.common.audit import log_action
from main.models import Content, Question, Quiz, QuizAttempt
from main.quiz.answers import normalize_answers, resolve_correct_option_id, to_stored_answers
from main.quiz.exceptions import AlreadyCompleted, NotFound

logger = logging.getLogger(__name__)


# ----------------------------- Lookup ---------------------------------------
@dataclass(frozen=True)
class QuizRef:
    """
    External quiz identifier. Clients address a quiz either by its own id or
    by the id of the Content row it hangs off; ``unknown`` means "could be either".
    """
    QUIZ = "quiz"
    CONTENT = "content"
    UNKNOWN = "unknown"

    kind: str
    value: int

    @classmethod
    def quiz(cls, value) -> "QuizRef":
        return cls(cls.QUIZ, int(value))

    @classmethod
    def content(cls, value) -> "QuizRef":
        return cls(cls.CONTENT, int(value))

    @classmethod
    def ambiguous(cls, value) -> "QuizRef":
        return cls(cls.UNKNOWN, int(value))


def _quiz_for_content(content_id: int) -> Optional[Quiz]:
    content = Content.objects.filter(pk=content_id, content_type=Content.QUIZ).first()
    if content is None:
        return None
    return Quiz.objects.filter(content=content).select_related("content").first()


def resolve_quiz(ref: Union[QuizRef, int, str]) -> Quiz:
    """
    Resolve ``ref`` to a Quiz, probing the quiz id first and the content id second.
    Raises ``NotFound`` when neither matches.
    """
    if not isinstance(ref, QuizRef):
        try:
            ref = QuizRef.ambiguous(ref)
        except (TypeError, ValueError):
            raise NotFound(f"No quiz found for id {ref!r}")

    quiz = None
    if ref.kind in (QuizRef.QUIZ, QuizRef.UNKNOWN):
        quiz = Quiz.objects.filter(pk=ref.value).select_related("content").first()
    if quiz is None and ref.kind in (QuizRef.CONTENT, QuizRef.UNKNOWN):
        quiz = _quiz_for_content(ref.value)

    if quiz is None:
        raise NotFound(f"No quiz found for id {ref.value}")
    return quiz


def resolve_quiz_id(ref: Union[QuizRef, int, str]) -> int:
    return resolve_quiz(ref).pk


# ----------------------------- Scoring --------------------------------------
@dataclass
class ScoreResult:
    score: int = 0
    total_possible_score: int = 0
    details: list = field(default_factory=list)

    @property
    def percentage(self) -> float:
        return percentage_of(self.score, self.total_possible_score)


def percentage_of(score, total) -> float:
    if not total:
        return 0
    return round(score * 100.0 / total, 2)


def score_answers(questions: Iterable[Question], answers: dict[str, str]) -> ScoreResult:
    """
    Award each question's points when the selected option id equals its
    correct option id. Every question counts towards the total.
    """
    result = ScoreResult()
    for question in questions:
        question_id = str(question.pk)
        selected = answers.get(question_id)
        correct = resolve_correct_option_id(question.options, question_id)
        is_correct = selected is not None and selected == correct

        result.total_possible_score += question.points
        if is_correct:
            result.score += question.points

        result.details.append({
            "questionId": question.pk,
            "selectedOptionId": selected,
            "correctOptionId": correct,
            "isCorrect": is_correct,
            "points": question.points,
        })
    return result


# ----------------------------- State machine --------------------------------
class QuizAttemptService:

    @staticmethod
    def _load_owned(attempt_id, student) -> QuizAttempt:
        try:
            return (
                QuizAttempt.objects.select_for_update()
                .select_related("quiz")
                .get(pk=attempt_id, student=student)
            )
        except (QuizAttempt.DoesNotExist, ValueError, TypeError):
            raise NotFound("Quiz attempt not found")

    @staticmethod
    def begin(student, quiz_ref) -> tuple[QuizAttempt, bool]:
        """
        Start or resume ``student``'s attempt at the referenced quiz.

        Returns ``(attempt, created)``. Raises ``AlreadyCompleted`` when the
        student already finished this quiz and ``NotFound`` for unknown ids or
        quizzes the student cannot see (drafts, other classes).
        """
        quiz = resolve_quiz(quiz_ref)
        if not Content.objects.quizzes().for_student(student).filter(pk=quiz.content_id).exists():
            raise NotFound(f"No quiz found for id {quiz.pk}")

        with transaction.atomic():
            attempts = list(
                QuizAttempt.objects.select_for_update()
                .for_pair(student, quiz)
                .order_by("started_at", "id")
            )

            completed = next((a for a in attempts if a.is_completed), None)
            if completed is not None:
                logger.info("Student %s already completed quiz %s (attempt %s)",
                            student.pk, quiz.pk, completed.pk)
                raise AlreadyCompleted(attempt_id=completed.pk)

            in_progress = next((a for a in attempts if not a.is_completed), None)
            if in_progress is not None:
                logger.info("Resuming attempt %s for student %s", in_progress.pk, student.pk)
                return in_progress, False

            try:
                with transaction.atomic():
                    attempt = QuizAttempt.objects.create(quiz=quiz, student=student, answers={})
            except IntegrityError:
                # a concurrent begin won the race; hand back its attempt
                attempt = QuizAttempt.objects.in_progress().for_pair(student, quiz).get()
                return attempt, False

        logger.info("Created attempt %s for student %s on quiz %s", attempt.pk, student.pk, quiz.pk)
        log_action("begin_attempt", attempt, user=student, quiz=quiz.pk)
        return attempt, True

    @staticmethod
    @transaction.atomic
    def save_progress(attempt_id, student, raw_answers) -> QuizAttempt:
        """Overwrite the in-progress answers; score and completion are untouched."""
        attempt = QuizAttemptService._load_owned(attempt_id, student)
        if attempt.is_completed:
            raise AlreadyCompleted(attempt_id=attempt.pk)

        attempt.answers = to_stored_answers(normalize_answers(raw_answers))
        attempt.save(update_fields=["answers"])

        logger.info("Saved progress on attempt %s (%d answers)", attempt.pk, len(attempt.answers))
        return attempt

    @staticmethod
    @transaction.atomic
    def complete(attempt_id, student, raw_answers) -> tuple[QuizAttempt, ScoreResult]:
        """Score ``raw_answers``, persist them with the score and close the attempt."""
        attempt = QuizAttemptService._load_owned(attempt_id, student)
        if attempt.is_completed:
            raise AlreadyCompleted(attempt_id=attempt.pk)

        answers = normalize_answers(raw_answers)
        result = score_answers(attempt.quiz.questions.all(), answers)

        attempt.answers = to_stored_answers(answers)
        attempt.score = result.score
        attempt.completed_at = timezone.now()
        attempt.save(update_fields=["answers", "score", "completed_at"])

        logger.info("Completed attempt %s: %s/%s", attempt.pk, result.score, result.total_possible_score)
        log_action("complete_attempt", attempt, user=student,
                   score=result.score, total=result.total_possible_score)
        return attempt, result

    @staticmethod
    def evaluate(attempt: QuizAttempt) -> ScoreResult:
        """Re-score stored answers for display; does not modify the attempt."""
        return score_answers(attempt.quiz.questions.all(), normalize_answers(attempt.answers))

    @staticmethod
    def reset(student, quiz: Optional[Quiz] = None, actor=None) -> int:
        """Delete a student's attempts (optionally for one quiz). Administrative only."""
        qs = QuizAttempt.objects.filter(student=student)
        if quiz is not None:
            qs = qs.filter(quiz=quiz)
        deleted, _ = qs.delete()

        logger.info("Reset %d quiz attempts for student %s", deleted, student.pk)
        log_action("reset_attempts", student, user=actor,
                   quiz=quiz.pk if quiz is not None else "all", deleted=deleted)
        return deleted
