# ==============================================
# File: main/common/managers.py
# Purpose: Role-aware querysets for content and quiz attempts
# ==============================================
from __future__ import annotations
from django.db import models


class ContentQuerySet(models.QuerySet):
    """QuerySet helpers for learning material visibility."""

    def published(self) -> "ContentQuerySet":
        return self.filter(status="published")

    def quizzes(self) -> "ContentQuerySet":
        return self.filter(content_type="quiz")

    def for_student(self, student) -> "ContentQuerySet":
        """Published content of the classes the student is enrolled in."""
        return self.published().filter(
            school_class__enrollments__student=student
        ).distinct()

    def visible_to(self, user) -> "ContentQuerySet":
        if user.is_student:
            return self.for_student(user)
        return self


ContentManager = models.Manager.from_queryset(ContentQuerySet)


class QuizAttemptQuerySet(models.QuerySet):
    """QuerySet helpers for the attempt lifecycle."""

    def for_pair(self, student, quiz) -> "QuizAttemptQuerySet":
        return self.filter(student=student, quiz=quiz)

    def completed(self) -> "QuizAttemptQuerySet":
        return self.filter(completed_at__isnull=False)

    def in_progress(self) -> "QuizAttemptQuerySet":
        return self.filter(completed_at__isnull=True)


QuizAttemptManager = models.Manager.from_queryset(QuizAttemptQuerySet)
