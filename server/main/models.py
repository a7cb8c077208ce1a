from __future__ import annotations
from django.contrib.auth.models import AbstractUser, UserManager as BaseUserManager
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q, UniqueConstraint
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from main.common.base_models import AuditableModel, TimeStampedModel
from main.common.managers import ContentManager, QuizAttemptManager

ADMIN = "admin"
TEACHER = "teacher"
STUDENT = "student"


class UserManager(BaseUserManager):
    """
    User manager that defaults superusers to the admin role.
    """

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault("role", ADMIN)
        return super().create_superuser(username, email, password, **extra_fields)

    def students(self):
        return self.get_queryset().filter(role=STUDENT)

    def teachers(self):
        return self.get_queryset().filter(role=TEACHER)


class User(AbstractUser):
    """
    Single auth model for every portal; ``role`` decides what a user may see and do.
    Student-only and teacher-only profile fields are optional columns on the same row.
    """
    ROLE_CHOICES = (
        (ADMIN, "Admin"),
        (TEACHER, "Teacher"),
        (STUDENT, "Student"),
    )

    REQUIRED_FIELDS = ["email"]

    email = models.EmailField(_('email address'), unique=True)
    role = models.CharField(
        max_length=10, default=STUDENT, choices=ROLE_CHOICES
    )  # Default role is student
    phone = models.CharField(max_length=20, blank=True, default="")
    image = models.ImageField(upload_to="profiles/%Y/%m/", blank=True, null=True, default=None)
    bio = models.TextField(blank=True, default="")

    # student profile
    grade = models.PositiveSmallIntegerField(null=True, blank=True)
    section = models.CharField(max_length=10, blank=True, default="")
    roll_number = models.CharField(max_length=30, blank=True, default="")
    admission_no = models.CharField(max_length=30, blank=True, default="")
    guardian_name = models.CharField(max_length=150, blank=True, default="")
    guardian_mobile = models.CharField(max_length=20, blank=True, default="")
    address = models.TextField(blank=True, default="")

    # teacher profile
    teacher_id = models.CharField(max_length=30, blank=True, default="")

    objects = UserManager()

    class Meta:
        indexes = [
            models.Index(fields=["role"], name="user_role_idx"),
        ]

    @property
    def is_admin(self):
        return self.role == ADMIN or self.is_superuser

    @property
    def is_teacher(self):
        return self.role == TEACHER

    @property
    def is_student(self):
        return self.role == STUDENT

    @property
    def full_name(self) -> str:
        if self.first_name or self.last_name:
            return f"{self.first_name} {self.last_name}".strip()
        return self.username

    def __str__(self):
        return f"{self.full_name} ({self.role})"


# ----------------------------- Subjects -------------------------------------
class Subject(TimeStampedModel):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover
        return self.name


# ----------------------------- Classes --------------------------------------
class SchoolClass(TimeStampedModel):
    """
    A homeroom such as "Grade 7 B". Students enroll here; subjects and one
    class teacher are assigned per class.
    """
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default="")
    grade = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(12)])
    section = models.CharField(max_length=10, blank=True, default="")

    class Meta:
        verbose_name = _("Class")
        verbose_name_plural = _("Classes")
        ordering = ["grade", "section", "name"]
        constraints = [
            UniqueConstraint(fields=["grade", "section", "name"], name="uniq_class_grade_section_name"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.full_name

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.section}".strip()

    def student_count(self) -> int:
        return self.enrollments.count()

    def is_class_teacher(self, user) -> bool:
        return ClassTeacher.objects.filter(school_class=self, teacher=user).exists()


class ClassSubject(TimeStampedModel):
    """
    Links a subject to a class with the teacher who teaches it there.
    """
    school_class = models.ForeignKey(
        SchoolClass, on_delete=models.CASCADE, related_name="class_subjects")
    subject = models.ForeignKey(
        Subject, on_delete=models.CASCADE, related_name="class_subjects")
    teacher = models.ForeignKey(
        "User", on_delete=models.CASCADE, related_name="teaching_assignments",
        limit_choices_to={"role": TEACHER})

    class Meta:
        constraints = [
            UniqueConstraint(fields=["school_class", "subject"], name="uniq_subject_per_class"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.subject} - {self.school_class} ({self.teacher})"


class ClassEnrollment(TimeStampedModel):
    school_class = models.ForeignKey(
        SchoolClass, on_delete=models.CASCADE, related_name="enrollments")
    student = models.ForeignKey(
        "User", on_delete=models.CASCADE, related_name="enrollments",
        limit_choices_to={"role": STUDENT})

    class Meta:
        constraints = [
            UniqueConstraint(fields=["school_class", "student"], name="uniq_enrollment_per_class"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.student} in {self.school_class}"


class ClassTeacher(models.Model):
    """The single teacher responsible for a class (and its attendance)."""
    school_class = models.OneToOneField(
        SchoolClass, on_delete=models.CASCADE, related_name="class_teacher")
    teacher = models.ForeignKey(
        "User", on_delete=models.CASCADE, related_name="homeroom_classes",
        limit_choices_to={"role": TEACHER})
    assigned_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.teacher} → {self.school_class}"


# ----------------------------- Content --------------------------------------
class Content(AuditableModel):
    """
    Generic learning material. A quiz is a Content of type ``quiz`` with a
    one-to-one ``Quiz`` satellite holding the quiz settings.
    """
    NOTE = "note"
    HOMEWORK = "homework"
    DPP = "dpp"
    QUIZ = "quiz"
    LECTURE = "lecture"
    SAMPLE_PAPER = "sample_paper"
    CONTENT_TYPE_CHOICES = (
        (NOTE, "Note"),
        (HOMEWORK, "Homework"),
        (DPP, "Daily Practice Problems"),
        (QUIZ, "Quiz"),
        (LECTURE, "Lecture"),
        (SAMPLE_PAPER, "Sample Paper"),
    )

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    STATUS_CHOICES = (
        (DRAFT, "Draft"),
        (PUBLISHED, "Published"),
        (ARCHIVED, "Archived"),
    )

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    content_type = models.CharField(max_length=20, choices=CONTENT_TYPE_CHOICES)
    school_class = models.ForeignKey(
        SchoolClass, on_delete=models.CASCADE, related_name="contents")
    subject = models.ForeignKey(
        Subject, on_delete=models.CASCADE, related_name="contents")
    author = models.ForeignKey(
        "User", on_delete=models.SET_NULL, null=True, blank=True, related_name="contents")
    file_url = models.CharField(max_length=500, blank=True, default="")
    due_date = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PUBLISHED)

    objects = ContentManager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["content_type", "status"], name="content_type_status_idx"),
            models.Index(fields=["school_class", "subject"], name="content_class_subject_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.title} ({self.content_type})"

    @property
    def is_published(self) -> bool:
        return self.status == self.PUBLISHED

    def can_edit(self, user) -> bool:
        return user.is_admin or (self.author_id is not None and self.author_id == user.id)


# ----------------------------- Quizzes --------------------------------------
class Quiz(TimeStampedModel):
    content = models.OneToOneField(
        Content, on_delete=models.CASCADE, related_name="quiz")
    time_limit = models.PositiveIntegerField(help_text="In minutes")
    passing_score = models.PositiveIntegerField(
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Required to pass (%)")
    total_points = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        verbose_name_plural = _("Quizzes")

    def __str__(self) -> str:  # pragma: no cover
        return self.title

    @property
    def title(self) -> str:
        return self.content.title


class Question(models.Model):
    """
    ``options`` holds a list of ``{"text": ..., "isCorrect": ...}`` records.
    Older rows may hold the same list JSON-encoded as a string, or flag the
    correct option as ``is_correct`` / ``"true"`` / ``1``.
    """
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="questions")
    text = models.TextField()
    options = models.JSONField(default=list)
    points = models.PositiveIntegerField(default=1)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order", "id"]
        indexes = [models.Index(fields=["quiz", "order"], name="question_quiz_order_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return self.text[:60]


class QuizAttempt(models.Model):
    """
    One student's engagement with one quiz: in progress while
    ``completed_at`` is null, completed (and final) afterwards.
    """
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="attempts")
    student = models.ForeignKey(
        "User", on_delete=models.CASCADE, related_name="quiz_attempts")
    started_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)
    score = models.IntegerField(null=True, blank=True)
    answers = models.JSONField(default=dict, blank=True)

    objects = QuizAttemptManager()

    class Meta:
        ordering = ["-started_at"]
        indexes = [models.Index(fields=["quiz", "student"], name="attempt_quiz_student_idx")]
        constraints = [
            UniqueConstraint(
                fields=["student", "quiz"],
                condition=Q(completed_at__isnull=True),
                name="uniq_in_progress_attempt",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.student} - {self.quiz} ({self.status})"

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def status(self) -> str:
        return "completed" if self.is_completed else "in_progress"
