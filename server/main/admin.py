from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import (
    ClassEnrollment, ClassSubject, ClassTeacher, Content, Question, Quiz,
    QuizAttempt, SchoolClass, Subject, User,
)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "first_name", "last_name", "role", "is_active")
    list_filter = ("role", "is_active")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("School profile", {"fields": (
            "role", "phone", "image", "bio", "grade", "section", "roll_number",
            "admission_no", "guardian_name", "guardian_mobile", "address", "teacher_id",
        )}),
    )


class EnrollmentInline(admin.TabularInline):
    model = ClassEnrollment
    extra = 0


@admin.register(SchoolClass)
class SchoolClassAdmin(admin.ModelAdmin):
    list_display = ("name", "grade", "section")
    inlines = [EnrollmentInline]


class QuestionInline(admin.StackedInline):
    model = Question
    extra = 0


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    list_display = ("title", "time_limit", "passing_score", "total_points")
    inlines = [QuestionInline]


@admin.register(QuizAttempt)
class QuizAttemptAdmin(admin.ModelAdmin):
    list_display = ("quiz", "student", "started_at", "completed_at", "score")
    list_filter = ("completed_at",)


@admin.register(Content)
class ContentAdmin(admin.ModelAdmin):
    list_display = ("title", "content_type", "school_class", "subject", "status", "author")
    list_filter = ("content_type", "status")
    search_fields = ("title", "description")


admin.site.register(Subject)
admin.site.register(ClassSubject)
admin.site.register(ClassTeacher)
