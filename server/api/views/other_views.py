import datetime
import logging

from django.db.models import Avg, Count, Q
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import ModelViewSet, ReadOnlyModelViewSet

from attendance.models import Attendance
from main.common.audit import log_action
from main.filter import QuizAttemptFilter, UserFilter
from main.models import (
    STUDENT, TEACHER, ClassEnrollment, ClassSubject, ClassTeacher,
    Content, Quiz, QuizAttempt, SchoolClass, Subject, User,
)
from main.quiz.services import QuizAttemptService, resolve_quiz

from ..permissions import IsAdmin, IsAdminOrReadOnly, IsSelfOrStaff
from ..serializers import (
    ClassSubjectSerializer,
    ClassTeacherSerializer,
    EnrollmentSerializer,
    QuizAttemptSerializer,
    SchoolClassSerializer,
    SubjectSerializer,
    UserAdminSerializer,
    UserSummarySerializer,
)
from ..serializers.attendance_serializers import RosterEntrySerializer
from ..serializers.auth_serializers import PasswordResetSerializer
from ..serializers.dashboard_serializers import (
    AdminDashboardSerializer,
    StudentDashboardSerializer,
    TeacherDashboardSerializer,
)

logger = logging.getLogger(__name__)


class StandardResultSetPagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = 'page_size'
    max_page_size = 100


class UserViewSet(ModelViewSet):
    queryset = User.objects.all().order_by('id')
    serializer_class = UserAdminSerializer
    permission_classes = [IsAdmin]
    pagination_class = StandardResultSetPagination
    filterset_class = UserFilter
    search_fields = ['username', 'email', 'first_name', 'last_name']
    ordering_fields = ['date_joined', 'username', 'role']

    def perform_destroy(self, instance):
        if instance == self.request.user:
            raise PermissionDenied("You cannot delete your own account")
        log_action("delete_user", instance, role=instance.role)
        instance.delete()

    @action(detail=True, methods=['post'], url_path='reset-password')
    def reset_password(self, request, pk=None):
        user = self.get_object()
        serializer = PasswordResetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user.set_password(serializer.validated_data['password'])
        user.save(update_fields=['password'])
        log_action("reset_password", user)
        return Response({'detail': 'Password reset successfully'})


class SubjectViewSet(ModelViewSet):
    queryset = Subject.objects.all()
    serializer_class = SubjectSerializer
    permission_classes = [IsAdminOrReadOnly]
    search_fields = ['name']


class SchoolClassViewSet(ModelViewSet):
    serializer_class = SchoolClassSerializer
    permission_classes = [IsAdminOrReadOnly]
    search_fields = ['name', 'section']
    filterset_fields = ['grade']

    def get_queryset(self):
        return SchoolClass.objects.select_related('class_teacher__teacher')

    @action(detail=True, methods=['get', 'post'])
    def subjects(self, request, pk=None):
        school_class = self.get_object()
        if request.method == 'GET':
            assignments = ClassSubject.objects.filter(
                school_class=school_class).select_related('subject', 'teacher')
            return Response(ClassSubjectSerializer(assignments, many=True).data)

        serializer = ClassSubjectSerializer(
            data=request.data, context={'school_class': school_class})
        serializer.is_valid(raise_exception=True)
        serializer.save(school_class=school_class)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def enroll(self, request, pk=None):
        school_class = self.get_object()
        serializer = EnrollmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        enrollment, created = ClassEnrollment.objects.get_or_create(
            school_class=school_class,
            student=serializer.validated_data['student'],
        )
        return Response(
            EnrollmentSerializer(enrollment).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @action(detail=True, methods=['get', 'post', 'delete'])
    def teacher(self, request, pk=None):
        school_class = self.get_object()
        assignment = ClassTeacher.objects.filter(school_class=school_class).first()

        if request.method == 'GET':
            if assignment is None:
                return Response({'detail': 'No class teacher assigned'}, status=status.HTTP_404_NOT_FOUND)
            return Response(ClassTeacherSerializer(assignment).data)

        if request.method == 'DELETE':
            if assignment is not None:
                assignment.delete()
                log_action("remove_class_teacher", school_class)
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = ClassTeacherSerializer(assignment, data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(school_class=school_class)
        log_action("assign_class_teacher", school_class,
                   teacher=serializer.validated_data['teacher'].pk)
        return Response(
            serializer.data,
            status=status.HTTP_201_CREATED if assignment is None else status.HTTP_200_OK,
        )

    @action(detail=True, methods=['get'], permission_classes=[IsAuthenticated])
    def attendance(self, request, pk=None):
        """Class roster with each student's attendance on ``?date=`` (default today)."""
        school_class = self.get_object()
        user = request.user
        if not (user.is_admin or school_class.is_class_teacher(user)):
            raise PermissionDenied("You are not assigned as class teacher for this class")

        day = request.query_params.get('date')
        try:
            day = datetime.date.fromisoformat(day) if day else timezone.localdate()
        except ValueError:
            return Response({'detail': 'Invalid date, expected YYYY-MM-DD'},
                            status=status.HTTP_400_BAD_REQUEST)

        records = {
            record.student_id: record
            for record in Attendance.objects.filter(school_class=school_class, date=day)
        }
        roster = []
        enrollments = school_class.enrollments.select_related('student').order_by(
            'student__first_name', 'student__last_name')
        for enrollment in enrollments:
            student = enrollment.student
            record = records.get(student.pk)
            roster.append({
                'id': student.pk,
                'name': student.full_name,
                'roll_number': student.roll_number,
                'is_present': record.is_present if record else None,
                'remarks': record.remarks if record else None,
                'date': record.date if record else None,
            })
        return Response(RosterEntrySerializer(roster, many=True).data)


class TeacherViewSet(ReadOnlyModelViewSet):
    serializer_class = UserSummarySerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return User.objects.teachers().order_by('first_name', 'last_name')

    @action(detail=True, methods=['get'])
    def classes(self, request, pk=None):
        teacher = self.get_object()
        classes = SchoolClass.objects.filter(
            Q(class_subjects__teacher=teacher) | Q(class_teacher__teacher=teacher)
        ).distinct()
        return Response(SchoolClassSerializer(classes, many=True).data)


class DashboardView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        user = request.user

        # Role-specific data
        if user.is_admin:
            return self._get_admin_dashboard_data(user)
        elif user.role == TEACHER:
            return self._get_teacher_dashboard_data(user)
        elif user.role == STUDENT:
            return self._get_student_dashboard_data(user)

        return Response(
            {"detail": "Invalid user role"},
            status=status.HTTP_403_FORBIDDEN
        )

    def _get_admin_dashboard_data(self, user):
        recent_users = User.objects.order_by('-date_joined')[:5]
        data = {
            'total_students': User.objects.students().count(),
            'total_teachers': User.objects.teachers().count(),
            'total_classes': SchoolClass.objects.count(),
            'total_quizzes': Quiz.objects.count(),
            'recent_users': UserSummarySerializer(recent_users, many=True).data,
        }
        return Response(AdminDashboardSerializer(data).data)

    def _get_teacher_dashboard_data(self, user):
        classes = SchoolClass.objects.filter(
            Q(class_subjects__teacher=user) | Q(class_teacher__teacher=user)
        ).distinct().annotate(enrolled=Count('enrollments', distinct=True))
        class_ids = [sc.id for sc in classes]

        now = timezone.now()
        deadlines = Content.objects.filter(
            school_class__in=class_ids, due_date__gte=now
        ).order_by('due_date')[:4]

        data = {
            'classes': [{
                'id': sc.id,
                'name': sc.full_name,
                'grade': sc.grade,
                'section': sc.section,
                'student_count': sc.enrolled,
            } for sc in classes],
            'total_students': ClassEnrollment.objects.filter(
                school_class__in=class_ids).values('student').distinct().count(),
            'content_uploads': Content.objects.filter(school_class__in=class_ids).count(),
            'upcoming_deadlines': [{
                'id': c.id,
                'title': c.title,
                'content_type': c.content_type,
                'due_date': c.due_date,
            } for c in deadlines],
        }
        return Response(TeacherDashboardSerializer(data).data)

    def _get_student_dashboard_data(self, user):
        today = timezone.localdate()
        month_start = today.replace(day=1)

        completed = QuizAttempt.objects.filter(student=user).completed()
        total_quizzes = Content.objects.quizzes().for_student(user).count()
        average = completed.aggregate(avg=Avg('score'))['avg']

        recent = completed.select_related('quiz__content').order_by('-completed_at')[:5]
        data = {
            'completed_quizzes': completed.count(),
            'total_quizzes': total_quizzes,
            'average_score': round(average, 2) if average is not None else 0,
            'attendance_percentage': Attendance.percentage_for_student(user, month_start, today),
            'recent_attempts': [{
                'id': attempt.id,
                'quizId': attempt.quiz_id,
                'title': attempt.quiz.title,
                'score': attempt.score,
                'totalPoints': attempt.quiz.total_points,
                'completedAt': attempt.completed_at,
            } for attempt in recent],
        }
        return Response(StudentDashboardSerializer(data).data)


class StudentViewSet(ReadOnlyModelViewSet):
    """
    Students directory plus per-student quiz views. Students may only open
    their own record.
    """
    serializer_class = UserSummarySerializer
    permission_classes = [IsSelfOrStaff]

    def get_queryset(self):
        return User.objects.students().order_by('first_name', 'last_name')

    @action(detail=True, methods=['get'])
    def classes(self, request, pk=None):
        student = self.get_object()
        classes = SchoolClass.objects.filter(enrollments__student=student)
        return Response(SchoolClassSerializer(classes, many=True).data)

    @action(detail=True, methods=['get', 'delete'], url_path='quiz-attempts')
    def quiz_attempts(self, request, pk=None):
        student = self.get_object()
        if request.method == 'GET':
            attempts = QuizAttempt.objects.filter(student=student).order_by('-started_at')
            attempts = QuizAttemptFilter(request.query_params, queryset=attempts).qs
            return Response(QuizAttemptSerializer(attempts, many=True).data)

        if not request.user.is_admin:
            raise PermissionDenied("Only admins can reset quiz attempts")

        quiz_id = request.query_params.get('quizId')
        quiz = resolve_quiz(quiz_id) if quiz_id else None
        deleted = QuizAttemptService.reset(student, quiz, actor=request.user)
        return Response({
            'message': f"Successfully reset {deleted} quiz attempts for student {student.pk}",
            'deleted': deleted,
        })

    @action(detail=True, methods=['get'], url_path='quizzes-with-status')
    def quizzes_with_status(self, request, pk=None):
        student = self.get_object()
        contents = (
            Content.objects.quizzes().for_student(student)
            .select_related('quiz', 'author', 'school_class', 'subject')
        )

        attempts = {}
        for attempt in QuizAttempt.objects.filter(student=student).order_by('started_at'):
            current = attempts.get(attempt.quiz_id)
            # a completed attempt outranks an in-progress one
            if current is None or (attempt.is_completed and not current.is_completed):
                attempts[attempt.quiz_id] = attempt

        results = []
        for content in contents:
            quiz = getattr(content, 'quiz', None)
            attempt = attempts.get(quiz.pk) if quiz is not None else None
            if attempt is None:
                attempt_status, attempt_id = 'not_attempted', None
            else:
                attempt_status, attempt_id = attempt.status, attempt.pk

            results.append({
                'id': content.id,
                'title': content.title,
                'description': content.description,
                'contentType': content.content_type,
                'classId': content.school_class_id,
                'subjectId': content.subject_id,
                'authorId': content.author_id,
                'status': content.status,
                'createdAt': content.created_at,
                'dueDate': content.due_date,
                'class': {'id': content.school_class_id, 'name': content.school_class.full_name},
                'subject': {'id': content.subject_id, 'name': content.subject.name},
                'quizId': quiz.pk if quiz is not None else None,
                'timeLimit': quiz.time_limit if quiz is not None else None,
                'attemptStatus': attempt_status,
                'attemptId': attempt_id,
            })
        return Response(results)
