import logging

from django.db import transaction
from django.http import Http404
from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet, ModelViewSet

from main.common.audit import log_action
from main.models import Content, Quiz, QuizAttempt
from main.quiz.answers import public_options
from main.quiz.exceptions import NotFound
from main.quiz.services import QuizAttemptService, percentage_of, resolve_quiz

from ..permissions import IsAuthorOrAdmin, IsStudent, IsTeacherOrAdminOrReadOnly
from ..serializers import (
    AttemptAnswersSerializer,
    BeginAttemptSerializer,
    QuestionSerializer,
    QuizAttemptSerializer,
    QuizDetailSerializer,
    QuizSerializer,
)
from .other_views import StandardResultSetPagination

logger = logging.getLogger(__name__)


class QuizViewSet(ModelViewSet):
    """
    Quizzes addressed by quiz id or by the id of their content row.
    Students only reach published quizzes of their classes and never see
    which option is correct.
    """
    permission_classes = [IsTeacherOrAdminOrReadOnly, IsAuthorOrAdmin]
    pagination_class = StandardResultSetPagination
    search_fields = ['content__title']
    ordering_fields = ['created_at']
    ordering = ['-created_at']

    def get_queryset(self):
        user = self.request.user
        qs = Quiz.objects.select_related('content', 'content__author')
        if user.is_student:
            qs = qs.filter(content__in=Content.objects.quizzes().for_student(user))
        return qs

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return QuizDetailSerializer
        return QuizSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['include_answers'] = not self.request.user.is_student
        return context

    def get_object(self):
        try:
            quiz = resolve_quiz(self.kwargs[self.lookup_url_kwarg or self.lookup_field])
        except NotFound:
            raise Http404
        if not self.get_queryset().filter(pk=quiz.pk).exists():
            raise Http404
        self.check_object_permissions(self.request, quiz)
        return quiz

    def perform_create(self, serializer):
        quiz = serializer.save()
        log_action("create_quiz", quiz, content=quiz.content_id)

    def perform_update(self, serializer):
        quiz = serializer.save()
        log_action("update_quiz", quiz)

    def perform_destroy(self, instance):
        # removing the content row cascades to the quiz, its questions and attempts
        log_action("delete_quiz", instance, content=instance.content_id)
        instance.content.delete()

    @action(detail=True, methods=['get'])
    def questions(self, request, pk=None):
        quiz = self.get_object()
        serializer = QuestionSerializer(
            quiz.questions.all(), many=True, context=self.get_serializer_context())
        return Response(serializer.data)


class QuizAttemptViewSet(mixins.RetrieveModelMixin, GenericViewSet):
    """
    begin (POST), resume (POST again), save progress (PATCH .../save-progress/)
    and submit (PUT) a quiz attempt.
    """
    serializer_class = QuizAttemptSerializer
    queryset = QuizAttempt.objects.select_related('quiz__content')

    def get_permissions(self):
        if self.action == 'retrieve':
            return [IsAuthenticated()]
        return [IsStudent()]

    def get_object(self):
        attempt = QuizAttempt.objects.select_related('quiz__content').filter(
            pk=self.kwargs['pk']).first()
        user = self.request.user
        # other students' attempts look missing
        if attempt is None or (user.is_student and attempt.student_id != user.pk):
            raise NotFound("Quiz attempt not found")
        return attempt

    def create(self, request, *args, **kwargs):
        serializer = BeginAttemptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        attempt, created = QuizAttemptService.begin(request.user, serializer.validated_data['quizId'])
        data = QuizAttemptSerializer(attempt).data
        if created:
            return Response(data, status=status.HTTP_201_CREATED)
        return Response({**data, 'message': 'Resuming existing quiz attempt'}, status=status.HTTP_200_OK)

    def retrieve(self, request, *args, **kwargs):
        attempt = self.get_object()
        quiz = attempt.quiz
        include_answers = attempt.is_completed or not request.user.is_student
        questions = [{
            'id': question.pk,
            'quizId': quiz.pk,
            'text': question.text,
            'options': public_options(question.options, include_answers=include_answers,
                                      question_id=question.pk),
            'points': question.points,
            'order': question.order,
        } for question in quiz.questions.all()]

        total = quiz.total_points or sum(q['points'] for q in questions)
        score = attempt.score or 0
        data = QuizAttemptSerializer(attempt).data
        data.update({
            'score': score,
            'quiz': {
                'id': quiz.pk,
                'contentId': quiz.content_id,
                'title': quiz.content.title,
                'description': quiz.content.description,
                'timeLimit': quiz.time_limit,
                'passingScore': quiz.passing_score,
                'totalPoints': total,
                'status': quiz.content.status,
                'createdAt': quiz.content.created_at,
                'questions': questions,
            },
            'totalPossibleScore': total,
            'percentage': percentage_of(score, total),
        })
        if attempt.is_completed:
            data['details'] = QuizAttemptService.evaluate(attempt).details
        return Response(data)

    def update(self, request, pk=None):
        serializer = AttemptAnswersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        attempt, result = QuizAttemptService.complete(pk, request.user, serializer.validated_data['answers'])
        return Response({
            **QuizAttemptSerializer(attempt).data,
            'message': 'Quiz submitted successfully',
            'score': result.score,
            'totalPossibleScore': result.total_possible_score,
            'percentage': result.percentage,
            'details': result.details,
        })

    @action(detail=True, methods=['patch'], url_path='save-progress')
    def save_progress(self, request, pk=None):
        serializer = AttemptAnswersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        answers = serializer.validated_data['answers']

        if serializer.validated_data['autoSubmit']:
            logger.info("Auto-submitting attempt %s", pk)
            with transaction.atomic():
                QuizAttemptService.save_progress(pk, request.user, answers)
                attempt, result = QuizAttemptService.complete(pk, request.user, answers)
            return Response({
                'message': 'Quiz auto-submitted successfully',
                **QuizAttemptSerializer(attempt).data,
                'score': result.score,
                'totalPossibleScore': result.total_possible_score,
                'percentage': result.percentage,
            })

        attempt = QuizAttemptService.save_progress(pk, request.user, answers)
        return Response({
            'message': 'Progress saved successfully',
            'attempt': QuizAttemptSerializer(attempt).data,
        })
