from django.db import transaction
from rest_framework import serializers

from main.models import Content, Question, Quiz, QuizAttempt, SchoolClass, Subject
from main.quiz.answers import public_options


class QuestionOptionSerializer(serializers.Serializer):
    text = serializers.CharField()
    isCorrect = serializers.BooleanField(default=False)


class QuestionWriteSerializer(serializers.ModelSerializer):
    options = QuestionOptionSerializer(many=True)

    class Meta:
        model = Question
        fields = ['text', 'options', 'points', 'order']

    def validate_options(self, value):
        if len(value) < 2:
            raise serializers.ValidationError('A question needs at least two options.')
        if not any(option['isCorrect'] for option in value):
            raise serializers.ValidationError('Mark one option as correct.')
        return value


class QuestionSerializer(serializers.ModelSerializer):
    """
    Question as shown to quiz takers. Options get 1-based ids; the correct flag
    is only included when the serializer context sets ``include_answers``.
    """
    options = serializers.SerializerMethodField()

    class Meta:
        model = Question
        fields = ['id', 'text', 'options', 'points', 'order']

    def get_options(self, obj):
        return public_options(obj.options, include_answers=self.context.get('include_answers', False),
                              question_id=obj.pk)


class QuizSerializer(serializers.ModelSerializer):
    """
    A quiz together with its content record. Writes create or update both rows
    and replace the question list in one transaction.
    """
    title = serializers.CharField(source='content.title')
    description = serializers.CharField(source='content.description', required=False, allow_blank=True)
    status = serializers.ChoiceField(source='content.status', choices=Content.STATUS_CHOICES,
                                     required=False)
    due_date = serializers.DateTimeField(source='content.due_date', required=False, allow_null=True)
    school_class = serializers.PrimaryKeyRelatedField(source='content.school_class',
                                                      queryset=SchoolClass.objects.all())
    subject = serializers.PrimaryKeyRelatedField(source='content.subject',
                                                 queryset=Subject.objects.all())
    content_id = serializers.IntegerField(read_only=True)
    author = serializers.IntegerField(source='content.author_id', read_only=True)
    questions = QuestionWriteSerializer(many=True, write_only=True, required=False)
    question_count = serializers.SerializerMethodField()

    class Meta:
        model = Quiz
        fields = ['id', 'content_id', 'title', 'description', 'status', 'due_date',
                  'school_class', 'subject', 'author', 'time_limit', 'passing_score',
                  'total_points', 'question_count', 'questions', 'created_at']
        read_only_fields = ['total_points', 'created_at']

    def get_question_count(self, obj):
        return obj.questions.count()

    def _replace_questions(self, quiz, questions):
        quiz.questions.all().delete()
        for position, question in enumerate(questions):
            Question.objects.create(
                quiz=quiz,
                text=question['text'],
                options=[dict(option) for option in question['options']],
                points=question.get('points', 1),
                order=question.get('order', position),
            )

    @transaction.atomic
    def create(self, validated_data):
        content_data = validated_data.pop('content')
        questions = validated_data.pop('questions', [])
        content = Content.objects.create(
            content_type=Content.QUIZ,
            author=self.context['request'].user,
            **content_data,
        )
        quiz = Quiz.objects.create(content=content, **validated_data)
        self._replace_questions(quiz, questions)
        quiz.refresh_from_db()
        return quiz

    @transaction.atomic
    def update(self, instance, validated_data):
        content_data = validated_data.pop('content', {})
        questions = validated_data.pop('questions', None)

        for attr, value in content_data.items():
            setattr(instance.content, attr, value)
        instance.content.save()

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()

        if questions is not None:
            self._replace_questions(instance, questions)
        instance.refresh_from_db()
        return instance


class QuizDetailSerializer(QuizSerializer):
    question_list = serializers.SerializerMethodField()

    class Meta(QuizSerializer.Meta):
        fields = QuizSerializer.Meta.fields + ['question_list']

    def get_question_list(self, obj):
        return QuestionSerializer(obj.questions.all(), many=True, context=self.context).data


# ----------------------------- Attempts -------------------------------------
class QuizAttemptSerializer(serializers.ModelSerializer):
    """Attempt row in the camelCase shape the quiz client consumes."""
    quizId = serializers.IntegerField(source='quiz_id', read_only=True)
    studentId = serializers.IntegerField(source='student_id', read_only=True)
    startedAt = serializers.DateTimeField(source='started_at', read_only=True)
    completedAt = serializers.DateTimeField(source='completed_at', read_only=True)

    class Meta:
        model = QuizAttempt
        fields = ['id', 'quizId', 'studentId', 'startedAt', 'completedAt', 'score',
                  'answers', 'status']
        read_only_fields = fields


class BeginAttemptSerializer(serializers.Serializer):
    quizId = serializers.IntegerField(
        error_messages={'required': 'Quiz ID is required'})


class AttemptAnswersSerializer(serializers.Serializer):
    answers = serializers.DictField(required=False, default=dict, allow_empty=True)
    autoSubmit = serializers.BooleanField(required=False, default=False)
