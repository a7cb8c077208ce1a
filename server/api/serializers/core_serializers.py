from django.db import transaction
from rest_framework import serializers

from main.models import (
    STUDENT, TEACHER, ClassEnrollment, ClassSubject, ClassTeacher, Content,
    SchoolClass, Subject, User,
)
import logging
logger = logging.getLogger(__name__)


class UserSummarySerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'full_name', 'email', 'role']


class UserAdminSerializer(serializers.ModelSerializer):
    """Admin-side user management; ``password`` is write-only and hashed on save."""
    password = serializers.CharField(write_only=True, required=False, min_length=6)
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'password', 'first_name', 'last_name', 'full_name',
                  'email', 'role', 'phone', 'bio', 'grade', 'section', 'roll_number',
                  'admission_no', 'guardian_name', 'guardian_mobile', 'address',
                  'teacher_id', 'is_active', 'date_joined']
        read_only_fields = ['date_joined']

    def validate(self, attrs):
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': 'This field is required.'})
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        user = super().update(instance, validated_data)
        if password:
            user.set_password(password)
            user.save(update_fields=['password'])
        return user


class SubjectSerializer(serializers.ModelSerializer):
    class Meta:
        model = Subject
        fields = ['id', 'name', 'description', 'created_at']
        read_only_fields = ['created_at']


class ClassTeacherSerializer(serializers.ModelSerializer):
    teacher = UserSummarySerializer(read_only=True)
    teacher_id = serializers.PrimaryKeyRelatedField(
        source='teacher', queryset=User.objects.filter(role=TEACHER), write_only=True)

    class Meta:
        model = ClassTeacher
        fields = ['id', 'school_class', 'teacher', 'teacher_id', 'assigned_at']
        read_only_fields = ['school_class', 'assigned_at']


class SchoolClassSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    student_count = serializers.IntegerField(read_only=True)
    class_teacher = serializers.SerializerMethodField()

    class Meta:
        model = SchoolClass
        fields = ['id', 'name', 'full_name', 'description', 'grade', 'section',
                  'student_count', 'class_teacher']

    def get_class_teacher(self, obj):
        assignment = getattr(obj, 'class_teacher', None)
        if assignment is None:
            return None
        return UserSummarySerializer(assignment.teacher).data


class ClassSubjectSerializer(serializers.ModelSerializer):
    subject_name = serializers.CharField(source='subject.name', read_only=True)
    teacher_name = serializers.CharField(source='teacher.full_name', read_only=True)
    teacher = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(role=TEACHER))

    class Meta:
        model = ClassSubject
        fields = ['id', 'school_class', 'subject', 'subject_name', 'teacher', 'teacher_name']
        read_only_fields = ['school_class']

    def validate(self, attrs):
        school_class = self.context.get('school_class')
        if school_class is not None and ClassSubject.objects.filter(
                school_class=school_class, subject=attrs['subject']).exists():
            raise serializers.ValidationError('This subject is already assigned to the class.')
        return attrs


class EnrollmentSerializer(serializers.ModelSerializer):
    studentId = serializers.PrimaryKeyRelatedField(
        source='student', queryset=User.objects.filter(role=STUDENT))

    class Meta:
        model = ClassEnrollment
        fields = ['id', 'school_class', 'studentId', 'created_at']
        read_only_fields = ['school_class', 'created_at']


class ContentSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)
    class_name = serializers.CharField(source='school_class.full_name', read_only=True)
    subject_name = serializers.CharField(source='subject.name', read_only=True)
    quiz_id = serializers.SerializerMethodField()

    class Meta:
        model = Content
        fields = ['id', 'title', 'description', 'content_type', 'school_class', 'class_name',
                  'subject', 'subject_name', 'author', 'file_url', 'due_date', 'status',
                  'quiz_id', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_quiz_id(self, obj):
        quiz = getattr(obj, 'quiz', None) if obj.content_type == Content.QUIZ else None
        return quiz.pk if quiz is not None else None

    def validate_content_type(self, value):
        # quizzes are created through the quiz endpoint so they always get a Quiz row
        if self.instance is None and value == Content.QUIZ:
            raise serializers.ValidationError('Create quizzes through the quizzes endpoint.')
        if self.instance is not None and value != self.instance.content_type:
            raise serializers.ValidationError('Content type cannot be changed.')
        return value

    def create(self, validated_data):
        validated_data['author'] = self.context['request'].user
        return super().create(validated_data)
