from rest_framework import serializers


class AdminDashboardSerializer(serializers.Serializer):
    """Serializer for admin dashboard data"""
    total_students = serializers.IntegerField(read_only=True)
    total_teachers = serializers.IntegerField(read_only=True)
    total_classes = serializers.IntegerField(read_only=True)
    total_quizzes = serializers.IntegerField(read_only=True)
    recent_users = serializers.ListField(child=serializers.DictField(), read_only=True)


class TeacherDashboardSerializer(serializers.Serializer):
    """Serializer for teacher dashboard data"""
    classes = serializers.ListField(child=serializers.DictField(), read_only=True)
    total_students = serializers.IntegerField(read_only=True)
    content_uploads = serializers.IntegerField(read_only=True)
    upcoming_deadlines = serializers.ListField(child=serializers.DictField(), read_only=True)


class StudentDashboardSerializer(serializers.Serializer):
    """Serializer for student dashboard data"""
    completed_quizzes = serializers.IntegerField(read_only=True)
    total_quizzes = serializers.IntegerField(read_only=True)
    average_score = serializers.FloatField(read_only=True)
    attendance_percentage = serializers.FloatField(read_only=True)
    recent_attempts = serializers.ListField(child=serializers.DictField(), read_only=True)
