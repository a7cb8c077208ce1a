from rest_framework import serializers

from attendance.models import Attendance
from main.models import STUDENT, SchoolClass, User


class AttendanceSerializer(serializers.ModelSerializer):
    """
    Serializer for Attendance records
    """
    student_name = serializers.SerializerMethodField()

    class Meta:
        model = Attendance
        fields = [
            'id', 'student', 'student_name', 'school_class', 'teacher',
            'date', 'is_present', 'remarks', 'recorded_at'
        ]
        read_only_fields = fields

    def get_student_name(self, obj):
        """Get the full name of the student"""
        return obj.student.full_name if obj.student else None


class RecordAttendanceSerializer(serializers.Serializer):
    """
    Input for recording one student's attendance.
    - The student must be enrolled in the class
    """
    classId = serializers.PrimaryKeyRelatedField(queryset=SchoolClass.objects.all())
    studentId = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(role=STUDENT))
    date = serializers.DateField()
    isPresent = serializers.BooleanField()
    remarks = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, data):
        school_class = data['classId']
        student = data['studentId']
        if not school_class.enrollments.filter(student=student).exists():
            raise serializers.ValidationError(
                {'studentId': 'Student is not enrolled in this class.'})
        return data


class RosterEntrySerializer(serializers.Serializer):
    """A class member with their attendance for the requested day (if any)."""
    id = serializers.IntegerField()
    name = serializers.CharField()
    roll_number = serializers.CharField()
    is_present = serializers.BooleanField(allow_null=True)
    remarks = serializers.CharField(allow_null=True, allow_blank=True)
    date = serializers.DateField(allow_null=True)
