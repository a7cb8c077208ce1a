import logging

from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response
from rest_framework.views import APIView

from attendance.models import Attendance
from main.common.audit import log_action
from main.models import ADMIN, TEACHER

from ..permissions import RoleRequired
from ..serializers.attendance_serializers import AttendanceSerializer, RecordAttendanceSerializer

logger = logging.getLogger(__name__)


class AttendanceView(APIView):
    """
    Record one student's attendance for a day. Only the class teacher of the
    class (or an admin) may record; a second record for the same day updates
    the first.
    """
    permission_classes = [RoleRequired]
    allowed_roles = (ADMIN, TEACHER)

    def post(self, request, *args, **kwargs):
        serializer = RecordAttendanceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        school_class = data['classId']
        user = request.user
        if not (user.is_admin or school_class.is_class_teacher(user)):
            logger.warning("User %s tried to record attendance for class %s", user.pk, school_class.pk)
            raise PermissionDenied("You are not assigned as class teacher for this class")

        record, created = Attendance.record(
            student=data['studentId'],
            school_class=school_class,
            teacher=user,
            date=data['date'],
            is_present=data['isPresent'],
            remarks=data.get('remarks', ''),
        )
        log_action("record_attendance", record, present=record.is_present, date=record.date)

        return Response(
            AttendanceSerializer(record).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )
