from datetime import date

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from attendance.models import Attendance
from main.tests.helpers import create_class, create_test_user


class AttendanceAPITests(APITestCase):
    """Test recording attendance and the class roster."""

    def setUp(self):
        self.client = APIClient()
        self.admin = create_test_user(role="admin")
        self.class_teacher = create_test_user(role="teacher")
        self.other_teacher = create_test_user(role="teacher", username="other_teacher")
        self.student = create_test_user(role="student", roll_number="7")
        self.not_enrolled = create_test_user(role="student", username="not_enrolled")
        self.school_class = create_class(class_teacher=self.class_teacher, students=[self.student])
        self.url = reverse('attendance')
        self.day = date(2024, 3, 4)

    def _record(self, is_present=True, student=None, remarks=''):
        return self.client.post(self.url, {
            'classId': self.school_class.pk,
            'studentId': (student or self.student).pk,
            'date': self.day.isoformat(),
            'isPresent': is_present,
            'remarks': remarks,
        }, format='json')

    def test_class_teacher_records_then_updates(self):
        self.client.force_authenticate(user=self.class_teacher)

        response = self._record(is_present=True)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_present'])

        response = self._record(is_present=False, remarks='Sick')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_present'])

        record = Attendance.objects.get()
        self.assertFalse(record.is_present)
        self.assertEqual(record.remarks, 'Sick')
        self.assertEqual(record.teacher, self.class_teacher)

    def test_other_teacher_is_rejected(self):
        self.client.force_authenticate(user=self.other_teacher)
        response = self._record()
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['detail'],
                         'You are not assigned as class teacher for this class')
        self.assertFalse(Attendance.objects.exists())

    def test_student_is_rejected(self):
        self.client.force_authenticate(user=self.student)
        response = self._record()
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_may_record(self):
        self.client.force_authenticate(user=self.admin)
        response = self._record()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_student_must_be_enrolled(self):
        self.client.force_authenticate(user=self.class_teacher)
        response = self._record(student=self.not_enrolled)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_roster_shows_recorded_day(self):
        Attendance.record(student=self.student, school_class=self.school_class,
                          teacher=self.class_teacher, date=self.day, is_present=False)
        self.client.force_authenticate(user=self.class_teacher)

        url = reverse('classes-attendance', args=[self.school_class.pk])
        response = self.client.get(url, {'date': self.day.isoformat()})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['id'], self.student.pk)
        self.assertFalse(response.data[0]['is_present'])

        response = self.client.get(url, {'date': '2024-03-05'})
        self.assertIsNone(response.data[0]['is_present'])

        self.client.force_authenticate(user=self.other_teacher)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AttendancePercentageTests(APITestCase):

    def test_percentage_over_range(self):
        teacher = create_test_user(role="teacher")
        student = create_test_user(role="student")
        school_class = create_class(class_teacher=teacher, students=[student])
        for day, present in ((1, True), (2, True), (3, False)):
            Attendance.record(student=student, school_class=school_class, teacher=teacher,
                              date=date(2024, 5, day), is_present=present)

        self.assertEqual(
            Attendance.percentage_for_student(student, date(2024, 5, 1), date(2024, 5, 31)), 66.67)
        self.assertEqual(
            Attendance.percentage_for_student(student, date(2024, 6, 1), date(2024, 6, 30)), 0)
