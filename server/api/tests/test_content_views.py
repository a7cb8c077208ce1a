from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from main.models import Content, Subject
from main.tests.helpers import create_class, create_test_user


class ContentAPITests(APITestCase):
    """Test content visibility and authoring rules."""

    def setUp(self):
        self.client = APIClient()
        self.admin = create_test_user(role="admin")
        self.teacher = create_test_user(role="teacher")
        self.other_teacher = create_test_user(role="teacher", username="other_teacher")
        self.student = create_test_user(role="student")
        self.school_class = create_class(students=[self.student])
        self.other_class = create_class(name="Grade 8", grade=8)
        self.subject = Subject.objects.create(name="History")
        self.list_url = reverse('contents-list')

    def _content(self, **kwargs):
        data = {
            'title': 'Chapter 1 notes',
            'content_type': Content.NOTE,
            'school_class': self.school_class,
            'subject': self.subject,
            'author': self.teacher,
        }
        data.update(kwargs)
        return Content.objects.create(**data)

    def test_teacher_creates_content_as_author(self):
        self.client.force_authenticate(user=self.teacher)
        data = {
            'title': 'Homework 1',
            'content_type': Content.HOMEWORK,
            'school_class': self.school_class.pk,
            'subject': self.subject.pk,
        }
        response = self.client.post(self.list_url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['author']['id'], self.teacher.pk)
        self.assertEqual(Content.objects.get(pk=response.data['id']).created_by, self.teacher)

    def test_quiz_content_must_use_quiz_endpoint(self):
        self.client.force_authenticate(user=self.teacher)
        data = {
            'title': 'Sneaky quiz',
            'content_type': Content.QUIZ,
            'school_class': self.school_class.pk,
            'subject': self.subject.pk,
        }
        response = self.client.post(self.list_url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_student_sees_only_published_content_of_enrolled_classes(self):
        visible = self._content()
        self._content(title='Draft', status=Content.DRAFT)
        self._content(title='Other class', school_class=self.other_class)

        self.client.force_authenticate(user=self.student)
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['id'] for item in response.data['results']], [visible.pk])

    def test_student_cannot_write(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post(self.list_url, {'title': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_only_author_or_admin_edits(self):
        content = self._content()
        url = reverse('contents-detail', args=[content.pk])

        self.client.force_authenticate(user=self.other_teacher)
        response = self.client.patch(url, {'title': 'Changed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(url, {'title': 'Changed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.force_authenticate(user=self.teacher)
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_filter_by_type(self):
        self._content()
        homework = self._content(title='Homework', content_type=Content.HOMEWORK)

        self.client.force_authenticate(user=self.teacher)
        response = self.client.get(self.list_url, {'content_type': Content.HOMEWORK})
        self.assertEqual([item['id'] for item in response.data['results']], [homework.pk])

    def test_teacher_sees_content_of_classes_they_do_not_teach(self):
        note = self._content(school_class=self.other_class)

        self.client.force_authenticate(user=self.other_teacher)
        response = self.client.get(self.list_url)
        self.assertEqual([item['id'] for item in response.data['results']], [note.pk])
