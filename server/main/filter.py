# filters.py
import django_filters
from django.db.models import Q

from .models import Content, QuizAttempt, User


class ContentFilter(django_filters.FilterSet):
    q = django_filters.CharFilter(method='filter_by_all', label='Search')
    due_before = django_filters.IsoDateTimeFilter(field_name='due_date', lookup_expr='lte')
    due_after = django_filters.IsoDateTimeFilter(field_name='due_date', lookup_expr='gte')

    class Meta:
        model = Content
        fields = ['q', 'content_type', 'school_class', 'subject', 'status', 'author']

    def filter_by_all(self, queryset, name, value):
        return queryset.filter(
            Q(title__icontains=value) |
            Q(description__icontains=value) |
            Q(subject__name__icontains=value)
        )


class UserFilter(django_filters.FilterSet):
    q = django_filters.CharFilter(method='filter_by_all', label='Search')

    class Meta:
        model = User
        fields = ['q', 'role', 'grade', 'section']

    def filter_by_all(self, queryset, name, value):
        return queryset.filter(
            Q(first_name__icontains=value) |
            Q(last_name__icontains=value) |
            Q(email__icontains=value) |
            Q(username__icontains=value)
        )


class QuizAttemptFilter(django_filters.FilterSet):
    completed = django_filters.BooleanFilter(
        field_name='completed_at', lookup_expr='isnull', exclude=True)

    class Meta:
        model = QuizAttempt
        fields = ['quiz', 'completed']
