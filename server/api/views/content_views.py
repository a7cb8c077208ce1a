import logging

from rest_framework.viewsets import ModelViewSet

from main.common.audit import log_action
from main.filter import ContentFilter
from main.models import Content

from ..permissions import IsAuthorOrAdmin, IsTeacherOrAdminOrReadOnly
from ..serializers import ContentSerializer
from .other_views import StandardResultSetPagination

logger = logging.getLogger(__name__)


class ContentViewSet(ModelViewSet):
    """
    Notes, homework, practice papers and quizzes. Students see published
    content of the classes they are enrolled in. Teachers and admins see
    all content; only the author or an admin may change it.
    """
    serializer_class = ContentSerializer
    permission_classes = [IsTeacherOrAdminOrReadOnly, IsAuthorOrAdmin]
    pagination_class = StandardResultSetPagination
    filterset_class = ContentFilter
    search_fields = ['title', 'description']
    ordering_fields = ['created_at', 'due_date', 'title']
    ordering = ['-created_at']

    def get_queryset(self):
        return (
            Content.objects.visible_to(self.request.user)
            .select_related('author', 'school_class', 'subject', 'quiz')
        )

    def perform_create(self, serializer):
        content = serializer.save()
        log_action("create_content", content, content_type=content.content_type)

    def perform_update(self, serializer):
        content = serializer.save()
        log_action("update_content", content)
