from .attendance_views import AttendanceView
from .auth_views import LogoutView, SessionLoginView
from .content_views import ContentViewSet
from .other_views import (
    DashboardView,
    SchoolClassViewSet,
    StudentViewSet,
    SubjectViewSet,
    TeacherViewSet,
    UserViewSet,
)
from .quiz_views import QuizAttemptViewSet, QuizViewSet
