from .core_serializers import (
    UserSummarySerializer,
    UserAdminSerializer,
    SubjectSerializer,
    SchoolClassSerializer,
    ClassSubjectSerializer,
    ClassTeacherSerializer,
    EnrollmentSerializer,
    ContentSerializer,
)
from .quiz_serializers import (
    QuizSerializer,
    QuizDetailSerializer,
    QuestionSerializer,
    QuizAttemptSerializer,
    BeginAttemptSerializer,
    AttemptAnswersSerializer,
)
