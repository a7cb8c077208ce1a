from django.urls import path, include

from rest_framework_nested import routers
from rest_framework_simplejwt.views import token_refresh, token_obtain_pair

from api import views


router = routers.DefaultRouter()
router.register('users', views.UserViewSet, basename='users')
router.register('subjects', views.SubjectViewSet, basename='subjects')
router.register('classes', views.SchoolClassViewSet, basename='classes')
router.register('students', views.StudentViewSet, basename='students')
router.register('teachers', views.TeacherViewSet, basename='teachers')
router.register('contents', views.ContentViewSet, basename='contents')
router.register('quizzes', views.QuizViewSet, basename='quizzes')
router.register('quiz-attempts', views.QuizAttemptViewSet, basename='quiz-attempts')

urlpatterns = [
    # Main API routes
    path('', include(router.urls)),

    # Dashboard
    path('dashboard/', views.DashboardView.as_view(), name='dashboard'),

    # Attendance
    path('attendance/', views.AttendanceView.as_view(), name='attendance'),

    # Authentication
    path("auth/", include("djoser.urls")),
    path("auth/", include("djoser.urls.jwt")),
    path("auth/login/", token_obtain_pair, name="token_obtain_pair"),
    path("auth/token/refresh/", token_refresh, name="token_refresh"),
    path("auth/session/login/", views.SessionLoginView.as_view(), name="session_login"),
    path("auth/session/logout/", views.LogoutView.as_view(), name="session_logout"),

    # Include default auth views for the browsable API
    path('api-auth/', include('rest_framework.urls', namespace='rest_framework')),
]
