import logging

from django.contrib.auth import login, logout
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from main.common.audit import log_action

from ..serializers.auth_serializers import SessionLoginSerializer, UserSerializer

logger = logging.getLogger(__name__)


class SessionLoginView(APIView):
    """Cookie based login for the browser client; JWT clients use ``auth/login/``."""
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = SessionLoginSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data['user']
        login(request, user)
        log_action("login", user, user=user, request=request)
        return Response(UserSerializer(user, context={'request': request}).data)


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        log_action("logout", request.user, user=request.user, request=request)
        logout(request)
        return Response(status=status.HTTP_204_NO_CONTENT)
