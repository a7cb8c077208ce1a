import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from main.quiz.exceptions import AlreadyCompleted, NotFound, QuizError

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    DRF exception handler that maps quiz lifecycle errors to client errors:
    ``NotFound`` -> 404, ``AlreadyCompleted`` -> 400 (with the finished attempt id).
    """
    if isinstance(exc, AlreadyCompleted):
        data = {"detail": exc.message, "message": exc.message}
        if exc.attempt_id is not None:
            data["attemptId"] = exc.attempt_id
        return Response(data, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, NotFound):
        return Response({"detail": exc.message, "message": exc.message},
                        status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, QuizError):
        logger.warning("Unhandled quiz error: %s", exc)
        return Response({"detail": exc.message}, status=status.HTTP_400_BAD_REQUEST)

    return exception_handler(exc, context)
