from django.contrib.auth.backends import ModelBackend
from django.contrib.auth import get_user_model
from django.db.models import Q
import logging

logger = logging.getLogger(__name__)

UserModel = get_user_model()


class UsernameOrEmailBackend(ModelBackend):
    def authenticate(self, request, username=None, password=None, **kwargs):
        """
        Authenticate a user by username or email address.

        The identifier may arrive as ``username`` or ``email`` (JWT login,
        session login and the browsable API send different field names).
        Inactive users and wrong passwords return None so the next backend,
        if any, gets a chance.
        """
        username = username or kwargs.get(UserModel.USERNAME_FIELD) or kwargs.get("email")

        if username is None or password is None:
            return None

        user = UserModel._default_manager.filter(
            Q(username__iexact=username) | Q(email__iexact=username)
        ).order_by("id").first()

        if user is None:
            # Run the default password hasher once to reduce the timing
            # difference between an existing and a nonexistent user.
            UserModel().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user

        logger.debug("Rejected credentials for user %s", user.pk)
        return None
