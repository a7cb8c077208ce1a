from typing import Iterable

from rest_framework import permissions

from main.models import STUDENT


class RoleRequired(permissions.BasePermission):
  """Allow when user's `role` is one of `allowed_roles` on the view; superuser bypass."""
  allowed_roles: Iterable[str] = ()

  def has_permission(self, request, view):
    user = request.user
    if not user or not user.is_authenticated:
      return False
    if user.is_superuser:
      return True
    allowed = getattr(view, "allowed_roles", tuple(self.allowed_roles))
    return getattr(user, "role", None) in allowed


class IsAdmin(permissions.BasePermission):
  def has_permission(self, request, view):
    user = request.user
    return bool(user and user.is_authenticated and user.is_admin)


class IsStudent(permissions.BasePermission):
  def has_permission(self, request, view):
    return bool(request.user and request.user.is_authenticated and request.user.role == STUDENT)


class IsAdminOrReadOnly(permissions.BasePermission):
  def has_permission(self, request, view):
    if not (request.user and request.user.is_authenticated):
      return False
    if request.method in permissions.SAFE_METHODS:
      return True
    return bool(request.user.is_admin)


class IsTeacherOrAdminOrReadOnly(permissions.BasePermission):
  def has_permission(self, request, view):
    if not (request.user and request.user.is_authenticated):
      return False
    if request.method in permissions.SAFE_METHODS:
      return True
    return bool(request.user.is_admin or request.user.is_teacher)


class IsAuthorOrAdmin(permissions.BasePermission):
  """
  Object level: content may be changed by its author or an admin.
  """
  def has_object_permission(self, request, view, obj):
    if request.method in permissions.SAFE_METHODS:
      return True
    content = getattr(obj, "content", obj)
    return content.can_edit(request.user)


class IsSelfOrStaff(permissions.BasePermission):
  """
  Students may only reach routes for their own id; teachers and admins reach any.
  """
  message = "You can only view your own records"

  def has_permission(self, request, view):
    user = request.user
    if not (user and user.is_authenticated):
      return False
    if not user.is_student:
      return True
    lookup = getattr(view, "lookup_url_kwarg", None) or "pk"
    return str(view.kwargs.get(lookup)) == str(user.pk)
