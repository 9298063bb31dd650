from rest_framework import permissions


def is_school_admin(user):
    if not user or not user.is_authenticated:
        return False
    return getattr(user, 'is_superuser', False) or getattr(user, 'user_type', None) == 'admin'


class IsSchoolAdmin(permissions.BasePermission):
    """
    Permission check for Admin users only.
    Allows only authenticated users with user_type='admin'.
    """

    def has_permission(self, request, view):
        return is_school_admin(request.user)


class IsAdminOrStaff(permissions.BasePermission):
    """
    Permission check for Admin or Staff users.
    Teachers upload grades, aggregate and publish term results, and read class views.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        if getattr(user, 'is_superuser', False) or getattr(user, 'is_staff', False):
            return True

        return getattr(user, 'user_type', None) in ['admin', 'staff']


class IsStudent(permissions.BasePermission):
    """Authenticated student accounts with a linked student profile"""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return getattr(user, 'user_type', None) == 'student' and hasattr(user, 'student_profile')
