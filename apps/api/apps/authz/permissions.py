"""
Authz permissions for registry endpoints.
"""
from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    """
    Permission class that only allows Admin role users.

    Used for every donor and donation mutation endpoint.
    """
    message = 'Admin privileges are required for this operation.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        return getattr(request.user, 'is_admin', False)
