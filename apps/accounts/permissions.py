"""
Role permission classes.

These only look at the account's role; row-level checks against a specific
card, request or display are made by the services through ScopePredicate.
"""
from rest_framework.permissions import BasePermission

from .models import UserRole


class IsFranchisor(BasePermission):
    """Allow franchisor accounts (and superusers) only."""

    message = 'Only the franchisor can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user and user.is_authenticated and
            (user.is_superuser or user.role == UserRole.FRANCHISOR)
        )


class IsFranchisorOrFranchisee(BasePermission):
    """
    Allow network managers: franchisor and franchisee accounts.

    Usage:
        def get_permissions(self):
            if self.action == 'create':
                return [IsAuthenticated(), IsFranchisorOrFranchisee()]
            return super().get_permissions()
    """

    message = 'Establishments cannot perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user and user.is_authenticated and
            (user.is_superuser or user.role in (UserRole.FRANCHISOR, UserRole.FRANCHISEE))
        )
