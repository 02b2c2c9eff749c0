"""
Network permissions для DRF.
"""
from rest_framework.permissions import BasePermission

from .mapper import MANAGE_SITES_PERMISSION


class CanManageSites(BasePermission):
    """Пользователь должен иметь capability manage_sites."""

    message = 'You do not have sufficient permissions to manage sites of this network.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.has_perm(MANAGE_SITES_PERMISSION)
