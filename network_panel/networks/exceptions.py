"""
Ошибки сети сайтов.

Unauthorized/Forbidden — фатальные: прерывают весь запрос создания сайта.
Наследуются от PermissionDenied, поэтому Django отдаёт их как 403.
"""
from django.core.exceptions import PermissionDenied


class Unauthorized(PermissionDenied):
    """Anti-forgery токен отсутствует или невалиден."""

    default_message = 'Nice try.'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class Forbidden(PermissionDenied):
    """У пользователя нет capability manage_sites."""

    default_message = 'You do not have sufficient permissions to add sites to this network.'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class NetworkServiceError(Exception):
    """Base exception for site creation errors."""
    pass


class NetworkNotConfigured(NetworkServiceError):
    """Raised when no Network row exists yet."""
    pass


class SiteAlreadyExists(NetworkServiceError):
    """Raised when the domain/path pair is already taken."""
    pass
