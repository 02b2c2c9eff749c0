"""
Anti-forgery токены, привязанные к действию и пользователю.

Аналог nonce: токен для 'add-blog' не подходит к другому действию
и к другому пользователю; истекает через NETWORK_ACTION_TOKEN_MAX_AGE.
"""
import logging

from django.conf import settings
from django.core import signing

logger = logging.getLogger(__name__)

ADD_SITE_ACTION = 'add-blog'


def token_field_name(action):
    """Имя поля формы с токеном: '_nonce_add-blog'."""
    return f'_nonce_{action}'


def _signer(action):
    return signing.TimestampSigner(salt=f'networks.action.{action}')


def make_action_token(user, action):
    return _signer(action).sign(str(user.pk))


def verify_action_token(token, user, action):
    """True если token выдан этому user для этого action и не истёк."""
    if not token or user is None or user.pk is None:
        return False
    max_age = getattr(settings, 'NETWORK_ACTION_TOKEN_MAX_AGE', 86400)
    try:
        value = _signer(action).unsign(token, max_age=max_age)
    except signing.SignatureExpired:
        logger.info('Action token expired: action=%s user=%s', action, user.pk)
        return False
    except signing.BadSignature:
        return False
    return value == str(user.pk)
