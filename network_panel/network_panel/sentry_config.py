"""
Sentry Integration для Django.
Отправляет ошибки в Sentry.

Настройка:
1. Добавить в .env: SENTRY_DSN=https://xxx@xxx.ingest.sentry.io/xxx
2. settings.py вызывает init_sentry() в самом конце.
"""
import os
import logging

logger = logging.getLogger(__name__)

# Ключи формы, которые нельзя отправлять наружу
SENSITIVE_KEYS = ('password', 'token', 'secret', 'csrfmiddlewaretoken', '_nonce_add-blog')


def init_sentry():
    """
    Инициализирует Sentry SDK.
    Вызывать в конце settings.py.
    """
    sentry_dsn = os.environ.get('SENTRY_DSN', '')

    if not sentry_dsn:
        logger.info("Sentry: DSN not configured, skipping initialization")
        return False

    import sentry_sdk
    from sentry_sdk.integrations.django import DjangoIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    environment = os.environ.get('DJANGO_ENV', 'production')
    if os.environ.get('DEBUG', 'False').lower() in ('true', '1', 'yes'):
        environment = 'development'

    sentry_sdk.init(
        dsn=sentry_dsn,
        integrations=[
            DjangoIntegration(transaction_style='url'),
            LoggingIntegration(
                level=logging.INFO,        # breadcrumbs
                event_level=logging.ERROR,  # events
            ),
        ],
        environment=environment,
        release=os.environ.get('APP_VERSION', 'unknown'),
        traces_sample_rate=float(os.environ.get('SENTRY_TRACES_SAMPLE_RATE', '0.0')),
        send_default_pii=False,
        ignore_errors=[
            'django.security.DisallowedHost',
        ],
        before_send=before_send_callback,
    )

    logger.info(f"Sentry: initialized for {environment} environment")
    return True


def before_send_callback(event, hint):
    """
    Фильтрация событий перед отправкой в Sentry.

    PermissionDenied (Unauthorized/Forbidden при создании сайта) — ожидаемые
    отказы, в Sentry не шлём. Токены и пароли из формы маскируем.
    """
    if 'exc_info' in hint:
        exc_type, exc_value, _ = hint['exc_info']
        if exc_type.__name__ in ('Http404', 'PermissionDenied', 'Unauthorized', 'Forbidden'):
            return None

    request_data = event.get('request')
    if request_data and isinstance(request_data.get('data'), dict):
        data = request_data['data']
        for key in SENSITIVE_KEYS:
            if key in data:
                data[key] = '[FILTERED]'

    return event
