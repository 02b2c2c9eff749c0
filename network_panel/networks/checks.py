"""
Django System Checks для конфигурации сети.

Запускаются при:
  - python manage.py check
  - python manage.py runserver

Выдают WARNINGS если маппинг на поддомены не сможет работать.
"""
from django.core.checks import Warning, register
from django.db import DatabaseError


@register()
def check_network_configuration(app_configs, **kwargs):
    """
    W001 — сеть на поддоменах: форма не покажет опцию маппинга.
    W002 — записи Network нет: создавать сайты нельзя.
    """
    errors = []
    try:
        from .models import Network
        network = Network.objects.current()
    except DatabaseError:
        # Таблица networks_network может не существовать (миграции не прошли)
        return errors

    if network is None:
        errors.append(
            Warning(
                'No Network is configured.',
                hint='Run: python manage.py create_network --domain example.com --path /',
                id='networks.W002',
            )
        )
    elif network.is_subdomain_install:
        errors.append(
            Warning(
                f'Network {network} is a subdomain install; subdomain mapping is inactive.',
                hint='Mapping sub-sites to subdomains only applies to path-based networks.',
                id='networks.W001',
            )
        )
    return errors
