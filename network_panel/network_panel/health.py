"""
Health Check Endpoint for Monitoring
=====================================
Используется системой мониторинга для проверки состояния приложения.
"""
import time

from django.conf import settings
from django.db import connection
from django.http import JsonResponse


def health_check(request):
    """
    Health check endpoint для мониторинга.

    Возвращает:
    - 200 если всё работает
    - 500 если есть критические проблемы

    Проверяет:
    - Соединение с базой данных
    - Доступность settings
    - Наличие записи Network (без неё нельзя создавать сайты)
    """
    status = {
        'status': 'healthy',
        'timestamp': time.time(),
        'version': getattr(settings, 'VERSION', '1.0.0'),
        'checks': {}
    }

    # 1. Проверка базы данных
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
        status['checks']['database'] = 'ok'
    except Exception as e:
        status['status'] = 'unhealthy'
        status['checks']['database'] = f'error: {str(e)[:100]}'

    # 2. Проверка критических настроек
    missing = [name for name in ('SECRET_KEY', 'DEBUG', 'ALLOWED_HOSTS') if not hasattr(settings, name)]
    if missing:
        status['status'] = 'unhealthy'
        status['checks']['settings'] = f'missing: {", ".join(missing)}'
    else:
        status['checks']['settings'] = 'ok'

    # 3. Сеть сконфигурирована (не критично — админ создаёт её командой create_network)
    if status['checks']['database'] == 'ok':
        from networks.models import Network
        network = Network.objects.current()
        if network is None:
            status['checks']['network'] = 'not configured (non-critical)'
        elif network.is_subdomain_install:
            status['checks']['network'] = 'subdomain install, domain mapping inactive'
        else:
            status['checks']['network'] = 'ok'

    http_status = 200 if status['status'] == 'healthy' else 500
    return JsonResponse(status, status=http_status)


def ready_check(request):
    """
    Readiness probe - проверяет готовность приложения обслуживать запросы.
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        return JsonResponse({'ready': True})
    except Exception:
        return JsonResponse({'ready': False}, status=503)


def live_check(request):
    """
    Liveness probe - проверяет что приложение живо.
    """
    return JsonResponse({'alive': True, 'timestamp': time.time()})
