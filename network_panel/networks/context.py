"""
Site context — текущий подсайт.

Использует contextvars (async-safe) вместо threading.local.
Middleware ставит сайт запроса, switch_to_site() — временно
переключает контекст на другой сайт (аналог switch_to_blog/restore_current_blog).
"""
import contextvars
from contextlib import contextmanager

from django.db import transaction

_current_site: contextvars.ContextVar = contextvars.ContextVar(
    'current_site', default=None
)


def set_current_site(site):
    """Установить текущий сайт в context. Возвращает token для reset."""
    return _current_site.set(site)


def get_current_site():
    """Получить текущий сайт из context. Возвращает None если не установлен."""
    return _current_site.get()


def clear_current_site():
    """Очистить текущий сайт из context."""
    _current_site.set(None)


class SiteOptions:
    """Доступ к SiteOption одного сайта."""

    def __init__(self, site):
        self.site = site

    def update(self, name, value):
        from .models import SiteOption
        SiteOption.objects.update_or_create(
            site=self.site, name=name, defaults={'value': value},
        )


@contextmanager
def switch_to_site(site):
    """
    Переключиться на сайт на время блока.

    Все записи внутри блока идут одной транзакцией; предыдущий сайт
    восстанавливается при любом выходе, в том числе по исключению
    (транзакция при этом откатывается).

        with switch_to_site(site) as options:
            options.update('home', url)
    """
    token = _current_site.set(site)
    try:
        with transaction.atomic():
            yield SiteOptions(site)
    finally:
        _current_site.reset(token)
