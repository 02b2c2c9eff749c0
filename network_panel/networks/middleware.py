"""
Site Middleware — определяет подсайт по hostname + path и кладёт в request.network_site.

Логика:
  1. blog.example.com/...     → Site(domain='blog.example.com', path='/')  — после маппинга
  2. example.com/blog/...     → Site(domain='example.com', path='/blog/')  — path-based
  3. ничего не нашлось        → None

Также ставит сайт в context (networks.context) для кода без request.
"""

import logging
import time

from django.conf import settings as django_settings

from .context import clear_current_site, set_current_site

logger = logging.getLogger(__name__)


class SiteMiddleware:
    """
    Ставить в MIDDLEWARE ПОСЛЕ AuthenticationMiddleware.

    Ставит:
      - request.network_site = Site instance (или None)
    """

    # Кэш: host → (список сайтов, отсортированный по длине path desc, timestamp)
    _host_cache = {}

    SKIP_PATHS = ('/admin/', '/health/', '/static/')

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        site = self._resolve_site(request)
        request.network_site = site
        set_current_site(site)
        try:
            response = self.get_response(request)
        finally:
            clear_current_site()
        return response

    def _resolve_site(self, request):
        path = request.path
        if path.startswith(self.SKIP_PATHS):
            return None

        host = request.get_host().split(':')[0].lower()
        # '/blog' тоже должен попасть в '/blog/'
        lookup_path = path if path.endswith('/') else path + '/'
        for site in self._sites_for_host(host):
            if lookup_path.startswith(site.path):
                return site
        logger.debug('No site for %s%s', host, path)
        return None

    def _sites_for_host(self, host):
        ttl = getattr(django_settings, 'SITE_CACHE_TTL', 300)
        cached = self._host_cache.get(host)
        if cached is not None:
            sites, ts = cached
            if (time.monotonic() - ts) < ttl:
                return sites
            del self._host_cache[host]

        from .models import Site
        sites = sorted(
            Site.objects.filter(domain=host).select_related('network'),
            key=lambda s: len(s.path),
            reverse=True,
        )
        self._host_cache[host] = (sites, time.monotonic())
        return sites

    @classmethod
    def clear_cache(cls):
        """Очистить кэш (при изменении Site)."""
        cls._host_cache.clear()
