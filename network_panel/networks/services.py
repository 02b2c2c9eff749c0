"""
Site creation service.

Creates a path-based sub-site and fires site_created in the same
transaction, so a fatal receiver error leaves no half-created site.
"""
import logging
import re

from django.db import transaction

from .exceptions import NetworkNotConfigured, SiteAlreadyExists
from .mapper import untrailingslashit
from .models import Network, Site, SiteOption
from .request_context import RequestContext
from .signals import site_created

logger = logging.getLogger(__name__)

SLUG_RE = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')


def validate_site_slug(slug):
    """Приводит slug к виду 'my-site'. ValueError если символы недопустимы."""
    slug = (slug or '').strip().strip('/').lower()
    if not SLUG_RE.match(slug):
        raise ValueError('Site address can only contain lowercase letters (a-z), numbers and hyphens.')
    return slug


class SiteService:
    """
    Сервис создания подсайтов сети.
    """

    @staticmethod
    @transaction.atomic
    def create_site(
        slug: str,
        title: str,
        request_context: RequestContext,
        principal,
        network: Network = None,
        admin_email: str = '',
    ) -> Site:
        """
        Создать подсайт {network.domain}{network.path}{slug}/.

        Args:
            slug: адрес сайта ('blog')
            title: название (option blogname)
            request_context: данные формы, передаются receiver'ам site_created
            principal: кто создаёт сайт
            network: сеть (None = текущая)
            admin_email: email администратора сайта (option admin_email, если задан)

        Returns:
            Site: созданный сайт (после receiver'ов, адрес мог смениться)

        Raises:
            NetworkNotConfigured: нет записи Network
            SiteAlreadyExists: адрес занят
            ValueError: недопустимый slug
            Unauthorized, Forbidden: из receiver'а маппинга
        """
        network = network or Network.objects.current()
        if network is None:
            raise NetworkNotConfigured('Network is not configured. Run: manage.py create_network')

        slug = validate_site_slug(slug)
        path = f'{network.path}{slug}/'

        if Site.objects.filter(domain=network.domain, path=path).exists():
            raise SiteAlreadyExists(f'Site {network.domain}{path} already exists')

        site = Site.objects.create(network=network, domain=network.domain, path=path)

        scheme = 'https://' if request_context.is_secure else 'http://'
        url = untrailingslashit(scheme + site.domain + site.path)
        SiteOption.objects.bulk_create([
            SiteOption(site=site, name=SiteOption.HOME, value=url),
            SiteOption(site=site, name=SiteOption.SITEURL, value=url),
            SiteOption(site=site, name=SiteOption.BLOGNAME, value=title),
        ])
        if admin_email:
            SiteOption.objects.create(site=site, name=SiteOption.ADMIN_EMAIL, value=admin_email)
        logger.info('Site %s created at %s by user=%s', site.pk, site.address, getattr(principal, 'pk', None))

        site_created.send(
            sender=Site,
            site_id=site.pk,
            network=network,
            request_context=request_context,
            principal=principal,
        )

        site.refresh_from_db()
        return site
