"""
Network signals.

site_created — подсайт только что создан (SiteService.create_site).
Receiver'ы вызываются внутри транзакции создания: исключение из
receiver'а откатывает создание сайта целиком.

Подключается через NetworksConfig.ready() в apps.py.
"""
import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal, receiver

from .mapper import map_site_to_subdomain

logger = logging.getLogger(__name__)

# kwargs: site_id, network, request_context, principal
site_created = Signal()


def is_domain_mapping_active(network):
    """Маппинг имеет смысл только для path-based сети."""
    from django.conf import settings
    if not getattr(settings, 'NETWORK_DOMAIN_MAPPING_ENABLED', True):
        return False
    return network is not None and not network.is_subdomain_install


@receiver(site_created)
def map_new_site_to_subdomain(sender, site_id, network, request_context, principal, **kwargs):
    """На создание сайта — возможно переназначить его на поддомен."""
    if not is_domain_mapping_active(network):
        logger.debug('Domain mapping inactive for network %s, site %s left as is', network, site_id)
        return
    map_site_to_subdomain(site_id, request_context, principal, network=network)


@receiver(post_save, sender='networks.Site')
def site_post_save(sender, instance, **kwargs):
    """При сохранении Site — сбросить кеш middleware (адрес мог измениться)."""
    from .middleware import SiteMiddleware
    SiteMiddleware.clear_cache()
    logger.debug('Site cache cleared after save: %s', instance.address)


@receiver(post_delete, sender='networks.Site')
def site_post_delete(sender, instance, **kwargs):
    from .middleware import SiteMiddleware
    SiteMiddleware.clear_cache()
    logger.debug('Site cache cleared after delete: %s', instance.address)
