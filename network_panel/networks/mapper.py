"""
Domain mapping: подсайт example.com/{slug}/ → {slug}.example.com.

Вызывается один раз, сразу после создания подсайта (signal site_created).
Обратного маппинга нет.
"""
import logging
import re
from typing import NamedTuple, Optional

from .context import switch_to_site
from .exceptions import Forbidden, SiteAlreadyExists, Unauthorized
from .models import Site, SiteOption
from .request_context import RequestContext
from .tokens import ADD_SITE_ACTION, token_field_name, verify_action_token

logger = logging.getLogger(__name__)

MANAGE_SITES_PERMISSION = 'networks.manage_sites'

# Единственный зарезервированный slug: сайт "www" не маппим.
RESERVED_SLUG = 'www'

_WWW_PREFIX_RE = re.compile(r'^www\.')


class NetworkUrlParts(NamedTuple):
    scheme: str  # 'https://' или 'http://'
    domain: str  # домен сети без www.
    path: str


def compose_network_url_parts(network, secure: bool) -> NetworkUrlParts:
    """
    Части URL сети.

    Домен возвращается без "www." — поддомен строится от голого домена:
    www.example.com → blog.example.com, а не blog.www.example.com.
    """
    return NetworkUrlParts(
        scheme='https://' if secure else 'http://',
        domain=_WWW_PREFIX_RE.sub('', network.domain),
        path=network.path,
    )


def untrailingslashit(value: str) -> str:
    return value.rstrip('/\\')


def subdomain_preview(parts: NetworkUrlParts, slug: str) -> str:
    """Как будет выглядеть адрес сайта после маппинга (для формы/API)."""
    return f'{parts.scheme}{slug}.{parts.domain}{parts.path}'


def check_add_site_request(request_context: RequestContext, principal) -> None:
    """
    Фатальные проверки запроса "Add New Site".

    Raises:
        Unauthorized: нет валидного токена действия 'add-blog'
        Forbidden: у principal нет manage_sites
    """
    token = request_context.get(token_field_name(ADD_SITE_ACTION))
    if not verify_action_token(token, principal, ADD_SITE_ACTION):
        logger.warning(
            'Add-site request rejected: invalid action token (user=%s)',
            getattr(principal, 'pk', None),
        )
        raise Unauthorized()
    if not principal.has_perm(MANAGE_SITES_PERMISSION):
        logger.warning(
            'Add-site request rejected: user=%s lacks %s',
            principal.pk, MANAGE_SITES_PERMISSION,
        )
        raise Forbidden()


def wants_domain_map(request_context: RequestContext) -> bool:
    return request_context.blog.get('domain_map') == '1'


def map_site_to_subdomain(
    site_id,
    request_context: RequestContext,
    principal,
    network=None,
) -> Optional[Site]:
    """
    Возможно переназначить подсайт на поддомен сети.

    Args:
        site_id: ID только что созданного сайта
        request_context: данные формы (токен, blog[domain_map]) и флаг https
        principal: пользователь, создающий сайт
        network: сеть (None = сеть сайта)

    Returns:
        Обновлённый Site, либо None если маппинг не запрошен / slug = 'www'.

    Raises:
        Unauthorized, Forbidden — до любых изменений.
        SiteAlreadyExists: адрес поддомена уже занят другим сайтом.
    """
    check_add_site_request(request_context, principal)

    if not wants_domain_map(request_context):
        return None

    site = Site.objects.select_related('network').get(pk=site_id)
    slug = site.slug

    if slug == RESERVED_SLUG:
        logger.info('Site %s has reserved slug "%s", domain mapping skipped', site.pk, slug)
        return None

    parts = compose_network_url_parts(network or site.network, request_context.is_secure)
    new_domain = f'{slug}.{parts.domain}'
    new_url = untrailingslashit(parts.scheme + new_domain + parts.path)

    # Поддомен может быть уже занят (тот же slug смаппили раньше)
    if Site.objects.filter(domain=new_domain, path=parts.path).exclude(pk=site.pk).exists():
        raise SiteAlreadyExists(f'Site {new_domain}{parts.path} already exists')

    old_address = site.address

    with switch_to_site(site) as options:
        site.domain = new_domain
        site.path = parts.path
        site.save(update_fields=['domain', 'path', 'updated_at'])
        options.update(SiteOption.HOME, new_url)
        options.update(SiteOption.SITEURL, new_url)

    logger.info('Site %s mapped to subdomain: %s → %s', site.pk, old_address, site.address)
    return site
