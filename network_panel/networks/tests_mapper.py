"""
Тесты маппинга подсайта на поддомен (mapper + site_created + SiteService).

Запуск: python manage.py test networks.tests_mapper -v2
"""

from unittest import mock

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.db import DatabaseError
from django.test import TestCase, override_settings

from networks.context import clear_current_site, get_current_site, set_current_site
from networks.exceptions import (
    Forbidden, NetworkNotConfigured, SiteAlreadyExists, Unauthorized,
)
from networks.mapper import map_site_to_subdomain
from networks.models import Network, Site, SiteOption
from networks.request_context import RequestContext
from networks.services import SiteService
from networks.tokens import make_action_token

User = get_user_model()


def make_site_manager(username='netadmin'):
    user = User.objects.create_user(username=username, password='Test1234')
    perm = Permission.objects.get(codename='manage_sites', content_type__app_label='networks')
    user.user_permissions.add(perm)
    # Сбрасываем кеш прав
    return User.objects.get(pk=user.pk)


def make_context(user, domain_map='1', secure=True, action='add-blog', with_token=True):
    data = {}
    if with_token:
        data['_nonce_add-blog'] = make_action_token(user, action)
    if domain_map is not None:
        data['blog'] = {'domain_map': domain_map}
    return RequestContext(data=data, is_secure=secure)


class MapperTestBase(TestCase):

    def setUp(self):
        self.network = Network.objects.create(domain='www.example.com', path='/')
        self.admin = make_site_manager()

    def create_path_site(self, slug, network=None):
        network = network or self.network
        site = Site.objects.create(network=network, domain=network.domain, path=f'{network.path}{slug}/')
        url = f'https://{network.domain}{network.path}{slug}'
        SiteOption.objects.create(site=site, name='home', value=url)
        SiteOption.objects.create(site=site, name='siteurl', value=url)
        return site

    def option(self, site, name):
        return SiteOption.objects.get(site=site, name=name).value


class MapSiteToSubdomainTests(MapperTestBase):

    def test_scenario_blog_on_www_network(self):
        """www.example.com, '/', https, slug blog → blog.example.com / https://blog.example.com."""
        site = self.create_path_site('blog')

        result = map_site_to_subdomain(site.pk, make_context(self.admin), self.admin)

        site.refresh_from_db()
        self.assertEqual(result.pk, site.pk)
        self.assertEqual(site.domain, 'blog.example.com')
        self.assertEqual(site.path, '/')
        self.assertEqual(self.option(site, 'home'), 'https://blog.example.com')
        self.assertEqual(self.option(site, 'siteurl'), 'https://blog.example.com')

    def test_plain_http_scheme(self):
        site = self.create_path_site('news')
        map_site_to_subdomain(site.pk, make_context(self.admin, secure=False), self.admin)
        self.assertEqual(self.option(site, 'home'), 'http://news.example.com')

    def test_many_slugs(self):
        """Для любого slug != www: domain = slug.домен_без_www, path = путь сети."""
        for slug in ('blog', 'my-site', 'a1', 'shop-2024'):
            with self.subTest(slug=slug):
                site = self.create_path_site(slug)
                map_site_to_subdomain(site.pk, make_context(self.admin), self.admin)
                site.refresh_from_db()
                self.assertEqual(site.domain, f'{slug}.example.com')
                self.assertEqual(site.path, self.network.path)

    def test_network_with_base_path(self):
        network = Network.objects.create(domain='example.org', path='/net/')
        site = self.create_path_site('docs', network=network)

        map_site_to_subdomain(site.pk, make_context(self.admin), self.admin, network=network)

        site.refresh_from_db()
        self.assertEqual(site.domain, 'docs.example.org')
        self.assertEqual(site.path, '/net/')
        self.assertEqual(self.option(site, 'home'), 'https://docs.example.org/net')

    def test_www_slug_is_not_mapped(self):
        """slug www → сайт остаётся www.example.com/www/."""
        site = self.create_path_site('www')

        result = map_site_to_subdomain(site.pk, make_context(self.admin), self.admin)

        self.assertIsNone(result)
        site.refresh_from_db()
        self.assertEqual(site.address, 'www.example.com/www/')
        self.assertEqual(self.option(site, 'home'), 'https://www.example.com/www')

    def test_intent_missing_or_not_one(self):
        """Флаг blog[domain_map] отсутствует или не '1' → ничего не меняем."""
        for i, value in enumerate((None, '', '0', 'true', 'on', '11', ' 1')):
            with self.subTest(domain_map=value):
                site = self.create_path_site(f'site-{i}')
                old_address = site.address

                result = map_site_to_subdomain(site.pk, make_context(self.admin, domain_map=value), self.admin)

                self.assertIsNone(result)
                site.refresh_from_db()
                self.assertEqual(site.address, old_address)

    def test_missing_token_is_unauthorized(self):
        site = self.create_path_site('blog')

        with self.assertRaises(Unauthorized):
            map_site_to_subdomain(site.pk, make_context(self.admin, with_token=False), self.admin)

        site.refresh_from_db()
        self.assertEqual(site.address, 'www.example.com/blog/')
        self.assertEqual(self.option(site, 'home'), 'https://www.example.com/blog')

    def test_token_for_other_action_is_unauthorized(self):
        site = self.create_path_site('blog')
        with self.assertRaises(Unauthorized):
            map_site_to_subdomain(site.pk, make_context(self.admin, action='delete-blog'), self.admin)

    def test_token_for_other_user_is_unauthorized(self):
        other = make_site_manager('other-admin')
        site = self.create_path_site('blog')
        with self.assertRaises(Unauthorized):
            map_site_to_subdomain(site.pk, make_context(other), self.admin)

    def test_unauthorized_checked_before_intent(self):
        """Токен проверяется даже если маппинг не запрошен."""
        site = self.create_path_site('blog')
        with self.assertRaises(Unauthorized):
            map_site_to_subdomain(
                site.pk, make_context(self.admin, domain_map=None, with_token=False), self.admin,
            )

    def test_principal_without_capability_is_forbidden(self):
        user = User.objects.create_user(username='editor', password='Test1234')
        site = self.create_path_site('blog')

        with self.assertRaises(Forbidden):
            map_site_to_subdomain(site.pk, make_context(user), user)

        site.refresh_from_db()
        self.assertEqual(site.address, 'www.example.com/blog/')

    def test_superuser_has_capability(self):
        root = User.objects.create_superuser(username='root', password='Test1234', email='root@example.com')
        site = self.create_path_site('blog')
        map_site_to_subdomain(site.pk, make_context(root), root)
        site.refresh_from_db()
        self.assertEqual(site.domain, 'blog.example.com')

    def test_error_messages(self):
        self.assertEqual(str(Unauthorized()), 'Nice try.')
        self.assertIn('sufficient permissions', str(Forbidden()))

    def test_storage_failure_rolls_back_and_restores_context(self):
        site = self.create_path_site('blog')
        marker = Site.objects.create(network=self.network, domain='www.example.com', path='/marker/')
        set_current_site(marker)
        try:
            with mock.patch('networks.context.SiteOptions.update', side_effect=DatabaseError('down')):
                with self.assertRaises(DatabaseError):
                    map_site_to_subdomain(site.pk, make_context(self.admin), self.admin)
            self.assertEqual(get_current_site(), marker)
        finally:
            clear_current_site()

        site.refresh_from_db()
        self.assertEqual(site.address, 'www.example.com/blog/')

    def test_taken_subdomain_is_not_overwritten(self):
        mapped = self.create_path_site('blog')
        map_site_to_subdomain(mapped.pk, make_context(self.admin), self.admin)
        second = self.create_path_site('blog')

        with self.assertRaises(SiteAlreadyExists):
            map_site_to_subdomain(second.pk, make_context(self.admin), self.admin)

        second.refresh_from_db()
        self.assertEqual(second.address, 'www.example.com/blog/')
        self.assertEqual(self.option(second, 'home'), 'https://www.example.com/blog')


class SiteServiceTests(MapperTestBase):

    def test_create_site_without_mapping(self):
        """Флаг не передан → сайт остаётся path-based."""
        ctx = make_context(self.admin, domain_map=None, secure=False)

        site = SiteService.create_site('blog', 'My Blog', ctx, self.admin, network=self.network)

        self.assertEqual(site.address, 'www.example.com/blog/')
        self.assertEqual(self.option(site, 'home'), 'http://www.example.com/blog')
        self.assertEqual(self.option(site, 'siteurl'), 'http://www.example.com/blog')
        self.assertEqual(self.option(site, 'blogname'), 'My Blog')

    def test_create_site_with_mapping(self):
        site = SiteService.create_site('Blog', 'My Blog', make_context(self.admin), self.admin)

        self.assertEqual(site.domain, 'blog.example.com')
        self.assertEqual(site.path, '/')
        self.assertEqual(self.option(site, 'home'), 'https://blog.example.com')
        self.assertEqual(self.option(site, 'blogname'), 'My Blog')

    def test_create_www_site_stays_path_based(self):
        site = SiteService.create_site('www', 'WWW', make_context(self.admin), self.admin)
        self.assertEqual(site.address, 'www.example.com/www/')

    def test_unauthorized_rolls_back_creation(self):
        ctx = make_context(self.admin, with_token=False)
        with self.assertRaises(Unauthorized):
            SiteService.create_site('blog', 'My Blog', ctx, self.admin)
        self.assertFalse(Site.objects.filter(path='/blog/').exists())
        self.assertFalse(SiteOption.objects.filter(value='My Blog').exists())

    def test_forbidden_rolls_back_creation(self):
        user = User.objects.create_user(username='editor', password='Test1234')
        with self.assertRaises(Forbidden):
            SiteService.create_site('blog', 'My Blog', make_context(user), user)
        self.assertFalse(Site.objects.exists())

    def test_duplicate_site(self):
        ctx = make_context(self.admin, domain_map=None)
        SiteService.create_site('blog', 'One', ctx, self.admin)
        with self.assertRaises(SiteAlreadyExists):
            SiteService.create_site('blog', 'Two', ctx, self.admin)

    def test_duplicate_subdomain_rolls_back_creation(self):
        """Второй "blog" с маппингом упирается в занятый blog.example.com."""
        SiteService.create_site('blog', 'One', make_context(self.admin), self.admin)
        with self.assertRaises(SiteAlreadyExists):
            SiteService.create_site('blog', 'Two', make_context(self.admin), self.admin)
        self.assertEqual(Site.objects.count(), 1)
        self.assertFalse(SiteOption.objects.filter(value='Two').exists())

    def test_admin_email_is_stored(self):
        ctx = make_context(self.admin, domain_map=None)
        site = SiteService.create_site('blog', 'T', ctx, self.admin, admin_email='owner@example.com')
        self.assertEqual(self.option(site, 'admin_email'), 'owner@example.com')

    def test_admin_email_is_optional(self):
        ctx = make_context(self.admin, domain_map=None)
        site = SiteService.create_site('blog', 'T', ctx, self.admin)
        self.assertFalse(SiteOption.objects.filter(site=site, name='admin_email').exists())

    def test_invalid_slug(self):
        ctx = make_context(self.admin, domain_map=None)
        for slug in ('', 'with space', 'under_score', '-lead', 'a/b'):
            with self.subTest(slug=slug):
                with self.assertRaises(ValueError):
                    SiteService.create_site(slug, 'T', ctx, self.admin)

    def test_no_network(self):
        Network.objects.all().delete()
        with self.assertRaises(NetworkNotConfigured):
            SiteService.create_site('blog', 'T', make_context(self.admin), self.admin)

    def test_subdomain_install_never_maps(self):
        self.network.is_subdomain_install = True
        self.network.save()
        site = SiteService.create_site('blog', 'T', make_context(self.admin), self.admin)
        self.assertEqual(site.address, 'www.example.com/blog/')

    @override_settings(NETWORK_DOMAIN_MAPPING_ENABLED=False)
    def test_mapping_disabled_by_settings(self):
        site = SiteService.create_site('blog', 'T', make_context(self.admin), self.admin)
        self.assertEqual(site.address, 'www.example.com/blog/')
