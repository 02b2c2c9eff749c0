"""
Baseline тесты для networks app.

Модели, части URL сети, разбор формы, токены действий, site context.

Запуск: python manage.py test networks.tests -v2
"""

from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase, override_settings

from networks.context import (
    clear_current_site, get_current_site, set_current_site, switch_to_site,
)
from networks.mapper import compose_network_url_parts, subdomain_preview, untrailingslashit
from networks.models import Network, Site, SiteOption, normalize_path
from networks.request_context import RequestContext, parse_nested_form
from networks.tokens import make_action_token, token_field_name, verify_action_token

User = get_user_model()


class ComposeNetworkUrlPartsTests(SimpleTestCase):
    """Части URL сети: схема, домен без www., путь."""

    def test_secure_request_gives_https(self):
        parts = compose_network_url_parts(Network(domain='example.com', path='/'), secure=True)
        self.assertEqual(parts.scheme, 'https://')

    def test_plain_request_gives_http(self):
        parts = compose_network_url_parts(Network(domain='example.com', path='/'), secure=False)
        self.assertEqual(parts.scheme, 'http://')

    def test_leading_www_is_stripped(self):
        parts = compose_network_url_parts(Network(domain='www.example.com', path='/'), secure=True)
        self.assertEqual(parts.domain, 'example.com')

    def test_only_leading_www_is_stripped(self):
        parts = compose_network_url_parts(Network(domain='www.www.example.com', path='/'), secure=True)
        self.assertEqual(parts.domain, 'www.example.com')
        parts = compose_network_url_parts(Network(domain='wwwexample.com', path='/'), secure=True)
        self.assertEqual(parts.domain, 'wwwexample.com')

    def test_path_is_unchanged(self):
        parts = compose_network_url_parts(Network(domain='example.com', path='/net/'), secure=False)
        self.assertEqual(parts.path, '/net/')

    def test_subdomain_preview(self):
        parts = compose_network_url_parts(Network(domain='www.example.com', path='/'), secure=True)
        self.assertEqual(subdomain_preview(parts, 'blog'), 'https://blog.example.com/')

    def test_untrailingslashit(self):
        self.assertEqual(untrailingslashit('https://blog.example.com/'), 'https://blog.example.com')
        self.assertEqual(untrailingslashit('https://blog.example.com//\\'), 'https://blog.example.com')
        self.assertEqual(untrailingslashit('https://blog.example.com'), 'https://blog.example.com')


class RequestContextTests(SimpleTestCase):

    def test_nested_keys_are_unfolded(self):
        data = parse_nested_form([
            ('blog[domain_map]', '1'),
            ('blog[address]', 'news'),
            ('_nonce_add-blog', 'abc'),
        ])
        self.assertEqual(data, {
            'blog': {'domain_map': '1', 'address': 'news'},
            '_nonce_add-blog': 'abc',
        })

    def test_deep_nesting(self):
        data = parse_nested_form([('a[b][c]', 'x')])
        self.assertEqual(data, {'a': {'b': {'c': 'x'}}})

    def test_blog_missing_is_empty_dict(self):
        ctx = RequestContext(data={'blog': 'not-a-dict'})
        self.assertEqual(ctx.blog, {})
        self.assertIsNone(ctx.get('blog', 'domain_map'))

    def test_get_nested(self):
        ctx = RequestContext(data={'blog': {'domain_map': '1'}})
        self.assertEqual(ctx.get('blog', 'domain_map'), '1')
        self.assertEqual(ctx.get('blog', 'missing', default='x'), 'x')


class ModelTests(TestCase):

    def test_normalize_path(self):
        self.assertEqual(normalize_path(''), '/')
        self.assertEqual(normalize_path('/'), '/')
        self.assertEqual(normalize_path('net'), '/net/')
        self.assertEqual(normalize_path('/net/sub'), '/net/sub/')

    def test_network_save_normalizes(self):
        network = Network.objects.create(domain=' WWW.Example.com ', path='net')
        self.assertEqual(network.domain, 'www.example.com')
        self.assertEqual(network.path, '/net/')

    def test_current_network_is_first(self):
        first = Network.objects.create(domain='example.com')
        Network.objects.create(domain='other.com')
        self.assertEqual(Network.objects.current(), first)

    def test_site_slug(self):
        network = Network.objects.create(domain='example.com', path='/')
        site = Site.objects.create(network=network, domain='example.com', path='/blog/')
        self.assertEqual(site.slug, 'blog')
        self.assertEqual(site.address, 'example.com/blog/')

    def test_site_slug_relative_to_network_path(self):
        network = Network.objects.create(domain='example.com', path='/net/')
        site = Site.objects.create(network=network, domain='example.com', path='/net/blog/')
        self.assertEqual(site.slug, 'blog')


class ActionTokenTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='admin', password='Test1234')
        self.other = User.objects.create_user(username='other', password='Test1234')

    def test_token_field_name(self):
        self.assertEqual(token_field_name('add-blog'), '_nonce_add-blog')

    def test_valid_token(self):
        token = make_action_token(self.user, 'add-blog')
        self.assertTrue(verify_action_token(token, self.user, 'add-blog'))

    def test_token_is_bound_to_action(self):
        token = make_action_token(self.user, 'delete-blog')
        self.assertFalse(verify_action_token(token, self.user, 'add-blog'))

    def test_token_is_bound_to_user(self):
        token = make_action_token(self.other, 'add-blog')
        self.assertFalse(verify_action_token(token, self.user, 'add-blog'))

    def test_garbage_and_missing_token(self):
        self.assertFalse(verify_action_token('garbage', self.user, 'add-blog'))
        self.assertFalse(verify_action_token('', self.user, 'add-blog'))
        self.assertFalse(verify_action_token(None, self.user, 'add-blog'))

    @override_settings(NETWORK_ACTION_TOKEN_MAX_AGE=-1)
    def test_expired_token(self):
        token = make_action_token(self.user, 'add-blog')
        self.assertFalse(verify_action_token(token, self.user, 'add-blog'))


class SiteContextTests(TestCase):

    def setUp(self):
        self.network = Network.objects.create(domain='example.com')
        self.site = Site.objects.create(network=self.network, domain='example.com', path='/blog/')
        clear_current_site()

    def tearDown(self):
        clear_current_site()

    def test_switch_to_site_sets_and_restores(self):
        other = Site.objects.create(network=self.network, domain='example.com', path='/other/')
        set_current_site(other)
        with switch_to_site(self.site) as options:
            self.assertEqual(get_current_site(), self.site)
            options.update('home', 'http://example.com/blog')
        self.assertEqual(get_current_site(), other)
        self.assertEqual(
            SiteOption.objects.get(site=self.site, name='home').value,
            'http://example.com/blog',
        )

    def test_update_option_overwrites(self):
        with switch_to_site(self.site) as options:
            options.update('blogname', 'One')
            options.update('blogname', 'Two')
        self.assertEqual(SiteOption.objects.filter(site=self.site, name='blogname').count(), 1)
        self.assertEqual(SiteOption.objects.get(site=self.site, name='blogname').value, 'Two')

    def test_switch_to_site_restores_and_rolls_back_on_error(self):
        with self.assertRaises(DatabaseError):
            with switch_to_site(self.site) as options:
                options.update('home', 'http://changed')
                raise DatabaseError('boom')
        self.assertIsNone(get_current_site())
        self.assertFalse(SiteOption.objects.filter(site=self.site, name='home').exists())

    def test_switch_to_site_restores_on_error_in_option_store(self):
        set_current_site(self.site)
        other = Site.objects.create(network=self.network, domain='example.com', path='/other/')
        with mock.patch('networks.context.SiteOptions.update', side_effect=DatabaseError('down')):
            with self.assertRaises(DatabaseError):
                with switch_to_site(other) as options:
                    options.update('home', 'x')
        self.assertEqual(get_current_site(), self.site)
