"""
Тесты HTTP-поверхности: форма Add New Site, API url-parts, SiteMiddleware,
system checks, create_network, health.

Запуск: python manage.py test networks.tests_views -v2
"""

from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import RequestFactory, TestCase, override_settings
from rest_framework.test import APIClient

from networks.checks import check_network_configuration
from networks.middleware import SiteMiddleware
from networks.models import Network, Site, SiteOption
from networks.tests_mapper import make_context, make_site_manager
from networks.mapper import map_site_to_subdomain
from networks.tokens import make_action_token

User = get_user_model()

SITE_NEW_URL = '/network/sites/new/'


class SiteCreateViewTests(TestCase):

    def setUp(self):
        self.network = Network.objects.create(domain='www.example.com', path='/')
        self.admin = make_site_manager()
        self.client.force_login(self.admin)
        SiteMiddleware.clear_cache()

    def _post(self, slug='blog', domain_map='1', token=True, secure=True, user=None, email=''):
        data = {'blog[address]': slug, 'blog[title]': 'My Blog', 'blog[email]': email}
        if domain_map is not None:
            data['blog[domain_map]'] = domain_map
        if token:
            data['_nonce_add-blog'] = make_action_token(user or self.admin, 'add-blog')
        return self.client.post(SITE_NEW_URL, data, secure=secure)

    def test_form_offers_domain_map_with_preview(self):
        response = self.client.get(SITE_NEW_URL, secure=True)
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'name="blog[domain_map]"')
        self.assertContains(response, 'value="1"')
        self.assertContains(response, 'name="_nonce_add-blog"')
        self.assertContains(response, 'https://<span id="psdn--subdomain-preview"></span>.example.com/')

    def test_form_hides_domain_map_for_subdomain_install(self):
        self.network.is_subdomain_install = True
        self.network.save()
        response = self.client.get(SITE_NEW_URL)
        self.assertEqual(response.status_code, 200)
        self.assertNotContains(response, 'blog[domain_map]')

    def test_create_and_map(self):
        response = self._post()

        self.assertEqual(response.status_code, 302)
        site = Site.objects.get()
        self.assertEqual(site.domain, 'blog.example.com')
        self.assertEqual(site.path, '/')
        self.assertEqual(SiteOption.objects.get(site=site, name='home').value, 'https://blog.example.com')
        self.assertEqual(SiteOption.objects.get(site=site, name='siteurl').value, 'https://blog.example.com')

    def test_create_without_intent_stays_path_based(self):
        response = self._post(domain_map=None, secure=False)

        self.assertEqual(response.status_code, 302)
        site = Site.objects.get()
        self.assertEqual(site.address, 'www.example.com/blog/')
        self.assertEqual(SiteOption.objects.get(site=site, name='home').value, 'http://www.example.com/blog')

    def test_www_slug_stays_path_based(self):
        self._post(slug='www')
        self.assertEqual(Site.objects.get().address, 'www.example.com/www/')

    def test_missing_token_halts_request(self):
        response = self._post(token=False)
        self.assertEqual(response.status_code, 403)
        self.assertFalse(Site.objects.exists())

    def test_user_without_capability_gets_403(self):
        editor = User.objects.create_user(username='editor', password='Test1234')
        self.client.force_login(editor)
        self.assertEqual(self.client.get(SITE_NEW_URL).status_code, 403)
        response = self._post(user=editor)
        self.assertEqual(response.status_code, 403)
        self.assertFalse(Site.objects.exists())

    def test_anonymous_gets_403(self):
        self.client.logout()
        self.assertEqual(self.client.get(SITE_NEW_URL).status_code, 403)

    def test_invalid_slug_is_form_error(self):
        response = self._post(slug='Not Valid!')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(Site.objects.exists())

    def test_duplicate_is_form_error(self):
        self._post(domain_map=None)
        response = self._post(domain_map=None)
        self.assertEqual(response.status_code, 400)
        self.assertContains(response, 'already exists', status_code=400)
        self.assertEqual(Site.objects.count(), 1)

    def test_duplicate_subdomain_is_form_error(self):
        self.assertEqual(self._post().status_code, 302)
        response = self._post()
        self.assertContains(response, 'blog.example.com/ already exists', status_code=400)
        self.assertEqual(Site.objects.count(), 1)
        self.assertEqual(Site.objects.get().address, 'blog.example.com/')

    def test_admin_email_is_saved(self):
        self._post(email='owner@example.com')
        site = Site.objects.get()
        self.assertEqual(SiteOption.objects.get(site=site, name='admin_email').value, 'owner@example.com')

    def test_invalid_admin_email_is_form_error(self):
        response = self._post(email='not-an-email')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(Site.objects.exists())

    def test_no_network(self):
        Network.objects.all().delete()
        response = self.client.get(SITE_NEW_URL)
        self.assertContains(response, 'Network is not configured.')
        response = self._post()
        self.assertEqual(response.status_code, 400)


class NetworkUrlPartsViewTests(TestCase):

    URL = '/api/network/url-parts/'

    def setUp(self):
        self.network = Network.objects.create(domain='www.example.com', path='/')
        self.client = APIClient()
        self.client.force_authenticate(user=make_site_manager())

    def test_parts_and_preview(self):
        response = self.client.get(self.URL, {'slug': 'blog'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            'scheme': 'http://',
            'domain': 'example.com',
            'path': '/',
            'domain_mapping': True,
            'preview': 'http://blog.example.com/',
        })

    def test_secure_request(self):
        response = self.client.get(self.URL, {'slug': 'blog'}, secure=True)
        self.assertEqual(response.json()['preview'], 'https://blog.example.com/')

    def test_without_slug(self):
        self.assertIsNone(self.client.get(self.URL).json()['preview'])

    def test_invalid_slug_is_rejected(self):
        for slug in ('a b', 'evil.com/x', 'under_score', '/'):
            with self.subTest(slug=slug):
                response = self.client.get(self.URL, {'slug': slug})
                self.assertEqual(response.status_code, 400)
                self.assertIn('lowercase letters', response.json()['detail'])

    def test_slug_is_normalized(self):
        response = self.client.get(self.URL, {'slug': '/Blog/'})
        self.assertEqual(response.json()['preview'], 'http://blog.example.com/')

    def test_requires_capability(self):
        client = APIClient()
        client.force_authenticate(user=User.objects.create_user(username='editor', password='Test1234'))
        self.assertEqual(client.get(self.URL).status_code, 403)

    def test_no_network(self):
        Network.objects.all().delete()
        self.assertEqual(self.client.get(self.URL).status_code, 404)


@override_settings(ALLOWED_HOSTS=['*'])
class SiteMiddlewareTests(TestCase):

    def setUp(self):
        self.network = Network.objects.create(domain='www.example.com', path='/')
        self.admin = make_site_manager()
        self.root = Site.objects.create(network=self.network, domain='www.example.com', path='/')
        self.blog = Site.objects.create(network=self.network, domain='www.example.com', path='/blog/')
        SiteMiddleware.clear_cache()
        self.factory = RequestFactory()
        self.middleware = SiteMiddleware(lambda req: None)

    def resolve(self, host, path):
        return self.middleware._resolve_site(self.factory.get(path, HTTP_HOST=host))

    def test_path_based_resolution(self):
        self.assertEqual(self.resolve('www.example.com', '/blog/hello/'), self.blog)
        self.assertEqual(self.resolve('www.example.com', '/blog'), self.blog)
        self.assertEqual(self.resolve('www.example.com', '/about/'), self.root)

    def test_unknown_host(self):
        self.assertIsNone(self.resolve('unknown.test', '/'))

    def test_admin_paths_skipped(self):
        self.assertIsNone(self.resolve('www.example.com', '/admin/'))

    def test_subdomain_after_mapping(self):
        """После маппинга сайт открывается по blog.example.com, а не по /blog/."""
        self.assertEqual(self.resolve('www.example.com', '/blog/'), self.blog)

        map_site_to_subdomain(self.blog.pk, make_context(self.admin), self.admin)

        self.assertEqual(self.resolve('blog.example.com', '/'), self.blog)
        self.assertEqual(self.resolve('www.example.com', '/blog/'), self.root)

    def test_request_attribute_is_set(self):
        seen = {}

        def view(request):
            seen['site'] = request.network_site
            from networks.context import get_current_site
            seen['current'] = get_current_site()

        SiteMiddleware(view)(self.factory.get('/blog/', HTTP_HOST='www.example.com'))
        self.assertEqual(seen['site'], self.blog)
        self.assertEqual(seen['current'], self.blog)


class ChecksTests(TestCase):

    def test_no_network_warning(self):
        ids = [w.id for w in check_network_configuration(None)]
        self.assertEqual(ids, ['networks.W002'])

    def test_subdomain_install_warning(self):
        Network.objects.create(domain='example.com', is_subdomain_install=True)
        ids = [w.id for w in check_network_configuration(None)]
        self.assertEqual(ids, ['networks.W001'])

    def test_path_based_network_ok(self):
        Network.objects.create(domain='example.com')
        self.assertEqual(check_network_configuration(None), [])


class CreateNetworkCommandTests(TestCase):

    def test_create_and_update(self):
        out = StringIO()
        call_command('create_network', '--domain', 'www.example.com', stdout=out)
        network = Network.objects.get()
        self.assertEqual(network.domain, 'www.example.com')
        self.assertEqual(network.path, '/')
        self.assertFalse(network.is_subdomain_install)

        call_command('create_network', '--domain', 'example.org', '--path', 'net', '--subdomain-install', stdout=out)
        network = Network.objects.get()
        self.assertEqual(network.domain, 'example.org')
        self.assertEqual(network.path, '/net/')
        self.assertTrue(network.is_subdomain_install)


class HealthTests(TestCase):

    def test_health(self):
        Network.objects.create(domain='example.com')
        response = self.client.get('/health/')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['status'], 'healthy')
        self.assertEqual(data['checks']['database'], 'ok')
        self.assertEqual(data['checks']['network'], 'ok')

    def test_health_without_network_is_still_healthy(self):
        response = self.client.get('/health/')
        self.assertEqual(response.status_code, 200)
        self.assertIn('not configured', response.json()['checks']['network'])

    def test_probes(self):
        self.assertEqual(self.client.get('/health/ready/').json(), {'ready': True})
        self.assertTrue(self.client.get('/health/live/').json()['alive'])
