"""
Views сети сайтов.

SiteCreateView     — HTML-форма "Add New Site" (+ опция маппинга на поддомен).
NetworkUrlPartsView — JSON: части URL сети и превью поддомена для формы.
"""
import logging

from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin, PermissionRequiredMixin
from django.shortcuts import redirect, render
from django.urls import reverse
from django.views import View
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import NetworkServiceError
from .forms import AddSiteForm
from .mapper import MANAGE_SITES_PERMISSION, compose_network_url_parts, subdomain_preview
from .models import Network
from .permissions import CanManageSites
from .request_context import RequestContext
from .services import SiteService, validate_site_slug
from .signals import is_domain_mapping_active
from .tokens import ADD_SITE_ACTION, make_action_token, token_field_name

logger = logging.getLogger(__name__)


class SiteCreateView(LoginRequiredMixin, PermissionRequiredMixin, View):
    """
    GET  /network/sites/new/ — форма
    POST /network/sites/new/ — создание сайта; маппинг делает receiver site_created.

    Unauthorized/Forbidden из receiver'а не ловим: Django отдаёт 403,
    транзакция создания откатывается.
    """
    permission_required = MANAGE_SITES_PERMISSION
    raise_exception = True
    template_name = 'networks/site_new.html'

    def get(self, request):
        network = Network.objects.current()
        form = AddSiteForm(allow_domain_map=is_domain_mapping_active(network))
        return self._render(request, network, form)

    def post(self, request):
        network = Network.objects.current()
        form = AddSiteForm(request.POST, allow_domain_map=is_domain_mapping_active(network))
        if not form.is_valid():
            return self._render(request, network, form, status=400)

        try:
            site = SiteService.create_site(
                slug=form.cleaned_data['address'],
                title=form.cleaned_data['title'],
                request_context=RequestContext.from_request(request),
                principal=request.user,
                network=network,
                admin_email=form.cleaned_data.get('email', ''),
            )
        except NetworkServiceError as e:
            form.add_error(None, str(e))
            return self._render(request, network, form, status=400)

        messages.success(request, f'Site added: {site.address}')
        return redirect(f"{reverse('networks:site-new')}?id={site.pk}")

    def _render(self, request, network, form, status=200):
        context = {
            'form': form,
            'network': network,
            'url_parts': compose_network_url_parts(network, request.is_secure()) if network else None,
            'domain_mapping': 'domain_map' in form.fields,
            'token_field': token_field_name(ADD_SITE_ACTION),
            'action_token': make_action_token(request.user, ADD_SITE_ACTION),
        }
        return render(request, self.template_name, context, status=status)


class NetworkUrlPartsView(APIView):
    """
    GET /api/network/url-parts/?slug=blog

    {
        "scheme": "https://",
        "domain": "example.com",
        "path": "/",
        "domain_mapping": true,
        "preview": "https://blog.example.com/"
    }

    Недопустимый slug → 400 {"detail": ...}.
    """
    permission_classes = [CanManageSites]

    def get(self, request):
        network = Network.objects.current()
        if network is None:
            return Response({'detail': 'Network is not configured'}, status=404)

        parts = compose_network_url_parts(network, request.is_secure())
        data = {
            'scheme': parts.scheme,
            'domain': parts.domain,
            'path': parts.path,
            'domain_mapping': is_domain_mapping_active(network),
            'preview': None,
        }
        slug = request.query_params.get('slug', '').strip()
        if slug:
            try:
                slug = validate_site_slug(slug)
            except ValueError as e:
                return Response({'detail': str(e)}, status=400)
            data['preview'] = subdomain_preview(parts, slug)
        return Response(data)
