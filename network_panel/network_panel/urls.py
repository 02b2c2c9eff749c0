"""
URL configuration for network_panel project.
"""
from django.contrib import admin
from django.urls import path, include

from . import health

urlpatterns = [
    path('admin/', admin.site.urls),

    # Health probes
    path('health/', health.health_check, name='health'),
    path('health/ready/', health.ready_check, name='health-ready'),
    path('health/live/', health.live_check, name='health-live'),

    # Network » Sites (форма "Add New Site")
    path('network/', include('networks.urls')),

    # API
    path('api/network/', include('networks.api_urls')),
]
