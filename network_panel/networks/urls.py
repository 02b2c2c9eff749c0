from django.urls import path

from . import views

app_name = 'networks'

urlpatterns = [
    path('sites/new/', views.SiteCreateView.as_view(), name='site-new'),
]
