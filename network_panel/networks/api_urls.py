from django.urls import path

from . import views

urlpatterns = [
    path('url-parts/', views.NetworkUrlPartsView.as_view(), name='network-url-parts'),
]
