"""
Development settings - локальная разработка
"""
from .settings import *  # noqa: F401,F403

DEBUG = True
ALLOWED_HOSTS = ['*']

# Поддомены example.test резолвятся на 127.0.0.1 через /etc/hosts
NETWORK_DOMAIN_MAPPING_ENABLED = True
SITE_CACHE_TTL = 5

LOGGING['loggers']['networks']['level'] = 'DEBUG'  # noqa: F405
