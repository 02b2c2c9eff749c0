from django.apps import AppConfig


class NetworksConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'networks'
    verbose_name = 'Сеть сайтов (Multi-Site)'

    def ready(self):
        # site_created receiver + инвалидация кеша middleware
        import networks.signals  # noqa: F401
        # Django system checks для конфигурации сети
        import networks.checks  # noqa: F401
