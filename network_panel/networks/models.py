"""
Network models — сеть сайтов (multi-site) с path-based адресацией.

Network = установка (базовый домен + путь).
Site    = подсайт сети: структурированная запись domain/path.
SiteOption = настройки подсайта (home, siteurl, blogname, ...).
"""

from django.db import models


def normalize_path(path):
    """'/foo' → '/foo/', '' → '/'."""
    path = '/' + (path or '').strip('/')
    return path if path == '/' else path + '/'


class NetworkManager(models.Manager):

    def current(self):
        """Текущая сеть. Установка обслуживает одну сеть — берём первую."""
        return self.order_by('id').first()


class Network(models.Model):
    """
    Сеть сайтов. Домен может содержать префикс www. — при построении
    поддоменов он отбрасывается (см. mapper.compose_network_url_parts).
    """
    domain = models.CharField(max_length=253, help_text='Базовый домен сети, например www.example.com')
    path = models.CharField(max_length=100, default='/', help_text='Базовый путь сети')
    is_subdomain_install = models.BooleanField(
        default=False,
        help_text='Сеть уже на поддоменах — маппинг не нужен',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = NetworkManager()

    class Meta:
        verbose_name = 'Сеть'
        verbose_name_plural = 'Сети'

    def __str__(self):
        return f'{self.domain}{self.path}'

    def save(self, *args, **kwargs):
        self.domain = self.domain.strip().lower()
        self.path = normalize_path(self.path)
        super().save(*args, **kwargs)


class Site(models.Model):
    """
    Подсайт сети.

    Для path-based сайта: domain = домен сети, path = '/{slug}/'.
    После маппинга на поддомен: domain = '{slug}.{домен сети}', path = путь сети.
    """
    network = models.ForeignKey(
        Network, on_delete=models.CASCADE,
        related_name='sites',
        verbose_name='Сеть',
    )
    domain = models.CharField(max_length=253, db_index=True)
    path = models.CharField(max_length=100, default='/')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['id']
        verbose_name = 'Сайт'
        verbose_name_plural = 'Сайты'
        unique_together = ['domain', 'path']
        permissions = [
            ('manage_sites', 'Can manage sites of the network'),
        ]

    def __str__(self):
        return self.address

    @property
    def address(self):
        return f'{self.domain}{self.path}'

    @property
    def slug(self):
        """
        Путь сайта относительно пути сети, без слешей по краям:
        '/blog/' → 'blog'; при пути сети '/net/': '/net/blog/' → 'blog'.
        """
        path = self.path
        base = self.network.path
        if base != '/' and path.startswith(base):
            path = path[len(base):]
        return path.strip('/')


class SiteOption(models.Model):
    """Настройка подсайта (аналог options-таблицы каждого сайта)."""

    HOME = 'home'
    SITEURL = 'siteurl'
    BLOGNAME = 'blogname'
    ADMIN_EMAIL = 'admin_email'

    site = models.ForeignKey(
        Site, on_delete=models.CASCADE,
        related_name='options',
        verbose_name='Сайт',
    )
    name = models.CharField(max_length=191)
    value = models.TextField(blank=True, default='')

    class Meta:
        verbose_name = 'Настройка сайта'
        verbose_name_plural = 'Настройки сайтов'
        unique_together = ['site', 'name']

    def __str__(self):
        return f'{self.site}: {self.name}'
