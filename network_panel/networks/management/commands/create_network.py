"""
Management command для создания/обновления сети

Использование:
    python manage.py create_network --domain www.example.com --path /
    python manage.py create_network --domain example.com --subdomain-install
"""

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from networks.models import Network


class Command(BaseCommand):
    help = 'Создать или обновить сеть сайтов (домен и базовый путь)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--domain',
            type=str,
            required=True,
            help='Базовый домен сети, например www.example.com'
        )
        parser.add_argument(
            '--path',
            type=str,
            default='/',
            help='Базовый путь сети (по умолчанию /)'
        )
        parser.add_argument(
            '--subdomain-install',
            action='store_true',
            help='Сеть уже на поддоменах (маппинг сайтов будет отключён)'
        )

    def handle(self, *args, **options):
        domain = options['domain'].strip()
        if not domain:
            raise CommandError('Укажите --domain')

        with transaction.atomic():
            network = Network.objects.current()
            created = network is None
            if created:
                network = Network()
            network.domain = domain
            network.path = options['path']
            network.is_subdomain_install = options['subdomain_install']
            network.save()

        action = 'Создана' if created else 'Обновлена'
        self.stdout.write(self.style.SUCCESS(f'{action} сеть: {network}'))
        if network.is_subdomain_install:
            self.stdout.write(self.style.WARNING('Subdomain install: маппинг сайтов на поддомены неактивен'))
