"""
Management command that blocks until the database accepts connections.
"""
import time

from django.db import connections
from django.db.utils import OperationalError
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    """Pauses execution until the default database is available."""
    help = 'Waits for the database to accept connections.'

    def add_arguments(self, parser):
        parser.add_argument('--timeout', type=int, default=60, help='Seconds to wait before giving up.')
        parser.add_argument('--interval', type=float, default=1.0, help='Seconds between attempts.')

    def handle(self, *args, **options):
        self.stdout.write('Waiting for the database...')
        deadline = time.monotonic() + options['timeout']
        while True:
            try:
                connections['default'].ensure_connection()
                break
            except OperationalError:
                if time.monotonic() >= deadline:
                    raise CommandError('Database still unavailable, giving up.')
                self.stdout.write(f"Database unavailable, retrying in {options['interval']}s...")
                time.sleep(options['interval'])

        self.stdout.write(self.style.SUCCESS('Database available!'))
