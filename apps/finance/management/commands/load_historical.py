from datetime import date
from django.core.management.base import BaseCommand, CommandError

from apps.finance.application.tasks import load_historical_data


class Command(BaseCommand):
    help = 'Load historical exchange rates between AED, USD, EUR and GBP for a date range'

    def add_arguments(self, parser):
        parser.add_argument(
            '--from',
            dest='date_from',
            type=str,
            required=True,
            help='Start date in YYYY-MM-DD format'
        )
        parser.add_argument(
            '--to',
            dest='date_to',
            type=str,
            required=True,
            help='End date in YYYY-MM-DD format'
        )
        parser.add_argument(
            '--sync',
            action='store_true',
            help='Run in this process instead of dispatching a Celery task'
        )

    def handle(self, **options):
        date_from_str = options['date_from']
        date_to_str = options['date_to']

        try:
            date_from = date.fromisoformat(date_from_str)
            date_to = date.fromisoformat(date_to_str)
        except ValueError:
            raise CommandError('Invalid date format. Use YYYY-MM-DD')

        if date_from > date_to:
            raise CommandError('date_from must be before or equal to date_to')

        if not options['sync']:
            task = load_historical_data.delay(date_from_str, date_to_str)
            self.stdout.write(self.style.SUCCESS(f'Task dispatched with ID: {task.id}'))
            return

        result = load_historical_data(date_from_str, date_to_str)
        if not result['success']:
            raise CommandError(f"Failed: {result.get('message') or 'Unknown error'}")

        self.stdout.write(self.style.SUCCESS(f"Loaded {result['rates_synced']} rates"))
        if result['errors']:
            self.stdout.write(self.style.WARNING(f"Errors: {len(result['errors'])}"))
