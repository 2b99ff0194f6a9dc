from django.core.management.base import BaseCommand

from printshop.core.operators import setup_accounts


class Command(BaseCommand):
    help = 'Create or update the configured admin, supervisor and operator accounts'

    def add_arguments(self, parser):
        parser.add_argument(
            '--password',
            help='Password for newly created accounts (defaults to OPERATOR_DEFAULT_PASSWORD)',
        )

    def handle(self, *args, **options):
        results, summary = setup_accounts(default_password=options.get('password'))

        for result in results:
            line = f"{result['email']}: {result['status']} - {result['message']}"
            if result['status'] == 'created':
                self.stdout.write(self.style.SUCCESS(f'✓ {line}'))
            elif result['status'] == 'updated':
                self.stdout.write(f'  {line}')
            else:
                self.stdout.write(self.style.ERROR(f'✗ {line}'))

        self.stdout.write(self.style.SUCCESS(
            f"\nSummary: {summary['total']} accounts, {summary['created']} created, "
            f"{summary['updated']} updated, {summary['errors']} errors"
        ))
