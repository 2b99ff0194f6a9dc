from django.conf import settings
from django.core.management.base import BaseCommand

from printshop.notifications.worker import process_pending_emails


class Command(BaseCommand):
    help = 'Send pending operator emails through the mail API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--limit',
            type=int,
            default=settings.EMAIL_WORKER_BATCH_SIZE,
            help='Maximum number of emails to send in this run',
        )

    def handle(self, *args, **options):
        result = process_pending_emails(options['limit'])
        if not result.get('total'):
            self.stdout.write(self.style.WARNING(result['message']))
            return

        self.stdout.write(f"  Sent: {result['success']}")
        self.stdout.write(f"  Failed: {result['failed']}")
        style = self.style.SUCCESS if not result['failed'] else self.style.ERROR
        self.stdout.write(style(result['message']))
