from django.core.management.base import BaseCommand
from django.db import transaction

from printshop.parties.ledger import compute_party_stats
from printshop.parties.models import Party


class Command(BaseCommand):
    help = 'Recomputes party balances and totals from their non-deleted ledger transactions'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Perform a dry run without saving changes',
        )
        parser.add_argument(
            '--party-id',
            type=int,
            help='Only repair this party',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN MODE: No changes will be saved."))

        parties = Party.objects.all().order_by('id')
        if options.get('party_id'):
            parties = parties.filter(pk=options['party_id'])
        self.stdout.write(f"Starting balance repair for {parties.count()} parties...")

        repaired = 0
        with transaction.atomic():
            for party in parties.select_for_update():
                stats = compute_party_stats(party)
                if party.balance != stats['balance'] or party.total_orders != stats['total_orders'] \
                        or party.total_payments != stats['total_payments']:
                    repaired += 1
                    self.stdout.write(self.style.SUCCESS(
                        f"  - {party.name} (ID: {party.id}): balance {party.balance} -> {stats['balance']}, "
                        f"orders {party.total_orders} -> {stats['total_orders']}, "
                        f"payments {party.total_payments} -> {stats['total_payments']}"
                    ))
                    party.balance = stats['balance']
                    party.total_orders = stats['total_orders']
                    party.total_payments = stats['total_payments']
                    party.save(update_fields=['balance', 'total_orders', 'total_payments', 'updated_at'])

            if dry_run:
                self.stdout.write(self.style.WARNING(f"\nDry run complete. {repaired} parties would change. Rolling back changes."))
                transaction.set_rollback(True)
            else:
                self.stdout.write(self.style.SUCCESS(f"\nBalance repair complete and committed. {repaired} parties updated."))
