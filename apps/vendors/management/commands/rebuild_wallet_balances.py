from django.core.management.base import BaseCommand

from apps.vendors.services.ledger import iter_wallets, recompute_wallet

TRACKED_FIELDS = ('total_sales', 'total_earnings', 'available_balance', 'pending_balance', 'total_withdrawn')


class Command(BaseCommand):
    help = "Rebuild wallet running totals from the transaction ledger."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report differences without saving",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        checked = 0
        drifted = 0

        for wallet in iter_wallets():
            checked += 1
            totals = recompute_wallet(wallet, save=False)
            changes = {
                field: (getattr(wallet, field), totals[field])
                for field in TRACKED_FIELDS
                if getattr(wallet, field) != totals[field]
            }
            if not changes:
                continue

            drifted += 1
            details = ", ".join(f"{field}: {old} -> {new}" for field, (old, new) in changes.items())
            self.stdout.write(self.style.WARNING(f"Vendor {wallet.vendor_id}: {details}"))

            if not dry_run:
                recompute_wallet(wallet)

        verb = "would be rebuilt" if dry_run else "rebuilt"
        self.stdout.write(self.style.SUCCESS(f"{drifted} of {checked} wallet(s) {verb}"))
