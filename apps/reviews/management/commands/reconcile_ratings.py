from django.core.management.base import BaseCommand

from apps.reviews.services import reconcile_all_ratings


class Command(BaseCommand):
    help = "Recompute product and vendor ratings from approved reviews."

    def handle(self, *args, **options):
        counts = reconcile_all_ratings()
        self.stdout.write(
            self.style.SUCCESS(
                f"Ratings recomputed for {counts['products']} product(s) and {counts['vendors']} vendor(s)"
            )
        )
