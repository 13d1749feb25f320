"""Management command to re-render stored QR images."""

from django.core.management.base import BaseCommand, CommandError

from qroyal.models import Business, Customer
from qroyal.services import business as business_service
from qroyal.services import customer as customer_service


class Command(BaseCommand):
    help = "Re-render stored QR images (after a style or PUBLIC_BASE_URL change)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--business",
            default=None,
            help="Only this business (token) and its members",
        )

    def handle(self, *args, **options):
        businesses = Business.objects.filter(is_active=True)
        customers = Customer.objects.filter(is_active=True)

        token = options["business"]
        if token:
            businesses = businesses.filter(token=token)
            if not businesses.exists():
                raise CommandError(f"Business '{token}' not found")
            customers = customers.filter(memberships__business__token=token)

        business_count = 0
        for business in businesses.iterator():
            business_service.render_qr(business)
            business_count += 1

        customer_count = 0
        for customer in customers.distinct().iterator():
            customer_service.render_qr(customer)
            customer_count += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Re-rendered {business_count} business and {customer_count} customer QR codes."
            )
        )
