"""
Management command to expire vouchers past their expiry date.

Meant to run daily from cron or a scheduler.

Usage:
    python manage.py expire_vouchers [--dry-run]
"""

from django.core.management.base import BaseCommand
from apps.vouchers.services import expire_vouchers


class Command(BaseCommand):
    help = 'Mark unused vouchers past their expiry date as expired'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show how many vouchers would expire without making changes',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']

        count = expire_vouchers(dry_run=dry_run)

        if count == 0:
            self.stdout.write(self.style.SUCCESS('No vouchers to expire.'))
            return

        if dry_run:
            self.stdout.write(
                self.style.WARNING(f'--dry-run mode: {count} voucher(s) would expire, no changes made.')
            )
            return

        self.stdout.write(self.style.SUCCESS(f'Expired {count} voucher(s).'))
