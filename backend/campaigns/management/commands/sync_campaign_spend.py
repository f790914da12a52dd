"""Management command to reconcile campaign spend with clip earnings."""
from django.core.management.base import BaseCommand

from campaigns.models import Campaign
from campaigns.services import actual_campaign_spend, sync_campaign_spend


class Command(BaseCommand):
    help = "Recompute campaign spent amounts from the earnings of approved clips"

    def add_arguments(self, parser):
        parser.add_argument(
            '--campaign-id',
            type=int,
            help='Specific campaign ID to sync (optional)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Preview differences without making changes',
        )

    def handle(self, *args, **options):
        campaign_id = options.get('campaign_id')
        dry_run = options.get('dry_run', False)

        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN MODE - No changes will be made"))

        campaigns = Campaign.objects.filter(deleted_at__isnull=True).exclude(status=Campaign.Status.DRAFT)
        if campaign_id:
            campaigns = campaigns.filter(pk=campaign_id)

        self.stdout.write(f"Checking {campaigns.count()} campaign(s)")

        corrected = 0
        for campaign in campaigns:
            if dry_run:
                actual = actual_campaign_spend(campaign)
                if actual != campaign.spent:
                    corrected += 1
                    self.stdout.write(f"  {campaign.title}: spent {campaign.spent} -> {actual}")
                continue

            result = sync_campaign_spend(campaign)
            if result["difference"]:
                corrected += 1
                self.stdout.write(f"  {campaign.title}: spent {result['previous']} -> {result['actual']}")

        self.stdout.write(self.style.SUCCESS(f"Done. {corrected} campaign(s) {'would be ' if dry_run else ''}corrected."))
