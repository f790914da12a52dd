"""Management command to run a view tracking pass from the shell."""
from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from submissions.models import ClipSubmission
from tracking.jobs import run_view_tracking_job
from tracking.tracker import ViewTracker, track_single_clip


class Command(BaseCommand):
    help = "Scrape current view counts and accrue earnings for tracked clips."

    def add_arguments(self, parser) -> None:
        parser.add_argument(
            "--max-clips",
            type=int,
            default=None,
            help="Maximum number of clips to process in this run.",
        )
        parser.add_argument(
            "--max-duration",
            type=float,
            default=None,
            help="Time budget in seconds for the whole run.",
        )
        parser.add_argument(
            "--clip",
            type=int,
            default=None,
            help="Refresh only the clip with this id.",
        )

    def handle(self, *args, **options) -> None:
        clip_id = options.get("clip")
        if clip_id is not None:
            submission = ClipSubmission.objects.select_related("clip", "campaign").filter(clip_id=clip_id).first()
            if submission is None:
                raise CommandError(f"No submission found for clip {clip_id}.")
            result = track_single_clip(submission)
            if not result.success:
                raise CommandError(f"Scrape failed for clip {clip_id}: {result.error}")
            self.stdout.write(self.style.SUCCESS(
                f"Clip {clip_id}: {result.previous_views} -> {result.current_views} views, "
                f"+${result.earnings_added}"
            ))
            return

        tracker = ViewTracker(max_clips=options.get("max_clips"), max_duration=options.get("max_duration"))
        summary = run_view_tracking_job(tracker=tracker)
        if summary["status"] == "SKIPPED":
            self.stdout.write(self.style.WARNING("Another view tracking run is in progress; skipped."))
            return

        self.stdout.write(
            f"Processed {summary['processed']} clip(s): {summary['successful']} ok, {summary['failed']} failed, "
            f"stopped: {summary['stopped_reason']}"
        )
        self.stdout.write(self.style.SUCCESS(
            f"Earnings accrued: ${summary['earnings_added']}. "
            f"Completed campaigns: {summary['completed_campaigns'] or 'none'}"
        ))
