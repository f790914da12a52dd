from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient, APITestCase

from audit.models import ApiAccessLog
from campaigns.models import Campaign


class ApiAccessLogViewSetTests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        User = get_user_model()
        self.user = User.objects.create_user(
            username="alice",
            email="alice@example.com",
            password="password123",
        )
        self.other_user = User.objects.create_user(
            username="bob",
            email="bob@example.com",
            password="password123",
        )
        ApiAccessLog.objects.create(
            user=self.user,
            method="GET",
            path="/api/campaigns/",
            action="campaign-list",
            status_code=200,
        )
        ApiAccessLog.objects.create(
            user=self.other_user,
            method="POST",
            path="/api/payouts/requests/",
            action="payout-request-list",
            status_code=201,
        )

    def _results(self, response):
        # The list call itself is logged after the response is built.
        return response.data.get("results", response.data)

    def test_user_sees_only_their_logs(self):
        self.client.force_authenticate(self.user)
        response = self.client.get("/api/audit/logs/")

        self.assertEqual(response.status_code, 200)
        results = self._results(response)
        self.assertEqual(len(results), 1)
        entry = results[0]
        self.assertEqual(entry["user"]["username"], "alice")
        self.assertEqual(entry["section"], "Campaigns")
        self.assertEqual(entry["request_summary"], "GET campaign-list -> 200")
        self.assertEqual(entry["status_code"], 200)

    def test_admin_sees_all_logs(self):
        self.user.role = get_user_model().Role.ADMIN
        self.user.save(update_fields=["role"])

        self.client.force_authenticate(self.user)
        response = self.client.get("/api/audit/logs/")

        self.assertEqual(response.status_code, 200)
        results = self._results(response)
        self.assertEqual(len(results), 2)
        usernames = {item["user"]["username"] for item in results}
        self.assertSetEqual(usernames, {"alice", "bob"})

    def test_anonymous_users_are_rejected(self):
        response = self.client.get("/api/audit/logs/")

        self.assertEqual(response.status_code, 401)


class ApiAuditMiddlewareTests(APITestCase):
    def setUp(self):
        User = get_user_model()
        self.user = User.objects.create_user(
            username="carol",
            email="carol@example.com",
            password="password123",
        )
        ApiAccessLog.objects.all().delete()

    def test_credentials_are_redacted(self):
        response = self.client.post(
            "/api/account/login/",
            {"username": "carol", "password": "password123"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        entry = ApiAccessLog.objects.get(path="/api/account/login/")
        self.assertEqual(entry.method, "POST")
        self.assertEqual(entry.payload, {"username": "carol", "password": "***"})
        self.assertEqual(entry.user, self.user)

    def test_campaign_id_is_captured_from_url(self):
        campaign = Campaign.objects.create(
            title="Spring drop",
            description="Clip the trailer",
            creator="Acme Records",
            budget=Decimal("500.00"),
            payout_rate=Decimal("1.50"),
            status=Campaign.Status.ACTIVE,
        )
        self.client.force_authenticate(self.user)

        response = self.client.get(f"/api/campaigns/{campaign.pk}/", HTTP_X_REQUEST_ID="req-42")

        self.assertEqual(response.status_code, 200)
        entry = ApiAccessLog.objects.get(path=f"/api/campaigns/{campaign.pk}/")
        self.assertEqual(entry.campaign_id, campaign.pk)
        self.assertEqual(entry.action, "campaign-detail")
        self.assertEqual(entry.request_id, "req-42")

    def test_non_api_paths_are_not_logged(self):
        self.client.get("/health/")

        self.assertFalse(ApiAccessLog.objects.exists())


class AdminActivityTests(APITestCase):
    def setUp(self):
        User = get_user_model()
        self.admin = User.objects.create_user(
            username="root",
            email="root@example.com",
            password="password123",
            role=User.Role.ADMIN,
        )
        self.clipper = User.objects.create_user(
            username="dave",
            email="dave@example.com",
            password="password123",
        )

    def test_activity_feed_is_admin_only(self):
        self.client.force_authenticate(self.clipper)

        response = self.client.get("/api/audit/logs/activity/")

        self.assertEqual(response.status_code, 403)

    def test_activity_feed_lists_newest_first(self):
        from submissions.models import ClipSubmission

        campaign = Campaign.objects.create(
            title="Spring drop",
            description="Clip the trailer",
            creator="Acme Records",
            budget=Decimal("500.00"),
            payout_rate=Decimal("1.50"),
            status=Campaign.Status.ACTIVE,
        )
        submission = ClipSubmission.objects.create(
            user=self.clipper,
            campaign=campaign,
            clip_url="https://www.tiktok.com/@dave/video/7300000000000000001",
            platform="TIKTOK",
        )
        ClipSubmission.objects.filter(pk=submission.pk).update(created_at=timezone.now() + timedelta(minutes=1))
        self.client.force_authenticate(self.admin)

        response = self.client.get("/api/audit/logs/activity/", {"limit": 2})

        self.assertEqual(response.status_code, 200)
        results = response.data["results"]
        self.assertEqual(len(results), 2)
        self.assertEqual(results[0]["type"], "CLIP_SUBMISSION")
        self.assertEqual(results[0]["data"]["user"]["username"], "dave")
        self.assertEqual(results[1]["type"], "USER_SIGNUP")

    def test_summary_counts_errors(self):
        ApiAccessLog.objects.create(user=self.clipper, method="GET", path="/api/campaigns/", status_code=200)
        ApiAccessLog.objects.create(user=self.clipper, method="POST", path="/api/submissions/", status_code=409)
        ApiAccessLog.objects.create(user=None, method="GET", path="/api/cron/view-tracking/", status_code=500)
        self.client.force_authenticate(self.admin)

        response = self.client.get("/api/audit/logs/summary/", {"hours": "abc"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["hours"], 24)
        self.assertEqual(response.data["total"], 3)
        self.assertEqual(response.data["client_errors"], 1)
        self.assertEqual(response.data["server_errors"], 1)
        self.assertEqual(response.data["active_users"], 1)
        self.assertEqual(response.data["top_failing_paths"], [{"path": "/api/cron/view-tracking/", "count": 1}])
