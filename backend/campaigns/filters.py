"""FilterSet definitions for campaign endpoints."""
from __future__ import annotations

import django_filters

from .models import Campaign


class CampaignFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    platform = django_filters.CharFilter(method="filter_platform")

    class Meta:
        model = Campaign
        fields = ["status"]

    def filter_platform(self, queryset, name, value):
        platform = value.upper()
        # JSON containment lookups are not available on every backend
        ids = [campaign.pk for campaign in queryset.only("pk", "target_platforms") if platform in (campaign.target_platforms or [])]
        return queryset.filter(pk__in=ids)


class AdminCampaignFilter(CampaignFilter):
    archived = django_filters.BooleanFilter(method="filter_archived")
    is_test = django_filters.BooleanFilter(field_name="is_test")
    hidden = django_filters.BooleanFilter(field_name="hidden")
    created_after = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Campaign
        fields = ["status", "is_test", "hidden"]

    def filter_archived(self, queryset, name, value):
        return queryset.filter(deleted_at__isnull=not value)
