from django_filters import rest_framework as filters

from campaigns.models import Platform

from .models import ClipSubmission


class SubmissionFilter(filters.FilterSet):
    status = filters.ChoiceFilter(field_name="status", choices=ClipSubmission.Status.choices)
    campaign = filters.NumberFilter(field_name="campaign_id")

    class Meta:
        model = ClipSubmission
        fields = ["status", "campaign"]


class AdminSubmissionFilter(SubmissionFilter):
    platform = filters.ChoiceFilter(field_name="platform", choices=Platform.choices)
    user = filters.NumberFilter(field_name="user_id")
    created_after = filters.DateTimeFilter(field_name="created_at", lookup_expr="gte")

    class Meta(SubmissionFilter.Meta):
        fields = SubmissionFilter.Meta.fields + ["platform", "user", "created_after"]
