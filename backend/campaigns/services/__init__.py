"""Expose commonly used campaign services."""

from .lifecycle import (
    ALLOWED_TRANSITIONS,
    CampaignDeleteBlocked,
    CampaignError,
    CampaignNotFound,
    InvalidStatusTransition,
    activate_scheduled_campaigns,
    actual_campaign_spend,
    archive_campaign,
    can_transition,
    change_status,
    delete_campaign,
    ensure_client_token,
    get_active_campaign,
    initial_status,
    restore_campaign,
    set_team_update,
    sync_all_campaigns,
    sync_campaign_spend,
    visible_campaigns,
)
from .completion import (
    CompletionCheck,
    auto_complete_campaigns,
    check_campaign_completion,
    complete_campaign,
    manually_complete_campaign,
    near_completion_campaigns,
)
