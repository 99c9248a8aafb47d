"""
Test suite for the Campaign aggregate.

Covers creation, the lifecycle state machine, field updates, metric tracking,
budget checks and the pending-event queue.
"""

from datetime import datetime, timedelta, timezone

import pytest

from campaign_management.domain import (
    BusinessRuleError,
    CampaignEventType,
    CampaignSettings,
    CampaignStatus,
    Channel,
    CurrencyMismatchError,
    InvalidStatusTransitionError,
    Money,
    RuleID,
    TrackedEvent,
    ValidationError,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _snapshot(campaign):
    return (campaign.to_dict(), campaign.version, len(campaign.pending_events))


def _spend(campaign, amount, currency="EUR"):
    campaign.track_event(
        TrackedEvent(CampaignEventType.CLICK, cost=Money(amount, currency)), now=NOW
    )


class TestCampaignCreation:
    """Test suite for Campaign.create."""

    def test_new_campaign_is_draft_with_one_event(self, make_campaign, rule_ids):
        campaign = make_campaign()

        assert campaign.status == CampaignStatus.DRAFT
        assert campaign.version == 1
        assert campaign.persisted_version == 0
        assert campaign.envelope.is_new
        assert campaign.targeting_rules == tuple(rule_ids)
        assert campaign.metrics.impressions == 0
        assert campaign.metrics.currency == "EUR"
        assert [event.event_type for event in campaign.pending_events] == ["CampaignCreated"]

    def test_created_event_payload(self, make_campaign):
        campaign = make_campaign()
        event = campaign.pending_events[0].to_dict()

        assert event["aggregate_id"] == str(campaign.id)
        assert event["event_version"] == 1
        assert event["payload"]["name"] == "Summer Loyalty Push"
        assert event["payload"]["type"] == "LOYALTY"
        assert event["payload"]["budget"] == {"amount": "1000.00", "currency": "EUR"}

    def test_every_invalid_field_is_reported(self, make_campaign):
        with pytest.raises(ValidationError) as exc_info:
            make_campaign(
                name="  ",
                targeting_rules=[],
                end_date=NOW - timedelta(days=5),
                budget=Money(0, "EUR"),
                settings=CampaignSettings(channels=frozenset()),
            )

        fields = [error.field for error in exc_info.value.field_errors]
        assert fields == ["name", "end_date", "budget", "targeting_rules", "channels"]

    def test_name_length_limit(self, make_campaign):
        assert make_campaign(name="x" * 255).name == "x" * 255
        with pytest.raises(ValidationError):
            make_campaign(name="x" * 256)

    def test_metrics_currency_follows_budget(self, make_campaign):
        assert make_campaign(budget=Money(10, "USD")).metrics.currency == "USD"
        assert make_campaign(budget=None, default_currency="GBP").metrics.currency == "GBP"

    def test_naive_dates_are_treated_as_utc(self, make_campaign):
        naive = (NOW - timedelta(days=1)).replace(tzinfo=None)
        campaign = make_campaign(start_date=naive)
        assert campaign.start_date == NOW - timedelta(days=1)


class TestCampaignLifecycle:
    """Test suite for status transitions."""

    def test_activation_waits_for_start_date(self, make_campaign):
        campaign = make_campaign(start_date=NOW + timedelta(days=1))
        campaign.pull_events()

        with pytest.raises(BusinessRuleError):
            campaign.activate(now=NOW)
        assert campaign.status == CampaignStatus.DRAFT
        assert campaign.pending_events == ()

        campaign.reschedule(NOW - timedelta(days=1), NOW + timedelta(days=30), now=NOW)
        version = campaign.version
        campaign.activate(now=NOW)

        assert campaign.status == CampaignStatus.ACTIVE
        assert campaign.version == version + 1
        assert campaign.pending_events[-1].event_type == "CampaignActivated"

    def test_cancel_requires_reason(self, make_campaign):
        campaign = make_campaign()
        campaign.activate(now=NOW)
        campaign.pull_events()

        with pytest.raises(ValidationError):
            campaign.cancel("", now=NOW)
        assert campaign.status == CampaignStatus.ACTIVE

        before = _snapshot(campaign)
        with pytest.raises(ValidationError) as exc_info:
            campaign.cancel(123, now=NOW)
        assert exc_info.value.field_errors[0].field == "reason"
        assert _snapshot(campaign) == before

        campaign.cancel("budget cut", now=NOW)

        assert campaign.status == CampaignStatus.CANCELLED
        events = campaign.pull_events()
        assert [event.event_type for event in events] == ["CampaignCancelled"]
        assert events[0].payload["reason"] == "budget cut"
        assert events[0].payload["previous_status"] == "ACTIVE"

    def test_pause_and_resume(self, make_campaign):
        campaign = make_campaign()
        campaign.activate(now=NOW)
        campaign.pause(now=NOW)
        assert campaign.status == CampaignStatus.PAUSED

        campaign.resume(now=NOW)
        assert campaign.status == CampaignStatus.ACTIVE
        assert [event.event_type for event in campaign.pull_events()] == [
            "CampaignCreated",
            "CampaignActivated",
            "CampaignPaused",
            "CampaignResumed",
        ]
        assert campaign.version == 4

    def test_pause_requires_active(self, make_campaign):
        campaign = make_campaign()
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            campaign.pause(now=NOW)
        assert exc_info.value.details["current_status"] == "DRAFT"

    def test_resume_requires_paused(self, make_campaign):
        campaign = make_campaign()
        campaign.activate(now=NOW)
        with pytest.raises(InvalidStatusTransitionError):
            campaign.resume(now=NOW)

    def test_resume_after_end_date_rejected(self, make_campaign):
        campaign = make_campaign(end_date=NOW + timedelta(days=1))
        campaign.activate(now=NOW)
        campaign.pause(now=NOW)

        with pytest.raises(BusinessRuleError):
            campaign.resume(now=NOW + timedelta(days=2))
        with pytest.raises(BusinessRuleError):
            campaign.activate(now=NOW + timedelta(days=2))
        assert campaign.status == CampaignStatus.PAUSED

    def test_complete_from_draft(self, make_campaign):
        campaign = make_campaign()
        campaign.complete(now=NOW)
        assert campaign.status == CampaignStatus.COMPLETED
        assert campaign.pending_events[-1].payload["final_metrics"]["impressions"] == 0

    @pytest.mark.parametrize("terminal", ["complete", "cancel"])
    def test_terminal_statuses_are_final(self, make_campaign, terminal):
        campaign = make_campaign()
        if terminal == "complete":
            campaign.complete(now=NOW)
        else:
            campaign.cancel("wrong audience", now=NOW)
        before = _snapshot(campaign)

        with pytest.raises(InvalidStatusTransitionError):
            campaign.activate(now=NOW)
        with pytest.raises(InvalidStatusTransitionError):
            campaign.complete(now=NOW)
        with pytest.raises(InvalidStatusTransitionError):
            campaign.cancel("again", now=NOW)
        with pytest.raises(BusinessRuleError):
            campaign.update_details(name="Renamed", now=NOW)
        with pytest.raises(BusinessRuleError):
            campaign.update_budget(Money(5, "EUR"), now=NOW)

        assert _snapshot(campaign) == before

    def test_is_active_respects_window(self, make_campaign):
        campaign = make_campaign(end_date=NOW + timedelta(days=1))
        assert not campaign.is_active(now=NOW)
        campaign.activate(now=NOW)
        assert campaign.is_active(now=NOW)
        assert not campaign.is_active(now=NOW + timedelta(days=2))


class TestCampaignUpdates:
    """Test suite for field updates."""

    def test_update_details(self, make_campaign):
        campaign = make_campaign()
        campaign.update_details(name="Autumn Push", now=NOW)

        assert campaign.name == "Autumn Push"
        assert campaign.description == "Double points for returning customers"
        event = campaign.pending_events[-1]
        assert event.event_type == "CampaignDetailsUpdated"
        assert event.payload["old_name"] == "Summer Loyalty Push"

    def test_update_details_needs_something(self, make_campaign):
        with pytest.raises(ValidationError):
            make_campaign().update_details(now=NOW)

    def test_targeting_rules_locked_while_active(self, make_campaign):
        campaign = make_campaign()
        campaign.activate(now=NOW)

        with pytest.raises(BusinessRuleError):
            campaign.update_targeting_rules([RuleID.generate()], now=NOW)

        campaign.pause(now=NOW)
        new_rule = RuleID.generate()
        campaign.update_targeting_rules([new_rule], now=NOW)
        assert campaign.targeting_rules == (new_rule,)

    def test_empty_targeting_rules_rejected(self, make_campaign):
        with pytest.raises(ValidationError):
            make_campaign().update_targeting_rules([], now=NOW)

    def test_reschedule_locked_while_active(self, make_campaign):
        campaign = make_campaign()
        campaign.activate(now=NOW)
        with pytest.raises(BusinessRuleError):
            campaign.reschedule(NOW, NOW + timedelta(days=3), now=NOW)

    def test_reschedule_validates_window(self, make_campaign):
        with pytest.raises(ValidationError):
            make_campaign().reschedule(NOW, NOW - timedelta(hours=1), now=NOW)

    def test_update_settings(self, make_campaign):
        campaign = make_campaign()
        settings = CampaignSettings(channels=frozenset({Channel.SMS, Channel.PUSH}))
        campaign.update_settings(settings, now=NOW)

        assert campaign.settings == settings
        assert campaign.pending_events[-1].payload["settings"]["channels"] == ["PUSH", "SMS"]

        with pytest.raises(ValidationError):
            campaign.update_settings(CampaignSettings(channels=frozenset()), now=NOW)

    def test_budget_currency_change_before_spend(self, make_campaign):
        campaign = make_campaign()
        campaign.update_budget(Money(500, "USD"), now=NOW)

        assert campaign.budget == Money(500, "USD")
        assert campaign.metrics.currency == "USD"

    def test_budget_currency_change_after_spend_rejected(self, make_campaign):
        campaign = make_campaign()
        _spend(campaign, 10)
        version = campaign.version

        with pytest.raises(CurrencyMismatchError):
            campaign.update_budget(Money(500, "USD"), now=NOW)
        assert campaign.budget == Money(1000, "EUR")
        assert campaign.version == version

    def test_clear_budget(self, make_campaign):
        campaign = make_campaign()
        campaign.update_budget(None, now=NOW)
        assert campaign.budget is None
        assert not campaign.has_exceeded_budget()
        assert campaign.budget_utilization() is None

    def test_updated_at_never_moves_backwards(self, make_campaign):
        campaign = make_campaign()
        campaign.update_details(description="later", now=NOW)
        campaign.update_details(description="clock skew", now=NOW - timedelta(days=10))
        assert campaign.updated_at == NOW


class TestCampaignMetricsAndBudget:
    """Test suite for event tracking and budget checks."""

    def test_track_event_in_any_status(self, make_campaign):
        campaign = make_campaign()
        campaign.cancel("stopped early", now=NOW)
        version = campaign.version

        campaign.track_event(TrackedEvent(CampaignEventType.IMPRESSION), now=NOW)

        assert campaign.metrics.impressions == 1
        assert campaign.version == version + 1
        assert campaign.pending_events[-1].event_type == "CampaignEventTracked"

    def test_metrics_property_is_a_copy(self, make_campaign):
        campaign = make_campaign()
        campaign.metrics.record_event(TrackedEvent(CampaignEventType.CLICK))
        assert campaign.metrics.clicks == 0

    def test_tracking_other_currency_rejected(self, make_campaign):
        campaign = make_campaign()
        before = _snapshot(campaign)
        with pytest.raises(CurrencyMismatchError):
            _spend(campaign, 5, currency="USD")
        assert _snapshot(campaign) == before

    def test_budget_exceeded_at_exact_limit(self, make_campaign):
        campaign = make_campaign(budget=Money("900.00", "EUR"))

        _spend(campaign, "899.99")
        assert not campaign.has_exceeded_budget()
        assert campaign.is_approaching_budget_limit()

        _spend(campaign, "0.01")
        assert campaign.has_exceeded_budget()
        assert campaign.remaining_budget() == Money(0, "EUR")

    def test_approaching_threshold(self, make_campaign):
        campaign = make_campaign(budget=Money("1000.00", "EUR"))

        _spend(campaign, "899.99")
        assert not campaign.is_approaching_budget_limit()
        assert campaign.is_approaching_budget_limit(threshold=0.8)

        _spend(campaign, "0.01")
        assert campaign.is_approaching_budget_limit()
        assert campaign.budget_utilization() == 90.0
        assert campaign.remaining_budget() == Money(100, "EUR")

    def test_pull_events_is_consuming(self, make_campaign):
        campaign = make_campaign()
        assert len(campaign.pull_events()) == 1
        assert campaign.pull_events() == []

    def test_mark_persisted(self, make_campaign):
        campaign = make_campaign()
        campaign.mark_persisted()
        assert campaign.persisted_version == campaign.version
        assert not campaign.envelope.has_unsaved_changes

        campaign.activate(now=NOW)
        assert campaign.envelope.has_unsaved_changes


_REACH = {
    CampaignStatus.DRAFT: [],
    CampaignStatus.ACTIVE: ["activate"],
    CampaignStatus.PAUSED: ["activate", "pause"],
    CampaignStatus.COMPLETED: ["complete"],
    CampaignStatus.CANCELLED: ["cancel"],
}

# (from status, transition) -> resulting status; missing pairs must be rejected
_ALLOWED = {
    (CampaignStatus.DRAFT, "activate"): CampaignStatus.ACTIVE,
    (CampaignStatus.DRAFT, "complete"): CampaignStatus.COMPLETED,
    (CampaignStatus.DRAFT, "cancel"): CampaignStatus.CANCELLED,
    (CampaignStatus.ACTIVE, "pause"): CampaignStatus.PAUSED,
    (CampaignStatus.ACTIVE, "complete"): CampaignStatus.COMPLETED,
    (CampaignStatus.ACTIVE, "cancel"): CampaignStatus.CANCELLED,
    (CampaignStatus.PAUSED, "activate"): CampaignStatus.ACTIVE,
    (CampaignStatus.PAUSED, "resume"): CampaignStatus.ACTIVE,
    (CampaignStatus.PAUSED, "complete"): CampaignStatus.COMPLETED,
    (CampaignStatus.PAUSED, "cancel"): CampaignStatus.CANCELLED,
}


def _apply(campaign, transition, now):
    if transition == "cancel":
        campaign.cancel("budget cut", now=now)
    else:
        getattr(campaign, transition)(now=now)


class TestTransitionMatrix:
    """Every lifecycle transition from every status."""

    @pytest.mark.parametrize("transition", ["activate", "pause", "resume", "complete", "cancel"])
    @pytest.mark.parametrize("status", list(CampaignStatus))
    def test_transition(self, make_campaign, status, transition):
        campaign = make_campaign()
        for step in _REACH[status]:
            _apply(campaign, step, NOW - timedelta(hours=1))
        assert campaign.status == status
        before = _snapshot(campaign)

        expected = _ALLOWED.get((status, transition))
        if expected is None:
            with pytest.raises(BusinessRuleError):
                _apply(campaign, transition, NOW)
            assert _snapshot(campaign) == before
        else:
            _apply(campaign, transition, NOW)
            assert campaign.status == expected
            assert campaign.version == before[1] + 1
            assert len(campaign.pending_events) == before[2] + 1
            assert campaign.updated_at == NOW
