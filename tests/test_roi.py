# =============================================================================
# tests/test_roi.py - ROI Calculator Engine Tests
# =============================================================================
# Unit tests for lib/roi.py:
# - Monthly projections and rounding
# - Plan recommendation, minimum-tier enforcement and fee clamping
# - Lead scoring
#
# Run with: pytest tests/test_roi.py -v
# =============================================================================

import pytest

from core.models.roi import PlanTier, ROISegment, ROIState, Scenario
from lib.roi import (
    apply_segment,
    calculate_hours_saved,
    calculate_plan_pricing,
    calculate_roi,
    calculate_roi_score,
    compute_derived_pricing,
    describe_workflows,
    determine_recommended_tier,
    parse_segment,
    round_half_up,
    round_to_nearest_50,
)


def lead_followup_state(**overrides) -> ROIState:
    """One lead follow-up workflow: 25 events/week, 12 -> 3 minutes."""
    data = {
        "company": {"employeesImpacted": 1, "industry": "healthcare"},
        "costs": {"hourlyRate": 30, "fullyLoadedMultiplier": 1.3},
        "workflows": [
            {"id": "lead_followup", "enabled": True, "eventsPerWeek": 25, "minutesBefore": 12, "minutesAfter": 3},
        ],
        "novique": {"monthlyFee": 750, "oneTimeSetup": 2250},
        "scenario": "expected",
    }
    data.update(overrides)
    return ROIState.model_validate(data)


# =============================================================================
# Rounding
# =============================================================================

class TestRounding:
    """Tests for half-up rounding helpers."""

    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4

    def test_negative_half_rounds_toward_positive(self):
        assert round_half_up(-2.5) == -2

    def test_nearest_50(self):
        assert round_to_nearest_50(600) == 600
        assert round_to_nearest_50(624) == 600
        assert round_to_nearest_50(625) == 650


# =============================================================================
# Projections
# =============================================================================

class TestCalculateRoi:
    """Tests for calculate_roi()."""

    def test_hours_saved(self):
        state = lead_followup_state()
        assert calculate_hours_saved(state.workflows) == 25 * 4.33 * 9 / 60

    def test_disabled_workflows_ignored(self):
        state = lead_followup_state(workflows=[
            {"id": "lead_followup", "enabled": False, "eventsPerWeek": 25, "minutesBefore": 12, "minutesAfter": 3},
        ])
        assert calculate_hours_saved(state.workflows) == 0

    def test_negative_time_savings_clamped(self):
        state = lead_followup_state(workflows=[
            {"id": "x", "enabled": True, "eventsPerWeek": 10, "minutesBefore": 2, "minutesAfter": 5},
        ])
        assert calculate_hours_saved(state.workflows) == 0

    def test_expected_scenario(self):
        results = calculate_roi(lead_followup_state())

        assert results.hours_saved_per_month == 16.2
        assert results.labor_savings_per_month == 633
        assert results.error_savings_per_month == 0
        assert results.revenue_uplift_per_month == 0
        assert results.total_benefit_per_month == 633
        assert results.net_benefit_per_month == -117
        assert results.roi_percent == -16

    def test_no_payback_when_net_benefit_not_positive(self):
        results = calculate_roi(lead_followup_state())
        assert results.payback_months is None

    def test_aggressive_scenario_scales_hours(self):
        results = calculate_roi(lead_followup_state(scenario=Scenario.AGGRESSIVE))
        assert results.hours_saved_per_month == 21.1

    def test_employees_multiply_savings(self):
        state = lead_followup_state(company={"employeesImpacted": 2})
        results = calculate_roi(state)

        assert results.hours_saved_per_month == 32.5
        assert results.net_benefit_per_month == 517
        # 2250 setup / 516.525 net benefit
        assert results.payback_months == 4.4

    def test_zero_fee_roi_is_zero(self):
        results = calculate_roi(lead_followup_state(novique={"monthlyFee": 0, "oneTimeSetup": 0}))
        assert results.roi_percent == 0

    def test_camel_case_output(self):
        dumped = calculate_roi(lead_followup_state()).model_dump(by_alias=True)
        assert "hoursSavedPerMonth" in dumped
        assert "paybackMonths" in dumped


# =============================================================================
# Pricing
# =============================================================================

class TestPricing:
    """Tests for plan selection and fee derivation."""

    def test_recommended_tier_bands(self):
        assert determine_recommended_tier(0) == PlanTier.STARTER
        assert determine_recommended_tier(4999) == PlanTier.STARTER
        assert determine_recommended_tier(5000) == PlanTier.GROWTH
        assert determine_recommended_tier(14999) == PlanTier.GROWTH
        assert determine_recommended_tier(15000) == PlanTier.SCALE

    def test_fee_within_range(self):
        assert calculate_plan_pricing(PlanTier.STARTER, 4000) == (600, 1800)

    def test_fee_clamped_to_minimum(self):
        assert calculate_plan_pricing(PlanTier.STARTER, 100) == (225, 675)

    def test_fee_clamped_to_maximum(self):
        assert calculate_plan_pricing(PlanTier.SCALE, 100000) == (5000, 15000)

    def test_selected_tier_above_recommendation_kept(self):
        pricing = compute_derived_pricing(4000, customer_selected_tier=PlanTier.GROWTH)

        assert pricing.recommended_tier == PlanTier.STARTER
        assert pricing.final_tier == PlanTier.GROWTH
        assert pricing.monthly_fee == 750
        assert pricing.setup_fee == 2250
        assert pricing.is_below_recommended is False

    def test_selected_tier_below_recommendation_upgraded(self):
        pricing = compute_derived_pricing(20000, customer_selected_tier=PlanTier.STARTER)

        assert pricing.final_tier == PlanTier.SCALE
        assert pricing.monthly_fee == 3000
        assert pricing.setup_fee == 9000
        assert pricing.is_below_recommended is True

    def test_no_selection_uses_recommendation(self):
        pricing = compute_derived_pricing(8000)

        assert pricing.customer_selected_tier is None
        assert pricing.final_tier == PlanTier.GROWTH
        assert pricing.monthly_fee == 1200


# =============================================================================
# Lead Scoring
# =============================================================================

class TestRoiScore:
    """Tests for calculate_roi_score()."""

    def test_top_score(self):
        results = {"roiPercent": 350, "paybackMonths": 2, "netBenefitPerMonth": 12000}
        assert calculate_roi_score(results) == 100

    def test_middle_score(self):
        results = {"roiPercent": 120, "paybackMonths": 8, "netBenefitPerMonth": 600}
        assert calculate_roi_score(results) == 50

    def test_missing_values_score_nothing(self):
        assert calculate_roi_score({}) == 0

    @pytest.mark.parametrize("results", [None, "roi", 42, ["roiPercent", 400]])
    def test_malformed_input_scores_zero(self, results):
        assert calculate_roi_score(results) == 0

    def test_non_numeric_values_ignored(self):
        results = {"roiPercent": "400", "paybackMonths": True, "netBenefitPerMonth": None}
        assert calculate_roi_score(results) == 0

    def test_low_values(self):
        results = {"roiPercent": 40, "paybackMonths": 36, "netBenefitPerMonth": 100}
        assert calculate_roi_score(results) == 0


class TestDescribeWorkflows:
    """Tests for describe_workflows()."""

    def test_known_and_unknown_ids(self):
        assert describe_workflows(["lead_followup", {"id": "custom_flow"}]) == (
            "Lead Capture + Follow-up, custom_flow"
        )

    def test_empty(self):
        assert describe_workflows([]) == ""


class TestSegments:
    """Tests for parse_segment() and apply_segment()."""

    @pytest.mark.parametrize("value,expected", [
        ("healthcare", ROISegment.HEALTHCARE),
        ("RealEstate", ROISegment.REALESTATE),
        ("retail", None),
        ("", None),
        (None, None),
    ])
    def test_parse(self, value, expected):
        assert parse_segment(value) == expected

    def test_apply_replaces_team_and_workflows(self):
        state = ROIState(scenario=Scenario.AGGRESSIVE, costs={"hourlyRate": 99, "fullyLoadedMultiplier": 1.5})

        prefilled = apply_segment(ROISegment.HEALTHCARE, state)

        assert prefilled.company.employees_impacted == 4
        assert prefilled.company.industry == "healthcare"
        assert prefilled.costs.hourly_rate == 30
        assert prefilled.costs.fully_loaded_multiplier == 1.5
        assert prefilled.scenario == Scenario.AGGRESSIVE

        workflows = {w.id: w for w in prefilled.workflows}
        assert len(workflows) == 7
        assert workflows["appointment_scheduling"].enabled
        assert workflows["appointment_scheduling"].events_per_week == 60
        assert workflows["appointment_scheduling"].minutes_before == 12
        assert workflows["appointment_scheduling"].minutes_after == 2
        assert not workflows["lead_followup"].enabled
        assert workflows["lead_followup"].events_per_week == 25

    def test_logistics_maps_to_manufacturing(self):
        prefilled = apply_segment(ROISegment.LOGISTICS, ROIState())

        assert prefilled.company.industry == "manufacturing"
        assert [w.id for w in prefilled.workflows if w.enabled] == [
            "status_updates", "task_routing", "support_triage",
        ]
