# =============================================================================
# lib/roi.py - ROI Calculator Engine
# =============================================================================
# Pure functions behind the public ROI calculator:
#
#   - calculate_roi: monthly hours/labor/error/revenue projections
#   - plan selection and fee derivation (starter / growth / scale)
#   - calculate_roi_score: 0-100 lead score for admin alerts
#   - workflow and industry catalogues used to label assessments
#   - industry segments that prefill the calculator
#
# No I/O happens here; services and routers call these with validated
# models from core/models/roi.py.
# =============================================================================

import logging
import math
from typing import Any

from core.models.roi import (
    CompanyInputs,
    DerivedPricing,
    FeeRange,
    PlanDefinition,
    PlanTier,
    PricingSettings,
    ROIResults,
    ROISegment,
    ROIState,
    Scenario,
    SegmentDefaults,
    SegmentMeta,
    WorkflowDefinition,
    WorkflowOverride,
    WorkflowSelection,
)

# Set up logging for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

SCENARIO_MULTIPLIERS: dict[Scenario, float] = {
    Scenario.CONSERVATIVE: 0.6,
    Scenario.EXPECTED: 1.0,
    Scenario.AGGRESSIVE: 1.3,
}

WEEKS_PER_MONTH = 4.33

DEFAULT_PRICING_SETTINGS = PricingSettings(
    monthly_value_multiplier=0.15,
    one_time_charge_multiplier=3,
)

STARTER_MAX_VALUE = 5000
GROWTH_MAX_VALUE = 15000

PLAN_DEFINITIONS: list[PlanDefinition] = [
    PlanDefinition(
        id=PlanTier.STARTER,
        name="Starter",
        tagline="Get out of the weeds",
        description=(
            "Best for small teams automating their first critical workflows. "
            "Focused on eliminating repetitive admin and follow-up work."
        ),
        min_monthly_value=0,
        max_monthly_value=STARTER_MAX_VALUE,
        monthly_fee_range=FeeRange(min=225, max=749),
        setup_fee_range=FeeRange(min=675, max=2247),
    ),
    PlanDefinition(
        id=PlanTier.GROWTH,
        name="Growth",
        tagline="Run smoother, scale smarter",
        description=(
            "For growing teams with multiple workflows across sales and operations. "
            "Automation becomes part of how the business runs."
        ),
        min_monthly_value=STARTER_MAX_VALUE,
        max_monthly_value=GROWTH_MAX_VALUE,
        monthly_fee_range=FeeRange(min=750, max=2499),
        setup_fee_range=FeeRange(min=2250, max=7497),
    ),
    PlanDefinition(
        id=PlanTier.SCALE,
        name="Scale",
        tagline="Automation as infrastructure",
        description=(
            "Designed for high-volume operations where automation is a core system, "
            "not a side project."
        ),
        min_monthly_value=GROWTH_MAX_VALUE,
        max_monthly_value=None,
        monthly_fee_range=FeeRange(min=2500, max=5000),
        setup_fee_range=FeeRange(min=7500, max=15000),
    ),
]

TIER_RANK: dict[PlanTier, int] = {
    PlanTier.STARTER: 0,
    PlanTier.GROWTH: 1,
    PlanTier.SCALE: 2,
}

DEFAULT_WORKFLOWS: list[WorkflowDefinition] = [
    WorkflowDefinition(
        id="lead_followup",
        name="Lead Capture + Follow-up",
        description="Automated lead capture from web forms with instant email/SMS follow-up",
        default_events_per_week=25, default_minutes_before=12, default_minutes_after=3,
        category="sales",
    ),
    WorkflowDefinition(
        id="appointment_scheduling",
        name="Appointment Scheduling + Reminders",
        description="AI-powered scheduling with automated confirmation and reminder messages",
        default_events_per_week=20, default_minutes_before=15, default_minutes_after=2,
        category="sales",
    ),
    WorkflowDefinition(
        id="invoice_generation",
        name="Invoice/Quote Generation",
        description="Auto-generate invoices and quotes from job data",
        default_events_per_week=15, default_minutes_before=20, default_minutes_after=5,
        category="operations",
    ),
    WorkflowDefinition(
        id="customer_intake",
        name="Customer Intake Forms",
        description="Digital intake forms with auto-populated CRM records",
        default_events_per_week=12, default_minutes_before=10, default_minutes_after=2,
        category="operations",
    ),
    WorkflowDefinition(
        id="status_updates",
        name="Status Updates + Reporting",
        description="Automated status notifications and report generation",
        default_events_per_week=30, default_minutes_before=8, default_minutes_after=1,
        category="operations",
    ),
    WorkflowDefinition(
        id="task_routing",
        name="Internal Task Routing",
        description="Smart assignment of tasks to team members based on availability",
        default_events_per_week=18, default_minutes_before=10, default_minutes_after=2,
        category="operations",
    ),
    WorkflowDefinition(
        id="support_triage",
        name="Support Triage",
        description="AI classification and routing of support requests",
        default_events_per_week=20, default_minutes_before=15, default_minutes_after=3,
        category="support",
    ),
]

WORKFLOW_NAMES: dict[str, str] = {workflow.id: workflow.name for workflow in DEFAULT_WORKFLOWS}

INDUSTRIES: dict[str, str] = {
    "home_services": "Home Services",
    "professional_services": "Professional Services",
    "healthcare": "Healthcare",
    "retail": "Retail",
    "real_estate": "Real Estate",
    "construction": "Construction",
    "manufacturing": "Manufacturing",
    "other": "Other",
}

# Calculator industry -> customers.business_type
INDUSTRY_TO_BUSINESS_TYPE: dict[str, str] = {
    "home_services": "other",
    "professional_services": "professional",
    "healthcare": "healthcare",
    "retail": "retail",
    "real_estate": "professional",
    "construction": "manufacturing",
    "manufacturing": "manufacturing",
    "other": "other",
}


# =============================================================================
# Segments
# =============================================================================

SEGMENT_META: dict[ROISegment, SegmentMeta] = {
    ROISegment.FINANCIAL: SegmentMeta(
        id=ROISegment.FINANCIAL,
        label="Financial & Professional Services",
        subtitle="Law, accounting, consulting, agencies",
        industry="professional_services",
        narrative=(
            "Professional services teams lose margin to non-billable admin work: scheduling, "
            "reminders, document handoffs, and follow-ups. Automation typically reclaims "
            "meaningful time each month without changing how you serve clients."
        ),
        reframing="This is like adding billable capacity, without hiring another employee.",
    ),
    ROISegment.HEALTHCARE: SegmentMeta(
        id=ROISegment.HEALTHCARE,
        label="Healthcare & Health Services",
        subtitle="Clinics, dental, therapy, wellness",
        industry="healthcare",
        narrative=(
            "Healthcare businesses lose revenue through missed appointments, delayed intake, "
            "and manual coordination between staff and patients. Automation reduces no-shows "
            "and frees staff to focus on care instead of coordination."
        ),
        reframing=(
            "This usually means fewer no-shows and smoother patient flow, "
            "without adding front-desk staff."
        ),
    ),
    ROISegment.LOGISTICS: SegmentMeta(
        id=ROISegment.LOGISTICS,
        label="Logistics & Transportation",
        subtitle="Freight, delivery, dispatch, fleet",
        industry="manufacturing",
        narrative=(
            "Logistics operations run on tight timelines where manual updates and dispatch "
            "coordination create delays and errors. Automation saves time daily while "
            "improving response speed and consistency."
        ),
        reframing="Often the difference between keeping up with demand and needing another coordinator.",
    ),
    ROISegment.REALESTATE: SegmentMeta(
        id=ROISegment.REALESTATE,
        label="Real Estate & Construction",
        subtitle="Brokerages, property management, contractors",
        industry="real_estate",
        narrative=(
            "Real estate and construction teams lose momentum when follow-ups, scheduling, "
            "and project updates fall through the cracks. Automation improves response time, "
            "keeps stakeholders aligned, and reduces delays caused by manual coordination."
        ),
        reframing="Typically translates to faster deal movement and fewer stalled projects.",
    ),
}

SEGMENT_DEFAULTS: dict[ROISegment, SegmentDefaults] = {
    ROISegment.FINANCIAL: SegmentDefaults(
        employees_impacted=3,
        hourly_rate=50,
        industry="professional_services",
        enabled_workflows=["lead_followup", "appointment_scheduling", "invoice_generation", "customer_intake"],
        workflow_overrides={
            "lead_followup": WorkflowOverride(events_per_week=40),
            "appointment_scheduling": WorkflowOverride(events_per_week=25),
            "invoice_generation": WorkflowOverride(events_per_week=40),
            "customer_intake": WorkflowOverride(events_per_week=10),
        },
    ),
    ROISegment.HEALTHCARE: SegmentDefaults(
        employees_impacted=4,
        hourly_rate=30,
        industry="healthcare",
        enabled_workflows=["appointment_scheduling", "customer_intake", "status_updates"],
        workflow_overrides={
            "appointment_scheduling": WorkflowOverride(events_per_week=60, minutes_before=12),
            "customer_intake": WorkflowOverride(events_per_week=60, minutes_before=12),
            "status_updates": WorkflowOverride(events_per_week=30),
        },
    ),
    ROISegment.LOGISTICS: SegmentDefaults(
        employees_impacted=3,
        hourly_rate=40,
        industry="manufacturing",
        enabled_workflows=["status_updates", "task_routing", "support_triage"],
        workflow_overrides={
            "status_updates": WorkflowOverride(events_per_week=50, minutes_before=15),
            "task_routing": WorkflowOverride(events_per_week=50, minutes_before=15),
            "support_triage": WorkflowOverride(events_per_week=30),
        },
    ),
    ROISegment.REALESTATE: SegmentDefaults(
        employees_impacted=3,
        hourly_rate=40,
        industry="real_estate",
        enabled_workflows=["lead_followup", "appointment_scheduling", "status_updates", "customer_intake"],
        workflow_overrides={
            "lead_followup": WorkflowOverride(events_per_week=30),
            "appointment_scheduling": WorkflowOverride(events_per_week=15, minutes_before=15),
            "status_updates": WorkflowOverride(events_per_week=12),
            "customer_intake": WorkflowOverride(events_per_week=15),
        },
    ),
}


def parse_segment(value: str | None) -> ROISegment | None:
    """Segment from a URL parameter (case-insensitive); None when unknown."""
    if not value:
        return None
    try:
        return ROISegment(value.lower())
    except ValueError:
        return None


def apply_segment(segment: ROISegment, state: ROIState) -> ROIState:
    """
    Prefill a calculator state from a segment's defaults.

    Team size, industry, hourly rate and the full workflow list are
    replaced; every other input of `state` is kept.
    """
    defaults = SEGMENT_DEFAULTS[segment]
    workflows = []
    for definition in DEFAULT_WORKFLOWS:
        override = defaults.workflow_overrides.get(definition.id, WorkflowOverride())
        workflows.append(WorkflowSelection(
            id=definition.id,
            enabled=definition.id in defaults.enabled_workflows,
            events_per_week=(
                override.events_per_week
                if override.events_per_week is not None
                else definition.default_events_per_week
            ),
            minutes_before=(
                override.minutes_before
                if override.minutes_before is not None
                else definition.default_minutes_before
            ),
            minutes_after=(
                override.minutes_after
                if override.minutes_after is not None
                else definition.default_minutes_after
            ),
        ))

    return state.model_copy(update={
        "company": CompanyInputs(
            employees_impacted=defaults.employees_impacted,
            industry=SEGMENT_META[segment].industry,
        ),
        "costs": state.costs.model_copy(update={"hourly_rate": defaults.hourly_rate}),
        "workflows": workflows,
    })


# =============================================================================
# Rounding
# =============================================================================

def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round half away from negative infinity, like the calculator UI.

    Python's round() uses banker's rounding (round(2.5) == 2); quoted
    figures must match what the visitor saw (2.5 -> 3, -2.5 -> -2).
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _round_int(value: float) -> int:
    return int(round_half_up(value))


# =============================================================================
# Calculations
# =============================================================================

def _enabled(workflows: list[WorkflowSelection]) -> list[WorkflowSelection]:
    return [workflow for workflow in workflows if workflow.enabled]


def calculate_hours_saved(workflows: list[WorkflowSelection]) -> float:
    """
    Hours saved per month by the enabled workflows (one employee, expected case).

    Example:
        25 events/week, 12 -> 3 minutes: 25 * 4.33 * 9 / 60 = 16.2375 hours
    """
    total = 0.0
    for workflow in _enabled(workflows):
        events_per_month = workflow.events_per_week * WEEKS_PER_MONTH
        minutes_saved = max(0.0, workflow.minutes_before - workflow.minutes_after)
        total += events_per_month * minutes_saved / 60
    return total


def calculate_roi(state: ROIState) -> ROIResults:
    """
    Project monthly benefits for a calculator state.

    Returns:
        ROIResults with hours rounded to 0.1, money and ROI% to whole
        numbers, payback to 0.1 months (None when never)
    """
    multiplier = SCENARIO_MULTIPLIERS[state.scenario]

    hours_saved = (
        calculate_hours_saved(state.workflows)
        * multiplier
        * state.company.employees_impacted
    )

    loaded_rate = state.costs.hourly_rate * state.costs.fully_loaded_multiplier
    labor_savings = hours_saved * loaded_rate

    error_savings = 0.0
    if state.quality.enabled:
        events_per_month = sum(
            workflow.events_per_week * WEEKS_PER_MONTH
            for workflow in _enabled(state.workflows)
        )
        errors_avoided = events_per_month * state.quality.error_rate * state.quality.error_reduction
        error_savings = errors_avoided * state.quality.cost_per_error * multiplier

    revenue_uplift = 0.0
    if state.revenue.enabled:
        revenue = state.revenue
        extra_deals = revenue.leads_per_month * revenue.conversion_rate * revenue.conversion_lift_relative
        revenue_uplift = extra_deals * revenue.avg_deal_value * revenue.gross_margin * multiplier

    total_benefit = labor_savings + error_savings + revenue_uplift
    monthly_fee = state.novique.monthly_fee
    net_benefit = total_benefit - monthly_fee

    roi_percent = (net_benefit / monthly_fee) * 100 if monthly_fee > 0 else 0.0

    payback_months: float | None = None
    if net_benefit > 0:
        payback_months = round_half_up(state.novique.one_time_setup / net_benefit, 1)

    return ROIResults(
        hours_saved_per_month=round_half_up(hours_saved, 1),
        labor_savings_per_month=_round_int(labor_savings),
        error_savings_per_month=_round_int(error_savings),
        revenue_uplift_per_month=_round_int(revenue_uplift),
        total_benefit_per_month=_round_int(total_benefit),
        net_benefit_per_month=_round_int(net_benefit),
        roi_percent=_round_int(roi_percent),
        payback_months=payback_months,
    )


# =============================================================================
# Plans and Pricing
# =============================================================================

def get_plan(tier: PlanTier | str) -> PlanDefinition:
    tier = PlanTier(tier)
    return next(plan for plan in PLAN_DEFINITIONS if plan.id == tier)


def determine_recommended_tier(total_monthly_value: float) -> PlanTier:
    """Tier whose monthly-value band contains the value."""
    if total_monthly_value < STARTER_MAX_VALUE:
        return PlanTier.STARTER
    if total_monthly_value < GROWTH_MAX_VALUE:
        return PlanTier.GROWTH
    return PlanTier.SCALE


def get_recommended_plan(total_monthly_value: float) -> PlanDefinition:
    return get_plan(determine_recommended_tier(total_monthly_value))


def tier_rank(tier: PlanTier | str) -> int:
    return TIER_RANK[PlanTier(tier)]


def enforce_minimum_tier(
    customer_selected_tier: PlanTier | None,
    recommended_tier: PlanTier,
) -> PlanTier:
    """The higher of the visitor's pick and the recommendation."""
    if customer_selected_tier is None:
        return recommended_tier
    if tier_rank(customer_selected_tier) >= tier_rank(recommended_tier):
        return PlanTier(customer_selected_tier)
    return recommended_tier


def round_to_nearest_50(value: float) -> float:
    return round_half_up(value / 50) * 50


def calculate_plan_pricing(
    tier: PlanTier | str,
    monthly_value: float,
    settings: PricingSettings = DEFAULT_PRICING_SETTINGS,
) -> tuple[float, float]:
    """
    Fees for a tier at a given monthly value.

    Steps: value x monthly multiplier, round to nearest $50, clamp to the
    tier's fee range, setup = fee x one-time multiplier.

    Returns:
        Tuple of (monthly_fee, setup_fee)
    """
    plan = get_plan(tier)
    fee = round_to_nearest_50(monthly_value * settings.monthly_value_multiplier)

    if fee < plan.monthly_fee_range.min:
        fee = plan.monthly_fee_range.min
    elif plan.monthly_fee_range.max is not None and fee > plan.monthly_fee_range.max:
        fee = plan.monthly_fee_range.max

    return fee, fee * settings.one_time_charge_multiplier


def compute_derived_pricing(
    total_monthly_value: float,
    customer_selected_tier: PlanTier | None = None,
    settings: PricingSettings = DEFAULT_PRICING_SETTINGS,
) -> DerivedPricing:
    """Quote fees, upgrading the visitor's tier when it's below the recommendation."""
    recommended = determine_recommended_tier(total_monthly_value)
    final = enforce_minimum_tier(customer_selected_tier, recommended)
    monthly_fee, setup_fee = calculate_plan_pricing(final, total_monthly_value, settings)

    return DerivedPricing(
        monthly_fee=monthly_fee,
        setup_fee=setup_fee,
        customer_selected_tier=customer_selected_tier,
        recommended_tier=recommended,
        final_tier=final,
        is_below_recommended=(
            customer_selected_tier is not None
            and tier_rank(customer_selected_tier) < tier_rank(recommended)
        ),
    )


# =============================================================================
# Lead Scoring
# =============================================================================

def calculate_roi_score(results: dict[str, Any]) -> int:
    """
    Score a submitted result set from 0 to 100 for admin alerts.

    Weights: ROI% up to 40, payback up to 30, net benefit up to 30.
    Missing or non-numeric values score nothing for that component.

    Args:
        results: camelCase results as stored (roiPercent, paybackMonths,
            netBenefitPerMonth)
    """
    if not isinstance(results, dict):
        return 0

    def number(key: str) -> float | None:
        value = results.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)

    score = 0

    roi = number("roiPercent")
    if roi is not None:
        if roi >= 300:
            score += 40
        elif roi >= 200:
            score += 30
        elif roi >= 100:
            score += 20
        elif roi >= 50:
            score += 10

    payback = number("paybackMonths")
    if payback is not None:
        if payback <= 3:
            score += 30
        elif payback <= 6:
            score += 25
        elif payback <= 12:
            score += 20
        elif payback <= 24:
            score += 10

    net = number("netBenefitPerMonth")
    if net is not None:
        if net >= 10000:
            score += 30
        elif net >= 5000:
            score += 25
        elif net >= 2500:
            score += 20
        elif net >= 1000:
            score += 15
        elif net >= 500:
            score += 10

    return min(max(score, 0), 100)


def describe_workflows(workflow_ids: list[Any]) -> str:
    """
    Human-readable list of selected workflows.

    Accepts ids or {"id": ...} dicts; unknown ids are shown as-is.
    """
    names = []
    for item in workflow_ids:
        workflow_id = item.get("id") if isinstance(item, dict) else item
        if workflow_id:
            names.append(WORKFLOW_NAMES.get(str(workflow_id), str(workflow_id)))
    return ", ".join(names)
