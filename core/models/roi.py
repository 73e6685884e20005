# =============================================================================
# core/models/roi.py - ROI Calculator Schemas
# =============================================================================
# These models describe the public ROI calculator:
# - ROIState: everything the visitor entered (team, workflows, quality,
#   revenue, quoted fees, scenario)
# - ROIResults: monthly projections computed by lib/roi.py
# - ROISegment / SegmentMeta / SegmentDefaults: industry landing pages
# - PlanDefinition / DerivedPricing: service tiers and the fee quoted for a
#   given monthly value
#
# The browser sends camelCase JSON, so every model accepts both the
# camelCase alias and the snake_case field name and serializes with
# aliases (by_alias=True) when results are stored.
# =============================================================================

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting camelCase input and emitting camelCase output."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Scenario(str, Enum):
    """Projection scenario; scales every benefit line."""
    CONSERVATIVE = "conservative"
    EXPECTED = "expected"
    AGGRESSIVE = "aggressive"


class PlanTier(str, Enum):
    """Service tiers, ordered starter < growth < scale."""
    STARTER = "starter"
    GROWTH = "growth"
    SCALE = "scale"


# =============================================================================
# Calculator Inputs
# =============================================================================

class WorkflowSelection(CamelModel):
    """One automatable workflow with its time cost before/after."""
    id: str
    enabled: bool = True
    events_per_week: float = Field(default=0, ge=0)
    minutes_before: float = Field(default=0, ge=0)
    minutes_after: float = Field(default=0, ge=0)


class CompanyInputs(CamelModel):
    employees_impacted: float = Field(default=1, ge=0)
    industry: str = "other"


class CostInputs(CamelModel):
    hourly_rate: float = Field(default=0, ge=0)
    fully_loaded_multiplier: float = Field(default=1.3, ge=0)


class QualityInputs(CamelModel):
    enabled: bool = False
    error_rate: float = Field(default=0, ge=0)
    cost_per_error: float = Field(default=0, ge=0)
    error_reduction: float = Field(default=0, ge=0)


class RevenueInputs(CamelModel):
    enabled: bool = False
    leads_per_month: float = Field(default=0, ge=0)
    conversion_rate: float = Field(default=0, ge=0)
    conversion_lift_relative: float = Field(default=0, ge=0)
    avg_deal_value: float = Field(default=0, ge=0)
    gross_margin: float = Field(default=0, ge=0)


class FeeInputs(CamelModel):
    """Fees quoted to the visitor."""
    monthly_fee: float = Field(default=0, ge=0)
    one_time_setup: float = Field(default=0, ge=0)
    selected_plan: Optional[PlanTier] = None


class ROIState(CamelModel):
    """
    Full calculator input.

    Example:
        {
            "company": {"employeesImpacted": 3, "industry": "healthcare"},
            "costs": {"hourlyRate": 30, "fullyLoadedMultiplier": 1.3},
            "workflows": [{"id": "lead_followup", "enabled": true,
                           "eventsPerWeek": 25, "minutesBefore": 12,
                           "minutesAfter": 3}],
            "quality": {"enabled": false},
            "revenue": {"enabled": false},
            "novique": {"monthlyFee": 750, "oneTimeSetup": 2250},
            "scenario": "expected"
        }
    """
    company: CompanyInputs = Field(default_factory=CompanyInputs)
    costs: CostInputs = Field(default_factory=CostInputs)
    workflows: list[WorkflowSelection] = Field(default_factory=list)
    quality: QualityInputs = Field(default_factory=QualityInputs)
    revenue: RevenueInputs = Field(default_factory=RevenueInputs)
    novique: FeeInputs = Field(default_factory=FeeInputs)
    scenario: Scenario = Scenario.EXPECTED


# =============================================================================
# Calculator Outputs
# =============================================================================

class ROIResults(CamelModel):
    """
    Monthly projections.

    payback_months is None when the net benefit is not positive (the
    investment never pays back).
    """
    hours_saved_per_month: float
    labor_savings_per_month: int
    error_savings_per_month: int
    revenue_uplift_per_month: int
    total_benefit_per_month: int
    net_benefit_per_month: int
    roi_percent: int
    payback_months: Optional[float] = None


class PricingSettings(CamelModel):
    """Multipliers turning monthly value into fees."""
    monthly_value_multiplier: float = Field(default=0.15, gt=0)
    one_time_charge_multiplier: float = Field(default=3, gt=0)


class FeeRange(BaseModel):
    min: int
    max: Optional[int] = None


class PlanDefinition(CamelModel):
    id: PlanTier
    name: str
    tagline: str
    description: str
    min_monthly_value: int
    max_monthly_value: Optional[int] = None
    monthly_fee_range: FeeRange
    setup_fee_range: FeeRange


class DerivedPricing(CamelModel):
    """Fees for a monthly value after enforcing the minimum tier."""
    monthly_fee: float
    setup_fee: float
    customer_selected_tier: Optional[PlanTier] = None
    recommended_tier: PlanTier
    final_tier: PlanTier
    is_below_recommended: bool


class WorkflowDefinition(CamelModel):
    """Catalogue entry used to prefill the calculator."""
    id: str
    name: str
    description: str
    default_events_per_week: int
    default_minutes_before: int
    default_minutes_after: int
    category: str


class ROISegment(str, Enum):
    """Industry landing pages (/roi/<segment>) that prefill the calculator."""
    FINANCIAL = "financial"
    HEALTHCARE = "healthcare"
    LOGISTICS = "logistics"
    REALESTATE = "realestate"


class WorkflowOverride(CamelModel):
    events_per_week: Optional[float] = None
    minutes_before: Optional[float] = None
    minutes_after: Optional[float] = None


class SegmentMeta(CamelModel):
    """Display copy for a segment page."""
    id: ROISegment
    label: str
    subtitle: str
    industry: str
    narrative: str
    reframing: str


class SegmentDefaults(CamelModel):
    """Calculator inputs a segment page starts from."""
    employees_impacted: float
    hourly_rate: float
    industry: str
    enabled_workflows: list[str]
    workflow_overrides: dict[str, WorkflowOverride] = Field(default_factory=dict)


# =============================================================================
# API Bodies
# =============================================================================

class ROICalculateRequest(CamelModel):
    state: ROIState
    pricing_settings: PricingSettings = Field(default_factory=PricingSettings)


class ROISubmitRequest(CamelModel):
    """
    Lead capture from the calculator.

    `results` is stored as sent; it is also scored for the admin alert.
    """
    email: str = ""
    results: dict[str, Any] = Field(default_factory=dict)
    industry: Optional[str] = None
    employees_impacted: Optional[float] = None
    selected_workflows: list[Any] = Field(default_factory=list)
    derived_pricing: Optional[dict[str, Any]] = None


class ROIAssessmentUpdate(BaseModel):
    """Admin follow-up fields on an assessment."""
    contacted: Optional[bool] = None
    notes: Optional[str] = None
