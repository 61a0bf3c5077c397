"""Electrical load estimate and panel recommendation for electric replacements."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from services.project_state import Appliance, ProjectState, included_appliances
from services.reference_data import (
    BREAKER_SPACE_REQUIREMENTS,
    BTU_PER_TON,
    BTU_TO_KWH,
    CHARGER_SPECS,
    CLIMATE_ZONE_COP_ADJUSTMENT,
    COP_LOOKUP,
    DEFAULT_VOLTAGE,
    HEATING_CATEGORIES,
    NAMEPLATE_PEAK_KW,
    AnalysisConfig,
    ApplianceCategory,
    ChargerClass,
    ClimateZone,
    EfficiencyTier,
    FacilityType,
    panel_size_ladder,
)

PANEL_NOT_REQUIRED = "Not Required"
ELECTRIC_TYPE_HEAT_PUMP = "Heat Pump"
ELECTRIC_TYPE_HPWH = "HPWH"
ELECTRIC_TYPE_RANGE = "Range"
ELECTRIC_TYPE_DRYER = "Dryer"
ELECTRIC_TYPE_EV_CHARGER = "EV Charger"


class BreakerStatus(str, Enum):
    SUFFICIENT = "Sufficient"
    SUB_PANEL = "Sub-panel Recommended"
    PANEL_UPGRADE = "Panel Upgrade Recommended"


@dataclass(frozen=True)
class ApplianceRecommendation:
    """Electric replacement for one appliance (or one synthetic EV charger entry)."""

    id: str
    text: str
    size: str
    electric_type: str
    output_btu: float
    kw: float
    amps: float
    breaker_spaces: int
    category: Optional[ApplianceCategory] = None

    @property
    def is_ev_charger(self) -> bool:
        return self.electric_type == ELECTRIC_TYPE_EV_CHARGER


@dataclass
class PlanningAnalysis:
    recommendations: List[ApplianceRecommendation] = field(default_factory=list)
    total_new_amps: float = 0.0
    total_new_kw: float = 0.0
    diversified_new_amps: float = 0.0
    existing_load_amps: float = 0.0
    total_calculated_load_amps: float = 0.0
    panel_capacity_amps: float = 0.0
    required_breaker_spaces: int = 0
    breaker_status: BreakerStatus = BreakerStatus.SUFFICIENT
    panel_status: str = PANEL_NOT_REQUIRED
    recommended_panel_amps: Optional[int] = None

    @property
    def panel_upgrade_recommended(self) -> bool:
        return self.recommended_panel_amps is not None

    @property
    def appliance_recommendations(self) -> List[ApplianceRecommendation]:
        return [r for r in self.recommendations if not r.is_ev_charger]


def effective_cop(
    category: ApplianceCategory,
    tier: EfficiencyTier,
    climate_zone: ClimateZone = ClimateZone.ZONE5,
    cold_climate_derating: bool = False,
    config: Optional[AnalysisConfig] = None,
) -> float:
    """Return the tier COP with climate penalties applied to space-heating categories.

    The zone adjustment and the optional cold-climate derating compound.
    """

    cfg = config or AnalysisConfig()
    cop = COP_LOOKUP[category][tier]
    if category in HEATING_CATEGORIES:
        cop *= CLIMATE_ZONE_COP_ADJUSTMENT.get(climate_zone, 1.0)
        if cold_climate_derating:
            cop *= cfg.cold_climate_derating
    return cop


def peak_kw(appliance: Appliance, state: ProjectState, config: Optional[AnalysisConfig] = None) -> float:
    """Peak electric draw of the appliance's replacement, in kW.

    Heat-producing categories are sized to deliver the same peak output as
    the gas unit; ranges and dryers use nameplate ratings.
    """

    definition = appliance.definition
    if definition is None:
        return 0.0
    category = definition.category
    if category in (
        ApplianceCategory.FURNACE,
        ApplianceCategory.BOILER,
        ApplianceCategory.WATER_HEATER,
        ApplianceCategory.SPACE_HEATER,
    ):
        cop = effective_cop(
            category, state.efficiency_tier, state.climate_zone, state.cold_climate_derating, config
        )
        return (max(appliance.btu, 0.0) * BTU_TO_KWH) / cop
    if category in (ApplianceCategory.RANGE, ApplianceCategory.DRYER):
        return NAMEPLATE_PEAK_KW[category]
    return 0.0


def round_to_half_ton(btu: float) -> float:
    """Convert BTU/hr to tons rounded to the nearest 0.5 (halves round up)."""

    tons = btu / BTU_PER_TON
    return math.floor(tons * 2.0 + 0.5) / 2.0


def water_heater_size(btu: float) -> str:
    if btu <= 40_000:
        return "50-gallon"
    if btu <= 60_000:
        return "65-gallon"
    return "80-gallon"


def describe_replacement(appliance: Appliance, tier: EfficiencyTier) -> Tuple[str, str, str]:
    """Return (text, size, electric_type) for the appliance's electric replacement."""

    definition = appliance.definition
    if definition is None:
        raise ValueError(f"Unknown appliance key: {appliance.key!r}")
    category = definition.category
    tier_label = "High-Efficiency" if tier is EfficiencyTier.HIGH else tier.value

    if category is ApplianceCategory.FURNACE:
        type_name, electric_type = "Central Ducted Heat Pump", ELECTRIC_TYPE_HEAT_PUMP
        size = f"{round_to_half_ton(appliance.btu):.1f}-ton"
    elif category is ApplianceCategory.BOILER:
        type_name, electric_type = "Ductless Mini-Split System", ELECTRIC_TYPE_HEAT_PUMP
        size = f"{round_to_half_ton(appliance.btu):.1f}-ton"
    elif category is ApplianceCategory.SPACE_HEATER:
        type_name, electric_type = "Ductless Mini-Split", ELECTRIC_TYPE_HEAT_PUMP
        size = f"{round_to_half_ton(appliance.btu):.1f}-ton"
    elif category is ApplianceCategory.WATER_HEATER:
        type_name, electric_type = "HPWH", ELECTRIC_TYPE_HPWH
        size = water_heater_size(appliance.btu)
    elif category is ApplianceCategory.RANGE:
        type_name, electric_type, size = "Induction Range", ELECTRIC_TYPE_RANGE, "Standard"
    elif category is ApplianceCategory.DRYER:
        type_name, electric_type, size = "Heat Pump Dryer", ELECTRIC_TYPE_DRYER, "Standard"
    else:  # pragma: no cover - every category is handled above
        raise ValueError(f"Unhandled appliance category: {category}")

    return f"{size} {tier_label} {type_name}", size, electric_type


def _amps_for(kw: float, voltage: float) -> float:
    volts = voltage if voltage > 0 else DEFAULT_VOLTAGE
    return (kw * 1000.0) / volts


def recommend_appliance(
    appliance: Appliance, state: ProjectState, config: Optional[AnalysisConfig] = None
) -> ApplianceRecommendation:
    category = appliance.definition.category
    kw = peak_kw(appliance, state, config)
    text, size, electric_type = describe_replacement(appliance, state.efficiency_tier)
    return ApplianceRecommendation(
        id=appliance.id,
        text=text,
        size=size,
        electric_type=electric_type,
        output_btu=float(appliance.btu),
        kw=kw,
        amps=_amps_for(kw, state.panel.voltage),
        breaker_spaces=BREAKER_SPACE_REQUIREMENTS[category],
        category=category,
    )


def ev_charger_recommendations(state: ProjectState) -> List[ApplianceRecommendation]:
    """Synthetic load entries for requested EV charging stations.

    Residential projects get at most one charger; other facilities get one
    entry per requested station.
    """

    spec = CHARGER_SPECS.get(state.ev_charger)
    if state.ev_charger is ChargerClass.NONE or spec is None:
        return []
    count = 1 if state.facility_type.is_residential else max(int(state.ev_charger_count), 0)
    return [
        ApplianceRecommendation(
            id=f"ev-charger-{idx}",
            text=spec.label,
            size=state.ev_charger.value,
            electric_type=ELECTRIC_TYPE_EV_CHARGER,
            output_btu=0.0,
            kw=spec.kw,
            amps=spec.amps,
            breaker_spaces=spec.breaker_spaces,
        )
        for idx in range(1, count + 1)
    ]


def diversified_load(
    loads_amps: Sequence[float], facility: FacilityType, config: Optional[AnalysisConfig] = None
) -> float:
    """Estimate realistic simultaneous demand from individual peak loads.

    Residential: the largest load in full plus a fraction of the rest.
    Commercial: load in full up to a threshold plus a fraction of the
    remainder. Zero or one load is never discounted.
    """

    cfg = config or AnalysisConfig()
    loads = [max(float(a), 0.0) for a in loads_amps]
    total = sum(loads)
    if len(loads) <= 1:
        return total
    if facility.is_residential:
        largest = max(loads)
        return largest + cfg.residential_diversity_fraction * (total - largest)
    threshold = cfg.commercial_diversity_threshold_amps
    if total <= threshold:
        return total
    return threshold + cfg.commercial_diversity_fraction * (total - threshold)


def recommend_panel_size(required_amps: float, ladder: Sequence[int]) -> int:
    """Smallest standard size at or above ``required_amps``; the largest size otherwise."""

    for size in sorted(ladder):
        if size >= required_amps:
            return int(size)
    return int(max(ladder))


def existing_load_amps(state: ProjectState, config: Optional[AnalysisConfig] = None) -> float:
    cfg = config or AnalysisConfig()
    if state.panel.existing_peak_load_amps is not None:
        return max(float(state.panel.existing_peak_load_amps), 0.0)
    return state.panel.amps * cfg.panel_continuous_load_fraction * cfg.assumed_existing_load_fraction


def calculate_planning_analysis(state: ProjectState, config: Optional[AnalysisConfig] = None) -> PlanningAnalysis:
    """Build replacement recommendations and the panel / breaker-space verdict."""

    cfg = config or AnalysisConfig()
    recommendations = [recommend_appliance(a, state, cfg) for a in included_appliances(state)]
    recommendations.extend(ev_charger_recommendations(state))

    total_new_amps = sum(r.amps for r in recommendations)
    total_new_kw = sum(r.kw for r in recommendations)
    required_spaces = sum(r.breaker_spaces for r in recommendations)
    diversified = diversified_load([r.amps for r in recommendations], state.facility_type, cfg)

    existing = existing_load_amps(state, cfg)
    total_load = existing + diversified
    capacity = state.panel.amps * cfg.panel_continuous_load_fraction

    recommended_panel: Optional[int] = None
    panel_status = PANEL_NOT_REQUIRED
    if recommendations and total_load > capacity:
        required_size = total_load / cfg.panel_continuous_load_fraction
        recommended_panel = recommend_panel_size(required_size, panel_size_ladder(state.facility_type))
        panel_status = f"Upgrade to {recommended_panel}A Recommended"

    if recommended_panel is not None:
        breaker_status = BreakerStatus.PANEL_UPGRADE
    elif required_spaces > state.panel.breaker_spaces:
        breaker_status = BreakerStatus.SUB_PANEL
    else:
        breaker_status = BreakerStatus.SUFFICIENT

    return PlanningAnalysis(
        recommendations=recommendations,
        total_new_amps=total_new_amps,
        total_new_kw=total_new_kw,
        diversified_new_amps=diversified,
        existing_load_amps=existing,
        total_calculated_load_amps=total_load,
        panel_capacity_amps=capacity,
        required_breaker_spaces=required_spaces,
        breaker_status=breaker_status,
        panel_status=panel_status,
        recommended_panel_amps=recommended_panel,
    )


__all__ = [
    "PANEL_NOT_REQUIRED",
    "ELECTRIC_TYPE_HEAT_PUMP",
    "ELECTRIC_TYPE_HPWH",
    "ELECTRIC_TYPE_RANGE",
    "ELECTRIC_TYPE_DRYER",
    "ELECTRIC_TYPE_EV_CHARGER",
    "BreakerStatus",
    "ApplianceRecommendation",
    "PlanningAnalysis",
    "effective_cop",
    "peak_kw",
    "round_to_half_ton",
    "water_heater_size",
    "describe_replacement",
    "recommend_appliance",
    "ev_charger_recommendations",
    "diversified_load",
    "recommend_panel_size",
    "existing_load_amps",
    "calculate_planning_analysis",
]
