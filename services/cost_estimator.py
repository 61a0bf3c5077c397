"""Low / medium / high project cost estimate with stacked rebate programs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from services.load_planning import (
    ELECTRIC_TYPE_HEAT_PUMP,
    ELECTRIC_TYPE_HPWH,
    BreakerStatus,
    PlanningAnalysis,
)
from services.project_state import Appliance, ProjectState
from services.reference_data import (
    REBATE_HEAT_PUMP,
    REBATE_HPWH,
    REBATE_PANEL_UPGRADE,
    ZERO_COST,
    ApplianceCategory,
    ChargerClass,
    CostRange,
    CostTables,
    default_cost_tables,
    panel_upgrade_key,
)


@dataclass(frozen=True)
class CostItem:
    name: str
    low: float
    medium: float
    high: float

    @classmethod
    def from_range(cls, name: str, cost: CostRange) -> "CostItem":
        return cls(name=name, low=cost.low, medium=cost.medium, high=cost.high)


@dataclass(frozen=True)
class RebateItem:
    name: str
    amount: float


@dataclass
class CostAnalysis:
    appliance_costs: Dict[str, List[CostItem]] = field(default_factory=dict)
    electrical_costs: List[CostItem] = field(default_factory=list)
    rebates: List[RebateItem] = field(default_factory=list)
    total_low: float = 0.0
    total_medium: float = 0.0
    total_high: float = 0.0
    total_rebates: float = 0.0
    net_low: float = 0.0
    net_medium: float = 0.0
    net_high: float = 0.0

    @property
    def all_items(self) -> List[CostItem]:
        items = [item for costs in self.appliance_costs.values() for item in costs]
        return items + list(self.electrical_costs)


def mini_split_cost(zones: Optional[int], tables: CostTables) -> CostRange:
    """Base unit plus each zone beyond the first; at least one zone is assumed."""

    zone_count = max(int(zones or 1), 1)
    base = tables.distribution.get("Mini-Split Base Unit", ZERO_COST)
    per_zone = tables.distribution.get("Mini-Split Additional Zone", ZERO_COST)
    return base + per_zone.scaled(zone_count - 1)


def appliance_cost_items(appliance: Appliance, state: ProjectState, tables: CostTables) -> List[CostItem]:
    """Line items to replace one gas appliance.

    Boiler installs carry the mini-split distribution cost inside
    "Installation & Materials"; space heaters list it separately.
    """

    category = appliance.definition.category
    items: List[CostItem] = []

    equipment = tables.equipment.get(category, {}).get(state.efficiency_tier)
    if equipment is not None:
        items.append(CostItem.from_range("Equipment", equipment))

    installation = tables.installation.get(category, ZERO_COST)
    if category is ApplianceCategory.BOILER:
        installation = installation + mini_split_cost(appliance.zones, tables)
    items.append(CostItem.from_range("Installation & Materials", installation))

    decommissioning = tables.decommissioning.get(category, ZERO_COST)
    if decommissioning.high > 0:
        items.append(CostItem.from_range("Gas Decommissioning", decommissioning))

    if category is ApplianceCategory.FURNACE:
        ductwork = tables.distribution.get("Ductwork Modification", ZERO_COST)
        items.append(CostItem.from_range("Ductwork Modification", ductwork))
    elif category is ApplianceCategory.SPACE_HEATER:
        items.append(
            CostItem.from_range("Ductless Mini-Split Distribution", mini_split_cost(appliance.zones, tables))
        )

    return items


def supplemental_heater_count(state: ProjectState, planning: PlanningAnalysis) -> int:
    recommended_ids = {r.id for r in planning.appliance_recommendations}
    total = 0
    for appliance in state.appliances:
        if appliance.id not in recommended_ids or appliance.definition is None:
            continue
        if appliance.definition.category in (ApplianceCategory.BOILER, ApplianceCategory.SPACE_HEATER):
            total += max(int(appliance.supplemental_heaters or 0), 0)
    return total


def electrical_cost_items(planning: PlanningAnalysis, state: ProjectState, tables: CostTables) -> List[CostItem]:
    items: List[CostItem] = []

    chargers = [r for r in planning.recommendations if r.is_ev_charger]
    if chargers and state.ev_charger is not ChargerClass.NONE:
        unit = tables.electrical.get(state.ev_charger.value)
        if unit is not None:
            items.append(
                CostItem.from_range(
                    f"{len(chargers)} EV Charger(s) (hardware + circuit)", unit.scaled(len(chargers))
                )
            )

    if planning.recommended_panel_amps is not None:
        upgrade = tables.electrical.get(panel_upgrade_key(planning.recommended_panel_amps))
        if upgrade is not None:
            items.append(CostItem.from_range(f"Main Panel Upgrade ({planning.recommended_panel_amps}A)", upgrade))
    elif planning.breaker_status is BreakerStatus.SUB_PANEL:
        sub_panel = tables.electrical.get("Sub-panel")
        if sub_panel is not None:
            items.append(CostItem.from_range("Sub-panel Installation", sub_panel))

    circuits = len(planning.appliance_recommendations)
    circuit_cost = tables.electrical.get("New Circuit")
    if circuits > 0 and circuit_cost is not None:
        items.append(CostItem.from_range(f"{circuits} New Circuit(s)", circuit_cost.scaled(circuits)))

    heaters = supplemental_heater_count(state, planning)
    heater_cost = tables.electrical.get("Supplemental Heater")
    if heaters > 0 and heater_cost is not None:
        items.append(
            CostItem.from_range(f"{heaters} Supplemental Electric Heater(s)", heater_cost.scaled(heaters))
        )

    permits = tables.electrical.get("Permits & Fees")
    if state.include_permitting and planning.recommendations and permits is not None:
        items.append(CostItem.from_range("Permits & Fees", permits))

    return items


def calculate_rebates(planning: PlanningAnalysis, state: ProjectState, tables: CostTables) -> List[RebateItem]:
    """Award rebates from the set of electric replacement types actually recommended.

    The panel-upgrade rebate requires both a recommended upgrade and a heat
    pump in the plan. Regional and federal programs stack.
    """

    electric_types = {r.electric_type for r in planning.appliance_recommendations}
    if not electric_types:
        return []

    has_heat_pump = ELECTRIC_TYPE_HEAT_PUMP in electric_types
    triggers = {
        REBATE_HEAT_PUMP: has_heat_pump,
        REBATE_HPWH: ELECTRIC_TYPE_HPWH in electric_types,
        REBATE_PANEL_UPGRADE: planning.panel_upgrade_recommended and has_heat_pump,
    }
    labels = {
        REBATE_HEAT_PUMP: ("Heat Pump Rebate", "Federal Heat Pump Tax Credit"),
        REBATE_HPWH: ("HPWH Rebate", "Federal HPWH Tax Credit"),
        REBATE_PANEL_UPGRADE: ("Panel Upgrade Rebate", "Federal Panel Upgrade Tax Credit"),
    }

    regional = tables.regional_rebates.get(state.rebate_region, {})
    rebates: List[RebateItem] = []
    for key, triggered in triggers.items():
        if not triggered:
            continue
        regional_label, federal_label = labels[key]
        regional_amount = float(regional.get(key, 0.0))
        if regional_amount > 0:
            rebates.append(RebateItem(f"{regional_label} ({state.rebate_region})", regional_amount))
        federal_amount = float(tables.federal_rebates.get(key, 0.0))
        if federal_amount > 0:
            rebates.append(RebateItem(federal_label, federal_amount))
    return rebates


def calculate_cost_analysis(
    planning: PlanningAnalysis,
    state: ProjectState,
    tables: Optional[CostTables] = None,
) -> CostAnalysis:
    """Sum line items per column and net out rebates with a floor of zero."""

    tables = tables or default_cost_tables()
    appliances_by_id = {a.id: a for a in state.appliances}

    appliance_costs: Dict[str, List[CostItem]] = {}
    for rec in planning.appliance_recommendations:
        appliance = appliances_by_id.get(rec.id)
        if appliance is None or appliance.definition is None:
            continue
        appliance_costs[rec.id] = appliance_cost_items(appliance, state, tables)

    electrical_costs = electrical_cost_items(planning, state, tables)
    rebates = calculate_rebates(planning, state, tables)

    analysis = CostAnalysis(appliance_costs=appliance_costs, electrical_costs=electrical_costs, rebates=rebates)
    for item in analysis.all_items:
        analysis.total_low += item.low
        analysis.total_medium += item.medium
        analysis.total_high += item.high
    analysis.total_rebates = sum(r.amount for r in rebates)
    analysis.net_low = max(0.0, analysis.total_low - analysis.total_rebates)
    analysis.net_medium = max(0.0, analysis.total_medium - analysis.total_rebates)
    analysis.net_high = max(0.0, analysis.total_high - analysis.total_rebates)
    return analysis


__all__ = [
    "CostItem",
    "RebateItem",
    "CostAnalysis",
    "mini_split_cost",
    "appliance_cost_items",
    "supplemental_heater_count",
    "electrical_cost_items",
    "calculate_rebates",
    "calculate_cost_analysis",
]
