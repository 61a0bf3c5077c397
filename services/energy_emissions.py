"""Annual energy and greenhouse-gas projection for the electrified appliances."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from services.load_planning import PlanningAnalysis, effective_cop
from services.project_state import Appliance, ProjectState, included_appliances, resolvable_appliances
from services.reference_data import (
    BTU_PER_THERM,
    BTU_TO_KWH,
    CO2_KG_PER_THERM_GAS,
    DEFAULT_GRID_REGION,
    GRID_EMISSION_FACTORS,
    GWP100_CH4,
    GWP20_CH4,
    HEATING_CATEGORIES,
    KG_CH4_PER_THERM,
    KG_CO2E_PER_CAR_YEAR,
    NON_HEATING_CATEGORIES,
    TOTAL_LEAKAGE_RATE,
    AnalysisConfig,
)


@dataclass
class ThermAllocation:
    """Annual gas usage attributed to the in-scope appliances.

    ``heating_therms`` / ``non_heating_therms`` are the category-group totals
    attributable to included appliances; ``per_appliance`` splits them by
    each included appliance's share of in-scope rated BTU.
    """

    heating_therms: float = 0.0
    non_heating_therms: float = 0.0
    per_appliance: Dict[str, float] = field(default_factory=dict)

    @property
    def total_therms(self) -> float:
        return self.heating_therms + self.non_heating_therms


@dataclass
class EnergyProjection:
    allocation: ThermAllocation
    useful_heat_btu: Dict[str, float] = field(default_factory=dict)
    kwh_by_appliance: Dict[str, float] = field(default_factory=dict)

    @property
    def total_kwh(self) -> float:
        return float(sum(self.kwh_by_appliance.values()))

    @property
    def useful_heat_kwh(self) -> float:
        return float(sum(self.useful_heat_btu.values())) * BTU_TO_KWH


@dataclass
class EnvironmentalImpact:
    current_annual_gas_co2_kg: float = 0.0
    current_annual_ch4_kg: float = 0.0
    current_annual_gas_co2e20_kg: float = 0.0
    current_annual_gas_co2e100_kg: float = 0.0
    projected_annual_elec_co2_kg: float = 0.0
    annual_ghg_reduction_co2e20_kg: float = 0.0
    annual_ghg_reduction_co2e100_kg: float = 0.0
    ghg_reduction_cars_off_road_100yr: float = 0.0
    grid_factor_kg_per_kwh: float = 0.0
    future_grid_factor_kg_per_kwh: float = 0.0
    future_projected_elec_co2_kg: float = 0.0
    future_annual_ghg_reduction_co2e100_kg: float = 0.0


@dataclass
class DistributionImpact:
    peak_demand_kw: float = 0.0
    non_heating_demand_kw: float = 0.0


def _btu_total(appliances: Iterable[Appliance]) -> float:
    return sum(max(float(a.btu), 0.0) for a in appliances)


def _group(appliances: Iterable[Appliance], categories) -> List[Appliance]:
    return [a for a in appliances if a.definition is not None and a.definition.category in categories]


def allocate_therms(state: ProjectState) -> ThermAllocation:
    """Two-level proportional split of annual therms.

    The in-scope share of each category group's listed BTU capacity sets the
    group's attributable therms; those therms are then divided among the
    included appliances by rated BTU. Empty groups receive zero.
    """

    listed = resolvable_appliances(state)
    included = [a for a in listed if a.included]
    allocation = ThermAllocation()

    for categories, annual_therms, attr in (
        (HEATING_CATEGORIES, state.annual_heating_therms, "heating_therms"),
        (NON_HEATING_CATEGORIES, state.annual_non_heating_therms, "non_heating_therms"),
    ):
        all_btu = _btu_total(_group(listed, categories))
        group_included = _group(included, categories)
        included_btu = _btu_total(group_included)

        group_therms = annual_therms * (included_btu / all_btu) if all_btu > 0 else 0.0
        setattr(allocation, attr, group_therms)

        for appliance in group_included:
            share = max(float(appliance.btu), 0.0) / included_btu if included_btu > 0 else 0.0
            allocation.per_appliance[appliance.id] = group_therms * share

    return allocation


def calculate_energy_projection(
    state: ProjectState,
    config: Optional[AnalysisConfig] = None,
    allocation: Optional[ThermAllocation] = None,
) -> EnergyProjection:
    """Electric kWh needed to deliver the useful heat the gas appliances deliver today.

    Useful heat is the allocated gas input scaled by the appliance's thermal
    efficiency, so an 80% furnace only needs 80% of its gas energy replaced.
    """

    allocation = allocation or allocate_therms(state)
    projection = EnergyProjection(allocation=allocation)

    for appliance in included_appliances(state):
        therms = allocation.per_appliance.get(appliance.id, 0.0)
        if therms <= 0:
            continue
        useful_btu = therms * BTU_PER_THERM * (appliance.efficiency / 100.0)
        cop = effective_cop(
            appliance.definition.category,
            state.efficiency_tier,
            state.climate_zone,
            state.cold_climate_derating,
            config,
        )
        projection.useful_heat_btu[appliance.id] = useful_btu
        projection.kwh_by_appliance[appliance.id] = (useful_btu * BTU_TO_KWH) / cop

    return projection


def gas_co2e_kg(therms: float, gwp: float) -> float:
    """Combustion CO2 plus leaked methane weighted by ``gwp``."""

    combustion = therms * CO2_KG_PER_THERM_GAS
    methane = therms * KG_CH4_PER_THERM * TOTAL_LEAKAGE_RATE
    return combustion + methane * gwp


def grid_factor_for(region: str) -> float:
    return GRID_EMISSION_FACTORS.get(region, GRID_EMISSION_FACTORS[DEFAULT_GRID_REGION])


def future_grid_factor(base_factor: float, annual_decarbonization_pct: float, lifetime_years: int) -> float:
    """Grid factor in the final project year under a constant annual decline."""

    rate = min(max(annual_decarbonization_pct / 100.0, 0.0), 1.0)
    return base_factor * (1.0 - rate) ** (lifetime_years - 1)


def calculate_environmental_impact(
    state: ProjectState,
    total_therms: float,
    projected_annual_kwh: float,
    config: Optional[AnalysisConfig] = None,
) -> EnvironmentalImpact:
    cfg = config or AnalysisConfig()
    gas_co2 = total_therms * CO2_KG_PER_THERM_GAS
    ch4 = total_therms * KG_CH4_PER_THERM * TOTAL_LEAKAGE_RATE
    gas_co2e20 = gas_co2e_kg(total_therms, GWP20_CH4)
    gas_co2e100 = gas_co2e_kg(total_therms, GWP100_CH4)

    grid_factor = grid_factor_for(state.grid_region)
    elec_co2 = projected_annual_kwh * grid_factor
    reduction100 = gas_co2e100 - elec_co2

    future_factor = future_grid_factor(grid_factor, state.grid_decarbonization_rate, cfg.lifetime_years)
    future_elec_co2 = projected_annual_kwh * future_factor

    return EnvironmentalImpact(
        current_annual_gas_co2_kg=gas_co2,
        current_annual_ch4_kg=ch4,
        current_annual_gas_co2e20_kg=gas_co2e20,
        current_annual_gas_co2e100_kg=gas_co2e100,
        projected_annual_elec_co2_kg=elec_co2,
        annual_ghg_reduction_co2e20_kg=gas_co2e20 - elec_co2,
        annual_ghg_reduction_co2e100_kg=reduction100,
        ghg_reduction_cars_off_road_100yr=reduction100 / KG_CO2E_PER_CAR_YEAR,
        grid_factor_kg_per_kwh=grid_factor,
        future_grid_factor_kg_per_kwh=future_factor,
        future_projected_elec_co2_kg=future_elec_co2,
        future_annual_ghg_reduction_co2e100_kg=gas_co2e100 - future_elec_co2,
    )


def calculate_distribution_impact(planning: PlanningAnalysis) -> DistributionImpact:
    """Grid-facing peak of all new loads and the year-round (non-heating) part."""

    impact = DistributionImpact()
    for rec in planning.recommendations:
        impact.peak_demand_kw += rec.kw
        if rec.category in NON_HEATING_CATEGORIES:
            impact.non_heating_demand_kw += rec.kw
    return impact


__all__ = [
    "ThermAllocation",
    "EnergyProjection",
    "EnvironmentalImpact",
    "DistributionImpact",
    "allocate_therms",
    "calculate_energy_projection",
    "gas_co2e_kg",
    "grid_factor_for",
    "future_grid_factor",
    "calculate_environmental_impact",
    "calculate_distribution_impact",
]
