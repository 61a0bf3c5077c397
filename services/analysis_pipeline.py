"""Single entry point that chains the estimators over one project snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from services.cost_estimator import CostAnalysis, calculate_cost_analysis
from services.energy_emissions import (
    DistributionImpact,
    EnergyProjection,
    EnvironmentalImpact,
    calculate_distribution_impact,
    calculate_energy_projection,
    calculate_environmental_impact,
)
from services.financial_projection import (
    FinancialAnalysis,
    LifetimeAnalysis,
    calculate_financial_analysis,
    calculate_lifetime_analysis,
)
from services.load_planning import PlanningAnalysis, calculate_planning_analysis
from services.project_state import ProjectState, snapshot, unresolved_appliances
from services.reference_data import AnalysisConfig, CostTables, default_cost_tables


@dataclass
class ProjectAnalysis:
    """Every derived record for one project state; the presentation contract."""

    state: ProjectState
    planning: PlanningAnalysis
    cost: CostAnalysis
    energy: EnergyProjection
    financial: FinancialAnalysis
    environmental: EnvironmentalImpact
    lifetime: LifetimeAnalysis
    distribution: DistributionImpact

    @property
    def is_empty(self) -> bool:
        """True when nothing is in scope and the report should show its placeholder."""

        return not self.planning.recommendations

    @property
    def projected_annual_kwh(self) -> float:
        return self.energy.total_kwh


def run_analysis(
    state: ProjectState,
    tables: Optional[CostTables] = None,
    config: Optional[AnalysisConfig] = None,
) -> ProjectAnalysis:
    """Recompute the full analysis from scratch.

    The state is deep-copied first; later edits to the caller's object do not
    affect the returned records.
    """

    frozen = snapshot(state)
    cfg = config or AnalysisConfig()
    tables = tables or default_cost_tables()

    for appliance in unresolved_appliances(frozen):
        logging.getLogger(__name__).warning(
            "Skipping appliance '%s': catalog key '%s' does not resolve.",
            appliance.id,
            appliance.key,
        )

    planning = calculate_planning_analysis(frozen, cfg)
    cost = calculate_cost_analysis(planning, frozen, tables)
    energy = calculate_energy_projection(frozen, cfg)
    total_therms = energy.allocation.total_therms
    financial = calculate_financial_analysis(frozen, cost, total_therms, energy.total_kwh)
    environmental = calculate_environmental_impact(frozen, total_therms, energy.total_kwh, cfg)
    lifetime = calculate_lifetime_analysis(financial, cost, frozen, cfg)
    distribution = calculate_distribution_impact(planning)

    return ProjectAnalysis(
        state=frozen,
        planning=planning,
        cost=cost,
        energy=energy,
        financial=financial,
        environmental=environmental,
        lifetime=lifetime,
        distribution=distribution,
    )


def analysis_summary_frame(analysis: ProjectAnalysis) -> pd.DataFrame:
    """One-row table of headline figures."""

    state = analysis.state
    address = " ".join(part for part in (state.address_number, state.street_name) if part)
    row = {
        "Address": ", ".join(part for part in (address, state.town) if part),
        "Facility": state.facility_type.value,
        "Recommendations": len(analysis.planning.recommendations),
        "Panel status": analysis.planning.panel_status,
        "Breaker status": analysis.planning.breaker_status.value,
        "Net cost low (USD)": analysis.cost.net_low,
        "Net cost medium (USD)": analysis.cost.net_medium,
        "Net cost high (USD)": analysis.cost.net_high,
        "Total rebates (USD)": analysis.cost.total_rebates,
        "Annual therms displaced": analysis.energy.allocation.total_therms,
        "Projected annual kWh": analysis.energy.total_kwh,
        "Net annual savings (USD)": analysis.financial.net_annual_savings,
        "Simple payback (years)": analysis.financial.simple_payback_years,
        "15-yr savings (USD)": analysis.lifetime.total_savings_15yr,
        "15-yr high-risk savings (USD)": analysis.lifetime.total_high_risk_savings_15yr,
        "Annual CO2e reduction, 20-yr GWP (kg)": analysis.environmental.annual_ghg_reduction_co2e20_kg,
        "Annual CO2e reduction, 100-yr GWP (kg)": analysis.environmental.annual_ghg_reduction_co2e100_kg,
        "Peak demand added (kW)": analysis.distribution.peak_demand_kw,
    }
    return pd.DataFrame([row])


__all__ = ["ProjectAnalysis", "run_analysis", "analysis_summary_frame"]
