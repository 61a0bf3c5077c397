"""Annual operating-cost comparison and the lifetime escalation projection.

Kept free of Streamlit/UI dependencies so the same maths backs the pages,
the API, and notebooks. Escalation rates are expressed as percent per year
(e.g., 3.0 = 3%).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import pandas as pd

from services.cost_estimator import CostAnalysis
from services.project_state import ProjectState, included_appliances
from services.reference_data import (
    ELECTRIC_MAINTENANCE_BY_CATEGORY,
    GAS_MAINTENANCE_BY_CATEGORY,
    AnalysisConfig,
)


@dataclass
class FinancialAnalysis:
    """Current (gas) versus projected (all-electric) annual costs in USD."""

    current_annual_gas_cost: float = 0.0
    current_annual_elec_cost: float = 0.0
    current_annual_maintenance: float = 0.0
    projected_annual_elec_cost: float = 0.0
    projected_annual_maintenance: float = 0.0
    effective_electric_rate: float = 0.0
    net_annual_savings: float = 0.0
    simple_payback_years: Optional[float] = None

    @property
    def current_annual_cost(self) -> float:
        return self.current_annual_gas_cost + self.current_annual_elec_cost + self.current_annual_maintenance

    @property
    def projected_annual_cost(self) -> float:
        return self.projected_annual_elec_cost + self.current_annual_elec_cost + self.projected_annual_maintenance


@dataclass
class LifetimeAnalysis:
    """Cumulative cost series indexed by project year (0..lifetime).

    Year 0 of the electric series holds the upfront net cost; the gas series
    start at zero. ``total_elec_cost_15yr`` excludes that upfront seed so the
    savings figures compare operating costs only.
    """

    years: List[int] = field(default_factory=list)
    cumulative_gas_costs: List[float] = field(default_factory=list)
    cumulative_high_risk_gas_costs: List[float] = field(default_factory=list)
    cumulative_elec_costs: List[float] = field(default_factory=list)
    total_gas_cost_15yr: float = 0.0
    total_high_risk_gas_cost_15yr: float = 0.0
    total_elec_cost_15yr: float = 0.0
    total_savings_15yr: float = 0.0
    total_high_risk_savings_15yr: float = 0.0


def effective_electric_rate(state: ProjectState) -> float:
    """Flat $/kWh, or the peak/off-peak blend when time-of-use pricing is on."""

    tou = state.time_of_use
    if not tou.enabled:
        return float(state.electricity_price_per_kwh)
    share = min(max(tou.peak_share_pct / 100.0, 0.0), 1.0)
    return share * tou.peak_price_per_kwh + (1.0 - share) * tou.off_peak_price_per_kwh


def annual_maintenance(state: ProjectState) -> tuple[float, float]:
    """Return (gas, electric) yearly maintenance totals over included appliances."""

    gas = 0.0
    electric = 0.0
    for appliance in included_appliances(state):
        category = appliance.definition.category
        gas += GAS_MAINTENANCE_BY_CATEGORY.get(category, 0.0)
        electric += ELECTRIC_MAINTENANCE_BY_CATEGORY.get(category, 0.0)
    return gas, electric


def calculate_financial_analysis(
    state: ProjectState,
    cost: CostAnalysis,
    total_therms: float,
    projected_annual_kwh: float,
) -> FinancialAnalysis:
    rate = effective_electric_rate(state)
    gas_maintenance, elec_maintenance = annual_maintenance(state)

    analysis = FinancialAnalysis(
        current_annual_gas_cost=total_therms * state.gas_price_per_therm,
        current_annual_elec_cost=max(float(state.existing_annual_kwh), 0.0) * rate,
        current_annual_maintenance=gas_maintenance,
        projected_annual_elec_cost=projected_annual_kwh * rate,
        projected_annual_maintenance=elec_maintenance,
        effective_electric_rate=rate,
    )
    analysis.net_annual_savings = analysis.current_annual_cost - analysis.projected_annual_cost

    # Payback is undefined without positive savings and a positive outlay.
    if analysis.net_annual_savings > 0 and cost.net_medium > 0:
        analysis.simple_payback_years = cost.net_medium / analysis.net_annual_savings
    return analysis


def _escalated(first_year_cost: float, escalation_pct: float, years: int) -> np.ndarray:
    """Per-year costs for years 1..``years`` compounding from ``first_year_cost``."""

    return first_year_cost * (1.0 + escalation_pct / 100.0) ** np.arange(years)


def _cumulative_series(per_year: np.ndarray, seed: float) -> np.ndarray:
    """Prefix sums of ``per_year`` with ``seed`` at year 0."""

    return np.concatenate(([seed], seed + np.cumsum(per_year)))


def calculate_lifetime_analysis(
    financial: FinancialAnalysis,
    cost: CostAnalysis,
    state: ProjectState,
    config: Optional[AnalysisConfig] = None,
) -> LifetimeAnalysis:
    """Cumulative gas, high-risk gas and electric cost series.

    Each fuel bill compounds at its own price escalation. The existing
    electric bill compounds at the electricity rate on both sides, and
    maintenance stays at its first-year amount.
    """

    cfg = config or AnalysisConfig()
    years = cfg.lifetime_years

    existing_elec = _escalated(financial.current_annual_elec_cost, state.electricity_price_escalation, years)
    gas_per_year = (
        _escalated(financial.current_annual_gas_cost, state.gas_price_escalation, years)
        + existing_elec
        + financial.current_annual_maintenance
    )
    high_risk_per_year = (
        _escalated(financial.current_annual_gas_cost, state.high_risk_gas_escalation, years)
        + existing_elec
        + financial.current_annual_maintenance
    )
    elec_per_year = (
        _escalated(financial.projected_annual_elec_cost, state.electricity_price_escalation, years)
        + existing_elec
        + financial.projected_annual_maintenance
    )

    gas = _cumulative_series(gas_per_year, 0.0)
    high_risk = _cumulative_series(high_risk_per_year, 0.0)
    elec = _cumulative_series(elec_per_year, cost.net_medium)

    elec_operating = float(np.sum(elec_per_year))
    return LifetimeAnalysis(
        years=list(range(years + 1)),
        cumulative_gas_costs=gas.tolist(),
        cumulative_high_risk_gas_costs=high_risk.tolist(),
        cumulative_elec_costs=elec.tolist(),
        total_gas_cost_15yr=float(gas[-1]),
        total_high_risk_gas_cost_15yr=float(high_risk[-1]),
        total_elec_cost_15yr=elec_operating,
        total_savings_15yr=float(gas[-1]) - elec_operating,
        total_high_risk_savings_15yr=float(high_risk[-1]) - elec_operating,
    )


def lifetime_frame(lifetime: LifetimeAnalysis) -> pd.DataFrame:
    """Long-format table of the cumulative series for charting and export."""

    wide = pd.DataFrame(
        {
            "Year": lifetime.years,
            "Gas (baseline escalation)": lifetime.cumulative_gas_costs,
            "Gas (high-risk escalation)": lifetime.cumulative_high_risk_gas_costs,
            "Electric (incl. upfront)": lifetime.cumulative_elec_costs,
        }
    )
    return wide.melt(id_vars="Year", var_name="Scenario", value_name="Cumulative cost (USD)")


__all__ = [
    "FinancialAnalysis",
    "LifetimeAnalysis",
    "effective_electric_rate",
    "annual_maintenance",
    "calculate_financial_analysis",
    "calculate_lifetime_analysis",
    "lifetime_frame",
]
