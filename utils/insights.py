"""Report guidance text derived from a finished analysis."""

from __future__ import annotations

from typing import Dict, List

from services.analysis_pipeline import ProjectAnalysis
from services.load_planning import BreakerStatus

EMPTY_REPORT_MESSAGE = "Add and include at least one gas appliance to generate a report."

INSIGHT_DEFINITIONS: Dict[str, Dict[str, str]] = {
    "panel_upgrade": {
        "label": "Panel upgrade",
        "insight": (
            "The calculated load exceeds 80% of the existing panel rating. Ask an electrician to"
            " confirm with a load calculation; load-management devices or lower-amperage heat"
            " pump models can sometimes avoid the upgrade."
        ),
    },
    "sub_panel": {
        "label": "Breaker space",
        "insight": (
            "The panel has capacity but not enough free breaker spaces for the new circuits;"
            " a sub-panel is usually the lower-cost fix."
        ),
    },
    "negative_savings": {
        "label": "Operating cost",
        "insight": (
            "Projected electric operating costs exceed today's gas costs at the entered rates."
            " Higher-efficiency equipment or a time-of-use rate can close the gap."
        ),
    },
    "emissions_increase": {
        "label": "Emissions",
        "insight": (
            "At the selected grid emission factor the electric replacements emit more than the"
            " displaced gas on a 100-year basis; check the grid region and equipment tier."
        ),
    },
}

NEXT_STEPS: List[str] = [
    "Get at least three quotes from qualified, licensed installers.",
    "Confirm current rebate and tax-credit eligibility with your utility program before signing.",
    "Schedule a home or building energy audit; weatherization lowers the size of equipment needed.",
]


def _describe(key: str) -> str:
    meta = INSIGHT_DEFINITIONS[key]
    return f"{meta['label']}: {meta['insight']}"


def build_report_insights(analysis: ProjectAnalysis) -> List[str]:
    """Translate the analysis into short, actionable guidance lines."""

    if analysis.is_empty:
        return [EMPTY_REPORT_MESSAGE]

    insights: List[str] = []
    planning = analysis.planning

    if planning.panel_upgrade_recommended:
        insights.append(_describe("panel_upgrade"))
    elif planning.breaker_status is BreakerStatus.SUB_PANEL:
        insights.append(_describe("sub_panel"))

    savings = analysis.financial.net_annual_savings
    payback = analysis.financial.simple_payback_years
    if savings < 0:
        insights.append(_describe("negative_savings"))
    elif payback is not None:
        insights.append(
            f"Payback: the net investment is recovered in about {payback:.1f} years from"
            f" ${savings:,.0f} of annual savings."
        )

    reduction = analysis.environmental.annual_ghg_reduction_co2e100_kg
    if reduction < 0:
        insights.append(_describe("emissions_increase"))
    elif reduction > 0:
        cars = analysis.environmental.ghg_reduction_cars_off_road_100yr
        insights.append(
            f"Emissions: about {reduction:,.0f} kg CO2e avoided per year (100-yr GWP),"
            f" like taking {cars:.1f} cars off the road."
        )

    insights.extend(NEXT_STEPS)
    return insights


__all__ = ["EMPTY_REPORT_MESSAGE", "INSIGHT_DEFINITIONS", "NEXT_STEPS", "build_report_insights"]
