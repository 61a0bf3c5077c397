"""Reusable KPI helpers for Streamlit pages."""

from dataclasses import dataclass
from typing import Optional

import streamlit as st

from frontend.ui.rendering import MetricSpec, render_metrics
from services.analysis_pipeline import ProjectAnalysis


@dataclass
class ReportKPIs:
    net_cost_low: float
    net_cost_high: float
    total_rebates: float
    net_annual_savings: float
    simple_payback_years: Optional[float]
    total_savings_15yr: float
    total_high_risk_savings_15yr: float
    annual_reduction_co2e20_kg: float
    annual_reduction_co2e100_kg: float
    cars_off_road: float
    peak_demand_kw: float
    panel_status: str


def compute_kpis(analysis: ProjectAnalysis) -> ReportKPIs:
    """Collect headline figures for reuse across pages."""

    return ReportKPIs(
        net_cost_low=analysis.cost.net_low,
        net_cost_high=analysis.cost.net_high,
        total_rebates=analysis.cost.total_rebates,
        net_annual_savings=analysis.financial.net_annual_savings,
        simple_payback_years=analysis.financial.simple_payback_years,
        total_savings_15yr=analysis.lifetime.total_savings_15yr,
        total_high_risk_savings_15yr=analysis.lifetime.total_high_risk_savings_15yr,
        annual_reduction_co2e20_kg=analysis.environmental.annual_ghg_reduction_co2e20_kg,
        annual_reduction_co2e100_kg=analysis.environmental.annual_ghg_reduction_co2e100_kg,
        cars_off_road=analysis.environmental.ghg_reduction_cars_off_road_100yr,
        peak_demand_kw=analysis.distribution.peak_demand_kw,
        panel_status=analysis.planning.panel_status,
    )


def _fmt_currency(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def _fmt_payback(years: Optional[float]) -> str:
    return "N/A" if years is None else f"{years:,.1f} yrs"


def render_primary_metrics(kpis: ReportKPIs) -> None:
    """Render the cost and savings cards shown above the report."""

    specs = [
        MetricSpec(
            "Net cost (after rebates)",
            f"{_fmt_currency(kpis.net_cost_low)} - {_fmt_currency(kpis.net_cost_high)}",
            help="Low to high estimate, never below zero.",
            caption=f"Rebates applied: {_fmt_currency(kpis.total_rebates)}",
        ),
        MetricSpec(
            "Annual savings",
            _fmt_currency(kpis.net_annual_savings),
            help="Current gas bill and maintenance minus projected electric bill and maintenance.",
        ),
        MetricSpec(
            "Simple payback",
            _fmt_payback(kpis.simple_payback_years),
            help="Average net cost divided by annual savings; N/A without positive savings.",
        ),
        MetricSpec(
            "15-year savings",
            _fmt_currency(kpis.total_savings_15yr),
            caption=f"High-risk gas scenario: {_fmt_currency(kpis.total_high_risk_savings_15yr)}",
        ),
    ]
    render_metrics(st.columns(len(specs)), specs)


def render_environment_metrics(kpis: ReportKPIs) -> None:
    specs = [
        MetricSpec(
            "CO2e avoided / yr (20-yr GWP)",
            f"{kpis.annual_reduction_co2e20_kg:,.0f} kg",
            help="Counts methane leakage at its 20-year warming potential.",
        ),
        MetricSpec(
            "CO2e avoided / yr (100-yr GWP)",
            f"{kpis.annual_reduction_co2e100_kg:,.0f} kg",
            caption=f"About {kpis.cars_off_road:,.1f} cars off the road",
        ),
        MetricSpec("Added peak demand", f"{kpis.peak_demand_kw:,.1f} kW"),
        MetricSpec("Main panel", kpis.panel_status),
    ]
    render_metrics(st.columns(len(specs)), specs)
