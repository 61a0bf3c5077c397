"""Altair chart builders for the report pages."""

import altair as alt
import pandas as pd

from services.energy_emissions import EnvironmentalImpact
from services.financial_projection import LifetimeAnalysis, lifetime_frame

_SCENARIO_COLORS = {
    "Gas (baseline escalation)": "#c78100",
    "Gas (high-risk escalation)": "#d9534f",
    "Electric (incl. upfront)": "#2b8cbe",
}


def build_lifetime_chart(lifetime: LifetimeAnalysis) -> alt.Chart:
    """Cumulative cost lines; the crossing point is the lifetime breakeven year."""

    df = lifetime_frame(lifetime)
    domain = list(_SCENARIO_COLORS)
    return (
        alt.Chart(df)
        .mark_line(point=True, strokeWidth=2)
        .encode(
            x=alt.X("Year:O", title="Project year"),
            y=alt.Y("Cumulative cost (USD):Q", title="Cumulative cost (USD)", axis=alt.Axis(format="$,.0f")),
            color=alt.Color(
                "Scenario:N",
                scale=alt.Scale(domain=domain, range=[_SCENARIO_COLORS[k] for k in domain]),
                legend=alt.Legend(orient="bottom"),
            ),
            tooltip=[
                alt.Tooltip("Year:O"),
                alt.Tooltip("Scenario:N"),
                alt.Tooltip("Cumulative cost (USD):Q", format="$,.0f"),
            ],
        )
        .properties(height=360)
    )


def emissions_frame(impact: EnvironmentalImpact) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"Source": "Gas today", "Horizon": "20-yr GWP", "kg CO2e / yr": impact.current_annual_gas_co2e20_kg},
            {"Source": "Gas today", "Horizon": "100-yr GWP", "kg CO2e / yr": impact.current_annual_gas_co2e100_kg},
            {"Source": "Electric (today's grid)", "Horizon": "20-yr GWP", "kg CO2e / yr": impact.projected_annual_elec_co2_kg},
            {"Source": "Electric (today's grid)", "Horizon": "100-yr GWP", "kg CO2e / yr": impact.projected_annual_elec_co2_kg},
            {"Source": "Electric (final-year grid)", "Horizon": "100-yr GWP", "kg CO2e / yr": impact.future_projected_elec_co2_kg},
        ]
    )


def build_emissions_chart(impact: EnvironmentalImpact) -> alt.Chart:
    df = emissions_frame(impact)
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("Source:N", title=None, sort=None),
            xOffset="Horizon:N",
            y=alt.Y("kg CO2e / yr:Q", title="kg CO2e per year"),
            color=alt.Color("Horizon:N", scale=alt.Scale(range=["#f2a900", "#7fd18b"])),
            tooltip=["Source:N", "Horizon:N", alt.Tooltip("kg CO2e / yr:Q", format=",.0f")],
        )
        .properties(height=320)
    )
