"""Shared rendering helpers for Streamlit pages."""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Union

import pandas as pd
import streamlit as st
from streamlit.delta_generator import DeltaGenerator

from services.analysis_pipeline import ProjectAnalysis
from services.project_state import ProjectState

Formatter = Union[str, Callable[[Any], str]]

CURRENCY_FORMAT = "${:,.0f}"
COST_FORMATTERS = {"Low": CURRENCY_FORMAT, "Medium": CURRENCY_FORMAT, "High": CURRENCY_FORMAT}


@dataclass(frozen=True)
class MetricSpec:
    """Specification for a Streamlit metric card."""

    label: str
    value: str
    help: Optional[str] = None
    caption: Optional[str] = None


def render_metrics(columns: Sequence[DeltaGenerator], specs: Sequence[MetricSpec]) -> None:
    for col, spec in zip(columns, specs):
        col.metric(spec.label, spec.value, help=spec.help)
        if spec.caption:
            col.caption(spec.caption)


def render_formatted_dataframe(
    df: pd.DataFrame,
    formatters: Mapping[str, Formatter],
    *,
    use_container_width: bool = True,
    **dataframe_kwargs: Any,
) -> None:
    st.dataframe(
        df.style.format(formatters, na_rep="N/A"),
        use_container_width=use_container_width,
        hide_index=True,
        **dataframe_kwargs,
    )


def appliance_label(state: ProjectState, appliance_id: str) -> str:
    for appliance in state.appliances:
        if appliance.id == appliance_id and appliance.definition is not None:
            return appliance.definition.name
    return appliance_id


def recommendations_frame(analysis: ProjectAnalysis) -> pd.DataFrame:
    """One row per electric replacement (including EV chargers)."""

    rows = [
        {
            "Existing": appliance_label(analysis.state, rec.id) if not rec.is_ev_charger else "New EV charging",
            "Recommendation": rec.text,
            "Peak kW": rec.kw,
            "Amps": rec.amps,
            "Breaker spaces": rec.breaker_spaces,
        }
        for rec in analysis.planning.recommendations
    ]
    return pd.DataFrame(rows, columns=["Existing", "Recommendation", "Peak kW", "Amps", "Breaker spaces"])


def cost_breakdown_frame(analysis: ProjectAnalysis) -> pd.DataFrame:
    """Flat line-item table grouped by appliance, then whole-project electrical work."""

    rows = []
    for appliance_id, items in analysis.cost.appliance_costs.items():
        group = appliance_label(analysis.state, appliance_id)
        rows.extend(
            {"Group": group, "Item": item.name, "Low": item.low, "Medium": item.medium, "High": item.high}
            for item in items
        )
    rows.extend(
        {"Group": "Electrical", "Item": item.name, "Low": item.low, "Medium": item.medium, "High": item.high}
        for item in analysis.cost.electrical_costs
    )
    return pd.DataFrame(rows, columns=["Group", "Item", "Low", "Medium", "High"])


def rebates_frame(analysis: ProjectAnalysis) -> pd.DataFrame:
    return pd.DataFrame(
        [{"Program": r.name, "Amount": r.amount} for r in analysis.cost.rebates],
        columns=["Program", "Amount"],
    )


def render_cost_tables(analysis: ProjectAnalysis) -> None:
    render_formatted_dataframe(cost_breakdown_frame(analysis), COST_FORMATTERS)
    rebates = rebates_frame(analysis)
    if not rebates.empty:
        st.markdown("**Rebates and tax credits**")
        render_formatted_dataframe(rebates, {"Amount": CURRENCY_FORMAT})
