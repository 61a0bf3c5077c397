# app.py — ElectrifyLab planner
# Building inventory on the left, live recommendations / costs / savings on the right.
# Full printable report and PDF export live on pages/01_Report.py.

import streamlit as st

from frontend.ui.charts import build_lifetime_chart
from frontend.ui.forms import (
    render_appliance_editor,
    render_economics_section,
    render_site_section,
    render_usage_section,
)
from frontend.ui.metrics import compute_kpis, render_primary_metrics
from frontend.ui.rendering import CURRENCY_FORMAT, recommendations_frame, render_cost_tables, render_formatted_dataframe
from services.analysis_pipeline import run_analysis
from utils.insights import EMPTY_REPORT_MESSAGE, build_report_insights
from utils.ui_layout import init_page_layout
from utils.ui_state import get_cost_tables, get_project_state, set_project_state


def run_app():
    render_layout = init_page_layout(
        page_title="ElectrifyLab",
        main_title="ElectrifyLab planner",
        description="Plan the switch from gas appliances to heat pumps and other electric equipment.",
    )
    tables = get_cost_tables()
    state = get_project_state()

    inputs_col, results_col = st.columns([5, 6], gap="large")
    with inputs_col:
        state = render_site_section(state, tables)
        state = render_usage_section(state)
        state = render_appliance_editor(state)
        state = render_economics_section(state)
    set_project_state(state)
    render_layout(state)

    analysis = run_analysis(state, tables)
    with results_col:
        st.subheader("Results")
        if analysis.is_empty:
            st.info(EMPTY_REPORT_MESSAGE)
            return

        render_primary_metrics(compute_kpis(analysis))

        st.markdown("**Recommended electric equipment**")
        render_formatted_dataframe(
            recommendations_frame(analysis),
            {"Peak kW": "{:,.1f}", "Amps": "{:,.1f}"},
        )
        planning = analysis.planning
        st.caption(
            f"Calculated load {planning.total_calculated_load_amps:,.0f} A vs "
            f"{planning.panel_capacity_amps:,.0f} A usable panel capacity. "
            f"Main panel: {planning.panel_status}. Breaker spaces: {planning.breaker_status.value}."
        )

        st.markdown("**Cost estimate**")
        render_cost_tables(analysis)
        st.caption(
            "Net cost: "
            + " / ".join(
                CURRENCY_FORMAT.format(v)
                for v in (analysis.cost.net_low, analysis.cost.net_medium, analysis.cost.net_high)
            )
            + " (low / medium / high)"
        )

        st.markdown("**15-year cumulative cost**")
        st.altair_chart(build_lifetime_chart(analysis.lifetime), use_container_width=True)

        with st.expander("Guidance", expanded=False):
            for line in build_report_insights(analysis):
                st.markdown(f"- {line}")


if __name__ == "__main__":
    run_app()
