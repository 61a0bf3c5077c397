from datetime import datetime

import streamlit as st

from frontend.ui.charts import build_emissions_chart, build_lifetime_chart
from frontend.ui.metrics import compute_kpis, render_environment_metrics, render_primary_metrics
from frontend.ui.pdf import build_pdf_summary
from frontend.ui.rendering import recommendations_frame, render_cost_tables, render_formatted_dataframe
from services.analysis_pipeline import analysis_summary_frame
from services.financial_projection import lifetime_frame
from utils.insights import build_report_insights
from utils.ui_layout import init_page_layout
from utils.ui_state import get_current_analysis

render_layout = init_page_layout(
    page_title="Full report",
    main_title="Electrification report",
    description="Recommendations, cost estimate, lifetime savings and emissions for the current project.",
)
render_layout()

analysis = get_current_analysis()
if analysis.is_empty:
    for line in build_report_insights(analysis):
        st.info(line)
    st.stop()

kpis = compute_kpis(analysis)
render_primary_metrics(kpis)
render_environment_metrics(kpis)

st.subheader("Recommended equipment")
render_formatted_dataframe(recommendations_frame(analysis), {"Peak kW": "{:,.1f}", "Amps": "{:,.1f}"})
planning = analysis.planning
c1, c2, c3 = st.columns(3)
c1.metric("Diversified new load", f"{planning.diversified_new_amps:,.0f} A",
          help=f"Sum of peaks: {planning.total_new_amps:,.0f} A")
c2.metric("Existing load", f"{planning.existing_load_amps:,.0f} A")
c3.metric("Breaker spaces needed", f"{planning.required_breaker_spaces}", help=planning.breaker_status.value)

st.subheader("Cost estimate")
render_cost_tables(analysis)

st.subheader("Operating costs")
fin = analysis.financial
render_formatted_dataframe(
    analysis_summary_frame(analysis)[
        ["Annual therms displaced", "Projected annual kWh", "Net annual savings (USD)", "Simple payback (years)"]
    ],
    {
        "Annual therms displaced": "{:,.0f}",
        "Projected annual kWh": "{:,.0f}",
        "Net annual savings (USD)": "${:,.0f}",
        "Simple payback (years)": "{:,.1f}",
    },
)
st.caption(
    f"Today: ${fin.current_annual_gas_cost:,.0f} gas + ${fin.current_annual_maintenance:,.0f} maintenance. "
    f"Electric: ${fin.projected_annual_elec_cost:,.0f} at ${fin.effective_electric_rate:.3f}/kWh "
    f"+ ${fin.projected_annual_maintenance:,.0f} maintenance."
)
st.altair_chart(build_lifetime_chart(analysis.lifetime), use_container_width=True)

st.subheader("Emissions")
st.altair_chart(build_emissions_chart(analysis.environmental), use_container_width=True)
env = analysis.environmental
if analysis.state.grid_decarbonization_rate > 0:
    st.caption(
        f"With the grid getting {analysis.state.grid_decarbonization_rate:.1f}% cleaner each year, the final-year "
        f"factor is {env.future_grid_factor_kg_per_kwh:.3f} kg/kWh and the 100-yr reduction grows to "
        f"{env.future_annual_ghg_reduction_co2e100_kg:,.0f} kg CO2e/yr."
    )
st.caption(
    f"Grid peak added: {analysis.distribution.peak_demand_kw:,.1f} kW, of which "
    f"{analysis.distribution.non_heating_demand_kw:,.1f} kW is year-round (non-heating)."
)

st.subheader("Guidance and next steps")
for line in build_report_insights(analysis):
    st.markdown(f"- {line}")

st.divider()
stamp = datetime.now().strftime("%Y%m%d")
c1, c2, c3 = st.columns(3)
c1.download_button(
    "Download PDF summary",
    build_pdf_summary(analysis),
    file_name=f"electrification_plan_{stamp}.pdf",
    mime="application/pdf",
)
c2.download_button(
    "Download summary (CSV)",
    analysis_summary_frame(analysis).to_csv(index=False).encode("utf-8"),
    file_name=f"electrification_summary_{stamp}.csv",
    mime="text/csv",
)
c3.download_button(
    "Download lifetime series (CSV)",
    lifetime_frame(analysis.lifetime).to_csv(index=False).encode("utf-8"),
    file_name=f"electrification_lifetime_{stamp}.csv",
    mime="text/csv",
)
