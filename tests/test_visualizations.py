import altair as alt
import pytest

from frontend.ui.charts import build_emissions_chart, build_lifetime_chart, emissions_frame
from services.analysis_pipeline import run_analysis
from services.project_state import Appliance, ProjectState


def _analysis():
    state = ProjectState(
        appliances=[Appliance(id="boiler", key="res-boiler", btu=100_000.0, efficiency=80.0)],
        grid_decarbonization_rate=4.0,
    )
    return run_analysis(state)


def test_lifetime_chart_encodes_three_scenarios():
    chart = build_lifetime_chart(_analysis().lifetime)

    assert isinstance(chart, alt.Chart)
    assert chart.data["Scenario"].nunique() == 3
    assert chart.data["Year"].max() == 15


def test_emissions_frame_rows():
    impact = _analysis().environmental
    frame = emissions_frame(impact)

    assert len(frame) == 5
    gas = frame[frame["Source"] == "Gas today"].set_index("Horizon")["kg CO2e / yr"]
    assert gas["20-yr GWP"] == pytest.approx(impact.current_annual_gas_co2e20_kg)
    assert gas["100-yr GWP"] == pytest.approx(impact.current_annual_gas_co2e100_kg)
    future = frame[frame["Source"] == "Electric (final-year grid)"]["kg CO2e / yr"].iloc[0]
    assert future < impact.projected_annual_elec_co2_kg


def test_emissions_chart_serializes():
    spec = build_emissions_chart(_analysis().environmental).to_dict()
    assert spec["mark"]["type"] == "bar"
