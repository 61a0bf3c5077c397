from dataclasses import replace

import pytest

from frontend.ui.metrics import compute_kpis
from frontend.ui.rendering import cost_breakdown_frame, rebates_frame, recommendations_frame
from services.analysis_pipeline import run_analysis
from services.project_state import Appliance, ProjectState, default_project_state
from services.reference_data import ChargerClass


def _analysis(**overrides):
    state = replace(
        default_project_state(),
        appliances=[Appliance(id="boiler", key="res-boiler", btu=100_000.0, efficiency=80.0)],
    )
    return run_analysis(replace(state, **overrides))


def test_compute_kpis_mirrors_analysis() -> None:
    analysis = _analysis(gas_price_per_therm=3.0)
    kpis = compute_kpis(analysis)

    assert kpis.net_cost_low == pytest.approx(6_250.0)
    assert kpis.net_cost_high == pytest.approx(22_000.0)
    assert kpis.total_rebates == pytest.approx(12_000.0)
    assert kpis.simple_payback_years == pytest.approx(analysis.financial.simple_payback_years)
    assert kpis.panel_status == "Not Required"
    assert kpis.annual_reduction_co2e20_kg > kpis.annual_reduction_co2e100_kg


def test_compute_kpis_payback_none_without_savings() -> None:
    kpis = compute_kpis(_analysis())
    assert kpis.net_annual_savings < 0
    assert kpis.simple_payback_years is None


def test_recommendations_frame_labels_existing_appliances() -> None:
    frame = recommendations_frame(_analysis(ev_charger=ChargerClass.LEVEL2_RESIDENTIAL))

    assert list(frame.columns) == ["Existing", "Recommendation", "Peak kW", "Amps", "Breaker spaces"]
    assert frame["Existing"].tolist() == ["Boiler (Hydronic)", "New EV charging"]


def test_cost_breakdown_frame_totals_match() -> None:
    analysis = _analysis()
    frame = cost_breakdown_frame(analysis)

    assert frame["Low"].sum() == pytest.approx(analysis.cost.total_low)
    assert frame["High"].sum() == pytest.approx(analysis.cost.total_high)
    assert set(frame["Group"]) == {"Boiler (Hydronic)", "Electrical"}
    assert rebates_frame(analysis)["Amount"].sum() == pytest.approx(12_000.0)


def test_frames_are_empty_for_empty_project() -> None:
    analysis = run_analysis(ProjectState())

    assert recommendations_frame(analysis).empty
    assert cost_breakdown_frame(analysis).empty
    assert rebates_frame(analysis).empty
