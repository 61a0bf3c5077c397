from dataclasses import replace

from services.analysis_pipeline import run_analysis
from services.project_state import Appliance, PanelDescriptor, ProjectState
from utils.insights import EMPTY_REPORT_MESSAGE, NEXT_STEPS, build_report_insights


def _boiler_state(**overrides) -> ProjectState:
    state = ProjectState(appliances=[Appliance(id="boiler", key="res-boiler", btu=100_000.0, efficiency=80.0)])
    return replace(state, **overrides)


def test_empty_project_only_shows_placeholder() -> None:
    assert build_report_insights(run_analysis(ProjectState())) == [EMPTY_REPORT_MESSAGE]


def test_negative_savings_and_next_steps() -> None:
    insights = build_report_insights(run_analysis(_boiler_state()))

    assert any(line.startswith("Operating cost:") for line in insights)
    assert not any(line.startswith("Payback:") for line in insights)
    assert insights[-len(NEXT_STEPS):] == NEXT_STEPS


def test_payback_and_emission_lines_for_good_project() -> None:
    insights = build_report_insights(run_analysis(_boiler_state(gas_price_per_therm=3.0)))

    assert any(line.startswith("Payback:") for line in insights)
    assert any(line.startswith("Emissions:") and "cars" in line for line in insights)


def test_panel_upgrade_takes_precedence_over_sub_panel() -> None:
    full = _boiler_state(panel=PanelDescriptor(amps=100.0, breaker_spaces=0))
    insights = build_report_insights(run_analysis(full))

    assert any(line.startswith("Panel upgrade:") for line in insights)
    assert not any(line.startswith("Breaker space:") for line in insights)


def test_sub_panel_guidance() -> None:
    insights = build_report_insights(run_analysis(_boiler_state(panel=PanelDescriptor(breaker_spaces=1))))
    assert any(line.startswith("Breaker space:") for line in insights)
