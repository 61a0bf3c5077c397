import logging
import unittest
from dataclasses import replace

import pytest

from services.analysis_pipeline import analysis_summary_frame, run_analysis
from services.load_planning import PANEL_NOT_REQUIRED, BreakerStatus
from services.project_state import Appliance, ProjectState, default_project_state


def _example_state() -> ProjectState:
    return replace(
        default_project_state(),
        appliances=[Appliance(id="boiler", key="res-boiler", btu=100_000.0, efficiency=80.0)],
    )


class RunAnalysisTests(unittest.TestCase):
    def test_example_boiler_end_to_end(self) -> None:
        analysis = run_analysis(_example_state())

        self.assertFalse(analysis.is_empty)
        self.assertEqual(analysis.planning.panel_status, PANEL_NOT_REQUIRED)
        self.assertIs(analysis.planning.breaker_status, BreakerStatus.SUFFICIENT)
        self.assertAlmostEqual(analysis.cost.net_medium, 14_125.0)
        self.assertAlmostEqual(analysis.energy.allocation.total_therms, 700.0)
        self.assertAlmostEqual(analysis.projected_annual_kwh, 56_000_000 * 0.000293071 / 3.0, places=6)
        self.assertAlmostEqual(analysis.financial.current_annual_cost, 1_300.0)
        self.assertIsNone(analysis.financial.simple_payback_years)
        self.assertAlmostEqual(analysis.environmental.current_annual_gas_co2e100_kg, 4_866.4)
        self.assertEqual(len(analysis.lifetime.years), 16)
        self.assertAlmostEqual(analysis.distribution.peak_demand_kw, analysis.planning.total_new_kw)

    def test_empty_project_yields_zeroed_records(self) -> None:
        analysis = run_analysis(default_project_state())

        self.assertTrue(analysis.is_empty)
        self.assertEqual(analysis.cost.total_medium, 0.0)
        self.assertEqual(analysis.projected_annual_kwh, 0.0)
        self.assertEqual(analysis.financial.net_annual_savings, 0.0)
        self.assertEqual(analysis.environmental.current_annual_gas_co2e20_kg, 0.0)
        self.assertIsNone(analysis.financial.simple_payback_years)

    def test_excluding_every_appliance_is_empty(self) -> None:
        state = _example_state()
        state.appliances[0].included = False
        self.assertTrue(run_analysis(state).is_empty)

    def test_analysis_is_isolated_from_later_edits(self) -> None:
        state = _example_state()
        analysis = run_analysis(state)
        state.appliances[0].btu = 1.0
        state.gas_price_per_therm = 99.0

        self.assertEqual(analysis.state.appliances[0].btu, 100_000.0)
        self.assertEqual(analysis.state.gas_price_per_therm, 1.50)

    def test_recomputing_is_deterministic(self) -> None:
        first = run_analysis(_example_state())
        second = run_analysis(_example_state())
        self.assertEqual(first.lifetime.cumulative_elec_costs, second.lifetime.cumulative_elec_costs)
        self.assertEqual(first.cost.total_high, second.cost.total_high)


def test_summary_frame_has_one_row_of_headline_figures() -> None:
    frame = analysis_summary_frame(run_analysis(_example_state()))

    assert len(frame) == 1
    row = frame.iloc[0]
    assert row["Address"] == "45 Main Street, Gardner"
    assert row["Facility"] == "Residential"
    assert row["Recommendations"] == 1
    assert row["Net cost medium (USD)"] == pytest.approx(14_125.0)
    assert row["Total rebates (USD)"] == pytest.approx(12_000.0)
    assert "Peak demand added (kW)" in frame.columns


def test_positive_savings_scenario_reports_payback() -> None:
    state = replace(_example_state(), gas_price_per_therm=3.0)
    analysis = run_analysis(state)

    assert analysis.financial.net_annual_savings > 0
    assert analysis.financial.simple_payback_years == pytest.approx(
        analysis.cost.net_medium / analysis.financial.net_annual_savings
    )
    assert analysis.lifetime.total_savings_15yr > 0


def test_unknown_catalog_key_is_logged_once_per_pass(caplog) -> None:
    state = _example_state()
    state.appliances.append(Appliance(id="ghost", key="not-in-catalog", btu=10_000.0))

    with caplog.at_level(logging.WARNING):
        analysis = run_analysis(state)

    messages = [record.getMessage() for record in caplog.records if "not-in-catalog" in record.getMessage()]
    assert len(messages) == 1
    assert len(analysis.planning.recommendations) == 1


def test_existing_electric_use_alone_reports_no_lifetime_savings() -> None:
    analysis = run_analysis(ProjectState(existing_annual_kwh=9_000.0))

    assert analysis.is_empty
    assert analysis.lifetime.total_savings_15yr == pytest.approx(0.0)
    assert analysis.lifetime.total_high_risk_savings_15yr == pytest.approx(0.0)


def test_existing_electric_use_does_not_change_lifetime_savings() -> None:
    base = run_analysis(_example_state())
    loaded = run_analysis(replace(_example_state(), existing_annual_kwh=9_000.0))

    assert loaded.lifetime.total_savings_15yr == pytest.approx(base.lifetime.total_savings_15yr)
    assert loaded.lifetime.total_high_risk_savings_15yr == pytest.approx(
        base.lifetime.total_high_risk_savings_15yr
    )
