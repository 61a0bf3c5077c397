import unittest
from dataclasses import replace

import pytest

from services.cost_estimator import CostAnalysis
from services.financial_projection import (
    annual_maintenance,
    calculate_financial_analysis,
    calculate_lifetime_analysis,
    effective_electric_rate,
    lifetime_frame,
)
from services.project_state import Appliance, ProjectState, TimeOfUseRates
from services.reference_data import AnalysisConfig


def _boiler_state(**overrides) -> ProjectState:
    state = ProjectState(
        appliances=[Appliance(id="boiler", key="res-boiler", btu=100_000.0, efficiency=80.0)],
    )
    return replace(state, **overrides)


def _cost(net_medium: float) -> CostAnalysis:
    return CostAnalysis(net_low=net_medium * 0.5, net_medium=net_medium, net_high=net_medium * 1.5)


EXAMPLE_KWH = 700 * 100_000 * 0.80 * 0.000293071 / 3.0


class FinancialAnalysisTests(unittest.TestCase):
    def test_example_boiler_has_no_payback(self) -> None:
        financial = calculate_financial_analysis(_boiler_state(), _cost(14_125.0), 700.0, EXAMPLE_KWH)

        self.assertAlmostEqual(financial.current_annual_gas_cost, 1_050.0)
        self.assertAlmostEqual(financial.current_annual_maintenance, 250.0)
        self.assertAlmostEqual(financial.current_annual_cost, 1_300.0)
        self.assertAlmostEqual(financial.projected_annual_elec_cost, EXAMPLE_KWH * 0.22)
        self.assertAlmostEqual(financial.projected_annual_cost, EXAMPLE_KWH * 0.22 + 150.0)
        self.assertLess(financial.net_annual_savings, 0.0)
        self.assertIsNone(financial.simple_payback_years)

    def test_positive_savings_give_payback(self) -> None:
        state = _boiler_state(gas_price_per_therm=3.0)
        financial = calculate_financial_analysis(state, _cost(14_125.0), 700.0, EXAMPLE_KWH)

        expected_savings = 2_100.0 + 250.0 - (EXAMPLE_KWH * 0.22 + 150.0)
        self.assertAlmostEqual(financial.net_annual_savings, expected_savings)
        self.assertAlmostEqual(financial.simple_payback_years, 14_125.0 / expected_savings)

    def test_zero_net_cost_has_no_payback(self) -> None:
        state = _boiler_state(gas_price_per_therm=3.0)
        financial = calculate_financial_analysis(state, _cost(0.0), 700.0, EXAMPLE_KWH)
        self.assertGreater(financial.net_annual_savings, 0.0)
        self.assertIsNone(financial.simple_payback_years)

    def test_existing_electric_use_cancels_out(self) -> None:
        base = calculate_financial_analysis(_boiler_state(), _cost(1.0), 700.0, EXAMPLE_KWH)
        loaded = calculate_financial_analysis(
            _boiler_state(existing_annual_kwh=9_000.0), _cost(1.0), 700.0, EXAMPLE_KWH
        )

        self.assertAlmostEqual(loaded.current_annual_elec_cost, 9_000.0 * 0.22)
        self.assertAlmostEqual(loaded.net_annual_savings, base.net_annual_savings)

    def test_maintenance_counts_included_appliances_only(self) -> None:
        state = ProjectState(
            appliances=[
                Appliance(id="f", key="res-furnace", btu=80_000.0),
                Appliance(id="r", key="res-range", btu=60_000.0),
                Appliance(id="off", key="res-boiler", btu=100_000.0, included=False),
            ]
        )
        self.assertEqual(annual_maintenance(state), (250.0, 150.0))


def test_time_of_use_blend() -> None:
    flat = ProjectState(electricity_price_per_kwh=0.2)
    assert effective_electric_rate(flat) == pytest.approx(0.2)

    tou = replace(
        flat,
        time_of_use=TimeOfUseRates(
            enabled=True, peak_price_per_kwh=0.40, off_peak_price_per_kwh=0.10, peak_share_pct=25.0
        ),
    )
    assert effective_electric_rate(tou) == pytest.approx(0.25 * 0.40 + 0.75 * 0.10)


def test_time_of_use_share_is_clamped() -> None:
    tou = ProjectState(
        time_of_use=TimeOfUseRates(enabled=True, peak_price_per_kwh=0.4, off_peak_price_per_kwh=0.1, peak_share_pct=150.0)
    )
    assert effective_electric_rate(tou) == pytest.approx(0.4)


def _lifetime(state: ProjectState, net_medium: float = 14_125.0, years: int = 15):
    financial = calculate_financial_analysis(state, _cost(net_medium), 700.0, EXAMPLE_KWH)
    return financial, calculate_lifetime_analysis(
        financial, _cost(net_medium), state, AnalysisConfig(lifetime_years=years)
    )


def test_lifetime_series_shape_and_seeds() -> None:
    financial, lifetime = _lifetime(_boiler_state())

    assert lifetime.years == list(range(16))
    assert len(lifetime.cumulative_gas_costs) == 16
    assert lifetime.cumulative_gas_costs[0] == 0.0
    assert lifetime.cumulative_high_risk_gas_costs[0] == 0.0
    assert lifetime.cumulative_elec_costs[0] == pytest.approx(14_125.0)
    assert lifetime.cumulative_gas_costs[1] == pytest.approx(financial.current_annual_cost)
    assert lifetime.cumulative_gas_costs[2] == pytest.approx(1_050.0 * (1 + 1.03) + 250.0 * 2)


def test_lifetime_totals_follow_compounding() -> None:
    financial, lifetime = _lifetime(_boiler_state())

    gas_total = sum(1_050.0 * 1.03**k for k in range(15)) + 250.0 * 15
    high_risk_total = sum(1_050.0 * 1.07**k for k in range(15)) + 250.0 * 15
    elec_total = sum(financial.projected_annual_elec_cost * 1.02**k for k in range(15)) + 150.0 * 15
    assert lifetime.total_gas_cost_15yr == pytest.approx(gas_total)
    assert lifetime.total_high_risk_gas_cost_15yr == pytest.approx(high_risk_total)
    assert lifetime.total_elec_cost_15yr == pytest.approx(elec_total)
    assert lifetime.total_savings_15yr == pytest.approx(gas_total - elec_total)
    assert lifetime.total_high_risk_savings_15yr > lifetime.total_savings_15yr


def test_existing_electric_use_leaves_lifetime_savings_unchanged() -> None:
    _, base = _lifetime(_boiler_state())
    _, loaded = _lifetime(_boiler_state(existing_annual_kwh=9_000.0))

    assert loaded.total_gas_cost_15yr > base.total_gas_cost_15yr
    assert loaded.total_savings_15yr == pytest.approx(base.total_savings_15yr)
    assert loaded.total_high_risk_savings_15yr == pytest.approx(base.total_high_risk_savings_15yr)


def test_empty_project_has_no_lifetime_savings() -> None:
    state = ProjectState(existing_annual_kwh=9_000.0)
    financial = calculate_financial_analysis(state, _cost(0.0), 0.0, 0.0)
    lifetime = calculate_lifetime_analysis(financial, _cost(0.0), state)

    assert financial.net_annual_savings == pytest.approx(0.0)
    assert lifetime.total_savings_15yr == pytest.approx(0.0)
    assert lifetime.total_high_risk_savings_15yr == pytest.approx(0.0)


def test_maintenance_is_not_escalated() -> None:
    state = _boiler_state(gas_price_per_therm=0.0)
    _, lifetime = _lifetime(state)

    assert lifetime.total_gas_cost_15yr == pytest.approx(250.0 * 15)
    assert lifetime.total_high_risk_gas_cost_15yr == pytest.approx(250.0 * 15)


def test_series_are_non_decreasing() -> None:
    _, lifetime = _lifetime(_boiler_state(gas_price_per_therm=3.0))
    for series in (
        lifetime.cumulative_gas_costs,
        lifetime.cumulative_high_risk_gas_costs,
        lifetime.cumulative_elec_costs,
    ):
        assert all(b >= a for a, b in zip(series, series[1:]))


def test_configured_lifetime_length() -> None:
    _, lifetime = _lifetime(_boiler_state(), years=5)
    assert lifetime.years == [0, 1, 2, 3, 4, 5]


def test_lifetime_frame_is_long_format() -> None:
    _, lifetime = _lifetime(_boiler_state())
    frame = lifetime_frame(lifetime)

    assert list(frame.columns) == ["Year", "Scenario", "Cumulative cost (USD)"]
    assert len(frame) == 16 * 3
    assert set(frame["Scenario"]) == {
        "Gas (baseline escalation)",
        "Gas (high-risk escalation)",
        "Electric (incl. upfront)",
    }
