import math
import unittest
from dataclasses import replace

import pytest

from services.energy_emissions import (
    allocate_therms,
    calculate_distribution_impact,
    calculate_energy_projection,
    calculate_environmental_impact,
    future_grid_factor,
    gas_co2e_kg,
    grid_factor_for,
)
from services.load_planning import calculate_planning_analysis
from services.project_state import Appliance, PanelDescriptor, ProjectState
from services.reference_data import (
    DEFAULT_GRID_REGION,
    GRID_EMISSION_FACTORS,
    ClimateZone,
)


def _mixed_state() -> ProjectState:
    return ProjectState(
        appliances=[
            Appliance(id="furnace", key="res-furnace", btu=60_000.0, efficiency=95.0),
            Appliance(id="fireplace", key="res-fireplace", btu=30_000.0, efficiency=75.0),
            Appliance(id="spare", key="res-boiler", btu=30_000.0, included=False),
            Appliance(id="wh", key="res-tank-wh", btu=40_000.0, efficiency=62.0),
            Appliance(id="range", key="res-range", btu=60_000.0, efficiency=40.0),
        ],
        annual_heating_therms=800.0,
        annual_non_heating_therms=300.0,
    )


def _boiler_state() -> ProjectState:
    return ProjectState(
        appliances=[Appliance(id="boiler", key="res-boiler", btu=100_000.0, efficiency=80.0)],
    )


class ThermAllocationTests(unittest.TestCase):
    def test_excluded_capacity_keeps_its_share(self) -> None:
        allocation = allocate_therms(_mixed_state())

        # 90k of 120k listed heating BTU is in scope
        self.assertAlmostEqual(allocation.heating_therms, 800.0 * 90 / 120)
        self.assertAlmostEqual(allocation.per_appliance["furnace"], 600.0 * 60 / 90)
        self.assertAlmostEqual(allocation.per_appliance["fireplace"], 600.0 * 30 / 90)
        self.assertNotIn("spare", allocation.per_appliance)
        self.assertAlmostEqual(allocation.non_heating_therms, 300.0)

    def test_per_appliance_shares_sum_to_group_totals(self) -> None:
        allocation = allocate_therms(_mixed_state())
        self.assertAlmostEqual(sum(allocation.per_appliance.values()), allocation.total_therms)

    def test_empty_group_gets_zero_without_dividing_by_zero(self) -> None:
        allocation = allocate_therms(_boiler_state())
        self.assertAlmostEqual(allocation.heating_therms, 700.0)
        self.assertEqual(allocation.non_heating_therms, 0.0)

        nothing = allocate_therms(ProjectState())
        self.assertEqual(nothing.total_therms, 0.0)
        self.assertEqual(nothing.per_appliance, {})

    def test_zero_btu_group_receives_nothing(self) -> None:
        state = ProjectState(appliances=[Appliance(id="f", key="res-furnace", btu=0.0)])
        allocation = allocate_therms(state)
        self.assertEqual(allocation.heating_therms, 0.0)
        self.assertEqual(allocation.per_appliance.get("f", 0.0), 0.0)


class EnergyProjectionTests(unittest.TestCase):
    def test_example_boiler_kwh(self) -> None:
        projection = calculate_energy_projection(_boiler_state())

        useful_btu = 700 * 100_000 * 0.80
        self.assertAlmostEqual(projection.useful_heat_btu["boiler"], useful_btu)
        self.assertAlmostEqual(projection.total_kwh, useful_btu * 0.000293071 / 3.0, places=6)
        self.assertAlmostEqual(projection.useful_heat_kwh, useful_btu * 0.000293071, places=6)

    def test_colder_zone_needs_more_kwh(self) -> None:
        mild = calculate_energy_projection(_boiler_state()).total_kwh
        cold = calculate_energy_projection(replace(_boiler_state(), climate_zone=ClimateZone.ZONE7)).total_kwh
        self.assertAlmostEqual(cold, mild / 0.85)

    def test_range_runs_at_unity_cop(self) -> None:
        state = ProjectState(
            appliances=[Appliance(id="range", key="res-range", btu=60_000.0, efficiency=40.0)],
            annual_non_heating_therms=100.0,
        )
        projection = calculate_energy_projection(state)
        self.assertAlmostEqual(projection.total_kwh, 100 * 100_000 * 0.40 * 0.000293071)


class EmissionsTests(unittest.TestCase):
    def test_example_boiler_emissions(self) -> None:
        state = _boiler_state()
        kwh = calculate_energy_projection(state).total_kwh
        impact = calculate_environmental_impact(state, 700.0, kwh)

        self.assertAlmostEqual(impact.current_annual_gas_co2_kg, 3_710.0)
        self.assertAlmostEqual(impact.current_annual_ch4_kg, 41.3)
        self.assertAlmostEqual(impact.current_annual_gas_co2e20_kg, 7_179.2)
        self.assertAlmostEqual(impact.current_annual_gas_co2e100_kg, 4_866.4)
        self.assertAlmostEqual(impact.projected_annual_elec_co2_kg, kwh * 0.26)
        self.assertAlmostEqual(
            impact.annual_ghg_reduction_co2e100_kg, impact.current_annual_gas_co2e100_kg - kwh * 0.26
        )
        self.assertAlmostEqual(
            impact.ghg_reduction_cars_off_road_100yr, impact.annual_ghg_reduction_co2e100_kg / 4_600.0
        )

    def test_twenty_year_reduction_exceeds_hundred_year(self) -> None:
        impact = calculate_environmental_impact(_boiler_state(), 500.0, 2_000.0)
        self.assertGreater(impact.annual_ghg_reduction_co2e20_kg, impact.annual_ghg_reduction_co2e100_kg)

    def test_no_gas_means_no_gas_emissions(self) -> None:
        impact = calculate_environmental_impact(ProjectState(), 0.0, 0.0)
        self.assertEqual(impact.current_annual_gas_co2e20_kg, 0.0)
        self.assertEqual(impact.annual_ghg_reduction_co2e100_kg, 0.0)

    def test_flat_grid_keeps_future_factor(self) -> None:
        impact = calculate_environmental_impact(_boiler_state(), 700.0, 1_000.0)
        self.assertAlmostEqual(impact.future_grid_factor_kg_per_kwh, impact.grid_factor_kg_per_kwh)
        self.assertAlmostEqual(impact.future_projected_elec_co2_kg, impact.projected_annual_elec_co2_kg)


def test_gas_co2e_scales_with_gwp() -> None:
    assert gas_co2e_kg(100.0, 0.0) == pytest.approx(530.0)
    assert gas_co2e_kg(100.0, 84.0) > gas_co2e_kg(100.0, 28.0)


def test_unknown_grid_region_falls_back_to_default() -> None:
    assert grid_factor_for("Atlantis") == GRID_EMISSION_FACTORS[DEFAULT_GRID_REGION]
    assert grid_factor_for("PJM Interconnection") == pytest.approx(0.38)


def test_future_grid_factor_declines_geometrically() -> None:
    assert future_grid_factor(0.26, 0.0, 15) == pytest.approx(0.26)
    assert future_grid_factor(0.26, 5.0, 15) == pytest.approx(0.26 * math.pow(0.95, 14))
    assert future_grid_factor(0.26, 100.0, 15) == pytest.approx(0.0)
    assert future_grid_factor(0.26, 5.0, 1) == pytest.approx(0.26)


def test_decarbonizing_grid_raises_future_reduction() -> None:
    state = replace(_boiler_state(), grid_decarbonization_rate=3.0)
    impact = calculate_environmental_impact(state, 700.0, 5_000.0)
    assert impact.future_annual_ghg_reduction_co2e100_kg > impact.annual_ghg_reduction_co2e100_kg


def test_distribution_impact_splits_year_round_load() -> None:
    state = ProjectState(
        panel=PanelDescriptor(amps=400.0),
        appliances=[
            Appliance(id="boiler", key="res-boiler", btu=100_000.0),
            Appliance(id="dryer", key="res-dryer", btu=22_000.0),
            Appliance(id="wh", key="res-tank-wh", btu=40_000.0),
        ],
    )
    planning = calculate_planning_analysis(state)
    impact = calculate_distribution_impact(planning)

    assert impact.peak_demand_kw == pytest.approx(planning.total_new_kw)
    assert impact.non_heating_demand_kw == pytest.approx(1.8 + 40_000 * 0.000293071 / 3.5)
