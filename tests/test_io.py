import json
import logging
import unittest

import pytest

from services.project_state import Appliance, PanelDescriptor, ProjectState, TimeOfUseRates
from services.reference_data import (
    ApplianceCategory,
    ChargerClass,
    CostRange,
    EfficiencyTier,
    FacilityType,
    default_cost_tables,
)
from utils.io import (
    ProjectFileError,
    apply_cost_table_defaults,
    dump_cost_tables_json,
    dump_project_json,
    load_cost_tables_json,
    load_project_json,
    merge_cost_tables,
    project_state_to_dict,
    read_cost_tables,
)


def _project() -> ProjectState:
    return ProjectState(
        facility_type=FacilityType.RESTAURANT,
        town="Worcester",
        panel=PanelDescriptor(amps=400.0, breaker_spaces=12, existing_peak_load_amps=150.0),
        time_of_use=TimeOfUseRates(enabled=True, peak_share_pct=30.0),
        ev_charger=ChargerClass.LEVEL2_COMMERCIAL,
        ev_charger_count=2,
        appliances=[
            Appliance(id="a1", key="rest-fryer", btu=90_000.0, efficiency=40.0),
            Appliance(id="a2", key="comm-rtu", btu=240_000.0, included=False, zones=3, supplemental_heaters=1),
        ],
    )


class ProjectFileTests(unittest.TestCase):
    def test_round_trip_preserves_state(self) -> None:
        state = _project()
        self.assertEqual(load_project_json(dump_project_json(state)), state)

    def test_minimal_file_uses_defaults(self) -> None:
        loaded = load_project_json(json.dumps({"facility_type": "Residential", "appliances": []}))
        self.assertEqual(loaded, ProjectState())

    def test_invalid_facility_type_is_rejected(self) -> None:
        payload = project_state_to_dict(_project())
        payload["facility_type"] = "Castle"
        with self.assertRaises(ProjectFileError):
            load_project_json(json.dumps(payload))

    def test_missing_facility_type_is_rejected(self) -> None:
        with self.assertRaises(ProjectFileError):
            load_project_json(json.dumps({"appliances": []}))

    def test_appliances_must_be_a_list(self) -> None:
        with self.assertRaises(ProjectFileError):
            load_project_json(json.dumps({"facility_type": "Residential", "appliances": {"a": 1}}))

    def test_unknown_appliance_key_is_rejected(self) -> None:
        payload = project_state_to_dict(_project())
        payload["appliances"][0]["key"] = "res-jacuzzi"
        with self.assertRaises(ProjectFileError):
            load_project_json(json.dumps(payload))

    def test_appliance_needs_btu_and_efficiency(self) -> None:
        payload = project_state_to_dict(_project())
        del payload["appliances"][0]["efficiency"]
        with self.assertRaises(ProjectFileError):
            load_project_json(json.dumps(payload))

    def test_non_numeric_btu_is_rejected(self) -> None:
        payload = project_state_to_dict(_project())
        payload["appliances"][0]["btu"] = "lots"
        with self.assertRaisesRegex(ProjectFileError, "appliances\\[0\\]"):
            load_project_json(json.dumps(payload))

    def test_null_breaker_spaces_is_rejected(self) -> None:
        payload = project_state_to_dict(_project())
        payload["panel"]["breaker_spaces"] = None
        with self.assertRaisesRegex(ProjectFileError, "breaker_spaces"):
            load_project_json(json.dumps(payload))

    def test_null_charger_count_is_rejected(self) -> None:
        payload = project_state_to_dict(_project())
        payload["ev_charger_count"] = None
        with self.assertRaisesRegex(ProjectFileError, "ev_charger_count"):
            load_project_json(json.dumps(payload))

    def test_null_zones_and_heaters_mean_auto(self) -> None:
        payload = project_state_to_dict(_project())
        payload["appliances"][1]["zones"] = None
        payload["appliances"][1]["supplemental_heaters"] = None
        loaded = load_project_json(json.dumps(payload))
        self.assertIsNone(loaded.appliances[1].zones)
        self.assertIsNone(loaded.appliances[1].supplemental_heaters)

    def test_bad_json_is_a_project_file_error(self) -> None:
        with self.assertRaises(ProjectFileError):
            load_project_json("{not json")


class CostTableFileTests(unittest.TestCase):
    def test_round_trip_preserves_tables(self) -> None:
        tables = default_cost_tables()
        self.assertEqual(load_cost_tables_json(dump_cost_tables_json(tables)), tables)

    def test_partial_file_overlays_and_leaves_base_untouched(self) -> None:
        base = default_cost_tables()
        payload = {
            "electrical": {"New Circuit": {"low": 1.0, "medium": 2.0, "high": 3.0}},
            "federal_rebates": {"Heat Pump": 0.0},
        }
        merged = merge_cost_tables(base, payload)

        self.assertEqual(merged.electrical["New Circuit"], CostRange(1.0, 2.0, 3.0))
        self.assertEqual(merged.federal_rebates["Heat Pump"], 0.0)
        self.assertEqual(merged.installation, base.installation)
        self.assertEqual(base.electrical["New Circuit"], CostRange(1_000.0, 1_250.0, 1_500.0))
        self.assertEqual(base.federal_rebates["Heat Pump"], 2_000.0)

    def test_two_column_ranges_get_midpoint(self) -> None:
        merged = load_cost_tables_json(json.dumps({"installation": {"Dryer": [100, 300]}}))
        self.assertEqual(merged.installation[ApplianceCategory.DRYER], CostRange(100.0, 200.0, 300.0))

    def test_three_column_list_and_equipment_tier(self) -> None:
        merged = load_cost_tables_json(json.dumps({"equipment": {"Range": {"Premium": [1, 2, 3]}}}))
        self.assertEqual(merged.equipment[ApplianceCategory.RANGE][EfficiencyTier.PREMIUM], CostRange(1.0, 2.0, 3.0))

    def test_malformed_ranges_are_rejected(self) -> None:
        for bad in ([5], [300, 100], {"low": -1, "high": 5}, "cheap"):
            with self.assertRaises(ProjectFileError):
                load_cost_tables_json(json.dumps({"electrical": {"New Circuit": bad}}))

    def test_negative_rebate_is_rejected(self) -> None:
        with self.assertRaises(ProjectFileError):
            load_cost_tables_json(json.dumps({"regional_rebates": {"Mass Save (MA)": {"HPWH": -5}}}))

    def test_new_rebate_region_is_added(self) -> None:
        merged = load_cost_tables_json(json.dumps({"regional_rebates": {"Efficiency Maine": {"Heat Pump": 8000}}}))
        self.assertEqual(merged.regional_rebates["Efficiency Maine"], {"Heat Pump": 8_000.0})
        self.assertIn("Mass Save (MA)", merged.regional_rebates)


def test_unknown_category_is_skipped_with_warning(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="utils.io"):
        merged = load_cost_tables_json(json.dumps({"installation": {"Sauna": [1, 2]}}))

    assert "Sauna" in caplog.text
    assert merged.installation == default_cost_tables().installation


def test_read_cost_tables_uses_first_readable_candidate(tmp_path) -> None:
    good = tmp_path / "tables.json"
    good.write_text(json.dumps({"default_gas_price_per_therm": 2.25}), encoding="utf-8")

    tables = read_cost_tables([tmp_path / "missing.json", good])
    assert tables.default_gas_price_per_therm == pytest.approx(2.25)


def test_read_cost_tables_reports_every_candidate(tmp_path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("[1, 2", encoding="utf-8")

    with pytest.raises(ProjectFileError) as excinfo:
        read_cost_tables([tmp_path / "missing.json", broken])
    assert "missing.json" in str(excinfo.value)
    assert "broken.json" in str(excinfo.value)


def test_apply_cost_table_defaults_rederives_prices() -> None:
    tables = default_cost_tables()
    tables.default_gas_price_per_therm = 2.0
    tables.default_electricity_price_per_kwh = 0.3
    state = apply_cost_table_defaults(_project(), tables)

    assert state.gas_price_per_therm == 2.0
    assert state.electricity_price_per_kwh == 0.3
    assert state.appliances == _project().appliances
