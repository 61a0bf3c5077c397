from __future__ import annotations

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from api.server import (
    AnalysisConfigPayload,
    AnalysisRequest,
    BatchRequest,
    BatchRun,
    analyze,
    batch,
    catalog,
    health,
    validate_project,
)
from services.project_state import Appliance, ProjectState
from utils.io import project_state_to_dict


def _project(**overrides) -> dict:
    state = ProjectState(appliances=[Appliance(id="boiler", key="res-boiler", btu=100_000.0, efficiency=80.0)])
    payload = project_state_to_dict(state)
    payload.update(overrides)
    return payload


def test_health() -> None:
    assert health() == {"status": "ok"}


def test_analyze_returns_summary_and_details() -> None:
    response = analyze(AnalysisRequest(project=_project()))

    summary = response["summary"]
    assert summary["Net cost medium (USD)"] == pytest.approx(14_125.0)
    assert summary["Panel status"] == "Not Required"
    details = response["analysis"]
    assert details["is_empty"] is False
    assert len(details["lifetime"]["years"]) == 16
    assert details["insights"], "Expected guidance lines"


def test_analyze_summary_only() -> None:
    response = analyze(AnalysisRequest(project=_project(), include_details=False))
    assert set(response) == {"summary"}


def test_analyze_applies_cost_table_overrides() -> None:
    tables = {"federal_rebates": {"Heat Pump": 0.0}}
    response = analyze(AnalysisRequest(project=_project(), cost_tables=tables, include_details=False))
    assert response["summary"]["Total rebates (USD)"] == pytest.approx(10_000.0)


def test_analyze_rejects_invalid_project() -> None:
    with pytest.raises(HTTPException) as excinfo:
        analyze(AnalysisRequest(project=_project(facility_type="Castle")))
    assert excinfo.value.status_code == 400


def test_analyze_rejects_null_charger_count() -> None:
    with pytest.raises(HTTPException) as excinfo:
        analyze(AnalysisRequest(project=_project(ev_charger_count=None)))
    assert excinfo.value.status_code == 400


def test_analyze_rejects_invalid_config() -> None:
    config = AnalysisConfigPayload(residential_diversity_fraction=1.5)
    with pytest.raises(HTTPException) as excinfo:
        analyze(AnalysisRequest(project=_project(), config=config))
    assert excinfo.value.status_code == 400


def test_batch_requires_runs() -> None:
    with pytest.raises(ValidationError):
        BatchRequest(runs=[])


def test_batch_names_runs() -> None:
    request = BatchRequest(
        runs=[
            BatchRun(name="baseline", project=_project()),
            BatchRun(project=_project(gas_price_per_therm=3.0)),
        ]
    )
    response = batch(request)

    assert [run["name"] for run in response["runs"]] == ["baseline", "project-2"]
    assert response["runs"][1]["summary"]["Net annual savings (USD)"] > 0


def test_batch_rejects_any_invalid_run() -> None:
    request = BatchRequest(runs=[BatchRun(project=_project()), BatchRun(project={"appliances": []})])
    with pytest.raises(HTTPException):
        batch(request)


def test_catalog_lists_selectable_values() -> None:
    data = catalog()

    assert "res-boiler" in data["appliances"]
    assert data["facility_appliances"]["Restaurant"]
    assert "Mass Save (MA)" in data["rebate_regions"]
    assert data["ev_chargers"]["None"] is None
    assert set(data) >= {"climate_zones", "efficiency_tiers", "grid_regions"}


def test_validate_project() -> None:
    assert validate_project(_project()) == {"valid": True, "error": None, "appliance_count": 1}
    result = validate_project({"facility_type": "Residential", "appliances": "boiler"})
    assert result["valid"] is False
    assert "appliances" in result["error"]
