from __future__ import annotations

import logging
import os
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, field_validator, model_validator

from services.analysis_pipeline import ProjectAnalysis, analysis_summary_frame, run_analysis
from services.project_state import ProjectState
from services.reference_data import (
    APPLIANCE_DEFINITIONS,
    CHARGER_SPECS,
    FACILITY_APPLIANCE_MAP,
    GRID_EMISSION_FACTORS,
    AnalysisConfig,
    ChargerClass,
    ClimateZone,
    CostTables,
    EfficiencyTier,
    default_cost_tables,
)
from utils.insights import build_report_insights
from utils.io import ProjectFileError, merge_cost_tables, project_state_from_dict

_DEFAULT_CFG = AnalysisConfig()
MAX_BATCH_RUNS = 200


class AnalysisConfigPayload(BaseModel):
    """Pydantic mirror of :class:`AnalysisConfig` for FastAPI requests."""

    residential_diversity_fraction: float = _DEFAULT_CFG.residential_diversity_fraction
    commercial_diversity_threshold_amps: float = _DEFAULT_CFG.commercial_diversity_threshold_amps
    commercial_diversity_fraction: float = _DEFAULT_CFG.commercial_diversity_fraction
    panel_continuous_load_fraction: float = _DEFAULT_CFG.panel_continuous_load_fraction
    assumed_existing_load_fraction: float = _DEFAULT_CFG.assumed_existing_load_fraction
    cold_climate_derating: float = _DEFAULT_CFG.cold_climate_derating
    lifetime_years: int = _DEFAULT_CFG.lifetime_years

    def build(self) -> AnalysisConfig:
        try:
            return AnalysisConfig(**self.model_dump())
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid config: {exc}") from exc


class AnalysisRequest(BaseModel):
    project: Dict[str, Any]
    cost_tables: Optional[Dict[str, Any]] = None
    config: AnalysisConfigPayload = Field(default_factory=AnalysisConfigPayload)
    include_details: bool = True


class BatchRun(BaseModel):
    name: Optional[str] = None
    project: Dict[str, Any]


class BatchRequest(BaseModel):
    runs: List[BatchRun]
    cost_tables: Optional[Dict[str, Any]] = None
    config: AnalysisConfigPayload = Field(default_factory=AnalysisConfigPayload)

    @field_validator("runs")
    @classmethod
    def _limit_runs(cls, runs: List[BatchRun]) -> List[BatchRun]:
        if len(runs) > MAX_BATCH_RUNS:
            raise ValueError(f"At most {MAX_BATCH_RUNS} runs per batch.")
        return runs

    @model_validator(mode="after")
    def _require_runs(self) -> "BatchRequest":
        if not self.runs:
            raise ValueError("Provide at least one run in 'runs'.")
        return self


def _parse_project(payload: Dict[str, Any], label: str = "project") -> ProjectState:
    try:
        return project_state_from_dict(payload)
    except ProjectFileError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid {label}: {exc}") from exc


def _resolve_tables(payload: Optional[Dict[str, Any]]) -> CostTables:
    if payload is None:
        return default_cost_tables()
    try:
        return merge_cost_tables(default_cost_tables(), payload)
    except ProjectFileError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid cost_tables: {exc}") from exc


def _serialize_summary(analysis: ProjectAnalysis) -> Dict[str, Any]:
    return analysis_summary_frame(analysis).to_dict(orient="records")[0]


def _serialize_analysis(analysis: ProjectAnalysis) -> Dict[str, Any]:
    return {
        "is_empty": analysis.is_empty,
        "planning": asdict(analysis.planning),
        "cost": asdict(analysis.cost),
        "energy": {
            "therms_by_appliance": analysis.energy.allocation.per_appliance,
            "heating_therms": analysis.energy.allocation.heating_therms,
            "non_heating_therms": analysis.energy.allocation.non_heating_therms,
            "kwh_by_appliance": analysis.energy.kwh_by_appliance,
            "projected_annual_kwh": analysis.energy.total_kwh,
        },
        "financial": {
            **asdict(analysis.financial),
            "current_annual_cost": analysis.financial.current_annual_cost,
            "projected_annual_cost": analysis.financial.projected_annual_cost,
        },
        "environmental": asdict(analysis.environmental),
        "lifetime": asdict(analysis.lifetime),
        "distribution": asdict(analysis.distribution),
        "insights": build_report_insights(analysis),
    }


app = FastAPI(
    title="ElectrifyLab API",
    description="REST API for running gas-to-electric planning analyses outside Streamlit.",
    version="0.1.0",
)


_default_cors_origins = [
    # Vite dev/preview servers
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:4173",
    "http://127.0.0.1:4173",
]
_allowed_origins_env = os.getenv("ELECTRIFYLAB_CORS_ORIGINS", "")
_allowed_origins = [
    origin.strip()
    for origin in _allowed_origins_env.split(",")
    if origin.strip()
] or _default_cors_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> Dict[str, str]:
    """Simple liveness probe for container orchestrators."""
    return {"status": "ok"}


@app.get("/catalog")
def catalog() -> Dict[str, Any]:
    """Selectable values a client needs to build a project file."""

    tables = default_cost_tables()
    return {
        "appliances": {
            key: {
                "name": d.name,
                "category": d.category.value,
                "default_btu": d.default_btu,
                "default_efficiency": d.default_efficiency,
            }
            for key, d in APPLIANCE_DEFINITIONS.items()
        },
        "facility_appliances": {f.value: list(keys) for f, keys in FACILITY_APPLIANCE_MAP.items()},
        "climate_zones": [z.value for z in ClimateZone],
        "efficiency_tiers": [t.value for t in EfficiencyTier],
        "rebate_regions": list(tables.regional_rebates),
        "grid_regions": GRID_EMISSION_FACTORS,
        "ev_chargers": {c.value: (asdict(CHARGER_SPECS[c]) if c in CHARGER_SPECS else None) for c in ChargerClass},
    }


@app.post("/project/validate")
def validate_project(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Check a project file without running the analysis."""

    try:
        state = project_state_from_dict(payload)
    except ProjectFileError as exc:
        return {"valid": False, "error": str(exc)}
    return {"valid": True, "error": None, "appliance_count": len(state.appliances)}


@app.post("/analyze")
def analyze(request: AnalysisRequest) -> Dict[str, Any]:
    """Run the full analysis for one project."""

    state = _parse_project(request.project)
    analysis = run_analysis(state, _resolve_tables(request.cost_tables), request.config.build())
    response: Dict[str, Any] = {"summary": _serialize_summary(analysis)}
    if request.include_details:
        response["analysis"] = _serialize_analysis(analysis)
    return response


@app.post("/batch")
def batch(request: BatchRequest) -> Dict[str, Any]:
    """Summarize several projects against the same cost tables and config."""

    tables = _resolve_tables(request.cost_tables)
    cfg = request.config.build()
    # Validate every run before computing any of them.
    states = [_parse_project(run.project, f"project for run {idx}") for idx, run in enumerate(request.runs)]

    runs: List[Dict[str, Any]] = []
    for idx, (run, state) in enumerate(zip(request.runs, states)):
        analysis = run_analysis(state, tables, cfg)
        runs.append({"name": run.name or f"project-{idx + 1}", "summary": _serialize_summary(analysis)})
    logging.getLogger(__name__).info("Batch analysed %d project(s).", len(runs))
    return {"runs": runs}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.server:app", host="0.0.0.0", port=8000, reload=False)
