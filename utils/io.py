"""Project-file and cost-table (de)serialization.

Both formats are plain JSON. Loading validates the whole payload before
anything is returned, so a malformed file never partially replaces the
caller's current state.
"""

from __future__ import annotations

import copy
import json
import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from services.project_state import Appliance, PanelDescriptor, ProjectState, TimeOfUseRates
from services.reference_data import (
    APPLIANCE_DEFINITIONS,
    ApplianceCategory,
    ChargerClass,
    ClimateZone,
    CostRange,
    CostTables,
    EfficiencyTier,
    FacilityType,
    default_cost_tables,
)

PROJECT_FILE_VERSION = 1


class ProjectFileError(ValueError):
    """Raised when a project or cost-table file fails structural validation."""


# ---- Project file ----


def project_state_to_dict(state: ProjectState) -> Dict[str, Any]:
    return {
        "version": PROJECT_FILE_VERSION,
        "facility_type": state.facility_type.value,
        "climate_zone": state.climate_zone.value,
        "cold_climate_derating": state.cold_climate_derating,
        "rebate_region": state.rebate_region,
        "grid_region": state.grid_region,
        "address_number": state.address_number,
        "street_name": state.street_name,
        "town": state.town,
        "annual_heating_therms": state.annual_heating_therms,
        "annual_non_heating_therms": state.annual_non_heating_therms,
        "existing_annual_kwh": state.existing_annual_kwh,
        "panel": {
            "amps": state.panel.amps,
            "voltage": state.panel.voltage,
            "breaker_spaces": state.panel.breaker_spaces,
            "existing_peak_load_amps": state.panel.existing_peak_load_amps,
        },
        "efficiency_tier": state.efficiency_tier.value,
        "appliances": [
            {
                "id": a.id,
                "key": a.key,
                "btu": a.btu,
                "included": a.included,
                "efficiency": a.efficiency,
                "zones": a.zones,
                "supplemental_heaters": a.supplemental_heaters,
            }
            for a in state.appliances
        ],
        "gas_price_per_therm": state.gas_price_per_therm,
        "electricity_price_per_kwh": state.electricity_price_per_kwh,
        "gas_price_escalation": state.gas_price_escalation,
        "electricity_price_escalation": state.electricity_price_escalation,
        "high_risk_gas_escalation": state.high_risk_gas_escalation,
        "grid_decarbonization_rate": state.grid_decarbonization_rate,
        "time_of_use": {
            "enabled": state.time_of_use.enabled,
            "peak_price_per_kwh": state.time_of_use.peak_price_per_kwh,
            "off_peak_price_per_kwh": state.time_of_use.off_peak_price_per_kwh,
            "peak_share_pct": state.time_of_use.peak_share_pct,
        },
        "ev_charger": state.ev_charger.value,
        "ev_charger_count": state.ev_charger_count,
        "include_permitting": state.include_permitting,
    }


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _number(payload: Mapping[str, Any], name: str, default: float) -> float:
    value = payload.get(name, default)
    if not _is_number(value):
        raise ProjectFileError(f"'{name}' must be a finite number, got {value!r}")
    return float(value)


def _integer(
    payload: Mapping[str, Any], name: str, default: Optional[int], allow_none: bool = False
) -> Optional[int]:
    value = payload.get(name, default)
    if value is None and allow_none:
        return None
    if not _is_number(value) or float(value) != int(value):
        raise ProjectFileError(f"'{name}' must be a whole number, got {value!r}")
    return int(value)


def _flag(payload: Mapping[str, Any], name: str, default: bool) -> bool:
    value = payload.get(name, default)
    if not isinstance(value, bool):
        raise ProjectFileError(f"'{name}' must be true or false, got {value!r}")
    return value


def _text(payload: Mapping[str, Any], name: str, default: str) -> str:
    value = payload.get(name, default)
    if not isinstance(value, str):
        raise ProjectFileError(f"'{name}' must be a string, got {value!r}")
    return value


def _enum(payload: Mapping[str, Any], name: str, enum_cls, default):
    value = payload.get(name, default.value if default is not None else None)
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ProjectFileError(f"'{name}' must be one of: {allowed}; got {value!r}") from None


def _section(payload: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = payload.get(name, {})
    if not isinstance(value, Mapping):
        raise ProjectFileError(f"'{name}' must be an object")
    return value


def _appliance_from_dict(raw: Any, index: int) -> Appliance:
    if not isinstance(raw, Mapping):
        raise ProjectFileError(f"appliances[{index}] must be an object")
    key = raw.get("key")
    if not isinstance(key, str) or key not in APPLIANCE_DEFINITIONS:
        raise ProjectFileError(f"appliances[{index}] has unknown appliance key {key!r}")
    if "btu" not in raw or "efficiency" not in raw:
        raise ProjectFileError(f"appliances[{index}] must define 'btu' and 'efficiency'")
    appliance_id = raw.get("id")
    if not isinstance(appliance_id, str) or not appliance_id:
        raise ProjectFileError(f"appliances[{index}] must have a non-empty string id")
    try:
        return Appliance(
            id=appliance_id,
            key=key,
            btu=_number(raw, "btu", 0.0),
            included=_flag(raw, "included", True),
            efficiency=_number(raw, "efficiency", 80.0),
            zones=_integer(raw, "zones", None, allow_none=True),
            supplemental_heaters=_integer(raw, "supplemental_heaters", None, allow_none=True),
        )
    except ProjectFileError as exc:
        raise ProjectFileError(f"appliances[{index}]: {exc}") from None


def project_state_from_dict(payload: Any) -> ProjectState:
    """Validate a decoded project file and build a fresh ``ProjectState``.

    Only ``facility_type`` and the ``appliances`` list are mandatory; every
    other field falls back to the planner defaults when absent.
    """

    if not isinstance(payload, Mapping):
        raise ProjectFileError("Project file must contain a JSON object")
    if "facility_type" not in payload:
        raise ProjectFileError("Project file is missing 'facility_type'")
    appliances_raw = payload.get("appliances")
    if not isinstance(appliances_raw, list):
        raise ProjectFileError("Project file 'appliances' must be a list")

    defaults = ProjectState()
    panel_raw = _section(payload, "panel")
    tou_raw = _section(payload, "time_of_use")

    existing_peak = panel_raw.get("existing_peak_load_amps")
    panel = PanelDescriptor(
        amps=_number(panel_raw, "amps", defaults.panel.amps),
        voltage=_number(panel_raw, "voltage", defaults.panel.voltage),
        breaker_spaces=_integer(panel_raw, "breaker_spaces", defaults.panel.breaker_spaces),
        existing_peak_load_amps=(
            None if existing_peak is None else _number(panel_raw, "existing_peak_load_amps", 0.0)
        ),
    )
    time_of_use = TimeOfUseRates(
        enabled=_flag(tou_raw, "enabled", defaults.time_of_use.enabled),
        peak_price_per_kwh=_number(tou_raw, "peak_price_per_kwh", defaults.time_of_use.peak_price_per_kwh),
        off_peak_price_per_kwh=_number(
            tou_raw, "off_peak_price_per_kwh", defaults.time_of_use.off_peak_price_per_kwh
        ),
        peak_share_pct=_number(tou_raw, "peak_share_pct", defaults.time_of_use.peak_share_pct),
    )

    return ProjectState(
        facility_type=_enum(payload, "facility_type", FacilityType, None),
        climate_zone=_enum(payload, "climate_zone", ClimateZone, defaults.climate_zone),
        cold_climate_derating=_flag(payload, "cold_climate_derating", defaults.cold_climate_derating),
        rebate_region=_text(payload, "rebate_region", defaults.rebate_region),
        grid_region=_text(payload, "grid_region", defaults.grid_region),
        address_number=_text(payload, "address_number", defaults.address_number),
        street_name=_text(payload, "street_name", defaults.street_name),
        town=_text(payload, "town", defaults.town),
        annual_heating_therms=_number(payload, "annual_heating_therms", defaults.annual_heating_therms),
        annual_non_heating_therms=_number(
            payload, "annual_non_heating_therms", defaults.annual_non_heating_therms
        ),
        existing_annual_kwh=_number(payload, "existing_annual_kwh", defaults.existing_annual_kwh),
        panel=panel,
        efficiency_tier=_enum(payload, "efficiency_tier", EfficiencyTier, defaults.efficiency_tier),
        appliances=[_appliance_from_dict(raw, idx) for idx, raw in enumerate(appliances_raw)],
        gas_price_per_therm=_number(payload, "gas_price_per_therm", defaults.gas_price_per_therm),
        electricity_price_per_kwh=_number(
            payload, "electricity_price_per_kwh", defaults.electricity_price_per_kwh
        ),
        gas_price_escalation=_number(payload, "gas_price_escalation", defaults.gas_price_escalation),
        electricity_price_escalation=_number(
            payload, "electricity_price_escalation", defaults.electricity_price_escalation
        ),
        high_risk_gas_escalation=_number(
            payload, "high_risk_gas_escalation", defaults.high_risk_gas_escalation
        ),
        grid_decarbonization_rate=_number(
            payload, "grid_decarbonization_rate", defaults.grid_decarbonization_rate
        ),
        time_of_use=time_of_use,
        ev_charger=_enum(payload, "ev_charger", ChargerClass, defaults.ev_charger),
        ev_charger_count=_integer(payload, "ev_charger_count", defaults.ev_charger_count),
        include_permitting=_flag(payload, "include_permitting", defaults.include_permitting),
    )


def dump_project_json(state: ProjectState) -> str:
    return json.dumps(project_state_to_dict(state), indent=2)


def load_project_json(text: Union[str, bytes]) -> ProjectState:
    """Parse a saved project; raises ``ProjectFileError`` on any defect."""

    try:
        payload = json.loads(text)
        return project_state_from_dict(payload)
    except json.JSONDecodeError as exc:
        logging.getLogger(__name__).warning("Project file is not valid JSON: %s", exc)
        raise ProjectFileError(f"Project file is not valid JSON: {exc}") from exc
    except ProjectFileError as exc:
        logging.getLogger(__name__).warning("Project file failed validation: %s", exc)
        raise


# ---- Cost tables ----


def _range_to_dict(cost: CostRange) -> Dict[str, float]:
    return {"low": cost.low, "medium": cost.medium, "high": cost.high}


def _range_from_raw(raw: Any, where: str) -> CostRange:
    """Accept ``{"low", "medium", "high"}`` objects or 2/3-element lists.

    Two-column ranges from older files get the midpoint as their medium.
    """

    if isinstance(raw, Mapping):
        if "low" not in raw or "high" not in raw:
            raise ProjectFileError(f"{where}: cost range needs 'low' and 'high'")
        values = [raw["low"], raw.get("medium"), raw["high"]]
    elif isinstance(raw, (list, tuple)) and len(raw) in (2, 3):
        values = [raw[0], raw[1], raw[2]] if len(raw) == 3 else [raw[0], None, raw[1]]
    else:
        raise ProjectFileError(f"{where}: expected a cost range, got {raw!r}")

    low, medium, high = values
    if medium is None and _is_number(low) and _is_number(high):
        medium = (low + high) / 2.0
    if not all(_is_number(v) and v >= 0 for v in (low, medium, high)):
        raise ProjectFileError(f"{where}: cost range values must be non-negative numbers")
    if not low <= high:
        raise ProjectFileError(f"{where}: low must not exceed high")
    return CostRange(float(low), float(medium), float(high))


def cost_tables_to_dict(tables: CostTables) -> Dict[str, Any]:
    return {
        "equipment": {
            category.value: {tier.value: _range_to_dict(cost) for tier, cost in tiers.items()}
            for category, tiers in tables.equipment.items()
        },
        "installation": {c.value: _range_to_dict(v) for c, v in tables.installation.items()},
        "decommissioning": {c.value: _range_to_dict(v) for c, v in tables.decommissioning.items()},
        "distribution": {k: _range_to_dict(v) for k, v in tables.distribution.items()},
        "electrical": {k: _range_to_dict(v) for k, v in tables.electrical.items()},
        "regional_rebates": {region: dict(amounts) for region, amounts in tables.regional_rebates.items()},
        "federal_rebates": dict(tables.federal_rebates),
        "default_gas_price_per_therm": tables.default_gas_price_per_therm,
        "default_electricity_price_per_kwh": tables.default_electricity_price_per_kwh,
    }


def _category(name: str, table: str) -> Optional[ApplianceCategory]:
    try:
        return ApplianceCategory(name)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring unknown category '%s' in %s table.", name, table)
        return None


def _mapping(payload: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = payload[name]
    if not isinstance(value, Mapping):
        raise ProjectFileError(f"'{name}' must be an object")
    return value


def merge_cost_tables(base: CostTables, payload: Any) -> CostTables:
    """Overlay a decoded cost-table file onto ``base`` entry by entry.

    Tables or entries missing from ``payload`` keep the ``base`` value; the
    returned tables are a new object and ``base`` is left unchanged.
    """

    if not isinstance(payload, Mapping):
        raise ProjectFileError("Cost-table file must contain a JSON object")

    merged = copy.deepcopy(base)
    present: List[str] = []

    if "equipment" in payload:
        present.append("equipment")
        for name, tiers in _mapping(payload, "equipment").items():
            category = _category(name, "equipment")
            if category is None:
                continue
            if not isinstance(tiers, Mapping):
                raise ProjectFileError(f"equipment.{name} must map tiers to cost ranges")
            target = merged.equipment.setdefault(category, {})
            for tier_name, raw in tiers.items():
                try:
                    tier = EfficiencyTier(tier_name)
                except ValueError:
                    logging.getLogger(__name__).warning(
                        "Ignoring unknown efficiency tier '%s' in equipment table.", tier_name
                    )
                    continue
                target[tier] = _range_from_raw(raw, f"equipment.{name}.{tier_name}")

    for table_name in ("installation", "decommissioning"):
        if table_name not in payload:
            continue
        present.append(table_name)
        target = getattr(merged, table_name)
        for name, raw in _mapping(payload, table_name).items():
            category = _category(name, table_name)
            if category is not None:
                target[category] = _range_from_raw(raw, f"{table_name}.{name}")

    for table_name in ("distribution", "electrical"):
        if table_name not in payload:
            continue
        present.append(table_name)
        target = getattr(merged, table_name)
        for name, raw in _mapping(payload, table_name).items():
            target[str(name)] = _range_from_raw(raw, f"{table_name}.{name}")

    if "regional_rebates" in payload:
        present.append("regional_rebates")
        for region, amounts in _mapping(payload, "regional_rebates").items():
            if not isinstance(amounts, Mapping):
                raise ProjectFileError(f"regional_rebates.{region} must be an object")
            target = merged.regional_rebates.setdefault(str(region), {})
            for key, amount in amounts.items():
                if not _is_number(amount) or amount < 0:
                    raise ProjectFileError(f"regional_rebates.{region}.{key} must be a non-negative number")
                target[str(key)] = float(amount)

    if "federal_rebates" in payload:
        present.append("federal_rebates")
        for key, amount in _mapping(payload, "federal_rebates").items():
            if not _is_number(amount) or amount < 0:
                raise ProjectFileError(f"federal_rebates.{key} must be a non-negative number")
            merged.federal_rebates[str(key)] = float(amount)

    for price_field in ("default_gas_price_per_therm", "default_electricity_price_per_kwh"):
        if price_field in payload:
            present.append(price_field)
            setattr(merged, price_field, _number(payload, price_field, getattr(base, price_field)))

    logging.getLogger(__name__).info("Merged cost-table file onto defaults (tables: %s).", ", ".join(present))
    return merged


def dump_cost_tables_json(tables: CostTables) -> str:
    return json.dumps(cost_tables_to_dict(tables), indent=2)


def load_cost_tables_json(text: Union[str, bytes], base: Optional[CostTables] = None) -> CostTables:
    try:
        payload = json.loads(text)
        return merge_cost_tables(base or default_cost_tables(), payload)
    except json.JSONDecodeError as exc:
        logging.getLogger(__name__).warning("Cost-table file is not valid JSON: %s", exc)
        raise ProjectFileError(f"Cost-table file is not valid JSON: {exc}") from exc
    except ProjectFileError as exc:
        logging.getLogger(__name__).warning("Cost-table file failed validation: %s", exc)
        raise


def read_cost_tables(path_candidates: Sequence[Union[str, Path]], base: Optional[CostTables] = None) -> CostTables:
    """Load the first readable cost-table file from ``path_candidates``."""

    last_err: Optional[Exception] = None
    for candidate in path_candidates:
        try:
            return load_cost_tables_json(Path(candidate).read_text(encoding="utf-8"), base)
        except (OSError, ProjectFileError) as e:
            last_err = e
    raise ProjectFileError(
        "Failed to read cost tables. "
        f"Looked for: {[str(p) for p in path_candidates]}. Last error: {last_err}"
    )


def apply_cost_table_defaults(state: ProjectState, tables: CostTables) -> ProjectState:
    """Return ``state`` with its cached price fields re-derived from ``tables``."""

    return replace(
        state,
        gas_price_per_therm=tables.default_gas_price_per_therm,
        electricity_price_per_kwh=tables.default_electricity_price_per_kwh,
    )


__all__ = [
    "PROJECT_FILE_VERSION",
    "ProjectFileError",
    "project_state_to_dict",
    "project_state_from_dict",
    "dump_project_json",
    "load_project_json",
    "cost_tables_to_dict",
    "merge_cost_tables",
    "dump_cost_tables_json",
    "load_cost_tables_json",
    "read_cost_tables",
    "apply_cost_table_defaults",
]
