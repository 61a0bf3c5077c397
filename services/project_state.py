"""Project state model and the pure operations that produce new states."""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from services.reference_data import (
    APPLIANCE_DEFINITIONS,
    DEFAULT_GRID_REGION,
    DEFAULT_REBATE_REGION,
    DEFAULT_USAGE_BY_FACILITY,
    FACILITY_APPLIANCE_MAP,
    ApplianceDefinition,
    ChargerClass,
    ClimateZone,
    EfficiencyTier,
    FacilityType,
)


@dataclass
class Appliance:
    """One existing gas appliance in the building inventory."""

    id: str
    key: str  # key into APPLIANCE_DEFINITIONS
    btu: float
    included: bool = True
    efficiency: float = 80.0  # thermal efficiency, percent
    zones: Optional[int] = None
    supplemental_heaters: Optional[int] = None

    @property
    def definition(self) -> Optional[ApplianceDefinition]:
        return APPLIANCE_DEFINITIONS.get(self.key)


@dataclass
class PanelDescriptor:
    amps: float = 200.0
    voltage: float = 240.0
    breaker_spaces: int = 4
    # Measured peak of the existing building. None falls back to the
    # fixed-fraction heuristic in the load planner.
    existing_peak_load_amps: Optional[float] = None


@dataclass
class TimeOfUseRates:
    enabled: bool = False
    peak_price_per_kwh: float = 0.32
    off_peak_price_per_kwh: float = 0.16
    peak_share_pct: float = 40.0


@dataclass
class ProjectState:
    """Aggregate root for one electrification project.

    Prices are USD, escalation rates are percent per year, gas usage is
    therms per year.
    """

    facility_type: FacilityType = FacilityType.RESIDENTIAL
    climate_zone: ClimateZone = ClimateZone.ZONE5
    cold_climate_derating: bool = False
    rebate_region: str = DEFAULT_REBATE_REGION
    grid_region: str = DEFAULT_GRID_REGION
    address_number: str = ""
    street_name: str = ""
    town: str = ""
    annual_heating_therms: float = 700.0
    annual_non_heating_therms: float = 250.0
    existing_annual_kwh: float = 0.0
    panel: PanelDescriptor = field(default_factory=PanelDescriptor)
    efficiency_tier: EfficiencyTier = EfficiencyTier.HIGH
    appliances: List[Appliance] = field(default_factory=list)
    gas_price_per_therm: float = 1.50
    electricity_price_per_kwh: float = 0.22
    gas_price_escalation: float = 3.0
    electricity_price_escalation: float = 2.0
    high_risk_gas_escalation: float = 7.0
    grid_decarbonization_rate: float = 0.0
    time_of_use: TimeOfUseRates = field(default_factory=TimeOfUseRates)
    ev_charger: ChargerClass = ChargerClass.NONE
    ev_charger_count: int = 1
    include_permitting: bool = False


def default_project_state() -> ProjectState:
    return ProjectState(address_number="45", street_name="Main Street", town="Gardner")


def snapshot(state: ProjectState) -> ProjectState:
    """Return an independent copy so a calculation pass cannot see later edits."""

    return copy.deepcopy(state)


def available_appliance_keys(facility: FacilityType) -> Tuple[str, ...]:
    return FACILITY_APPLIANCE_MAP.get(facility, ())


def new_appliance(key: str) -> Appliance:
    definition = APPLIANCE_DEFINITIONS.get(key)
    if definition is None:
        raise ValueError(f"Unknown appliance key: {key!r}")
    return Appliance(
        id=uuid.uuid4().hex,
        key=key,
        btu=float(definition.default_btu),
        included=True,
        efficiency=float(definition.default_efficiency),
    )


def add_appliance(state: ProjectState, key: str) -> ProjectState:
    return replace(state, appliances=[*state.appliances, new_appliance(key)])


def remove_appliance(state: ProjectState, appliance_id: str) -> ProjectState:
    return replace(state, appliances=[a for a in state.appliances if a.id != appliance_id])


def update_appliance(state: ProjectState, appliance_id: str, **changes) -> ProjectState:
    """Return a new state with the matching appliance's fields replaced."""

    if "id" in changes or "key" in changes:
        raise ValueError("Appliance id and key cannot be edited; remove and re-add instead.")
    updated: List[Appliance] = []
    found = False
    for appliance in state.appliances:
        if appliance.id == appliance_id:
            appliance = replace(appliance, **changes)
            found = True
        updated.append(appliance)
    if not found:
        raise KeyError(appliance_id)
    return replace(state, appliances=updated)


def change_facility_type(state: ProjectState, facility: FacilityType) -> ProjectState:
    """Switch facility type and reseed annual usage with that facility's defaults."""

    heating, non_heating = DEFAULT_USAGE_BY_FACILITY[facility]
    return replace(
        state,
        facility_type=facility,
        annual_heating_therms=float(heating),
        annual_non_heating_therms=float(non_heating),
    )


def included_appliances(state: ProjectState) -> List[Appliance]:
    """Return included appliances whose catalog key resolves."""

    return [a for a in resolvable_appliances(state) if a.included]


def resolvable_appliances(state: ProjectState) -> List[Appliance]:
    return [a for a in state.appliances if a.definition is not None]


def unresolved_appliances(state: ProjectState) -> List[Appliance]:
    """Appliances whose catalog key no longer resolves; the engine skips them."""

    return [a for a in state.appliances if a.definition is None]


__all__ = [
    "Appliance",
    "PanelDescriptor",
    "TimeOfUseRates",
    "ProjectState",
    "default_project_state",
    "snapshot",
    "available_appliance_keys",
    "new_appliance",
    "add_appliance",
    "remove_appliance",
    "update_appliance",
    "change_facility_type",
    "included_appliances",
    "resolvable_appliances",
    "unresolved_appliances",
]
