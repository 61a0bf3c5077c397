"""Reference tables and engine assumptions for electrification planning.

All tables here are read-only lookups keyed by the enumerated category,
tier, and facility variants. Dollar figures are planning-grade market
averages (Massachusetts / New England) and are intended to be overridden
through a cost-table file rather than edited in place.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Tuple


class ApplianceCategory(str, Enum):
    FURNACE = "Furnace"
    BOILER = "Boiler"
    WATER_HEATER = "Water Heater"
    RANGE = "Range"
    DRYER = "Dryer"
    SPACE_HEATER = "Space Heater"


class EfficiencyTier(str, Enum):
    STANDARD = "Standard"
    HIGH = "High"
    PREMIUM = "Premium"


class FacilityType(str, Enum):
    RESIDENTIAL = "Residential"
    SMALL_COMMERCIAL = "Small Commercial"
    LARGE_COMMERCIAL = "Large Commercial"
    INDUSTRIAL = "Industrial"
    RESTAURANT = "Restaurant"
    MEDICAL = "Medical"
    NURSING_HOME = "Nursing Home"

    @property
    def is_residential(self) -> bool:
        return self is FacilityType.RESIDENTIAL


class ClimateZone(str, Enum):
    ZONE5 = "Zone5"
    ZONE6 = "Zone6"
    ZONE7 = "Zone7"


class ChargerClass(str, Enum):
    NONE = "None"
    LEVEL2_RESIDENTIAL = "Level 2 (Residential)"
    LEVEL2_COMMERCIAL = "Level 2 (Commercial)"
    DC_FAST = "DC Fast Charger"


HEATING_CATEGORIES: Tuple[ApplianceCategory, ...] = (
    ApplianceCategory.FURNACE,
    ApplianceCategory.BOILER,
    ApplianceCategory.SPACE_HEATER,
)
NON_HEATING_CATEGORIES: Tuple[ApplianceCategory, ...] = (
    ApplianceCategory.WATER_HEATER,
    ApplianceCategory.RANGE,
    ApplianceCategory.DRYER,
)


# ---- Unit conversions ----
BTU_PER_THERM = 100_000.0
# 1 BTU = 0.000293071 kWh; the same factor converts BTU/hr to kW.
BTU_TO_KWH = 0.000293071
BTU_PER_TON = 12_000.0
DEFAULT_VOLTAGE = 240.0
LIFETIME_YEARS = 15

# ---- Emissions ----
CO2_KG_PER_THERM_GAS = 5.3  # EPA, combustion only
UPSTREAM_LEAKAGE_RATE = 0.015
ONSITE_SLIPPAGE_RATE = 0.01
TOTAL_LEAKAGE_RATE = UPSTREAM_LEAKAGE_RATE + ONSITE_SLIPPAGE_RATE
KG_CH4_PER_THERM = 2.36
# IPCC AR6 methane GWP values. Changing these changes every reduction figure.
GWP20_CH4 = 84.0
GWP100_CH4 = 28.0
KG_CO2E_PER_CAR_YEAR = 4_600.0  # EPA average passenger vehicle

# kg CO2e per kWh by grid region (ISO New England 2022 for the default).
GRID_EMISSION_FACTORS: Dict[str, float] = {
    "New England (ISO-NE)": 0.26,
    "New York (NYISO)": 0.23,
    "PJM Interconnection": 0.38,
    "US Average": 0.37,
}
DEFAULT_GRID_REGION = "New England (ISO-NE)"


@dataclass(frozen=True)
class CostRange:
    """Low / medium / high dollar estimate for one line item."""

    low: float
    medium: float
    high: float

    def scaled(self, factor: float) -> "CostRange":
        return CostRange(self.low * factor, self.medium * factor, self.high * factor)

    def __add__(self, other: "CostRange") -> "CostRange":
        return CostRange(self.low + other.low, self.medium + other.medium, self.high + other.high)

    @property
    def is_zero(self) -> bool:
        return self.low == 0 and self.medium == 0 and self.high == 0


ZERO_COST = CostRange(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class ApplianceDefinition:
    name: str
    category: ApplianceCategory
    default_btu: float
    default_efficiency: float


APPLIANCE_DEFINITIONS: Dict[str, ApplianceDefinition] = {
    # Residential
    "res-furnace": ApplianceDefinition("Forced Air Furnace", ApplianceCategory.FURNACE, 80_000, 80),
    "res-boiler": ApplianceDefinition("Boiler (Hydronic)", ApplianceCategory.BOILER, 100_000, 80),
    "res-tank-wh": ApplianceDefinition("Tank Water Heater", ApplianceCategory.WATER_HEATER, 40_000, 62),
    "res-tankless-wh": ApplianceDefinition("Tankless Water Heater", ApplianceCategory.WATER_HEATER, 150_000, 82),
    "res-range": ApplianceDefinition("Gas Range", ApplianceCategory.RANGE, 60_000, 40),
    "res-dryer": ApplianceDefinition("Gas Dryer", ApplianceCategory.DRYER, 22_000, 75),
    "res-pool-heater": ApplianceDefinition("Pool Heater", ApplianceCategory.SPACE_HEATER, 250_000, 82),
    "res-fireplace": ApplianceDefinition("Gas Fireplace Insert", ApplianceCategory.SPACE_HEATER, 30_000, 75),
    # Commercial / industrial / medical / nursing
    "comm-rtu": ApplianceDefinition("Rooftop Unit (RTU)", ApplianceCategory.FURNACE, 240_000, 80),
    "comm-boiler": ApplianceDefinition("Commercial Boiler", ApplianceCategory.BOILER, 500_000, 80),
    "comm-wh": ApplianceDefinition("Commercial Water Heater", ApplianceCategory.WATER_HEATER, 199_000, 80),
    "laundry-dryer": ApplianceDefinition("Large Capacity Dryer", ApplianceCategory.DRYER, 120_000, 75),
    # Restaurant
    "rest-range": ApplianceDefinition("Commercial Range", ApplianceCategory.RANGE, 180_000, 40),
    "rest-convection-oven": ApplianceDefinition("Convection Oven", ApplianceCategory.RANGE, 50_000, 40),
    "rest-fryer": ApplianceDefinition("Fryer", ApplianceCategory.RANGE, 90_000, 40),
    "rest-griddle": ApplianceDefinition("Griddle", ApplianceCategory.RANGE, 60_000, 40),
    "rest-booster-heater": ApplianceDefinition(
        "Booster Heater (Dishwasher)", ApplianceCategory.WATER_HEATER, 58_000, 80
    ),
}

_COMMERCIAL_CORE = ["comm-rtu", "comm-boiler", "comm-wh"]

FACILITY_APPLIANCE_MAP: Dict[FacilityType, Tuple[str, ...]] = {
    FacilityType.RESIDENTIAL: (
        "res-furnace",
        "res-boiler",
        "res-tank-wh",
        "res-tankless-wh",
        "res-range",
        "res-dryer",
        "res-pool-heater",
        "res-fireplace",
    ),
    FacilityType.SMALL_COMMERCIAL: tuple(_COMMERCIAL_CORE),
    FacilityType.LARGE_COMMERCIAL: tuple(_COMMERCIAL_CORE + ["laundry-dryer"]),
    FacilityType.INDUSTRIAL: tuple(_COMMERCIAL_CORE + ["laundry-dryer"]),
    FacilityType.RESTAURANT: (
        "rest-range",
        "rest-convection-oven",
        "rest-fryer",
        "rest-griddle",
        "comm-rtu",
        "comm-wh",
        "rest-booster-heater",
    ),
    FacilityType.MEDICAL: tuple(_COMMERCIAL_CORE + ["laundry-dryer", "rest-range", "rest-convection-oven"]),
    FacilityType.NURSING_HOME: tuple(_COMMERCIAL_CORE + ["laundry-dryer", "rest-range", "rest-convection-oven"]),
}

# Mass Save market averages, therms per year (heating, non-heating).
DEFAULT_USAGE_BY_FACILITY: Dict[FacilityType, Tuple[float, float]] = {
    FacilityType.RESIDENTIAL: (700, 250),
    FacilityType.SMALL_COMMERCIAL: (2_000, 800),
    FacilityType.LARGE_COMMERCIAL: (15_000, 5_000),
    FacilityType.INDUSTRIAL: (50_000, 20_000),
    FacilityType.RESTAURANT: (1_500, 4_000),
    FacilityType.MEDICAL: (10_000, 8_000),
    FacilityType.NURSING_HOME: (8_000, 6_000),
}

# ---- Performance ----
COP_LOOKUP: Dict[ApplianceCategory, Dict[EfficiencyTier, float]] = {
    ApplianceCategory.FURNACE: {EfficiencyTier.STANDARD: 2.5, EfficiencyTier.HIGH: 3.0, EfficiencyTier.PREMIUM: 3.5},
    ApplianceCategory.BOILER: {EfficiencyTier.STANDARD: 2.5, EfficiencyTier.HIGH: 3.0, EfficiencyTier.PREMIUM: 3.5},
    ApplianceCategory.WATER_HEATER: {
        EfficiencyTier.STANDARD: 2.8,
        EfficiencyTier.HIGH: 3.5,
        EfficiencyTier.PREMIUM: 4.0,
    },
    ApplianceCategory.SPACE_HEATER: {
        EfficiencyTier.STANDARD: 2.5,
        EfficiencyTier.HIGH: 3.0,
        EfficiencyTier.PREMIUM: 3.5,
    },
    # Induction has no heat-pump gain; 1.0 keeps useful heat equal to input.
    ApplianceCategory.RANGE: {EfficiencyTier.STANDARD: 1.0, EfficiencyTier.HIGH: 1.0, EfficiencyTier.PREMIUM: 1.0},
    ApplianceCategory.DRYER: {EfficiencyTier.STANDARD: 1.5, EfficiencyTier.HIGH: 2.0, EfficiencyTier.PREMIUM: 2.5},
}

# Planning penalties for colder zones, not physical constants.
CLIMATE_ZONE_COP_ADJUSTMENT: Dict[ClimateZone, float] = {
    ClimateZone.ZONE5: 1.0,
    ClimateZone.ZONE6: 0.9,
    ClimateZone.ZONE7: 0.85,
}

# Nameplate peak kW for appliances not sized from BTU input.
NAMEPLATE_PEAK_KW: Dict[ApplianceCategory, float] = {
    ApplianceCategory.RANGE: 9.6,
    ApplianceCategory.DRYER: 1.8,
}

BREAKER_SPACE_REQUIREMENTS: Dict[ApplianceCategory, int] = {category: 2 for category in ApplianceCategory}

RESIDENTIAL_PANEL_SIZES: Tuple[int, ...] = (100, 125, 150, 200, 400, 600)
COMMERCIAL_PANEL_SIZES: Tuple[int, ...] = (200, 400, 600, 800, 1000, 1200, 1600, 2000)


def panel_size_ladder(facility: FacilityType) -> Tuple[int, ...]:
    return RESIDENTIAL_PANEL_SIZES if facility.is_residential else COMMERCIAL_PANEL_SIZES


@dataclass(frozen=True)
class ChargerSpec:
    """Fixed electrical draw of one EV charging station."""

    label: str
    amps: float
    kw: float
    breaker_spaces: int


CHARGER_SPECS: Dict[ChargerClass, ChargerSpec] = {
    ChargerClass.LEVEL2_RESIDENTIAL: ChargerSpec("Level 2 EV Charger (40A)", 40.0, 9.6, 2),
    ChargerClass.LEVEL2_COMMERCIAL: ChargerSpec("Commercial Level 2 EV Charger (48A)", 48.0, 11.5, 2),
    ChargerClass.DC_FAST: ChargerSpec("DC Fast Charger (50 kW)", 139.0, 50.0, 3),
}

# ---- Maintenance (USD / year per appliance) ----
GAS_MAINTENANCE_BY_CATEGORY: Dict[ApplianceCategory, float] = {
    ApplianceCategory.FURNACE: 200.0,
    ApplianceCategory.BOILER: 250.0,
    ApplianceCategory.WATER_HEATER: 100.0,
    ApplianceCategory.RANGE: 50.0,
    ApplianceCategory.DRYER: 50.0,
    ApplianceCategory.SPACE_HEATER: 100.0,
}
ELECTRIC_MAINTENANCE_BY_CATEGORY: Dict[ApplianceCategory, float] = {
    ApplianceCategory.FURNACE: 150.0,
    ApplianceCategory.BOILER: 150.0,
    ApplianceCategory.WATER_HEATER: 50.0,
    ApplianceCategory.RANGE: 0.0,
    ApplianceCategory.DRYER: 25.0,
    ApplianceCategory.SPACE_HEATER: 100.0,
}


def _cr(low: float, high: float, medium: float | None = None) -> CostRange:
    return CostRange(float(low), float(medium if medium is not None else (low + high) / 2.0), float(high))


def _default_equipment_costs() -> Dict[ApplianceCategory, Dict[EfficiencyTier, CostRange]]:
    s, h, p = EfficiencyTier.STANDARD, EfficiencyTier.HIGH, EfficiencyTier.PREMIUM
    return {
        ApplianceCategory.FURNACE: {s: _cr(6_000, 8_000), h: _cr(8_000, 12_000), p: _cr(12_000, 18_000)},
        ApplianceCategory.BOILER: {s: _cr(6_000, 8_000), h: _cr(8_000, 12_000), p: _cr(12_000, 18_000)},
        ApplianceCategory.WATER_HEATER: {s: _cr(1_500, 2_500), h: _cr(2_500, 4_000), p: _cr(4_000, 6_000)},
        ApplianceCategory.RANGE: {s: _cr(1_000, 2_000), h: _cr(2_000, 3_500), p: _cr(3_500, 5_000)},
        ApplianceCategory.DRYER: {s: _cr(800, 1_200), h: _cr(1_200, 1_800), p: _cr(1_800, 2_500)},
        ApplianceCategory.SPACE_HEATER: {s: _cr(1_500, 2_500), h: _cr(2_500, 4_000), p: _cr(4_000, 5_500)},
    }


def _default_installation_costs() -> Dict[ApplianceCategory, CostRange]:
    return {
        ApplianceCategory.FURNACE: _cr(5_000, 10_000),
        ApplianceCategory.BOILER: _cr(5_000, 10_000),
        ApplianceCategory.WATER_HEATER: _cr(1_000, 2_000),
        ApplianceCategory.RANGE: _cr(300, 600),
        ApplianceCategory.DRYER: _cr(300, 600),
        ApplianceCategory.SPACE_HEATER: _cr(3_000, 6_000),
    }


def _default_decommissioning_costs() -> Dict[ApplianceCategory, CostRange]:
    return {
        ApplianceCategory.FURNACE: _cr(250, 500),
        ApplianceCategory.BOILER: _cr(250, 500),
        ApplianceCategory.WATER_HEATER: _cr(150, 300),
        ApplianceCategory.RANGE: _cr(100, 200),
        ApplianceCategory.DRYER: _cr(0, 0),  # usually part of install
        ApplianceCategory.SPACE_HEATER: _cr(50, 100),
    }


def _default_distribution_costs() -> Dict[str, CostRange]:
    return {
        "Ductwork Modification": _cr(500, 2_000),
        "Mini-Split Base Unit": _cr(4_000, 10_000),
        "Mini-Split Additional Zone": _cr(2_500, 4_500),
    }


def _default_electrical_costs() -> Dict[str, CostRange]:
    costs = {
        "New Circuit": _cr(1_000, 1_500),
        "Sub-panel": _cr(1_500, 2_500),
        "Supplemental Heater": _cr(300, 800),
        "Permits & Fees": _cr(300, 1_000),
        "Level 2 (Residential)": _cr(1_200, 2_500),
        "Level 2 (Commercial)": _cr(4_000, 7_000),
        "DC Fast Charger": _cr(40_000, 100_000),
    }
    panel_upgrades = {
        100: (1_500, 3_000),
        125: (2_000, 3_500),
        150: (2_500, 4_000),
        200: (3_000, 5_000),
        400: (5_000, 8_000),
        600: (15_000, 25_000),
        800: (25_000, 40_000),
        1000: (35_000, 55_000),
        1200: (45_000, 70_000),
        1600: (60_000, 95_000),
        2000: (80_000, 130_000),
    }
    for size, (low, high) in panel_upgrades.items():
        costs[panel_upgrade_key(size)] = _cr(low, high)
    return costs


def panel_upgrade_key(size_amps: int) -> str:
    return f"Panel Upgrade to {int(size_amps)}A"


# Rebate trigger keys shared by the regional and federal tables.
REBATE_HEAT_PUMP = "Heat Pump"
REBATE_HPWH = "HPWH"
REBATE_PANEL_UPGRADE = "Panel Upgrade"


def _default_regional_rebates() -> Dict[str, Dict[str, float]]:
    return {
        "Mass Save (MA)": {REBATE_HEAT_PUMP: 10_000.0, REBATE_HPWH: 750.0, REBATE_PANEL_UPGRADE: 1_500.0},
        "Energize CT": {REBATE_HEAT_PUMP: 5_000.0, REBATE_HPWH: 750.0, REBATE_PANEL_UPGRADE: 0.0},
        "Rhode Island Energy": {REBATE_HEAT_PUMP: 6_000.0, REBATE_HPWH: 600.0, REBATE_PANEL_UPGRADE: 1_000.0},
        "None": {REBATE_HEAT_PUMP: 0.0, REBATE_HPWH: 0.0, REBATE_PANEL_UPGRADE: 0.0},
    }


def _default_federal_rebates() -> Dict[str, float]:
    # IRA 25C credit caps, used as planning amounts.
    return {REBATE_HEAT_PUMP: 2_000.0, REBATE_HPWH: 2_000.0, REBATE_PANEL_UPGRADE: 600.0}


DEFAULT_REBATE_REGION = "Mass Save (MA)"


@dataclass
class CostTables:
    """User-editable reference tables loaded from / saved to the cost-table file."""

    equipment: Dict[ApplianceCategory, Dict[EfficiencyTier, CostRange]] = field(
        default_factory=_default_equipment_costs
    )
    installation: Dict[ApplianceCategory, CostRange] = field(default_factory=_default_installation_costs)
    decommissioning: Dict[ApplianceCategory, CostRange] = field(default_factory=_default_decommissioning_costs)
    distribution: Dict[str, CostRange] = field(default_factory=_default_distribution_costs)
    electrical: Dict[str, CostRange] = field(default_factory=_default_electrical_costs)
    regional_rebates: Dict[str, Dict[str, float]] = field(default_factory=_default_regional_rebates)
    federal_rebates: Dict[str, float] = field(default_factory=_default_federal_rebates)
    default_gas_price_per_therm: float = 1.50
    default_electricity_price_per_kwh: float = 0.22


def default_cost_tables() -> CostTables:
    return CostTables()


def _ensure_non_negative_finite(value: float, name: str) -> None:
    """Raise ValueError when a numeric value is negative or non-finite."""

    if not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")


def _ensure_fraction(value: float, name: str) -> None:
    _ensure_non_negative_finite(value, name)
    if value > 1.0:
        raise ValueError(f"{name} must be between 0 and 1")


@dataclass(frozen=True)
class AnalysisConfig:
    """Policy assumptions used by the engine.

    Fractions are expressed as 0..1. ``residential_diversity_fraction`` is the
    share of every load except the largest that counts toward diversified
    peak; the commercial rule counts loads in full up to
    ``commercial_diversity_threshold_amps`` and the remainder at
    ``commercial_diversity_fraction``.
    """

    residential_diversity_fraction: float = 0.6
    commercial_diversity_threshold_amps: float = 80.0
    commercial_diversity_fraction: float = 0.75
    panel_continuous_load_fraction: float = 0.8
    assumed_existing_load_fraction: float = 0.5
    cold_climate_derating: float = 0.85
    lifetime_years: int = LIFETIME_YEARS

    def __post_init__(self) -> None:
        _ensure_fraction(self.residential_diversity_fraction, "residential_diversity_fraction")
        _ensure_non_negative_finite(self.commercial_diversity_threshold_amps, "commercial_diversity_threshold_amps")
        _ensure_fraction(self.commercial_diversity_fraction, "commercial_diversity_fraction")
        _ensure_fraction(self.assumed_existing_load_fraction, "assumed_existing_load_fraction")
        _ensure_fraction(self.cold_climate_derating, "cold_climate_derating")
        if not 0.0 < self.panel_continuous_load_fraction <= 1.0:
            raise ValueError("panel_continuous_load_fraction must be in (0, 1]")
        if self.lifetime_years <= 0:
            raise ValueError("lifetime_years must be positive")


def lookup_definition(key: str, catalog: Mapping[str, ApplianceDefinition] = APPLIANCE_DEFINITIONS):
    """Return the catalog entry for ``key`` or None when it does not resolve."""

    return catalog.get(key)


__all__ = [
    "ApplianceCategory",
    "EfficiencyTier",
    "FacilityType",
    "ClimateZone",
    "ChargerClass",
    "HEATING_CATEGORIES",
    "NON_HEATING_CATEGORIES",
    "BTU_PER_THERM",
    "BTU_TO_KWH",
    "BTU_PER_TON",
    "DEFAULT_VOLTAGE",
    "LIFETIME_YEARS",
    "CO2_KG_PER_THERM_GAS",
    "UPSTREAM_LEAKAGE_RATE",
    "ONSITE_SLIPPAGE_RATE",
    "TOTAL_LEAKAGE_RATE",
    "KG_CH4_PER_THERM",
    "GWP20_CH4",
    "GWP100_CH4",
    "KG_CO2E_PER_CAR_YEAR",
    "GRID_EMISSION_FACTORS",
    "DEFAULT_GRID_REGION",
    "CostRange",
    "ZERO_COST",
    "ApplianceDefinition",
    "APPLIANCE_DEFINITIONS",
    "FACILITY_APPLIANCE_MAP",
    "DEFAULT_USAGE_BY_FACILITY",
    "COP_LOOKUP",
    "CLIMATE_ZONE_COP_ADJUSTMENT",
    "NAMEPLATE_PEAK_KW",
    "BREAKER_SPACE_REQUIREMENTS",
    "RESIDENTIAL_PANEL_SIZES",
    "COMMERCIAL_PANEL_SIZES",
    "panel_size_ladder",
    "ChargerSpec",
    "CHARGER_SPECS",
    "GAS_MAINTENANCE_BY_CATEGORY",
    "ELECTRIC_MAINTENANCE_BY_CATEGORY",
    "panel_upgrade_key",
    "REBATE_HEAT_PUMP",
    "REBATE_HPWH",
    "REBATE_PANEL_UPGRADE",
    "DEFAULT_REBATE_REGION",
    "CostTables",
    "default_cost_tables",
    "AnalysisConfig",
    "lookup_definition",
]
