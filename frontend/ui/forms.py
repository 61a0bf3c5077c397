"""Streamlit input sections for the planner.

Every renderer takes the current ``ProjectState`` and returns a new one built
with ``dataclasses.replace``; nothing here edits the session state in place.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence

import streamlit as st

from services.project_state import (
    ProjectState,
    add_appliance,
    available_appliance_keys,
    change_facility_type,
    remove_appliance,
    update_appliance,
)
from services.reference_data import (
    APPLIANCE_DEFINITIONS,
    GRID_EMISSION_FACTORS,
    ApplianceCategory,
    ChargerClass,
    ClimateZone,
    CostTables,
    EfficiencyTier,
    FacilityType,
)
from utils.ui_state import replace_project_state, widget_key


def _index_of(options: Sequence, value) -> int:
    return list(options).index(value) if value in options else 0


def render_site_section(state: ProjectState, tables: CostTables) -> ProjectState:
    """Facility, location and program selectors."""

    st.subheader("Site")
    c1, c2, c3 = st.columns(3)
    address_number = c1.text_input("Number", state.address_number, key=widget_key("site_number"))
    street_name = c2.text_input("Street", state.street_name, key=widget_key("site_street"))
    town = c3.text_input("Town", state.town, key=widget_key("site_town"))

    c1, c2, c3 = st.columns(3)
    facilities = list(FacilityType)
    facility = c1.selectbox(
        "Facility type",
        facilities,
        index=_index_of(facilities, state.facility_type),
        format_func=lambda f: f.value,
        help="Changing the facility type resets annual gas usage to that type's typical values.",
        key=widget_key("site_facility"),
    )
    zones = list(ClimateZone)
    climate_zone = c2.selectbox(
        "IECC climate zone",
        zones,
        index=_index_of(zones, state.climate_zone),
        format_func=lambda z: z.value,
        help="Colder zones lower heat pump efficiency (Zone6 ×0.90, Zone7 ×0.85).",
        key=widget_key("site_zone"),
    )
    cold_climate = c3.checkbox(
        "Apply cold-climate derating",
        value=state.cold_climate_derating,
        help="Further lowers space-heating COP by 15% for design-day sizing.",
        key=widget_key("site_cold_climate"),
    )

    c1, c2 = st.columns(2)
    regions = list(tables.regional_rebates)
    rebate_region = c1.selectbox(
        "Rebate program",
        regions,
        index=_index_of(regions, state.rebate_region),
        key=widget_key("site_rebate_region"),
    )
    grids = list(GRID_EMISSION_FACTORS)
    grid_region = c2.selectbox(
        "Electric grid region",
        grids,
        index=_index_of(grids, state.grid_region),
        format_func=lambda g: f"{g} ({GRID_EMISSION_FACTORS[g]:.2f} kg/kWh)",
        key=widget_key("site_grid_region"),
    )

    updated = replace(
        state,
        address_number=address_number,
        street_name=street_name,
        town=town,
        climate_zone=climate_zone,
        cold_climate_derating=cold_climate,
        rebate_region=rebate_region,
        grid_region=grid_region,
    )
    if facility != state.facility_type:
        updated = change_facility_type(updated, facility)
        replace_project_state(updated)
        st.rerun()
    return updated


def render_usage_section(state: ProjectState) -> ProjectState:
    """Annual gas usage, the existing panel, and the target equipment tier."""

    st.subheader("Usage and electrical service")
    c1, c2, c3 = st.columns(3)
    heating = c1.number_input(
        "Annual heating gas (therms)",
        min_value=0.0,
        value=float(state.annual_heating_therms),
        step=50.0,
        key=widget_key("usage_heating"),
    )
    non_heating = c2.number_input(
        "Annual non-heating gas (therms)",
        min_value=0.0,
        value=float(state.annual_non_heating_therms),
        step=25.0,
        help="Water heating, cooking, and drying.",
        key=widget_key("usage_non_heating"),
    )
    existing_kwh = c3.number_input(
        "Existing annual electricity (kWh)",
        min_value=0.0,
        value=float(state.existing_annual_kwh),
        step=500.0,
        help="Priced on both sides of the comparison, so it does not change savings.",
        key=widget_key("usage_existing_kwh"),
    )

    c1, c2, c3, c4 = st.columns(4)
    amps = c1.number_input(
        "Main panel rating (A)", min_value=0.0, value=float(state.panel.amps), step=25.0, key=widget_key("panel_amps")
    )
    voltage = c2.number_input(
        "Service voltage (V)",
        min_value=0.0,
        value=float(state.panel.voltage),
        step=8.0,
        help="0 or blank falls back to 240 V.",
        key=widget_key("panel_voltage"),
    )
    spaces = c3.number_input(
        "Free breaker spaces",
        min_value=0,
        value=int(state.panel.breaker_spaces),
        step=1,
        key=widget_key("panel_spaces"),
    )
    measured = c4.number_input(
        "Measured peak load (A)",
        min_value=0.0,
        value=float(state.panel.existing_peak_load_amps or 0.0),
        step=5.0,
        help="Leave at 0 to assume the panel runs at 50% of its continuous rating.",
        key=widget_key("panel_existing_peak"),
    )

    tiers = list(EfficiencyTier)
    tier = st.radio(
        "Replacement efficiency tier",
        tiers,
        index=_index_of(tiers, state.efficiency_tier),
        format_func=lambda t: t.value,
        horizontal=True,
        key=widget_key("usage_tier"),
    )

    panel = replace(
        state.panel,
        amps=amps,
        voltage=voltage,
        breaker_spaces=int(spaces),
        existing_peak_load_amps=measured if measured > 0 else None,
    )
    return replace(
        state,
        annual_heating_therms=heating,
        annual_non_heating_therms=non_heating,
        existing_annual_kwh=existing_kwh,
        panel=panel,
        efficiency_tier=tier,
    )


def render_appliance_editor(state: ProjectState) -> ProjectState:
    """Inventory of existing gas appliances with add / edit / remove controls."""

    st.subheader("Gas appliances")
    keys: List[str] = list(available_appliance_keys(state.facility_type))
    c1, c2 = st.columns([3, 1])
    selected = c1.selectbox(
        "Appliance type",
        keys,
        format_func=lambda k: APPLIANCE_DEFINITIONS[k].name,
        key=widget_key("appliance_new_key"),
    )
    if c2.button("Add appliance", use_container_width=True) and selected:
        replace_project_state(add_appliance(state, selected))
        st.rerun()

    if not state.appliances:
        st.info("No appliances yet. Add the gas equipment in the building to start the plan.")
        return state

    updated = state
    for appliance in state.appliances:
        definition = appliance.definition
        name = definition.name if definition is not None else f"Unknown ({appliance.key})"
        with st.expander(name, expanded=True):
            c1, c2, c3, c4 = st.columns([1, 2, 2, 1])
            included = c1.checkbox("Include", value=appliance.included, key=widget_key(f"inc_{appliance.id}"))
            btu = c2.number_input(
                "Input (BTU/hr)",
                min_value=0.0,
                value=float(appliance.btu),
                step=1000.0,
                key=widget_key(f"btu_{appliance.id}"),
            )
            efficiency = c3.number_input(
                "Efficiency (%)",
                min_value=1.0,
                max_value=100.0,
                value=float(appliance.efficiency),
                step=1.0,
                key=widget_key(f"eff_{appliance.id}"),
            )
            if c4.button("Remove", key=widget_key(f"rm_{appliance.id}")):
                replace_project_state(remove_appliance(updated, appliance.id))
                st.rerun()

            changes = {"included": included, "btu": btu, "efficiency": efficiency}
            if definition is not None and definition.category in (
                ApplianceCategory.BOILER,
                ApplianceCategory.SPACE_HEATER,
            ):
                d1, d2 = st.columns(2)
                changes["zones"] = int(
                    d1.number_input(
                        "Mini-split zones",
                        min_value=1,
                        value=int(appliance.zones or 1),
                        step=1,
                        key=widget_key(f"zones_{appliance.id}"),
                    )
                )
                changes["supplemental_heaters"] = int(
                    d2.number_input(
                        "Supplemental electric heaters",
                        min_value=0,
                        value=int(appliance.supplemental_heaters or 0),
                        step=1,
                        help="Baseboard or panel heaters for rooms the mini-split heads will not reach.",
                        key=widget_key(f"supp_{appliance.id}"),
                    )
                )
            updated = update_appliance(updated, appliance.id, **changes)
    return updated


def render_economics_section(state: ProjectState) -> ProjectState:
    """Energy prices, escalation scenarios, EV charging and permitting."""

    st.subheader("Prices and scenario")
    c1, c2, c3 = st.columns(3)
    gas_price = c1.number_input(
        "Gas price ($/therm)", min_value=0.0, value=float(state.gas_price_per_therm), step=0.05,
        key=widget_key("econ_gas_price"),
    )
    elec_price = c2.number_input(
        "Electricity price ($/kWh)", min_value=0.0, value=float(state.electricity_price_per_kwh), step=0.01,
        key=widget_key("econ_elec_price"), format="%.3f",
    )
    decarb = c3.number_input(
        "Grid decarbonization (%/yr)", min_value=0.0, max_value=100.0,
        value=float(state.grid_decarbonization_rate), step=0.5, key=widget_key("econ_decarb"),
    )

    c1, c2, c3 = st.columns(3)
    gas_esc = c1.number_input(
        "Gas price escalation (%/yr)", value=float(state.gas_price_escalation), step=0.5,
        key=widget_key("econ_gas_esc"),
    )
    risk_esc = c2.number_input(
        "High-risk gas escalation (%/yr)", value=float(state.high_risk_gas_escalation), step=0.5,
        help="Models utility stranded-cost recovery as customers leave the gas system.",
        key=widget_key("econ_risk_esc"),
    )
    elec_esc = c3.number_input(
        "Electricity price escalation (%/yr)", value=float(state.electricity_price_escalation), step=0.5,
        key=widget_key("econ_elec_esc"),
    )

    tou = state.time_of_use
    with st.expander("Time-of-use electricity rate", expanded=tou.enabled):
        tou_enabled = st.checkbox("Use time-of-use pricing", value=tou.enabled, key=widget_key("tou_enabled"))
        t1, t2, t3 = st.columns(3)
        peak = t1.number_input("Peak ($/kWh)", min_value=0.0, value=float(tou.peak_price_per_kwh), step=0.01,
                               key=widget_key("tou_peak"), format="%.3f")
        off_peak = t2.number_input("Off-peak ($/kWh)", min_value=0.0, value=float(tou.off_peak_price_per_kwh),
                                   step=0.01, key=widget_key("tou_off_peak"), format="%.3f")
        share = t3.slider("Share of use at peak (%)", 0.0, 100.0, float(tou.peak_share_pct), 5.0,
                          key=widget_key("tou_share"))

    c1, c2, c3 = st.columns(3)
    chargers = list(ChargerClass)
    ev_charger = c1.selectbox(
        "EV charging", chargers, index=_index_of(chargers, state.ev_charger),
        format_func=lambda c: c.value, key=widget_key("econ_ev"),
    )
    ev_count = state.ev_charger_count
    if not state.facility_type.is_residential:
        ev_count = int(c2.number_input("Number of chargers", min_value=1, value=int(state.ev_charger_count),
                                       step=1, key=widget_key("econ_ev_count")))
    permitting = c3.checkbox("Include permits & fees", value=state.include_permitting,
                             key=widget_key("econ_permits"))

    return replace(
        state,
        gas_price_per_therm=gas_price,
        electricity_price_per_kwh=elec_price,
        grid_decarbonization_rate=decarb,
        gas_price_escalation=gas_esc,
        high_risk_gas_escalation=risk_esc,
        electricity_price_escalation=elec_esc,
        time_of_use=replace(
            tou,
            enabled=tou_enabled,
            peak_price_per_kwh=peak,
            off_peak_price_per_kwh=off_peak,
            peak_share_pct=share,
        ),
        ev_charger=ev_charger,
        ev_charger_count=ev_count,
        include_permitting=permitting,
    )
