"""Reusable layout helpers for Streamlit pages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import streamlit as st
from streamlit.delta_generator import DeltaGenerator

from services.project_state import ProjectState, included_appliances
from utils.ui_state import TABLES_SOURCE_SESSION_KEY, get_project_state

HeaderRenderer = Callable[[Optional[ProjectState]], ProjectState]


@dataclass(frozen=True)
class _NavigationLink:
    label: str
    target: str
    help_text: Optional[str] = None


_NAV_LINKS = (
    _NavigationLink("Home (Guide)", "pages/00_Home.py", "How the planner estimates loads, costs and savings."),
    _NavigationLink("Planner", "app.py", "Building inventory and live results."),
    _NavigationLink("Full report", "pages/01_Report.py", "Printable report with charts and PDF export."),
    _NavigationLink("Save / load", "pages/02_Save_Load.py", "Project files and cost tables."),
)


def _render_navigation_block(container: DeltaGenerator) -> None:
    container.markdown("#### Navigate")
    for link in _NAV_LINKS:
        container.page_link(link.target, label=link.label, help=link.help_text)


def _render_status_block(container: DeltaGenerator, state: ProjectState) -> None:
    """Show a concise summary of the project held in this session."""

    included = len(included_appliances(state))
    address = " ".join(part for part in (state.address_number, state.street_name, state.town) if part)
    table_source = st.session_state.get(TABLES_SOURCE_SESSION_KEY, "built-in")

    container.markdown("#### Session status")
    container.caption(f"Project: {address or 'unnamed'} ({state.facility_type.value})")
    container.caption(f"Appliances: {len(state.appliances)} listed, {included} included.")
    container.caption(f"Cost tables: {table_source}.")


def init_page_layout(
    *,
    page_title: str,
    main_title: str,
    description: Optional[str] = None,
) -> HeaderRenderer:
    """Initialize the page layout with shared navigation and status blocks.

    ``st.set_page_config`` runs immediately and a header slot is reserved at
    the top of the page. The returned renderer fills that slot once the page
    has applied its input changes, so the status block reflects the latest
    state.
    """

    st.set_page_config(page_title=page_title, layout="wide")
    header_container = st.container()

    def _render(state: Optional[ProjectState] = None) -> ProjectState:
        current = state if state is not None else get_project_state()
        with header_container:
            st.title(main_title)
            if description:
                st.caption(description)

            nav_col, status_col = st.columns([3, 2])
            _render_navigation_block(nav_col)
            _render_status_block(status_col, current)

        st.divider()
        return current

    return _render
