"""Shared UI helpers for the session-scoped project and cost tables."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import streamlit as st

from services.analysis_pipeline import ProjectAnalysis, run_analysis
from services.project_state import ProjectState, default_project_state
from services.reference_data import CostTables, default_cost_tables
from utils.io import ProjectFileError, apply_cost_table_defaults, read_cost_tables

PROJECT_SESSION_KEY = "electrify_project_state"
TABLES_SESSION_KEY = "electrify_cost_tables"
TABLES_SOURCE_SESSION_KEY = "electrify_cost_tables_source"
PROJECT_REVISION_KEY = "electrify_project_revision"
COST_TABLES_ENV = "ELECTRIFYLAB_COST_TABLES"


def get_base_dir() -> Path:
    return Path(__file__).resolve().parent.parent


def _default_table_paths(base_dir: Path) -> list[Path]:
    configured = os.environ.get(COST_TABLES_ENV)
    if configured:
        return [Path(configured)]
    return [base_dir / "data" / "cost_tables.json"]


def load_default_cost_tables(base_dir: Optional[Path] = None) -> CostTables:
    """Built-in tables, overlaid with the configured cost-table file when one loads.

    ``ELECTRIFYLAB_COST_TABLES`` points at a JSON file; without it the
    optional ``data/cost_tables.json`` beside the app is tried.
    """

    paths = _default_table_paths(base_dir or get_base_dir())
    if not any(path.exists() for path in paths):
        st.session_state[TABLES_SOURCE_SESSION_KEY] = "built-in"
        return default_cost_tables()
    try:
        tables = read_cost_tables(paths)
    except ProjectFileError as exc:
        logging.getLogger(__name__).warning("Using built-in cost tables: %s", exc)
        st.session_state[TABLES_SOURCE_SESSION_KEY] = "built-in (file failed to load)"
        return default_cost_tables()
    st.session_state[TABLES_SOURCE_SESSION_KEY] = "file"
    return tables


def get_cost_tables() -> CostTables:
    if TABLES_SESSION_KEY not in st.session_state:
        st.session_state[TABLES_SESSION_KEY] = load_default_cost_tables()
    return st.session_state[TABLES_SESSION_KEY]


def set_cost_tables(tables: CostTables) -> None:
    """Replace the session tables and re-derive the project's cached prices."""

    st.session_state[TABLES_SESSION_KEY] = tables
    st.session_state[TABLES_SOURCE_SESSION_KEY] = "upload"
    replace_project_state(apply_cost_table_defaults(get_project_state(), tables))


def get_project_state() -> ProjectState:
    if PROJECT_SESSION_KEY not in st.session_state:
        st.session_state[PROJECT_SESSION_KEY] = apply_cost_table_defaults(
            default_project_state(), get_cost_tables()
        )
    return st.session_state[PROJECT_SESSION_KEY]


def set_project_state(state: ProjectState) -> None:
    """Swap in a whole new state; the stored value is never edited in place."""

    st.session_state[PROJECT_SESSION_KEY] = state


def replace_project_state(state: ProjectState) -> None:
    """Swap in a state that did not come from the input widgets (file load, reset).

    Bumping the revision gives every input widget a fresh key so it is
    seeded from the new state instead of keeping its previous value.
    """

    set_project_state(state)
    st.session_state[PROJECT_REVISION_KEY] = st.session_state.get(PROJECT_REVISION_KEY, 0) + 1


def widget_key(name: str) -> str:
    return f"{name}_{st.session_state.get(PROJECT_REVISION_KEY, 0)}"


def get_current_analysis() -> ProjectAnalysis:
    return run_analysis(get_project_state(), get_cost_tables())
