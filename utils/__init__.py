"""Utility helpers shared across Streamlit app modules and the API."""

from utils.insights import build_report_insights
from utils.io import (
    ProjectFileError,
    dump_cost_tables_json,
    dump_project_json,
    load_cost_tables_json,
    load_project_json,
)

__all__ = [
    "build_report_insights",
    "ProjectFileError",
    "dump_cost_tables_json",
    "dump_project_json",
    "load_cost_tables_json",
    "load_project_json",
]
