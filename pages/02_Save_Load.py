import streamlit as st

from services.project_state import default_project_state
from utils.io import (
    ProjectFileError,
    apply_cost_table_defaults,
    dump_cost_tables_json,
    dump_project_json,
    load_cost_tables_json,
    load_project_json,
)
from utils.ui_layout import init_page_layout
from utils.ui_state import get_cost_tables, get_project_state, replace_project_state, set_cost_tables

render_layout = init_page_layout(
    page_title="Save / load",
    main_title="Save and load",
    description="Keep projects as JSON files and apply local cost tables.",
)
render_layout()

state = get_project_state()
tables = get_cost_tables()

st.subheader("Project file")
st.download_button(
    "Download project (JSON)",
    dump_project_json(state).encode("utf-8"),
    file_name="electrification_project.json",
    mime="application/json",
)
project_upload = st.file_uploader("Load a project file", type=["json"], key="project_upload")
if project_upload is not None and st.button("Apply project file"):
    try:
        loaded = load_project_json(project_upload.getvalue())
    except ProjectFileError as exc:
        st.error(f"Could not load project: {exc}. The current project was left unchanged.")
    else:
        replace_project_state(loaded)
        st.success(f"Loaded project with {len(loaded.appliances)} appliance(s).")

if st.button("Start a new project"):
    replace_project_state(apply_cost_table_defaults(default_project_state(), tables))
    st.success("Project reset to defaults.")

st.divider()
st.subheader("Cost tables")
st.caption(
    "Cost-table files overlay the built-in equipment, installation, electrical and rebate tables. "
    "Entries missing from the file keep their current values."
)
st.download_button(
    "Download current cost tables (JSON)",
    dump_cost_tables_json(tables).encode("utf-8"),
    file_name="cost_tables.json",
    mime="application/json",
)
tables_upload = st.file_uploader("Load a cost-table file", type=["json"], key="tables_upload")
if tables_upload is not None and st.button("Apply cost tables"):
    try:
        merged = load_cost_tables_json(tables_upload.getvalue(), base=tables)
    except ProjectFileError as exc:
        st.error(f"Could not load cost tables: {exc}. The current tables were left unchanged.")
    else:
        set_cost_tables(merged)
        st.success("Cost tables applied; gas and electricity prices were reset from the file defaults.")
