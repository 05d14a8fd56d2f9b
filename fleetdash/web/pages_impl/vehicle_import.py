"""
Spreadsheet import: pick or detect the vehicle type, preview the rows the
server parsed, fix cells in place (single edits or fill-down) and import.

Edits are kept per row number across preview pages and sent with the import.
"""
from __future__ import annotations

import hashlib
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
import streamlit as st

from fleetdash.data.api_client import FileUpload
from fleetdash.domain.models import ImportPreview
from fleetdash.domain.rules import (
    IMPORT_EXTENSIONS,
    apply_cell_edit,
    detect_vehicle_type,
    fill_down,
    import_columns,
    import_template_filename,
)
from fleetdash.web.components.breadcrumbs import render_breadcrumbs
from fleetdash.web.framework.state import ensure_defaults, flash, navigate
from fleetdash.web.framework.user_context import app_settings
from fleetdash.web.services.api_bridge import call_api
from fleetdash.web.utils import to_upload

STATE_DEFAULTS = {
    "imp_file_digest": None,
    "imp_base": None,  # ImportPreview with every edit applied
    "imp_edits": {},  # row number -> full row data
    "imp_version": 0,
    "imp_page": 1,
}

META_COLUMNS = ("Row", "Valid", "Errors")


def _reset(digest: Optional[str]) -> None:
    st.session_state.update({**STATE_DEFAULTS, "imp_edits": {}, "imp_file_digest": digest})


def _bake(preview: ImportPreview, edits: Dict[int, Dict[str, Any]]) -> ImportPreview:
    """Re-apply stored edits to a freshly fetched preview page."""
    for row in list(preview.rows):
        saved = edits.get(row.row_number)
        if not saved:
            continue
        for key, value in saved.items():
            if row.data.get(key) != value:
                preview, edits = apply_cell_edit(preview, edits, row.row_number, key, value)
    return preview


def _frame(preview: ImportPreview, columns: List[str]) -> pd.DataFrame:
    records = []
    for row in preview.rows:
        record = {"Row": row.row_number, "Valid": "✅" if row.is_valid else "❌", "Errors": "; ".join(row.errors)}
        record.update({c: "" if row.data.get(c) is None else str(row.data.get(c)) for c in columns})
        records.append(record)
    return pd.DataFrame(records, columns=list(META_COLUMNS) + columns)


def _diff_edits(
    preview: ImportPreview, edits: Dict[int, Dict[str, Any]], before: pd.DataFrame, after: pd.DataFrame,
    columns: List[str],
) -> Tuple[ImportPreview, Dict[int, Dict[str, Any]]]:
    for i in range(len(before)):
        row_number = int(before.iloc[i]["Row"])
        for col in columns:
            old, new = before.iloc[i][col], after.iloc[i][col]
            if (old or "") != (new or ""):
                preview, edits = apply_cell_edit(preview, edits, row_number, col, "" if new is None else str(new))
    return preview, edits


def _load_page(upload: FileUpload, type_id: int, page: int) -> None:
    per_page = app_settings().page_size
    preview = call_api(
        lambda s: s.vehicles.import_preview(upload, type_id, page=page, per_page=per_page),
        error="Failed to preview file",
    )
    if preview is None:
        return
    st.session_state["imp_base"] = _bake(preview, st.session_state["imp_edits"])
    st.session_state["imp_page"] = page
    st.session_state["imp_version"] += 1


def _type_selection(vehicle_types, filename: Optional[str]) -> Optional[int]:
    by_id = {vt.id: vt for vt in vehicle_types}
    detected = detect_vehicle_type(filename, vehicle_types) if filename else None
    ids = list(by_id)
    index = ids.index(detected.id) if detected else 0
    type_id = st.selectbox("Vehicle type *", ids, index=index, format_func=lambda i: by_id[i].name)
    if detected:
        st.caption(f"Detected **{detected.name}** from the file name ({detected.confidence}% confidence).")

    template = call_api(
        lambda s: s.vehicle_types.download_import_template(type_id),
        error="Template unavailable",
        toast=True,
    )
    if template is not None:
        st.download_button(
            "📥 Download template",
            template.content,
            file_name=template.filename or import_template_filename(by_id[type_id].name),
            mime=template.content_type,
        )
    return type_id


def render() -> None:
    render_breadcrumbs("/dashboard/vehicles/import")
    st.title("📥 Import Vehicles")
    st.caption("Upload an Excel or CSV file built from the vehicle type's template.")
    ensure_defaults(STATE_DEFAULTS)

    vehicle_types = call_api(lambda s: s.vehicle_types.get_all(), error="Failed to load vehicle types", default=[])
    if not vehicle_types:
        st.info("Create a vehicle type first.")
        return

    uploaded = st.file_uploader("Spreadsheet", type=list(IMPORT_EXTENSIONS))
    type_id = _type_selection(vehicle_types, uploaded.name if uploaded else None)
    if uploaded is None:
        if st.session_state["imp_file_digest"] is not None:
            _reset(None)
        return

    digest = hashlib.sha1(uploaded.getvalue()).hexdigest() + f":{type_id}"
    if digest != st.session_state["imp_file_digest"]:
        _reset(digest)
    upload = to_upload(uploaded)

    if st.session_state["imp_base"] is None:
        if st.button("Preview", type="primary"):
            _load_page(upload, type_id, 1)
            st.rerun()
        return

    base: ImportPreview = st.session_state["imp_base"]
    columns = import_columns(base)
    m1, m2, m3 = st.columns(3)
    m1.metric("Rows in file", base.total_rows)
    m2.metric("Valid (this page)", base.valid_rows)
    m3.metric("Invalid (this page)", base.invalid_rows)

    before = _frame(base, columns)
    after = st.data_editor(
        before,
        key=f"import_editor_{st.session_state['imp_version']}",
        hide_index=True,
        use_container_width=True,
        disabled=list(META_COLUMNS),
        num_rows="fixed",
    )
    current, edits = _diff_edits(base, dict(st.session_state["imp_edits"]), before, after, columns)
    if current.invalid_rows:
        st.warning("\n".join(f"Row {r.row_number}: {'; '.join(r.errors)}" for r in current.rows if not r.is_valid))

    fill_col, fill_btn = st.columns([3, 1])
    fill_key = fill_col.selectbox("Fill down column", columns) if columns else None
    if fill_key and fill_btn.button("Fill down", use_container_width=True):
        try:
            filled, filled_edits = fill_down(current, edits, fill_key)
        except ValueError as e:
            st.error(str(e))
        else:
            st.session_state.update(imp_base=filled, imp_edits=filled_edits)
            st.session_state["imp_version"] += 1
            st.rerun()

    pag = base.pagination
    p1, p2, p3 = st.columns([1, 2, 1])
    if p1.button("◀ Previous", disabled=pag.current_page <= 1):
        st.session_state["imp_edits"] = edits
        _load_page(upload, type_id, pag.current_page - 1)
        st.rerun()
    p2.caption(f"Page {pag.current_page} of {max(pag.total_pages, 1)}")
    if p3.button("Next ▶", disabled=not pag.has_more and pag.current_page >= pag.total_pages):
        st.session_state["imp_edits"] = edits
        _load_page(upload, type_id, pag.current_page + 1)
        st.rerun()

    if st.button(f"Import {base.total_rows} vehicle(s)", type="primary"):
        imported = call_api(
            lambda s: s.vehicles.import_vehicles(upload, type_id, edits),
            error="Import failed",
        )
        if imported is not None:
            _reset(None)
            flash(f"Imported {imported} vehicle(s).")
            navigate("vehicles")
