"""Vehicle types: CRUD, custom field management and the vehicles of a type."""
from __future__ import annotations

import re
from typing import Any, Dict, Optional

import pandas as pd
import streamlit as st

from fleetdash.domain.models import FIELD_TYPES, VehicleType, VehicleTypeField
from fleetdash.domain.rules import (
    format_field_options,
    import_template_filename,
    parse_field_options,
    vehicle_display_name,
)
from fleetdash.web.components.breadcrumbs import render_breadcrumbs
from fleetdash.web.components.confirm import confirm_button
from fleetdash.web.framework.state import flash, navigate
from fleetdash.web.services.api_bridge import call_api

SELECTED_TYPE_KEY = "vehicle_types_selected"


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.strip().lower()).strip("_")


# =============================================================================
# Types
# =============================================================================


def _render_create_type() -> None:
    with st.expander("➕ New vehicle type"):
        with st.form("create_vehicle_type", clear_on_submit=True):
            name = st.text_input("Name *", placeholder="e.g., Excavator")
            description = st.text_area("Description")
            is_active = st.checkbox("Active", value=True)
            submitted = st.form_submit_button("Create", type="primary")
        if submitted:
            created = call_api(
                lambda s: s.vehicle_types.create(name, description or None, is_active),
                error="Failed to create vehicle type",
            )
            if created is not None:
                st.session_state[SELECTED_TYPE_KEY] = created.id
                flash(f"Vehicle type '{created.name}' created.")
                st.rerun()


def _render_edit_type(vt: VehicleType) -> None:
    with st.form(f"edit_type_{vt.id}"):
        name = st.text_input("Name", value=vt.name)
        description = st.text_area("Description", value=vt.description or "")
        is_active = st.checkbox("Active", value=vt.is_active)
        submitted = st.form_submit_button("Save")
    if submitted:
        changes = {"name": name.strip(), "description": description or None, "is_active": is_active}
        if call_api(lambda s: s.vehicle_types.update(vt.id, changes), error="Failed to update vehicle type") is not None:
            flash("Vehicle type updated.")
            st.rerun()

    t1, t2 = st.columns(2)
    with t1:
        template = call_api(
            lambda s: s.vehicle_types.download_import_template(vt.id),
            error="Import template unavailable",
            toast=True,
        )
        if template is not None:
            st.download_button(
                "📥 Import template",
                template.content,
                file_name=template.filename or import_template_filename(vt.name),
                mime=template.content_type,
                use_container_width=True,
            )
    with t2:
        if confirm_button("🗑️ Delete type", f"delete_type_{vt.id}",
                          f"Delete '{vt.name}'? Vehicles of this type may block deletion."):
            if call_api(lambda s: s.vehicle_types.delete(vt.id), error="Failed to delete vehicle type",
                        default=False) is not False:
                st.session_state.pop(SELECTED_TYPE_KEY, None)
                flash("Vehicle type deleted.")
                st.rerun()


# =============================================================================
# Fields
# =============================================================================


def _field_form(prefix: str, field: Optional[VehicleTypeField] = None) -> Optional[Dict[str, Any]]:
    """Shared create/edit form; returns the submitted values."""
    with st.form(f"{prefix}_field_form", clear_on_submit=field is None):
        c1, c2 = st.columns(2)
        name = c1.text_input("Name *", value=field.name if field else "")
        key = c2.text_input("Key", value=field.key if field else "", help="Left empty, derived from the name.",
                            disabled=field is not None)
        index = FIELD_TYPES.index(field.field_type) if field and field.field_type in FIELD_TYPES else 0
        field_type = c1.selectbox("Type", FIELD_TYPES, index=index)
        unit = c2.text_input("Unit", value=(field.unit or "") if field else "")
        description = st.text_input("Description", value=(field.description or "") if field else "")
        options_text = st.text_area(
            "Options (select fields, one `key: label` per line)",
            value=format_field_options(field.options) if field else "",
        )
        o1, o2 = st.columns(2)
        is_required = o1.checkbox("Required", value=field.is_required if field else False)
        sort_order = o2.number_input("Sort order", value=field.sort_order if field else 100, step=1)
        submitted = st.form_submit_button("Save field" if field else "Add field", type="primary")

    if not submitted:
        return None
    data: Dict[str, Any] = {
        "name": name.strip(),
        "field_type": field_type,
        "unit": unit or None,
        "description": description or None,
        "is_required": is_required,
        "sort_order": int(sort_order),
        "options": parse_field_options(options_text) if field_type == "select" else None,
    }
    if field is None:
        data["key"] = key.strip() or _slug(name)
    if field_type == "select" and not data["options"]:
        st.error("Select fields need at least one `key: label` option.")
        return None
    return data


def _render_fields(vt: VehicleType) -> None:
    fields = call_api(lambda s: s.vehicle_type_fields.get_for_type(vt.id), error="Failed to load fields", default=[])
    defaults = [f for f in fields if f.is_default]
    custom = [f for f in fields if not f.is_default]

    if defaults:
        st.markdown("**Default fields** (shared, read-only)")
        st.dataframe(
            pd.DataFrame(
                [{"Name": f.name, "Key": f.key, "Type": f.field_type, "Unit": f.unit or "",
                  "Required": "✅" if f.is_required else ""} for f in defaults]
            ),
            hide_index=True,
            use_container_width=True,
        )

    st.markdown("**Custom fields**")
    if not custom:
        st.caption("No custom fields yet.")
    for f in custom:
        with st.expander(f"{f.name} · `{f.key}` · {f.field_type}{' · required' if f.is_required else ''}"):
            changes = _field_form(f"edit_{f.id}", f)
            if changes is not None:
                if call_api(lambda s: s.vehicle_type_fields.update(f, changes), error="Failed to update field") is not None:
                    flash(f"Field '{changes['name']}' updated.")
                    st.rerun()
            if confirm_button("Delete field", f"delete_field_{f.id}", f"Delete field '{f.name}'?"):
                if call_api(lambda s: s.vehicle_type_fields.delete(f), error="Failed to delete field",
                            default=False) is not False:
                    flash("Field deleted.")
                    st.rerun()

    st.markdown("**Add field**")
    data = _field_form(f"new_{vt.id}")
    if data is not None:
        if call_api(lambda s: s.vehicle_type_fields.create(vt.id, data), error="Failed to add field") is not None:
            flash(f"Field '{data['name']}' added.")
            st.rerun()


def _render_vehicles_of_type(vt: VehicleType) -> None:
    vehicles = call_api(lambda s: s.vehicles.get_by_type(vt.id), error="Failed to load vehicles", default=[])
    if not vehicles:
        st.caption("No vehicles of this type.")
        return
    for v in vehicles:
        c1, c2 = st.columns([5, 1])
        c1.markdown(f"**{vehicle_display_name(v)}** · {v.status}")
        if c2.button("Open", key=f"type_vehicle_{v.id}"):
            navigate("vehicle_detail", id=v.id)


# =============================================================================
# Page
# =============================================================================


def render() -> None:
    render_breadcrumbs("/dashboard/vehicle-types")
    st.title("🏷️ Vehicle Types")
    st.caption("Define the kinds of vehicles in your fleet and the fields recorded for each.")

    _render_create_type()
    vehicle_types = call_api(lambda s: s.vehicle_types.get_all(), error="Failed to load vehicle types", default=[])
    if not vehicle_types:
        st.info("No vehicle types yet.")
        return

    st.dataframe(
        pd.DataFrame(
            [{"Name": vt.name, "Description": vt.description or "", "Active": "✅" if vt.is_active else "",
              "Shared": "" if vt.tenant_id else "✅"} for vt in vehicle_types]
        ),
        hide_index=True,
        use_container_width=True,
    )

    by_id = {vt.id: vt for vt in vehicle_types}
    current = st.session_state.get(SELECTED_TYPE_KEY)
    ids = list(by_id)
    selected = st.selectbox(
        "Manage type", ids, index=ids.index(current) if current in by_id else 0,
        format_func=lambda i: by_id[i].name,
    )
    st.session_state[SELECTED_TYPE_KEY] = selected
    vt = by_id[selected]

    details, fields, vehicles = st.tabs(["Details", "Fields", "Vehicles"])
    with details:
        _render_edit_type(vt)
    with fields:
        _render_fields(vt)
    with vehicles:
        _render_vehicles_of_type(vt)
