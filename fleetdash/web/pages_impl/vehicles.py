"""Vehicle list, create, detail and edit pages."""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
import streamlit as st

from fleetdash.domain.models import VEHICLE_STATUSES, Vehicle, VehicleTypeField
from fleetdash.domain.rules import (
    document_file_url,
    document_type_name,
    find_field_value,
    format_file_size,
    public_vehicle_url,
    vehicle_display_name,
)
from fleetdash.infra.clock import format_date, parse_date
from fleetdash.infra.exceptions import AuthenticationError, FleetDashException
from fleetdash.infra.logging import get_logger
from fleetdash.web.components.badges import (
    compliance_status_html,
    document_status_html,
    operational_status_html,
    score_ring_html,
    vehicle_status_html,
)
from fleetdash.web.components.breadcrumbs import render_breadcrumbs
from fleetdash.web.components.confirm import confirm_button
from fleetdash.web.components.qr import qr_png, render_qr
from fleetdash.web.config import PAGES
from fleetdash.web.framework.state import flash, get_int_param, navigate
from fleetdash.web.framework.user_context import app_settings
from fleetdash.web.services.api_bridge import call_api

logger = get_logger(__name__)

CAPACITY_UNITS = ("tons", "kg", "lbs", "cubic_meters", "liters", "gallons", "passengers")


# =============================================================================
# Dynamic type fields
# =============================================================================


def field_input(field: VehicleTypeField, current: Any, key_prefix: str) -> Any:
    """One widget per custom field, chosen by ``field_type``."""
    label = f"{field.name}{' *' if field.is_required else ''}"
    if field.unit:
        label += f" ({field.unit})"
    key = f"{key_prefix}_{field.key}"
    help_text = field.description or None

    if field.field_type == "number":
        try:
            value = float(current) if current not in (None, "") else None
        except (TypeError, ValueError):
            value = None
        return st.number_input(label, value=value, key=key, help=help_text)
    if field.field_type == "date":
        value = st.date_input(label, value=parse_date(current), key=key, help=help_text)
        return format_date(value)
    if field.field_type == "select" and field.options:
        options = [""] + list(field.options)
        index = options.index(current) if current in options else 0
        return st.selectbox(
            label, options, index=index, key=key, help=help_text,
            format_func=lambda k: field.options.get(k, "Select...") if k else "Select...",
        )
    if field.field_type == "textarea":
        return st.text_area(label, value=current or "", key=key, help=help_text)
    if field.field_type == "boolean":
        return st.checkbox(label, value=str(current).lower() in ("1", "true", "yes"), key=key, help=help_text)
    return st.text_input(label, value=current or "", key=key, help=help_text)


def collect_field_values(
    fields: Sequence[VehicleTypeField], current: Dict[str, Any], key_prefix: str
) -> Dict[str, Any]:
    """Render every field and return ``{key: value}`` with empty values left out."""
    values: Dict[str, Any] = {}
    cols = st.columns(2)
    for i, f in enumerate(fields):
        with cols[i % 2]:
            value = field_input(f, current.get(f.key), key_prefix)
        if value is not None and value != "":
            values[f.key] = value
    return values


def missing_required(fields: Sequence[VehicleTypeField], values: Dict[str, Any]) -> List[str]:
    return [f.name for f in fields if f.is_required and f.field_type != "boolean" and f.key not in values]


# =============================================================================
# List
# =============================================================================


def _filter_vehicles(vehicles: List[Vehicle], search: str, type_id: Optional[int], status: str) -> List[Vehicle]:
    s = search.strip().lower()
    result = []
    for v in vehicles:
        if type_id and v.vehicle_type_id != type_id:
            continue
        if status != "all" and v.status != status:
            continue
        if s:
            haystack = " ".join(
                str(x or "") for x in (vehicle_display_name(v), v.registration_number, v.vin, v.make, v.model)
            ).lower()
            if s not in haystack:
                continue
        result.append(v)
    return result


async def _load_list(s):
    return await asyncio.gather(s.vehicles.get_all(), s.vehicle_types.get_all())


def render_list() -> None:
    render_breadcrumbs("/dashboard/vehicles")
    head, new_col, import_col = st.columns([6, 2, 2])
    head.title("🚚 Vehicles")
    new_col.page_link(PAGES["new_vehicle"], label="Add vehicle", icon="➕")
    import_col.page_link(PAGES["import_vehicles"], label="Import", icon="📥")

    loaded = call_api(_load_list, error="Failed to load vehicles")
    if loaded is None:
        return
    vehicles, vehicle_types = loaded

    f1, f2, f3 = st.columns([3, 2, 2])
    search = f1.text_input("Search", placeholder="Name, registration, VIN...")
    type_names = {vt.id: vt.name for vt in vehicle_types}
    type_id = f2.selectbox(
        "Type", [None] + list(type_names), format_func=lambda t: "All types" if t is None else type_names[t]
    )
    status = f3.selectbox("Status", ("all",) + VEHICLE_STATUSES, format_func=lambda s: s.capitalize())

    shown = _filter_vehicles(vehicles, search, type_id, status)
    st.caption(f"{len(shown)} of {len(vehicles)} vehicles")
    if not shown:
        st.info("No vehicles match." if vehicles else "No vehicles yet. Add one or import a spreadsheet.")
        return

    df = pd.DataFrame(
        [
            {
                "ID": v.id,
                "Vehicle": vehicle_display_name(v),
                "Type": v.vehicle_type.name if v.vehicle_type else type_names.get(v.vehicle_type_id, ""),
                "Registration": v.registration_number or find_field_value(v.field_values, "registration") or "",
                "Status": v.status,
                "Compliance": (v.compliance_status or "").replace("_", " "),
            }
            for v in shown
        ]
    )
    event = st.dataframe(
        df,
        use_container_width=True,
        hide_index=True,
        on_select="rerun",
        selection_mode="single-row",
        key="vehicles_table",
    )
    selected_rows = event.selection.rows if event else []
    if not selected_rows:
        st.caption("Select a row to open, edit or delete a vehicle.")
        return

    vehicle = shown[selected_rows[0]]
    st.markdown(f"**{vehicle_display_name(vehicle)}** {vehicle_status_html(vehicle.status)}", unsafe_allow_html=True)
    a1, a2, a3, a4 = st.columns(4)
    if a1.button("View", use_container_width=True):
        navigate("vehicle_detail", id=vehicle.id)
    if a2.button("Edit", use_container_width=True):
        navigate("edit_vehicle", id=vehicle.id)
    if a3.button("Compliance", use_container_width=True):
        navigate("vehicle_compliance", id=vehicle.id)
    with a4:
        if confirm_button("Delete", f"delete_vehicle_{vehicle.id}",
                          f"Delete {vehicle_display_name(vehicle)}? This cannot be undone."):
            if call_api(lambda s: s.vehicles.delete(vehicle.id), error="Failed to delete vehicle", default=False) is not False:
                flash("Vehicle deleted.")
                st.rerun()


# =============================================================================
# Create
# =============================================================================


def render_new() -> None:
    render_breadcrumbs("/dashboard/vehicles/new")
    st.title("➕ Add vehicle")

    vehicle_types = call_api(lambda s: s.vehicle_types.get_all(), error="Failed to load vehicle types", default=[])
    if not vehicle_types:
        st.info("Create a vehicle type first.")
        st.page_link(PAGES["vehicle_types"], label="Vehicle types", icon="🏷️")
        return

    names = {vt.id: vt.name for vt in vehicle_types}
    type_id = st.selectbox("Vehicle type *", list(names), format_func=names.get, key="new_vehicle_type")
    fields = call_api(
        lambda s: s.vehicle_type_fields.get_for_type(type_id), error="Failed to load type fields", default=[]
    )

    with st.form("new_vehicle"):
        st.subheader("Basic information")
        c1, c2 = st.columns(2)
        name = c1.text_input("Vehicle name *")
        make = c2.text_input("Make/Manufacturer", placeholder="e.g., Caterpillar")
        model = c1.text_input("Model", placeholder="e.g., 320D")
        year = c2.number_input("Year", min_value=1900, max_value=2100, value=None, step=1)
        registration_number = c1.text_input("Registration number", placeholder="ABC-1234")
        vin = c2.text_input("VIN")
        serial_number = c1.text_input("Serial number")

        st.subheader("Specifications")
        s1, s2 = st.columns(2)
        capacity = s1.number_input("Capacity", value=None, step=0.01)
        capacity_unit = s2.selectbox("Capacity unit", CAPACITY_UNITS)
        specifications = st.text_area("Specifications")

        st.subheader("Status & purchase")
        p1, p2 = st.columns(2)
        status = p1.selectbox("Status", VEHICLE_STATUSES)
        purchase_date = p2.date_input("Purchase date", value=None)
        purchase_price = p1.number_input("Purchase price", value=None, step=0.01)
        notes = st.text_area("Notes")

        field_values: Dict[str, Any] = {}
        if fields:
            st.subheader("Type fields")
            field_values = collect_field_values(fields, {}, "new_field")

        submitted = st.form_submit_button("Create vehicle", type="primary")

    if not submitted:
        return
    if not name.strip():
        st.error("Vehicle name is required.")
        return
    missing = missing_required(fields, field_values)
    if missing:
        st.error(f"Required fields missing: {', '.join(missing)}")
        return

    data = {
        "vehicle_type_id": type_id,
        "name": name.strip(),
        "make": make or None,
        "model": model or None,
        "year": int(year) if year else None,
        "registration_number": registration_number or None,
        "vin": vin or None,
        "serial_number": serial_number or None,
        "capacity": capacity,
        "capacity_unit": capacity_unit if capacity else None,
        "specifications": specifications or None,
        "status": status,
        "purchase_date": format_date(purchase_date),
        "purchase_price": purchase_price,
        "notes": notes or None,
        "field_values": field_values or None,
    }
    created = call_api(
        lambda s: s.vehicles.create({k: v for k, v in data.items() if v is not None}),
        error="Failed to create vehicle",
    )
    if created is not None:
        flash(f"Vehicle '{vehicle_display_name(created)}' created.")
        navigate("vehicles")


# =============================================================================
# Detail
# =============================================================================


def _info_grid(pairs: List[tuple]) -> None:
    shown = [(label, value) for label, value in pairs if value not in (None, "")]
    if not shown:
        st.caption("Nothing recorded.")
        return
    cols = st.columns(2)
    for i, (label, value) in enumerate(shown):
        with cols[i % 2]:
            st.caption(label)
            st.markdown(f"**{value}**")


async def _load_detail(s, vehicle_id: int):
    vehicle, documents, status = await asyncio.gather(
        s.vehicles.get_one(vehicle_id),
        s.documents.get_vehicle_documents(vehicle_id),
        s.compliance.get_vehicle_compliance_status(vehicle_id),
        return_exceptions=True,
    )
    if isinstance(vehicle, BaseException):
        raise vehicle
    for part, value in (("documents", documents), ("compliance status", status)):
        if isinstance(value, AuthenticationError) or (
            isinstance(value, BaseException) and not isinstance(value, FleetDashException)
        ):
            raise value
        if isinstance(value, BaseException):
            logger.warning(f"Vehicle {vehicle_id}: {part} unavailable: {value}")
    return (
        vehicle,
        [] if isinstance(documents, BaseException) else documents,
        None if isinstance(status, BaseException) else status,
    )


def _vehicle_id_or_stop() -> int:
    vehicle_id = get_int_param("id")
    if vehicle_id is None:
        st.warning("No vehicle selected.")
        st.page_link(PAGES["vehicles"], label="Back to vehicles", icon="🚚")
        st.stop()
    return vehicle_id


def _not_found() -> None:
    st.subheader("Vehicle Not Found")
    st.page_link(PAGES["vehicles"], label="Back to Vehicles", icon="🚚")


def render_detail() -> None:
    vehicle_id = _vehicle_id_or_stop()
    loaded = call_api(lambda s: _load_detail(s, vehicle_id), error="Failed to load vehicle",
                      context={"vehicle_id": vehicle_id})
    if loaded is None:
        _not_found()
        return
    vehicle, documents, status = loaded
    name = vehicle_display_name(vehicle)
    render_breadcrumbs(f"/dashboard/vehicles/{vehicle_id}")

    head, badge_col = st.columns([5, 2])
    with head:
        st.title(name)
        st.caption(vehicle.vehicle_type.name if vehicle.vehicle_type else "Unknown Type")
    with badge_col:
        st.markdown(vehicle_status_html(vehicle.status), unsafe_allow_html=True)

    b1, b2, b3, b4 = st.columns(4)
    if b1.button("✏️ Edit", use_container_width=True):
        navigate("edit_vehicle", id=vehicle_id)
    if b2.button("🛡️ Compliance", use_container_width=True):
        navigate("vehicle_compliance", id=vehicle_id)
    if b3.button("📄 Documents", use_container_width=True):
        navigate("documents", vehicle=vehicle_id)
    with b4:
        if confirm_button("🗑️ Delete", f"delete_vehicle_{vehicle_id}", f"Delete {name}? This cannot be undone."):
            if call_api(lambda s: s.vehicles.delete(vehicle_id), error="Failed to delete vehicle", default=False) is not False:
                flash("Vehicle deleted.")
                navigate("vehicles")

    main, side = st.columns([2, 1])
    with main:
        with st.container(border=True):
            st.markdown("#### Basic Information")
            _info_grid([
                ("Make", vehicle.make),
                ("Model", vehicle.model),
                ("Year", vehicle.year),
                ("Registration Number", vehicle.registration_number),
                ("VIN", vehicle.vin),
                ("Serial Number", vehicle.serial_number),
            ])
        with st.container(border=True):
            st.markdown("#### Specifications")
            capacity = f"{vehicle.capacity:g} {vehicle.capacity_unit or ''}".strip() if vehicle.capacity else None
            _info_grid([("Capacity", capacity), ("Additional Specifications", vehicle.specifications)])
        with st.container(border=True):
            st.markdown("#### Purchase & Maintenance")
            price = f"${vehicle.purchase_price:,.2f}" if vehicle.purchase_price else None
            _info_grid([
                ("Purchase Date", vehicle.purchase_date and vehicle.purchase_date[:10]),
                ("Purchase Price", price),
                ("Last Service Date", vehicle.last_service_date and vehicle.last_service_date[:10]),
                ("Next Service Date", vehicle.next_service_date and vehicle.next_service_date[:10]),
                ("Notes", vehicle.notes),
            ])
        if vehicle.field_values:
            with st.container(border=True):
                st.markdown("#### Type fields")
                _info_grid([(fv.name, fv.display) for fv in vehicle.field_values])

        with st.container(border=True):
            st.markdown("#### Vehicle Documents")
            if not documents:
                st.caption("No Documents Yet")
            for doc in documents:
                c1, c2, c3 = st.columns([4, 2, 1])
                c1.markdown(f"**{doc.document_name}**  \n{document_type_name(doc)} · {format_file_size(doc.file_size)}")
                c2.markdown(document_status_html(doc), unsafe_allow_html=True)
                if doc.file_path:
                    c3.link_button("Open", document_file_url(app_settings().api_url, doc.file_path))

    with side:
        with st.container(border=True):
            st.markdown("#### Compliance")
            if status is None:
                st.caption("Compliance status unavailable.")
            else:
                st.markdown(score_ring_html(status.summary.compliance_score), unsafe_allow_html=True)
                st.markdown(
                    compliance_status_html(status.compliance_status) + " "
                    + operational_status_html(status.operational_status, status.summary.can_operate),
                    unsafe_allow_html=True,
                )
                st.caption(f"{status.summary.total_requirements} requirements")

        with st.container(border=True):
            st.markdown("#### Vehicle QR Code")
            if vehicle.qr_code_token:
                url = public_vehicle_url(app_settings().public_base_url, vehicle.qr_code_token)
                render_qr(url)
                st.caption("QR Code Contains:")
                st.code(url, language=None)
                st.download_button(
                    "Download PNG", qr_png(url), file_name=f"vehicle-{vehicle_id}-qr.png", mime="image/png"
                )
            else:
                st.caption("No QR token assigned.")


# =============================================================================
# Edit
# =============================================================================


async def _load_edit(s, vehicle_id: int):
    vehicle = await s.vehicles.get_one(vehicle_id)
    fields = await s.vehicle_type_fields.get_for_type(vehicle.vehicle_type_id) if vehicle.vehicle_type_id else []
    return vehicle, fields


def render_edit() -> None:
    vehicle_id = _vehicle_id_or_stop()
    with st.spinner("Loading vehicle data..."):
        loaded = call_api(lambda s: _load_edit(s, vehicle_id), error="Failed to load vehicle")
    if loaded is None:
        _not_found()
        return
    vehicle, fields = loaded
    name = vehicle_display_name(vehicle)
    render_breadcrumbs(f"/dashboard/vehicles/{vehicle_id}/edit")
    st.title(f"✏️ Edit {name}")

    current = {fv.key: fv.value for fv in vehicle.field_values if fv.key}
    with st.form("edit_vehicle"):
        index = VEHICLE_STATUSES.index(vehicle.status) if vehicle.status in VEHICLE_STATUSES else 0
        status = st.selectbox("Status", VEHICLE_STATUSES, index=index)
        field_values: Dict[str, Any] = {}
        if fields:
            st.subheader(vehicle.vehicle_type.name if vehicle.vehicle_type else "Fields")
            field_values = collect_field_values(fields, current, f"edit_{vehicle_id}")
        else:
            st.caption("This vehicle type has no custom fields.")
        save_col, cancel_col = st.columns(2)
        submitted = save_col.form_submit_button("Save changes", type="primary", use_container_width=True)
        cancelled = cancel_col.form_submit_button("Cancel", use_container_width=True)

    if cancelled:
        navigate("vehicle_detail", id=vehicle_id)
    if not submitted:
        return
    missing = missing_required(fields, field_values)
    if missing:
        st.error(f"Required fields missing: {', '.join(missing)}")
        return
    updated = call_api(
        lambda s: s.vehicles.update(vehicle_id, {"status": status, "field_values": field_values}),
        error="Failed to update vehicle. Please try again",
    )
    if updated is not None:
        flash("Vehicle updated.")
        navigate("vehicle_detail", id=vehicle_id)
