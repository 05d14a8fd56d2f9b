"""Documents across the fleet, plus per-vehicle upload and edit (``?vehicle=`` / ``&document=``)."""
from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

from fleetdash.domain.models import DocumentType, Vehicle, VehicleDocument
from fleetdash.domain.rules import (
    document_file_url,
    document_status_badge,
    document_type_name,
    format_file_size,
    vehicle_display_name,
)
from fleetdash.infra.clock import parse_date
from fleetdash.services import DocumentForm
from fleetdash.web.components.breadcrumbs import render_breadcrumbs
from fleetdash.web.components.confirm import confirm_button
from fleetdash.web.config import PAGES
from fleetdash.web.framework.state import flash, get_int_param, navigate
from fleetdash.web.framework.user_context import app_settings
from fleetdash.web.services.api_bridge import call_api
from fleetdash.web.utils import to_upload

UPLOAD_TYPES = ["pdf", "jpg", "jpeg", "png", "doc", "docx", "xls", "xlsx"]
STATUS_FILTERS = ("All", "Expired", "Expiring Soon", "Valid", "No Expiry")


def _file_link(col, doc: VehicleDocument, label: str = "Open") -> None:
    if doc.file_path:
        col.link_button(label, document_file_url(app_settings().api_url, doc.file_path), use_container_width=True)


def _delete(doc: VehicleDocument) -> bool:
    vehicle_id = doc.vehicle_id
    return call_api(
        lambda s: s.documents.delete_document(vehicle_id, doc.id),
        error="Failed to delete document",
        default=False,
    ) is not False


def _documents_frame(docs: List[VehicleDocument], names: Dict[int, str]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Document Type": document_type_name(d),
                "Document Name": d.document_name,
                "Document Number": d.document_number or "-",
                "Vehicle": d.vehicle_name or names.get(d.vehicle_id, f"Vehicle #{d.vehicle_id}"),
                "Expiry": (d.expiry_date or "")[:10],
                "Status": document_status_badge(d).label,
                "Size": format_file_size(d.file_size),
            }
            for d in docs
        ]
    )


# =============================================================================
# All documents
# =============================================================================


async def _load_all(s):
    return await asyncio.gather(s.documents.get_all_documents(), s.vehicles.get_all())


def render_all() -> None:
    render_breadcrumbs("/dashboard/documents")
    st.title("📄 Documents")
    st.caption("Every document uploaded for your fleet.")

    loaded = call_api(_load_all, error="Failed to load documents")
    if loaded is None:
        return
    documents, vehicles = loaded
    names = {v.id: vehicle_display_name(v) for v in vehicles}

    f1, f2, f3 = st.columns([3, 2, 2])
    search = f1.text_input("Search", placeholder="Name, number or vehicle...")
    type_options = ["All"] + sorted({document_type_name(d) for d in documents})
    type_filter = f2.selectbox("Document type", type_options)
    status_filter = f3.selectbox("Status", STATUS_FILTERS)

    needle = search.strip().lower()
    shown = [
        d for d in documents
        if (type_filter == "All" or document_type_name(d) == type_filter)
        and (status_filter == "All" or document_status_badge(d).label == status_filter)
        and (not needle or needle in " ".join(
            [d.document_name, d.document_number or "", names.get(d.vehicle_id, "")]).lower())
    ]

    up1, up2 = st.columns([3, 1])
    upload_vehicle = up1.selectbox(
        "Upload for vehicle", [None] + list(names),
        format_func=lambda i: "Select a vehicle..." if i is None else names[i],
    )
    if up2.button("Upload document", disabled=upload_vehicle is None, use_container_width=True):
        navigate("documents", vehicle=upload_vehicle)

    st.caption(f"{len(shown)} of {len(documents)} documents")
    if not shown:
        st.info("No documents found.")
        return

    event = st.dataframe(
        _documents_frame(shown, names),
        hide_index=True,
        use_container_width=True,
        on_select="rerun",
        selection_mode="single-row",
        key="documents_table",
    )
    rows = event.selection.rows if event else []
    if not rows:
        return
    doc = shown[rows[0]]
    a1, a2, a3, a4 = st.columns(4)
    _file_link(a1, doc, "Download")
    if a2.button("Edit", use_container_width=True):
        navigate("documents", vehicle=doc.vehicle_id, document=doc.id)
    if a3.button("Vehicle", use_container_width=True):
        navigate("vehicle_detail", id=doc.vehicle_id)
    with a4:
        if confirm_button("Delete", f"delete_doc_{doc.id}", f"Delete '{doc.document_name}'?"):
            if _delete(doc):
                flash("Document deleted successfully")
                st.rerun()


# =============================================================================
# Per vehicle
# =============================================================================


def _document_form(
    key: str, doc_types: List[DocumentType], doc: Optional[VehicleDocument] = None
) -> Optional[DocumentForm]:
    by_id = {t.id: t for t in doc_types}
    ids = list(by_id)
    current_type = doc.document_type_id if doc else None
    with st.form(key, clear_on_submit=doc is None):
        type_id = st.selectbox(
            "Document Type *", ids, index=ids.index(current_type) if current_type in by_id else 0,
            format_func=lambda i: f"{by_id[i].name}{' (required)' if by_id[i].is_required else ''}",
        )
        c1, c2 = st.columns(2)
        name = c1.text_input("Document Name *", value=doc.document_name if doc else "")
        number = c2.text_input("Document Number", value=(doc.document_number or "") if doc else "")
        uploaded = st.file_uploader("Document File" + ("" if doc else " *"), type=UPLOAD_TYPES)
        d1, d2 = st.columns(2)
        issue = d1.date_input("Issue Date", value=parse_date(doc.issue_date) if doc else None)
        expiry = d2.date_input("Expiry Date", value=parse_date(doc.expiry_date) if doc else None)
        notes = st.text_area("Notes", value=(doc.notes or "") if doc else "")
        submitted = st.form_submit_button("Save changes" if doc else "Upload", type="primary")

    if not submitted:
        return None
    if not name.strip():
        st.error("Document name is required.")
        return None
    if doc is None and uploaded is None:
        st.error("Please choose a file to upload.")
        return None
    return DocumentForm(
        document_type_id=type_id,
        document_name=name.strip(),
        document_number=number or None,
        file=to_upload(uploaded),
        issue_date=issue,
        expiry_date=expiry,
        notes=notes or None,
    )


async def _load_vehicle(s, vehicle_id: int):
    return await asyncio.gather(
        s.vehicles.get_one(vehicle_id),
        s.documents.get_vehicle_documents(vehicle_id),
        s.documents.get_document_types_for_vehicle(vehicle_id),
    )


def _render_edit(vehicle: Vehicle, doc: VehicleDocument, doc_types: List[DocumentType]) -> None:
    st.subheader(f"Edit {doc.document_name}")
    if doc.file_path:
        _file_link(st, doc, "Current file")
    form = _document_form(f"edit_doc_{doc.id}", doc_types, doc)
    if form is not None:
        updated = call_api(
            lambda s: s.documents.update_document(vehicle.id, doc.id, form),
            error="Failed to update document",
        )
        if updated is not None:
            flash("Document updated.")
            navigate("documents", vehicle=vehicle.id)
    if st.button("Cancel"):
        navigate("documents", vehicle=vehicle.id)


def _render_new_document_type(vehicle: Vehicle) -> None:
    with st.expander("Missing a document type? Create one"):
        with st.form(f"new_doc_type_{vehicle.id}", clear_on_submit=True):
            name = st.text_input("Type name *")
            description = st.text_input("Description")
            submitted = st.form_submit_button("Create type")
        if submitted:
            created = call_api(
                lambda s: s.documents.create_document_type(name, description, vehicle.vehicle_type_id),
                error="Failed to create document type",
            )
            if created is not None:
                flash(f"Document type '{created.name}' created.")
                st.rerun()


def render_vehicle(vehicle_id: int) -> None:
    loaded = call_api(lambda s: _load_vehicle(s, vehicle_id), error="Failed to load vehicle documents")
    if loaded is None:
        return
    vehicle, documents, doc_types = loaded
    name = vehicle_display_name(vehicle)
    render_breadcrumbs(f"/dashboard/vehicles/{vehicle_id}/documents")
    st.title(f"📄 {name}: documents")
    if st.button("◀ All documents"):
        navigate("documents")

    document_id = get_int_param("document")
    if document_id is not None:
        doc = call_api(lambda s: s.documents.get_document(vehicle_id, document_id), error="Failed to load document")
        if doc is None:
            st.page_link(PAGES["documents"], label="Back to documents", icon="📄")
        else:
            _render_edit(vehicle, doc, doc_types)
            return

    if not documents:
        st.info("No Documents Yet")
    for doc in documents:
        with st.container(border=True):
            c1, c2, c3, c4, c5 = st.columns([4, 2, 1, 1, 1])
            c1.markdown(f"**{doc.document_name}**  \n{document_type_name(doc)} · {format_file_size(doc.file_size)}")
            c2.markdown(document_status_badge(doc).label)
            _file_link(c3, doc)
            if c4.button("Edit", key=f"edit_{doc.id}"):
                navigate("documents", vehicle=vehicle_id, document=doc.id)
            with c5:
                if confirm_button("Delete", f"delete_doc_{doc.id}", "Delete this document?"):
                    if _delete(doc):
                        flash("Document deleted successfully")
                        st.rerun()

    st.subheader("Upload document")
    _render_new_document_type(vehicle)
    if not doc_types:
        st.info("No document types are configured for this vehicle type.")
        return
    form = _document_form(f"upload_doc_{vehicle_id}", doc_types)
    if form is not None:
        created = call_api(
            lambda s: s.documents.create_document(vehicle_id, form),
            error="Failed to upload document",
        )
        if created is not None:
            flash(f"Uploaded '{created.document_name}'.")
            st.rerun()


def render() -> None:
    vehicle_id = get_int_param("vehicle")
    if vehicle_id is None:
        render_all()
    else:
        render_vehicle(vehicle_id)
