"""Per-vehicle compliance: overview, records table, add / quick-add forms and history."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional, Tuple

import pandas as pd
import streamlit as st

from fleetdash.data.api_client import FileUpload
from fleetdash.domain.models import ComplianceRecord, ComplianceStatus, ComplianceType
from fleetdash.domain.rules import compliance_status_badge, suggest_expiry_date, vehicle_display_name
from fleetdash.infra.clock import format_date, today
from fleetdash.infra.exceptions import AuthenticationError, FleetDashException
from fleetdash.infra.logging import get_logger
from fleetdash.services import ComplianceRecordForm
from fleetdash.web.components.badges import (
    compliance_status_html,
    operational_status_html,
    render_score_ring,
)
from fleetdash.web.components.breadcrumbs import render_breadcrumbs
from fleetdash.web.components.confirm import confirm_button
from fleetdash.web.components.loading import loading_overlay
from fleetdash.web.config import PAGES
from fleetdash.web.framework.state import flash, get_int_param
from fleetdash.web.services.api_bridge import call_api
from fleetdash.web.utils import to_upload

logger = get_logger(__name__)

MAX_UPLOAD_BYTES = 100 * 1024 * 1024
QUEUE_KEY = "compliance_quick_queue"


@dataclass
class QueuedRecord:
    compliance_type: ComplianceType
    issue_date: date
    expiry_date: date
    file: Optional[FileUpload]


# =============================================================================
# Overview
# =============================================================================


def render_overview(status: Optional[ComplianceStatus]) -> None:
    if status is None:
        st.error("Failed to load compliance status")
        if st.button("Retry", key="overview_retry"):
            st.rerun()
        return

    summary = status.summary
    c1, c2, c3 = st.columns([1, 1, 2])
    with c1.container(border=True):
        st.markdown("**Compliance Score**")
        render_score_ring(summary.compliance_score, size=64, show_label=False)
        st.caption(f"Vehicle is {summary.overall_status.replace('_', ' ', 1)}")
    with c2.container(border=True):
        st.markdown("**Requirements**")
        st.markdown(f"## {summary.total_requirements}")
        st.caption(f"🟢 {summary.compliant} · 🟠 {summary.at_risk} · 🔴 {summary.expired} · ⚪ {summary.pending}")
        st.markdown(
            operational_status_html(status.operational_status, summary.can_operate), unsafe_allow_html=True
        )
    with c3.container(border=True, height=260):
        st.markdown("**Required Items**")
        requirements = status.required + status.optional
        if not requirements:
            st.caption("No requirements configured for this vehicle.")
        for req in requirements:
            left, right = st.columns([3, 2])
            left.markdown(f"{req.label}  \n:gray[{req.category.capitalize()}]")
            parts = [compliance_status_html(req.status)]
            if req.days_until_expiry is not None:
                days = req.days_until_expiry
                text = f"{abs(days)} days overdue" if days < 0 else f"{days} days left"
                color = "#ef4444" if req.is_overdue or days < 30 else "#6b7280"
                parts.insert(0, f'<span style="color:{color};font-size:0.75rem">{text}</span>')
            right.markdown(" ".join(parts), unsafe_allow_html=True)


# =============================================================================
# Records table
# =============================================================================


def _records_frame(records: List[ComplianceRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Type": r.compliance_type.name if r.compliance_type else f"Type #{r.compliance_type_id}",
                "Issue Date": (r.issue_date or "")[:10],
                "Expiry Date": (r.expiry_date or "")[:10],
                "Status": compliance_status_badge(r.status).label,
                "Approved": "✅" if r.is_approved else "",
                "Documents": len(r.documents),
            }
            for r in records
        ]
    )


def _delete_records(vehicle_id: int, record_ids: List[int]) -> Tuple[int, int]:
    return call_api(
        lambda s: s.compliance.delete_compliance_records(vehicle_id, record_ids),
        error="Failed to delete records",
        default=(0, len(record_ids)),
    )


def _render_history(vehicle_id: int, requirement_id: int) -> None:
    history = call_api(
        lambda s: s.compliance.get_compliance_history(vehicle_id, requirement_id),
        error="Failed to load history",
    )
    if history is None:
        return
    st.markdown(f"**{history.compliance_type_name}** history")
    if not history.history:
        st.caption("No previous records.")
        return
    st.dataframe(
        pd.DataFrame(
            [
                {
                    "Issue Date": (h.issue_date or "")[:10],
                    "Expiry Date": (h.expiry_date or "")[:10],
                    "Status": h.status,
                    "Current": "✅" if h.is_current else "",
                }
                for h in history.history
            ]
        ),
        hide_index=True,
        use_container_width=True,
    )


def _render_record_actions(vehicle_id: int, record: ComplianceRecord) -> None:
    a1, a2, a3, a4 = st.columns(4)
    with a1.popover("History", use_container_width=True):
        if record.vehicle_compliance_requirement_id:
            _render_history(vehicle_id, record.vehicle_compliance_requirement_id)
        else:
            st.caption("Record is not linked to a requirement.")
    with a2:
        if record.documents:
            doc = call_api(
                lambda s: s.compliance.download_compliance_document(vehicle_id, record.id),
                error="Failed to download document",
                toast=True,
            )
            if doc is not None:
                st.download_button(
                    "Download",
                    doc.content,
                    file_name=doc.filename or record.documents[0].document_name or "document",
                    mime=doc.content_type,
                    use_container_width=True,
                )
        else:
            st.button("Download", disabled=True, use_container_width=True, key=f"dl_{record.id}")
    with a3:
        if st.button("Approve", disabled=record.is_approved, use_container_width=True, key=f"approve_{record.id}"):
            if call_api(lambda s: s.compliance.approve_compliance_record(vehicle_id, record.id),
                        error="Failed to approve record") is not None:
                flash("Record approved.")
                st.rerun()
    with a4:
        if confirm_button("Delete", f"delete_record_{record.id}", "Delete this compliance record?"):
            ok, failed = _delete_records(vehicle_id, [record.id])
            if ok:
                flash("Record deleted successfully")
                st.rerun()


def render_records(vehicle_id: int, records: List[ComplianceRecord]) -> None:
    st.subheader("Compliance Records")
    st.caption("History of all compliance submissions and their status.")
    if not records:
        st.info("No compliance records yet.")
        return

    event = st.dataframe(
        _records_frame(records),
        hide_index=True,
        use_container_width=True,
        on_select="rerun",
        selection_mode="multi-row",
        key="compliance_records_table",
    )
    selected = [records[i] for i in (event.selection.rows if event else [])]
    if len(selected) == 1:
        _render_record_actions(vehicle_id, selected[0])
    elif len(selected) > 1:
        if confirm_button(
            f"Delete {len(selected)} selected", "bulk_delete_records",
            f"Delete {len(selected)} compliance records? This cannot be undone.",
            button_type="primary",
        ):
            ok, failed = _delete_records(vehicle_id, [r.id for r in selected])
            if failed:
                flash("Failed to delete some records", "error")
            else:
                flash(f"{ok} record(s) deleted successfully")
            st.rerun()


# =============================================================================
# Add forms
# =============================================================================


def _type_picker(types: List[ComplianceType], key: str) -> Optional[ComplianceType]:
    by_id = {t.id: t for t in types}
    chosen = st.selectbox(
        "Compliance type *",
        [None] + list(by_id),
        format_func=lambda i: "Select a type..." if i is None else f"{by_id[i].name} ({by_id[i].category})",
        key=key,
    )
    return by_id.get(chosen)


def _dates(ctype: Optional[ComplianceType], key: str) -> Tuple[Optional[date], Optional[date]]:
    d1, d2 = st.columns(2)
    issue = d1.date_input("Issue date *", value=today(), key=f"{key}_issue")
    suggested = suggest_expiry_date(issue, ctype.renewal_frequency_days if ctype else None)
    expiry = d2.date_input("Expiry date *", value=suggested, key=f"{key}_expiry_{ctype.id if ctype else 0}")
    if suggested:
        d2.caption(f"Suggested from a {ctype.renewal_frequency_days}-day renewal period.")
    return issue, expiry


def render_add_form(vehicle_id: int, types: List[ComplianceType]) -> None:
    ctype = _type_picker(types, "add_record_type")
    issue, expiry = _dates(ctype, "add_record")
    uploaded = st.file_uploader("Document", type=["pdf", "jpg", "jpeg", "png", "doc", "docx"], key="add_record_file")
    with st.form("add_compliance_record", clear_on_submit=True):
        p1, p2 = st.columns(2)
        provider = p1.text_input("Inspection provider")
        number = p2.text_input("Inspection / certificate number")
        notes = st.text_area("Notes")
        submitted = st.form_submit_button("Add Compliance", type="primary")

    if not submitted:
        return
    if ctype is None:
        st.error("Please select a compliance type")
        return
    if not issue or not expiry:
        st.error("Please select issue and expiry dates")
        return
    form = ComplianceRecordForm.for_type(
        ctype, issue, expiry, to_upload(uploaded),
        inspection_provider=provider or None, inspection_number=number or None, notes=notes or None,
    )
    created = call_api(
        lambda s: s.compliance.create_compliance_record(vehicle_id, form),
        error="Failed to create compliance record",
    )
    if created is not None:
        flash("Compliance record created successfully.")
        st.rerun()


def _upload_queue(
    vehicle_id: int, queue: List[QueuedRecord], progress: Callable[[int, str], None]
) -> Optional[Tuple[int, int]]:
    def report(i: int) -> None:
        progress(i * 100 // len(queue), f"Uploading {queue[i].compliance_type.name} ({i + 1}/{len(queue)})")

    forms = [
        ComplianceRecordForm.for_type(item.compliance_type, item.issue_date, item.expiry_date, item.file)
        for item in queue
    ]
    return call_api(
        lambda s: s.compliance.create_compliance_records(vehicle_id, forms, progress=report),
        error="Upload failed",
    )


def render_quick_add(vehicle_id: int, types: List[ComplianceType]) -> None:
    """Queue several records (type, dates, file) and upload them in one go."""
    queue: List[QueuedRecord] = st.session_state.setdefault(QUEUE_KEY, [])
    ctype = _type_picker(types, "quick_type")
    issue, expiry = _dates(ctype, "quick")
    uploaded = st.file_uploader("Document (max 100MB)", key="quick_file")

    q1, q2 = st.columns(2)
    if q1.button("Add to queue", use_container_width=True):
        if uploaded is not None and uploaded.size > MAX_UPLOAD_BYTES:
            st.error("File too large: maximum file size is 100MB")
        elif ctype is None:
            st.error("Please select a compliance type")
        elif not issue or not expiry:
            st.error("Please select issue and expiry dates")
        else:
            queue.append(QueuedRecord(ctype, issue, expiry, to_upload(uploaded)))
            st.toast("Record added to pending list.")

    if queue:
        st.markdown(f"**Pending ({len(queue)})**")
        for i, item in enumerate(queue):
            r1, r2 = st.columns([5, 1])
            r1.caption(
                f"{item.compliance_type.name} · {format_date(item.issue_date)} → {format_date(item.expiry_date)}"
                + (f" · 📎 {item.file.filename}" if item.file else "")
            )
            if r2.button("✕", key=f"dequeue_{i}"):
                queue.pop(i)
                st.rerun()

    if q2.button(f"Upload {len(queue)} record(s)", type="primary", disabled=not queue, use_container_width=True):
        with loading_overlay("Uploading records...") as progress:
            result = _upload_queue(vehicle_id, list(queue), progress)
        if result is None:
            return
        ok, failed = result
        st.session_state[QUEUE_KEY] = []
        if failed:
            flash(f"Failed to upload {failed} record(s).", "warning")
        else:
            flash(f"Uploaded {ok} record(s).")
        st.rerun()


# =============================================================================
# Page
# =============================================================================


async def _load(s, vehicle_id: int):
    vehicle, records, types = await asyncio.gather(
        s.vehicles.get_one(vehicle_id),
        s.compliance.get_vehicle_compliance_records(vehicle_id),
        s.compliance.get_vehicle_compliance_types(vehicle_id),
    )
    try:
        status = await s.compliance.get_vehicle_compliance_status(vehicle_id)
    except AuthenticationError:
        raise
    except FleetDashException as e:
        logger.error(f"Compliance status for vehicle {vehicle_id} failed: {e.message}")
        status = None
    return vehicle, records, types, status


def render() -> None:
    vehicle_id = get_int_param("id")
    if vehicle_id is None:
        st.warning("No vehicle selected.")
        st.page_link(PAGES["vehicles"], label="Back to vehicles", icon="🚚")
        return

    loaded = call_api(lambda s: _load(s, vehicle_id), error="Failed to load compliance data",
                      context={"vehicle_id": vehicle_id})
    if loaded is None:
        return
    vehicle, records, types, status = loaded

    render_breadcrumbs(f"/dashboard/vehicles/{vehicle_id}/compliance")
    st.title("🛡️ Vehicle Compliance")
    st.caption(f"{vehicle_display_name(vehicle)} · Manage compliance requirements, records, and documents.")

    render_overview(status)
    render_records(vehicle_id, records)

    st.subheader("Add compliance")
    if not types:
        st.info("No compliance types apply to this vehicle.")
        return
    single, quick = st.tabs(["Single record", "Quick add"])
    with single:
        render_add_form(vehicle_id, types)
    with quick:
        render_quick_add(vehicle_id, types)
