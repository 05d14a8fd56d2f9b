"""
Public vehicle lookup, the page a printed QR code opens.

No sign-in: the vehicle is resolved from ``?token=``; ``&category=`` drills into
one document type.
"""
from __future__ import annotations

import html

import streamlit as st

from fleetdash.domain.models import PublicDocument, PublicVehicle
from fleetdash.domain.rules import (
    FILE_KIND_ICONS,
    document_category_icon,
    document_file_url,
    file_kind,
    format_file_size_mb,
    group_documents_by_type,
    public_vehicle_name,
)
from fleetdash.infra.clock import parse_date
from fleetdash.infra.exceptions import ErrorHandler, FleetDashException, NotFoundError
from fleetdash.infra.logging import get_logger
from fleetdash.web.components.badges import vehicle_status_html
from fleetdash.web.framework.state import get_param
from fleetdash.web.framework.user_context import app_settings
from fleetdash.web.utils import load_public_category, load_public_vehicle

logger = get_logger(__name__)


def _not_found(message: str = "") -> None:
    st.error("### Vehicle Not Found")
    st.caption(message or "The vehicle you are looking for does not exist or the link is invalid.")


def _header(vehicle: PublicVehicle) -> None:
    st.caption(f"🚚 {app_settings().app_name} · Vehicle Management System")
    st.title(public_vehicle_name(vehicle))
    st.markdown(
        f'<span class="fd-badge fd-outline">{html.escape(vehicle.vehicle_type)}</span> '
        + vehicle_status_html(vehicle.status),
        unsafe_allow_html=True,
    )


def _document_row(doc: PublicDocument) -> None:
    api_url = app_settings().api_url
    c1, c2 = st.columns([5, 1])
    lines = [f"{FILE_KIND_ICONS[file_kind(doc.file_type, doc.file_path)]} **{doc.document_name}**"]
    if doc.document_number:
        lines.append(f"#{doc.document_number}")
    expiry = parse_date(doc.expiry_date)
    if expiry:
        lines.append(
            f":red[⚠ Expired: {expiry:%Y-%m-%d}]" if doc.is_expired else f":green[✓ Valid until: {expiry:%Y-%m-%d}]"
        )
    lines.append(f":gray[{format_file_size_mb(doc.file_size)}]")
    c1.markdown("  \n".join(lines))
    if doc.file_path:
        c2.link_button("Download", document_file_url(api_url, doc.file_path), use_container_width=True)


def _render_vehicle(token: str, vehicle: PublicVehicle) -> None:
    _header(vehicle)

    with st.container(border=True):
        st.markdown("#### Vehicle Information")
        if vehicle.field_values:
            cols = st.columns(2)
            for i, fv in enumerate(vehicle.field_values):
                with cols[i % 2]:
                    st.caption(fv.name.upper())
                    st.markdown(f"**{fv.display}**")
        else:
            st.caption("No vehicle information available")

    st.markdown("### 📁 Documents")
    groups = group_documents_by_type(vehicle.documents)
    if not groups:
        st.info("No Documents Available: no documents have been uploaded for this vehicle yet")
        return
    for doc_type, docs in groups.items():
        icon, _ = document_category_icon(doc_type)
        with st.expander(f"{icon} {doc_type} · {len(docs)} document{'s' if len(docs) != 1 else ''}"):
            for doc in docs:
                _document_row(doc)
            if st.button("Open category", key=f"cat_{doc_type}"):
                st.query_params.update({"token": token, "category": doc_type})
                st.rerun()


def _render_category(token: str, vehicle: PublicVehicle, category: str) -> None:
    if st.button("◀ Back to vehicle"):
        st.query_params.clear()
        st.query_params["token"] = token
        st.rerun()
    icon, color = document_category_icon(category)
    st.markdown(f"<h2 style='color:{color}'>{icon} {html.escape(category)}</h2>", unsafe_allow_html=True)
    st.caption(public_vehicle_name(vehicle))
    try:
        docs = load_public_category(token, category)
    except FleetDashException as e:
        ErrorHandler(logger).handle_and_log(e, {"token": token, "category": category})
        st.error("Error Loading Documents")
        st.caption(e.message or "Failed to load documents")
        return
    if not docs:
        st.info(f"No {category} documents available.")
    for doc in docs:
        with st.container(border=True):
            _document_row(doc)


def render() -> None:
    token = get_param("token")
    if not token:
        _not_found("No vehicle token in the link.")
        return
    try:
        vehicle = load_public_vehicle(token)
    except NotFoundError as e:
        _not_found(e.message)
        return
    except FleetDashException as e:
        ErrorHandler(logger).handle_and_log(e, {"token": token})
        _not_found(e.message)
        return

    category = get_param("category")
    if category:
        _render_category(token, vehicle, category)
    else:
        _render_vehicle(token, vehicle)

    st.divider()
    st.caption(f"Powered by {app_settings().app_name} · Professional Vehicle Management System")
