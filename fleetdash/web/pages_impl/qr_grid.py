from __future__ import annotations

import html

import streamlit as st
import streamlit.components.v1 as components

from fleetdash.domain.rules import public_vehicle_name, public_vehicle_url, vehicle_status_style
from fleetdash.infra.exceptions import ErrorHandler, FleetDashException
from fleetdash.infra.logging import get_logger
from fleetdash.web.components.qr import qr_svg
from fleetdash.web.config import page_url_path
from fleetdash.web.framework.state import get_param
from fleetdash.web.framework.user_context import app_settings
from fleetdash.web.utils import load_tenant_vehicles

logger = get_logger(__name__)

COLUMNS = 3


def _print_button() -> None:
    components.html(
        '<button onclick="window.parent.print()" style="padding:0.4rem 1rem;border-radius:0.5rem;'
        'border:1px solid #cbd5e1;background:#fff;cursor:pointer">🖨️ Print All</button>',
        height=48,
    )


def render() -> None:
    tenant_token = get_param("tenant")
    if not tenant_token:
        st.error("Error: no tenant token in the link.")
        return
    try:
        vehicles = load_tenant_vehicles(tenant_token)
    except FleetDashException as e:
        ErrorHandler(logger).handle_and_log(e, {"tenant": tenant_token})
        st.error(f"Error: {e.message or 'Failed to load vehicles'}")
        return

    head, print_col = st.columns([4, 1])
    with head:
        st.title("Vehicle QR Codes")
        st.caption(f"{len(vehicles)} {'vehicle' if len(vehicles) == 1 else 'vehicles'} available")
    with print_col:
        _print_button()

    if not vehicles:
        st.info("No vehicles found for this business.")
        return

    base_url = app_settings().public_base_url
    page = page_url_path("public_vehicle")
    cols = st.columns(COLUMNS)
    for i, vehicle in enumerate(v for v in vehicles if v.qr_code_token):
        url = public_vehicle_url(base_url, vehicle.qr_code_token, page)
        status = vehicle_status_style(vehicle.status)
        with cols[i % COLUMNS]:
            st.markdown(
                f"""
                <div class="fd-qr-card">
                  <span class="fd-badge fd-outline" style="color:{status.color}">{html.escape(vehicle.status)}</span>
                  {qr_svg(url, box_size=6)}
                  <h4>{html.escape(public_vehicle_name(vehicle, grid=True))}</h4>
                  <p class="fd-muted">{html.escape(vehicle.vehicle_type.upper())}</p>
                  <code style="font-size:0.6rem">{html.escape(url)}</code>
                </div>
                """,
                unsafe_allow_html=True,
            )
            st.link_button("View Details", url, use_container_width=True)
