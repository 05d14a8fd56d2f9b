from __future__ import annotations

import streamlit as st

from fleetdash.domain.models import BusinessRegistration
from fleetdash.domain.rules import format_validation_errors, validate_business_registration
from fleetdash.infra.exceptions import APIError, ErrorHandler, FleetDashException
from fleetdash.infra.logging import get_logger
from fleetdash.web.config import PAGES
from fleetdash.web.framework.state import flash
from fleetdash.web.services.api_bridge import run_api

logger = get_logger(__name__)

FALLBACK_ERROR = "Registration failed. Please try again."


def _submit(registration: BusinessRegistration) -> None:
    try:
        result = run_api(lambda s: s.tenant.register_business(registration))
    except APIError as e:
        ErrorHandler(logger).handle_and_log(e, {"business": registration.business_name})
        if e.validation_errors:
            st.error(format_validation_errors(e.validation_errors))
        else:
            st.error(e.server_message or FALLBACK_ERROR)
        return
    except FleetDashException as e:
        ErrorHandler(logger).handle_and_log(e, {"business": registration.business_name})
        st.error(FALLBACK_ERROR)
        return

    if result.success and result.token:
        flash(f"Welcome to {registration.business_name}!")
        st.switch_page(PAGES["dashboard"])
    st.error(result.message or FALLBACK_ERROR)


def render() -> None:
    st.title("🏢 Register your business")
    st.caption("Create a tenant account and its first administrator.")

    with st.form("register_business"):
        st.subheader("Business")
        business_name = st.text_input("Business name *")
        business_email = st.text_input("Business email *")
        c1, c2 = st.columns(2)
        business_phone = c1.text_input("Phone")
        business_address = c2.text_input("Address")

        st.subheader("Administrator")
        admin_name = st.text_input("Your name *")
        admin_email = st.text_input("Your email *")
        c3, c4 = st.columns(2)
        admin_password = c3.text_input("Password *", type="password")
        admin_password_confirmation = c4.text_input("Confirm password *", type="password")

        submitted = st.form_submit_button("Create account", type="primary", use_container_width=True)

    st.page_link(PAGES["home"], label="Already registered? Sign in", icon="🔐")

    if not submitted:
        return

    registration = BusinessRegistration(
        business_name=business_name,
        business_email=business_email.strip(),
        admin_name=admin_name,
        admin_email=admin_email.strip(),
        admin_password=admin_password,
        admin_password_confirmation=admin_password_confirmation,
        business_phone=business_phone or None,
        business_address=business_address or None,
    )
    errors = validate_business_registration(registration)
    if errors:
        for message in errors.values():
            st.error(message)
        return
    _submit(registration)
