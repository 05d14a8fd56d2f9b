"""
Synchronous bridge from Streamlit page scripts to the async services.

Each call opens one aiohttp session, runs the coroutine with ``asyncio.run``
and closes the session again. A Streamlit rerun throws away the previous
script run, so there is nothing to cancel.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import streamlit as st

from fleetdash.data.api_client import FleetApiClient
from fleetdash.data.session_store import SessionStore
from fleetdash.infra.exceptions import AuthenticationError, ErrorHandler, FleetDashException
from fleetdash.infra.logging import get_logger
from fleetdash.services import (
    AlertsService,
    AuthService,
    ComplianceDashboardService,
    ComplianceService,
    DocumentService,
    PublicService,
    TenantService,
    VehicleService,
    VehicleTypeFieldService,
    VehicleTypeService,
)
from fleetdash.web.config import PAGES
from fleetdash.web.framework.state import flash
from fleetdash.web.framework.user_context import app_settings, get_session_store

logger = get_logger(__name__)
_error_handler = ErrorHandler(logger)

T = TypeVar("T")


@dataclass
class Services:
    client: FleetApiClient
    auth: AuthService
    tenant: TenantService
    vehicle_types: VehicleTypeService
    vehicle_type_fields: VehicleTypeFieldService
    vehicles: VehicleService
    documents: DocumentService
    compliance: ComplianceService
    compliance_dashboard: ComplianceDashboardService
    alerts: AlertsService
    public: PublicService

    @classmethod
    def build(cls, client: FleetApiClient, store: SessionStore) -> "Services":
        return cls(
            client=client,
            auth=AuthService(client, store),
            tenant=TenantService(client, store),
            vehicle_types=VehicleTypeService(client),
            vehicle_type_fields=VehicleTypeFieldService(client),
            vehicles=VehicleService(client),
            documents=DocumentService(client),
            compliance=ComplianceService(client),
            compliance_dashboard=ComplianceDashboardService(client),
            alerts=AlertsService(client),
            public=PublicService(client),
        )


async def _with_services(fn: Callable[[Services], Awaitable[T]], store: SessionStore, public: bool) -> T:
    settings = app_settings()
    async with FleetApiClient(settings.api_url, None if public else store, settings.request_timeout) as client:
        return await fn(Services.build(client, store))


def run_api(fn: Callable[[Services], Awaitable[T]], *, public: bool = False) -> T:
    """Run ``fn(services)`` to completion and return its result; errors propagate."""
    store = SessionStore() if public else get_session_store()
    return asyncio.run(_with_services(fn, store, public))


def call_api(
    fn: Callable[[Services], Awaitable[T]],
    *,
    error: str = "Request failed",
    default: Any = None,
    toast: bool = False,
    public: bool = False,
    context: Optional[Dict[str, Any]] = None,
) -> Any:
    """
    Run ``fn(services)`` and surface failures in the page

    Args:
        fn: coroutine function receiving the ``Services`` bundle
        error: headline of the error shown to the user
        default: returned when the call fails
        toast: show failures as a toast instead of an inline error
        public: send no credentials (QR pages)
        context: extra fields for the error log

    Returns:
        the coroutine's result, or ``default`` on failure
    """
    try:
        return run_api(fn, public=public)
    except AuthenticationError as e:
        _error_handler.handle_and_log(e, context)
        if public:
            st.error(f"{error}: {e.message}")
            return default
        flash(e.message, "warning")
        st.switch_page(PAGES["home"])
    except FleetDashException as e:
        _error_handler.handle_and_log(e, context)
        message = f"{error}: {_error_handler.user_message(e)}"
        if toast:
            st.toast(message, icon="❌")
        else:
            st.error(message)
        return default
