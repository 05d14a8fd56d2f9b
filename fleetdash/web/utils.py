from __future__ import annotations

from typing import List, Optional

import streamlit as st

from fleetdash.data.api_client import FileUpload
from fleetdash.domain.models import PublicDocument, PublicVehicle
from fleetdash.web.services.api_bridge import run_api


@st.cache_data(ttl=60)
def load_public_vehicle(token: str) -> PublicVehicle:
    """
    Public vehicle page data, cached 60 seconds per token
    """
    return run_api(lambda s: s.public.get_vehicle(token), public=True)


@st.cache_data(ttl=60)
def load_public_category(token: str, category: str) -> List[PublicDocument]:
    return run_api(lambda s: s.public.get_category_documents(token, category), public=True)


@st.cache_data(ttl=300)
def load_tenant_vehicles(tenant_token: str) -> List[PublicVehicle]:
    """
    Every vehicle of a tenant for the QR grid, cached 5 minutes
    """
    return run_api(lambda s: s.public.get_tenant_vehicles(tenant_token), public=True)


def to_upload(uploaded) -> Optional[FileUpload]:
    """Streamlit ``UploadedFile`` -> multipart part."""
    if uploaded is None:
        return None
    return FileUpload(
        filename=uploaded.name,
        content=uploaded.getvalue(),
        content_type=uploaded.type or "application/octet-stream",
    )
