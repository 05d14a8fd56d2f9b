"""
Endpoint wrappers, one class per API area.

Every service takes a ``FleetApiClient``; the auth and tenant services also
write the session store.
"""

from .alerts import AlertsService
from .auth import AuthService, OAuthCallback
from .compliance import ComplianceDashboardService, ComplianceRecordForm, ComplianceService
from .documents import DocumentForm, DocumentService
from .public import PublicService
from .tenant import TenantService
from .vehicles import VehicleService, VehicleTypeFieldService, VehicleTypeService

__all__ = [
    "AlertsService",
    "AuthService",
    "OAuthCallback",
    "ComplianceDashboardService",
    "ComplianceRecordForm",
    "ComplianceService",
    "DocumentForm",
    "DocumentService",
    "PublicService",
    "TenantService",
    "VehicleService",
    "VehicleTypeFieldService",
    "VehicleTypeService",
]
