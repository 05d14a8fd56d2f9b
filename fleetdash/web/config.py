from pathlib import Path

from fleetdash.infra.config import DATA_DIR, PROJECT_ROOT

PAGES_DIR = PROJECT_ROOT / "pages"
LOGS_DIR = DATA_DIR / "logs"

PAGE_TITLE_PREFIX = "FleetDash - "

# page key -> script path, as st.switch_page / st.page_link expect it
PAGES = {
    "home": "app.py",
    "dashboard": "pages/1_Dashboard.py",
    "vehicles": "pages/2_Vehicles.py",
    "new_vehicle": "pages/3_New_Vehicle.py",
    "vehicle_detail": "pages/4_Vehicle_Detail.py",
    "edit_vehicle": "pages/5_Edit_Vehicle.py",
    "vehicle_compliance": "pages/6_Vehicle_Compliance.py",
    "vehicle_types": "pages/7_Vehicle_Types.py",
    "import_vehicles": "pages/8_Import_Vehicles.py",
    "documents": "pages/9_Documents.py",
    "compliance": "pages/10_Compliance.py",
    "alerts": "pages/11_Alerts.py",
    "settings": "pages/12_Settings.py",
    "register_business": "pages/13_Register_Business.py",
    "public_vehicle": "pages/14_Public_Vehicle.py",
    "qr_grid": "pages/15_Fleet_QR_Grid.py",
}


def page_url_path(key: str) -> str:
    """URL path Streamlit derives from a page script name (``2_Vehicles.py`` -> ``Vehicles``)."""
    stem = Path(PAGES[key]).stem
    return stem.split("_", 1)[1] if stem[:1].isdigit() else ""


# dashboard route -> page key, used to resolve alert action links
ROUTES = {
    "/dashboard": "dashboard",
    "/dashboard/vehicles": "vehicles",
    "/dashboard/vehicles/new": "new_vehicle",
    "/dashboard/vehicles/import": "import_vehicles",
    "/dashboard/vehicle-types": "vehicle_types",
    "/dashboard/documents": "documents",
    "/dashboard/compliance": "compliance",
    "/dashboard/compliance/alerts": "alerts",
    "/dashboard/settings": "settings",
}
