from fleetdash.web.framework.page import init_page, PageSpec
from fleetdash.web.pages_impl.vehicle_import import render

# MUST be the first Streamlit command on this page
init_page(PageSpec(title="Import Vehicles", icon="📥"))

render()
