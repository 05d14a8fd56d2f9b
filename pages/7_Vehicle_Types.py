from fleetdash.web.framework.page import init_page, PageSpec
from fleetdash.web.pages_impl.vehicle_types import render

# MUST be the first Streamlit command on this page
init_page(PageSpec(title="Vehicle Types", icon="🏷️"))

render()
