from fleetdash.web.framework.page import init_page, PageSpec
from fleetdash.web.pages_impl.vehicles import render_list as render

# MUST be the first Streamlit command on this page
init_page(PageSpec(title="Vehicles", icon="🚚"))

render()
