from fleetdash.web.framework.page import init_page, PageSpec
from fleetdash.web.pages_impl.qr_grid import render

# MUST be the first Streamlit command on this page
init_page(PageSpec(title="Vehicle QR Codes", icon="🔳", public=True))

render()
