from __future__ import annotations

import html
from typing import List, Optional

import streamlit as st

from fleetdash.domain.rules import Breadcrumb, generate_breadcrumbs, header_breadcrumbs
from fleetdash.web.config import ROUTES, page_url_path


def _page_href(route: str) -> Optional[str]:
    """Map a dashboard route onto the Streamlit page URL, when one exists."""
    key = ROUTES.get(route)
    if key is None:
        return None
    path = page_url_path(key)
    return f"/{path}" if path else "/"


def render_breadcrumbs(route: str, items: Optional[List[Breadcrumb]] = None, header: bool = False) -> None:
    """
    Home › crumb › crumb; intermediate crumbs link when the route maps to a page.

    ``header=True`` uses the header trail, which keeps the ``dashboard`` segment
    instead of the home icon.
    """
    if items is not None:
        crumbs = items
    elif header:
        crumbs = header_breadcrumbs(route)
    else:
        crumbs = generate_breadcrumbs(route)
    parts = [] if header else [f'<a href="{_page_href("/dashboard")}" target="_self">🏠</a>']
    for crumb in crumbs:
        label = html.escape(crumb.label)
        href = _page_href(crumb.href) if crumb.href else None
        if href and not crumb.is_last:
            parts.append(f'<a href="{href}" target="_self">{label}</a>')
        else:
            parts.append(f'<span class="fd-current">{label}</span>')
    st.markdown(f'<nav class="fd-crumbs">{" › ".join(parts)}</nav>', unsafe_allow_html=True)
