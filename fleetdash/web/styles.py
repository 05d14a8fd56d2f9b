import streamlit as st

from fleetdash.web.framework.user_context import app_settings


def load_fleet_style():
    """Badge, card and print CSS shared by every page"""
    st.markdown("""
        <style>
        /* badges */
        .fd-badge {
            display: inline-flex;
            align-items: center;
            gap: 0.3rem;
            padding: 0.1rem 0.55rem;
            border-radius: 9999px;
            font-size: 0.78rem;
            font-weight: 600;
            line-height: 1.4;
            text-transform: capitalize;
            white-space: nowrap;
        }
        .fd-badge.fd-solid { color: #ffffff; }
        .fd-badge.fd-outline { background: transparent; border: 1px solid currentColor; }

        /* cards */
        .fd-card {
            border: 1px solid #e5e7eb;
            border-radius: 0.75rem;
            padding: 1rem 1.25rem;
            margin-bottom: 0.75rem;
            background: #ffffff;
        }
        .fd-card h4 { margin: 0 0 0.25rem 0; }
        .fd-muted { color: #6b7280; font-size: 0.85rem; }

        /* breadcrumbs */
        .fd-crumbs { font-size: 0.85rem; color: #6b7280; margin-bottom: 0.75rem; }
        .fd-crumbs a { color: #6b7280; text-decoration: none; }
        .fd-crumbs a:hover { color: #111827; }
        .fd-crumbs .fd-current { color: #111827; font-weight: 500; }

        /* alert banner */
        .fd-banner {
            border: 1px solid rgba(239, 68, 68, 0.5);
            background: rgba(239, 68, 68, 0.05);
            color: #b91c1c;
            border-radius: 0.5rem;
            padding: 0.6rem 1rem;
        }

        /* QR grid */
        .fd-qr-card { text-align: center; }
        .fd-qr-card svg { width: 160px; height: 160px; }
        @media print {
            section[data-testid="stSidebar"], header[data-testid="stHeader"], .fd-no-print { display: none !important; }
            .fd-qr-card { break-inside: avoid; }
        }
        </style>
    """, unsafe_allow_html=True)


def render_sidebar_header():
    """Logo block at the top of the sidebar"""
    name = app_settings().app_name
    st.sidebar.markdown(f"""
        <div style="padding-bottom: 1.25rem; padding-left: 0.5rem;">
            <div style="display: flex; align-items: center; gap: 0.75rem;">
                <div style="width: 32px; height: 32px; background-color: #1d4ed8; border-radius: 6px; display: flex; align-items: center; justify-content: center;">
                    <span style="color: white; font-weight: bold; font-size: 18px;">🚚</span>
                </div>
                <div>
                    <div style="font-weight: 600; font-size: 1rem; color: #111827;">{name}</div>
                    <div style="font-size: 0.75rem; color: #6b7280;">Fleet compliance</div>
                </div>
            </div>
        </div>
    """, unsafe_allow_html=True)
