"""HTML badges rendered through ``st.markdown(..., unsafe_allow_html=True)``."""
from __future__ import annotations

import html
from typing import Optional

import streamlit as st

from fleetdash.domain.rules import (
    BadgeStyle,
    compliance_score_style,
    compliance_status_badge,
    document_status_badge,
    operational_status_badge,
    vehicle_status_style,
)


def badge_html(style: BadgeStyle) -> str:
    label = html.escape(f"{style.icon} {style.label}".strip())
    title = f' title="{html.escape(style.tooltip)}"' if style.tooltip else ""
    if style.variant == "outline":
        return (
            f'<span class="fd-badge fd-outline" style="color:{style.color};'
            f'background:{style.color}26"{title}>{label}</span>'
        )
    return f'<span class="fd-badge fd-solid" style="background:{style.color}"{title}>{label}</span>'


def render_badge(style: BadgeStyle) -> None:
    st.markdown(badge_html(style), unsafe_allow_html=True)


def compliance_status_html(status: Optional[str]) -> str:
    return badge_html(compliance_status_badge(status))


def operational_status_html(status: Optional[str], can_operate: Optional[bool] = None) -> str:
    return badge_html(operational_status_badge(status, can_operate))


def vehicle_status_html(status: Optional[str]) -> str:
    return badge_html(vehicle_status_style(status))


def document_status_html(doc) -> str:
    return badge_html(document_status_badge(doc))


def score_ring_html(score: Optional[float], size: int = 48, show_label: bool = True) -> str:
    """Circular compliance score (radius 18 ring in a 50x50 viewBox)."""
    s = compliance_score_style(score)
    stroke = {32: 3, 48: 4, 64: 5}.get(size, 4)
    ring = f"""
    <svg width="{size}" height="{size}" viewBox="0 0 50 50" style="transform: rotate(-90deg)">
      <circle cx="25" cy="25" r="18" stroke="#e5e7eb" stroke-width="{stroke}" fill="transparent"/>
      <circle cx="25" cy="25" r="18" stroke="{s.color}" stroke-width="{stroke}" fill="transparent"
              stroke-dasharray="{s.circumference:.2f}" stroke-dashoffset="{s.dash_offset:.2f}"
              stroke-linecap="round"/>
    </svg>"""
    label = '<span class="fd-muted">Compliance Score</span>' if show_label else ""
    return f"""
    <div style="display:flex;align-items:center;gap:0.5rem;">
      <div style="position:relative;width:{size}px;height:{size}px;">
        {ring}
        <div style="position:absolute;inset:0;display:flex;align-items:center;justify-content:center;
                    font-weight:700;font-size:0.75rem;color:{s.color};">{s.score}%</div>
      </div>
      {label}
    </div>"""


def render_score_ring(score: Optional[float], size: int = 48, show_label: bool = True) -> None:
    st.markdown(score_ring_html(score, size, show_label), unsafe_allow_html=True)
