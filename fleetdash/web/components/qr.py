from __future__ import annotations

import io

import qrcode
import qrcode.image.svg
import streamlit as st


def qr_svg(data: str, box_size: int = 10) -> str:
    """Inline SVG markup for a QR code pointing at ``data``."""
    img = qrcode.make(data, image_factory=qrcode.image.svg.SvgPathImage, box_size=box_size)
    return img.to_string(encoding="unicode")


def qr_png(data: str, box_size: int = 10) -> bytes:
    """PNG bytes, for the download button."""
    qr = qrcode.QRCode(box_size=box_size, border=2)
    qr.add_data(data)
    qr.make(fit=True)
    buf = io.BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(buf, format="PNG")
    return buf.getvalue()


def render_qr(data: str, caption: str = "") -> None:
    st.markdown(f'<div class="fd-qr-card">{qr_svg(data)}</div>', unsafe_allow_html=True)
    if caption:
        st.caption(caption)
