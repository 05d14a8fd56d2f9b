from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator

import streamlit as st


@contextmanager
def loading_overlay(message: str = "Loading...") -> Iterator[Callable[[int, str], None]]:
    """
    Spinner with a progress bar; yields ``update(percent, message)``.

    The bar is removed when the block exits, also on error.
    """
    bar = st.progress(0, text=message)

    def update(percent: int, text: str = message) -> None:
        bar.progress(max(0, min(100, int(percent))), text=text)

    try:
        with st.spinner(message):
            yield update
    finally:
        bar.empty()
