import streamlit as st

PALETTE = {
    "low": "#2e7d32",
    "indeterminate": "#f9a825",
    "high": "#c62828",
    "info": "#455a64",
}

# every form widget key starts with this so a new patient can clear them all
WIDGET_PREFIX = "w_"


def color_box(text: str, level: str = "info"):
    col = PALETTE.get(level, "#455a64")
    st.markdown(
        f"""
        <div style=\"background:{col};padding:12px;border-radius:8px;color:white;font-weight:600;\">{text}</div>
        """,
        unsafe_allow_html=True,
    )


def widget_key(name: str) -> str:
    return f"{WIDGET_PREFIX}{name}"


def text_field(label: str, name: str, value: str, area: bool = False) -> str:
    key = widget_key(name)
    widget = st.text_area if area else st.text_input
    if key in st.session_state:
        return widget(label, key=key)
    return widget(label, value=value, key=key)


def clear_widgets() -> None:
    for k in [k for k in st.session_state.keys() if str(k).startswith(WIDGET_PREFIX)]:
        del st.session_state[k]
