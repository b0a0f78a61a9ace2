"""Store-bound input widgets.

Each widget's session-state key is re-seeded from the store before it is
drawn, and edits reach the store only through on_change callbacks. Values the
store derives (an auto-filled debt payment, a reset) therefore always show up
in the widgets on the next run.
"""

import streamlit as st

from engine.validation import validate_financial_field


def _commit(key, on_commit):
    on_commit(st.session_state[key])


def bound_text_input(label, key, current, on_commit, field_type=None, **kwargs):
    """Text input showing `current`; an edit calls `on_commit(new_value)`."""
    st.session_state[key] = current
    st.text_input(label, key=key, on_change=_commit, args=(key, on_commit), **kwargs)
    if field_type is not None:
        check = validate_financial_field(current, field_type)
        if not check.is_valid:
            st.caption(f":red[{check.error}]")


def bound_checkbox(label, key, current, on_commit, **kwargs):
    st.session_state[key] = bool(current)
    st.checkbox(label, key=key, on_change=_commit, args=(key, on_commit), **kwargs)


def grid_key(prefix, *parts):
    """Data editor key that changes whenever the underlying records change.

    A data editor keeps its edits as a delta against the frame it was first
    given; a fresh key after every store change drops that delta so stale
    cells are never written back.
    """
    return f"{prefix}-{hash(parts) & 0xFFFFFFFF:08x}"


def reset_widgets(keep=("store",)):
    """Drop every widget value so the next run redraws from the store."""
    for key in list(st.session_state.keys()):
        if key not in keep:
            del st.session_state[key]
