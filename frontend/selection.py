"""
State and district picker state for the dashboard, kept in st.session_state.
"""

STATE_KEY = "state"
DISTRICT_KEY = "district"


def picker_index(options, preferred):
    """Index of the preferred option, or 0 when it is not offered."""
    options = list(options)
    return options.index(preferred) if preferred in options else 0


def remember_detection(store, result) -> bool:
    """Store a successful detection so both pickers select it on the next run."""
    if not result.get("detected"):
        return False
    store[STATE_KEY] = result["state"]
    store[DISTRICT_KEY] = result["district"]
    return True
