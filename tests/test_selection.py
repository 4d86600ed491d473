from frontend.selection import DISTRICT_KEY, STATE_KEY, picker_index, remember_detection


def test_picker_index():
    assert picker_index(["MH", "KA"], "KA") == 1
    assert picker_index(["MH", "KA"], "GA") == 0
    assert picker_index(["MH"], None) == 0


def test_detection_sets_state_and_district():
    store = {STATE_KEY: "KA", DISTRICT_KEY: "Old"}
    assert remember_detection(store, {"state": "MH", "district": "पुणे (Pune)", "detected": True})
    assert store == {STATE_KEY: "MH", DISTRICT_KEY: "पुणे (Pune)"}


def test_failed_detection_keeps_selection():
    store = {STATE_KEY: "MH", DISTRICT_KEY: "पुणे (Pune)"}
    assert not remember_detection(store, {"detected": False, "message": "unavailable"})
    assert store == {STATE_KEY: "MH", DISTRICT_KEY: "पुणे (Pune)"}
