"""
MGNREGA district dashboard (Marathi / English).

Run with:
    streamlit run frontend/streamlit_app.py
"""

import pandas as pd
import requests
import streamlit as st

from api_client import TrackerApiClient, error_message
from selection import STATE_KEY, DISTRICT_KEY, picker_index, remember_detection

st.set_page_config(page_title="मनरेगा जिल्हा माहिती | MGNREGA District Tracker", page_icon="🌾", layout="centered")

client = TrackerApiClient()


@st.cache_data(ttl=3600)
def load_states():
    return client.states()


@st.cache_data(ttl=3600)
def load_districts(state):
    return client.districts(state)


@st.cache_data(ttl=600)
def load_district_data(state, district):
    return client.district_data(state, district)


def change_label(change):
    if change > 0:
        return f"▲ {change}%"
    if change < 0:
        return f"▼ {abs(change)}%"
    return "—"


st.title("🌾 मनरेगा जिल्हा माहिती")
st.caption("MGNREGA District Performance Tracker")

try:
    states = load_states()
except requests.exceptions.RequestException as e:
    st.error(f"सर्व्हरशी संपर्क होऊ शकला नाही | {error_message(e)}")
    st.stop()

state_names = {s["stateCode"]: s["stateName"] for s in states}
state_codes = list(state_names)
state = st.selectbox(
    "राज्य निवडा | Select state",
    state_codes,
    index=picker_index(state_codes, st.session_state.get(STATE_KEY)),
    format_func=state_names.get,
)

# Location detection by coordinates
with st.expander("📍 माझे ठिकाण शोधा | Detect my location"):
    col_lat, col_lng = st.columns(2)
    lat = col_lat.text_input("Latitude")
    lng = col_lng.text_input("Longitude")
    notice = st.session_state.pop("location_notice", None)
    if notice:
        st.success(notice)
    if st.button("शोधा | Detect") and lat and lng:
        try:
            result = client.detect_location(lat, lng)
        except requests.exceptions.RequestException as e:
            result = {"detected": False, "message": error_message(e)}
        if remember_detection(st.session_state, result):
            st.session_state["location_notice"] = f"✅ {result['district']}"
            st.rerun()
        else:
            st.warning(result.get("message", "Location not detected. Please select manually."))

districts = load_districts(state)
if not districts:
    st.info("या राज्यासाठी जिल्हे उपलब्ध नाहीत | No districts available for this state")
    st.stop()

district = st.selectbox(
    "जिल्हा निवडा | Select district",
    districts,
    index=picker_index(districts, st.session_state.get(DISTRICT_KEY)),
)

try:
    data = load_district_data(state, district)
except requests.exceptions.RequestException as e:
    st.error(error_message(e))
    st.stop()

current = data["current"]
comparison = data["comparison"]
state_avg = comparison["stateAvg"]

st.subheader(data["district"])
st.caption(f"शेवटचे अद्यतन | Last updated: {data.get('lastUpdated') or '-'}")

col1, col2 = st.columns(2)
col1.metric(
    "कुटुंबांना काम | Households worked",
    f"{current['householdsWorked']:,}",
    change_label(comparison["lastMonth"]["change"]),
)
col2.metric("सक्रिय कामगार | Active workers", f"{current['activeWorkers']:,}")

col3, col4 = st.columns(2)
col3.metric("महिला कामगार | Women workers", f"{current['womenWorkers']:,}")
col4.metric("सरासरी दिवस | Avg days of work", current["avgDays"])

st.metric("सरासरी मजुरी | Avg daily wage", f"₹{current['avgWage']}")

st.markdown("#### राज्य सरासरीशी तुलना | Compared with state average")
if state_avg["position"] == "above":
    st.success(f"⬆️ राज्य सरासरीपेक्षा जास्त | Above state average ({state_avg['value']:,} households)")
else:
    st.warning(f"⬇️ राज्य सरासरीपेक्षा कमी | Below state average ({state_avg['value']:,} households)")

st.table(pd.DataFrame(
    {
        "हा जिल्हा | This district": [current["householdsWorked"], current["avgDays"], current["avgWage"]],
        "राज्य सरासरी | State average": [state_avg["value"], state_avg["avgDays"], state_avg["avgWage"]],
    },
    index=["Households", "Avg days", "Avg wage (₹)"],
))

st.markdown("#### मागील कालावधी | Previous periods")
st.write(
    f"गेल्या महिन्यात | Last month: {comparison['lastMonth']['previousValue']:,} "
    f"({change_label(comparison['lastMonth']['change'])})"
)
st.write(
    f"गेल्या वर्षी | Last year: {comparison['lastYear']['previousValue']:,} "
    f"({change_label(comparison['lastYear']['change'])})"
)

if data["historical"]:
    history = pd.DataFrame(data["historical"]).set_index("month")
    st.markdown("#### कल | Trend")
    st.bar_chart(history["value"])
