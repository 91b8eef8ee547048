# -----------------------------------------------------------------------------
# Streamlit Frontend for unitconvert
# Purpose:
#   Minimal UI to (1) browse the unit table, (2) run a conversion or evaluate
#   an expression through the API, rendering the result and its trace.
#
#---------------------------------------------------------------------------

import os, json, requests, streamlit as st
from dotenv import load_dotenv

# Load .env to pick API_URL at runtime for local/remote backends
load_dotenv()
API_URL = os.getenv("API_URL","http://127.0.0.1:8000")

# Page setup and header
st.set_page_config(page_title="unitconvert", layout="centered")
st.title("Unit Converter")

# ---------------- Sidebar: Unit Explorer --------------------------------------
with st.sidebar:
    st.subheader("Known units")
    if st.checkbox("Show units"):
        r = requests.get(f"{API_URL}/units")
        if r.status_code == 200:
            data = r.json()
            st.caption(f"{data['count']} units in {len(data['categories'])} categories")
            category = st.selectbox("Category", ["All"] + data["categories"])
            rows = [{
                "unit": it["unit"], "category": it["category"],
                "abbreviations": ", ".join(it["abbreviations"]),
            } for it in data["items"] if category == "All" or it["category"] == category]
            st.dataframe(rows, use_container_width=True, height=400)
        else:
            st.error(f"Units error: {r.text}")

# ---------------- Main Form: Convert / Evaluate -------------------------------
with st.form("qform"):
    q = st.text_input("Conversion or expression", value="2km -> nmi")
    mode = st.radio("Mode", ["Convert", "Evaluate"], horizontal=True)
    submit = st.form_submit_button("Run")

if submit and q.strip():
    if mode == "Convert":
        r = requests.post(f"{API_URL}/convert", json={"query": q})
    else:
        r = requests.post(f"{API_URL}/evaluate", json={"expression": q, "variables": {}})

    if r.status_code != 200:
        # FastAPI errors carry the message in `detail`
        try:
            st.error(r.json().get("detail", r.text))
        except ValueError:
            st.error(r.text)
        st.stop()

    res = r.json()
    if mode == "Convert":
        st.success(f"{res['value']} {res['to_unit']}")
        st.caption(f"{res['from_unit']} → {res['to_unit']} ({res['category']})")
        with st.expander("Trace"):
            st.code(json.dumps(res.get("steps", []), indent=2))
    else:
        st.success(f"{res['value']}")
