from dotenv import load_dotenv

load_dotenv(".env.local"); load_dotenv()  # also loads .env if present

# app.py
import os

import requests
import streamlit as st

st.set_page_config(page_title="New inspection", layout="wide")

BACKEND = os.getenv("BACKEND_URL", "http://127.0.0.1:8087")


def _error_detail(r: requests.Response) -> str:
    try:
        return r.json().get("detail", r.text)
    except ValueError:
        return r.text


@st.cache_data(ttl=60)
def load_templates():
    r = requests.get(f"{BACKEND}/templates", timeout=30)
    r.raise_for_status()
    return [t["template"] for t in r.json().get("templates", [])]


def load_fields(template: str):
    r = requests.get(f"{BACKEND}/fields", params={"template": template}, timeout=60)
    if not r.ok:
        st.error(f"Could not load fields: {_error_detail(r)}")
        return None
    return r.json().get("fields", [])


# ------------- Sidebar: template picking -------------
st.sidebar.title("Template")

# /start?doc_id=... on the backend redirects here with ?template=<file>
params = st.query_params
launched_template = params.get("template")

try:
    templates = load_templates()
except requests.RequestException as e:
    templates = []
    st.sidebar.warning(f"Template list unavailable: {e}")

if launched_template and launched_template not in templates:
    templates = [launched_template] + templates

if templates:
    default_idx = templates.index(launched_template) if launched_template else 0
    template = st.sidebar.selectbox("Select template", options=templates, index=default_idx)
else:
    template = st.sidebar.text_input("Template path", value=launched_template or "")

if st.sidebar.button("Reload templates"):
    load_templates.clear()
    st.rerun()


# ------------- Main: the form -------------
st.title("New inspection")

if not template:
    st.info("Pick a template in the sidebar to start.")
    st.stop()

st.caption(f"Template: `{template}`")
fields = load_fields(template)
if fields is None:
    st.stop()
if not fields:
    st.warning("This template has no fillable fields.")
    st.stop()

with st.form("inspection_form"):
    values = {}
    cols = st.columns(2)
    for i, name in enumerate(fields):
        with cols[i % 2]:
            values[name] = st.text_area(name, key=f"field::{template}::{name}", height=68)
    submitted = st.form_submit_button("Generate report")

if submitted:
    payload = {k: v for k, v in values.items() if v}
    with st.spinner("Filling template..."):
        try:
            r = requests.post(f"{BACKEND}/submit", params={"template": template}, json=payload, timeout=120)
        except requests.RequestException as e:
            st.error(f"Request failed: {e}")
            st.stop()
    if r.ok:
        st.session_state["report_pdf"] = r.content
        st.success(f"Report ready ({len(payload)} of {len(fields)} fields filled).")
    else:
        st.session_state.pop("report_pdf", None)
        st.error(f"Fill failed: {_error_detail(r)}")

if st.session_state.get("report_pdf"):
    st.download_button(
        "Download report.pdf",
        data=st.session_state["report_pdf"],
        file_name="report.pdf",
        mime="application/pdf",
    )
