import os

import requests
import streamlit as st

from components import breakdown_html, score_html

API_BASE = os.getenv("TUBEMASTER_API_BASE", "http://127.0.0.1:8000")
API_COMPARE = f"{API_BASE}/api/v1/thumbnail/compare"

PAGE_TITLE = "Thumbnail A/B Simulator · TubeMaster"
FRIENDLY_ERROR = "Comparison temporarily unavailable. Please try again."

st.set_page_config(
    page_title=PAGE_TITLE,
    layout="wide",
    initial_sidebar_state="collapsed",
)

# ---------- STYLING ----------
st.markdown(
    """
    <style>
    [data-testid="stAppViewContainer"] {
        background:
            radial-gradient(circle at top left, #1f2937 0, transparent 55%),
            #020617;
        color: #e5e7eb;
    }

    .section-label {
        font-size: 0.78rem;
        text-transform: uppercase;
        color: #6b7280;
        margin-bottom: 0.55rem;
        letter-spacing: 0.12em;
    }

    .score {
        font-size: 2.6rem;
        font-weight: 700;
        color: #475569;
        text-align: center;
    }

    .score.winner {
        color: #4ade80;
    }

    .badge {
        font-size: 0.7rem;
        padding: 0.15rem 0.6rem;
        border-radius: 999px;
        font-weight: 600;
    }

    .badge-A { background: rgba(34,197,94,0.2); color: #4ade80; }
    .badge-B { background: rgba(59,130,246,0.2); color: #60a5fa; }
    </style>
    """,
    unsafe_allow_html=True,
)


def compare(file_a, file_b) -> dict:
    files = {
        "file_a": (file_a.name, file_a.getvalue(), file_a.type or "image/jpeg"),
        "file_b": (file_b.name, file_b.getvalue(), file_b.type or "image/jpeg"),
    }
    r = requests.post(API_COMPARE, files=files, timeout=180)
    r.raise_for_status()
    return r.json()


def render_score(result: dict, label: str) -> None:
    if result:
        st.markdown(score_html(result, label), unsafe_allow_html=True)


if "compare_result" not in st.session_state:
    st.session_state.compare_result = None

st.markdown("<h2 style='text-align:center;'>Thumbnail A/B Simulator</h2>", unsafe_allow_html=True)
st.markdown(
    "<p style='text-align:center;color:#94a3b8;'>Upload two thumbnails. "
    "The vision model sees them in random order to avoid first-position bias.</p>",
    unsafe_allow_html=True,
)

result = st.session_state.compare_result
col_a, col_b = st.columns(2)

with col_a:
    st.markdown('<div class="section-label">Thumbnail A</div>', unsafe_allow_html=True)
    upload_a = st.file_uploader("Upload A", type=["png", "jpg", "jpeg", "webp"], key="upload_a")
    if upload_a:
        st.image(upload_a, use_container_width=True)
    render_score(result, "A")

with col_b:
    st.markdown('<div class="section-label">Thumbnail B</div>', unsafe_allow_html=True)
    upload_b = st.file_uploader("Upload B", type=["png", "jpg", "jpeg", "webp"], key="upload_b")
    if upload_b:
        st.image(upload_b, use_container_width=True)
    render_score(result, "B")

st.write("")
if st.button("Analyze with Grok Vision ⚡", use_container_width=True):
    st.session_state.compare_result = None
    if not upload_a or not upload_b:
        st.warning("Please upload both thumbnails for analysis.")
    else:
        try:
            with st.spinner("Asking the vision model…"):
                st.session_state.compare_result = compare(upload_a, upload_b)
            st.rerun()
        except (requests.RequestException, ValueError):
            st.error(FRIENDLY_ERROR)

if result:
    st.markdown('<div class="section-label">Verdict</div>', unsafe_allow_html=True)
    st.write(result.get("reasoning", ""))

    st.markdown('<div class="section-label">Breakdown</div>', unsafe_allow_html=True)
    for item in result.get("breakdown", []):
        st.markdown(breakdown_html(item), unsafe_allow_html=True)
        st.caption(item.get("explanation", ""))
