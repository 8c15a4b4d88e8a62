"""
app.py
======
Streamlit web UI for Informant Trail: Where in the World is Nadine Vuan?

Responsibilities:
  - Configure and render the Streamlit page (layout, travel-dossier theme).
  - Keep one GameEngine per browser session in st.session_state.
  - Render sidebar components (progress, attempts, evidence board).
  - Render main-panel components per phase (intro, investigation, travel,
    final encounter, conclusion / game over).

This file contains only UI logic. All game logic lives in game_engine.py,
catalog data in case_data.py / catalog.py, and shared display helpers in
ui_helpers.py. The UI reads GameSnapshot objects and calls engine actions;
it never edits SessionState directly.

Run with:
    streamlit run app.py
"""

from __future__ import annotations

import logging

import streamlit as st
from dotenv import load_dotenv

# Load .env before any game code runs so CATALOG_SOURCE etc. are available.
load_dotenv()

from config import RuntimeSettings

SETTINGS = RuntimeSettings.from_env()

# ---------------------------------------------------------------------------
# Logging configuration
#
# basicConfig is called here, at the Streamlit entry point. It is a no-op on
# reruns once the root logger has a handler, and every "informant_trail.*"
# logger propagates to it.
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=SETTINGS.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("informant_trail.app")

from errors import CatalogLoadError, InvalidActionError, RouteGenerationError
from game_engine import ActionResult, GameEngine, build_engine
from models import (
    PHASE_CONCLUSION,
    PHASE_GAME_OVER,
    PHASE_INTRO,
    PHASE_INVESTIGATION,
    PHASE_TRAVEL,
)
from scoring import summary
from ui_helpers import (
    TIER_BADGES,
    build_css,
    format_clue,
    group_clues_by_city,
    group_clues_by_tier,
    progress_line,
)


# ============================================================
# PAGE CONFIGURATION
# ============================================================

st.set_page_config(
    page_title="Where in the World is Nadine Vuan?",
    page_icon="🌍",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown(f"<style>{build_css()}</style>", unsafe_allow_html=True)


# ============================================================
# SESSION STATE
# ============================================================

def init_session_state() -> bool:
    """
    Create the per-browser GameEngine on first run.

    Returns:
        False when the catalog could not be loaded; the error is logged and
        a generic message is shown.
    """
    if "engine" in st.session_state:
        return True
    try:
        st.session_state.engine = build_engine(SETTINGS)
    except CatalogLoadError as exc:
        logger.error("Catalog load failed: %s (%s)", exc, exc.problems)
        st.error("The case files could not be loaded. Please refresh to try again.")
        return False
    st.session_state.last_result = None
    return True


def engine() -> GameEngine:
    return st.session_state.engine


def run_action(action, *args) -> None:
    """Call an engine action, keep its result for display, and rerun."""
    try:
        st.session_state.last_result = action(*args)
    except InvalidActionError as exc:
        st.warning(f"Not now: {exc.reason}")
        return
    except RouteGenerationError as exc:
        logger.error("Route generation failed: %s", exc)
        st.error("Could not plan a new case. Please try again.")
        return
    st.rerun()


def new_case() -> None:
    engine().restart()
    run_action(engine().start_game)


# ============================================================
# SIDEBAR
# ============================================================

def render_sidebar() -> None:
    snap = engine().snapshot()
    st.sidebar.markdown("### 🗺️ CASE STATUS")
    if snap.route_length:
        st.sidebar.markdown(
            progress_line(
                snap.route_index,
                snap.route_length,
                snap.stats.score,
                snap.stats.attempts_remaining,
            )
        )
        st.sidebar.progress(snap.stats.cities_completed / max(1, snap.route_length - 1))
    if snap.milestone and not snap.is_game_complete:
        st.sidebar.success("Nadine's final hideout is within reach!")

    st.sidebar.markdown("---")
    st.sidebar.markdown("### 🧾 EVIDENCE BOARD")
    view = st.sidebar.radio("Group by", ["Difficulty", "City"], horizontal=True)
    if not snap.clues:
        st.sidebar.caption("No clues collected yet.")
    elif view == "Difficulty":
        for tier, clues in group_clues_by_tier(snap.clues).items():
            if clues:
                st.sidebar.markdown(f"**{TIER_BADGES[tier]}**")
                for clue in clues:
                    st.sidebar.markdown(f"- {clue.text}")
    else:
        for city_name, clues in group_clues_by_city(snap.clues, engine().manager.cities_by_id).items():
            st.sidebar.markdown(f"**{city_name}**")
            for clue in clues:
                st.sidebar.markdown(f"- {format_clue(clue)}")

    if snap.clues_remaining:
        st.sidebar.caption(
            "Still to ask: "
            + " · ".join(f"{TIER_BADGES[t]} {n}" for t, n in snap.clues_remaining.items())
        )

    with st.sidebar.expander("🎲 Fairness"):
        st.json(engine().manager.fairness_tracker.stats())

    st.sidebar.markdown("---")
    if st.sidebar.button("🔄 NEW CASE", use_container_width=True):
        new_case()


# ============================================================
# MAIN PANEL
# ============================================================

def render_dialogue(result: ActionResult) -> None:
    for speaker, text in result.dialogue:
        st.markdown(
            f"<div class='informant-line'><b>{speaker}:</b> {text}</div>",
            unsafe_allow_html=True,
        )
    if result.message:
        st.caption(result.message)


def render_intro() -> None:
    st.markdown("<h1 class='main-header'>WHERE IN THE WORLD IS NADINE VUAN?</h1>", unsafe_allow_html=True)
    st.markdown(
        "<p class='sub-header'>Follow the informants. Read the clues. Find Nadine.</p>",
        unsafe_allow_html=True,
    )
    st.markdown(
        "Each informant tells you something about Nadine's next stop. Hard clues "
        "score more if you guess right; every wrong guess costs one of your attempts."
    )
    if st.button("🕵️ OPEN THE CASE", type="primary"):
        run_action(engine().start_game)


def render_investigation() -> None:
    snap = engine().snapshot()
    city = snap.current_city
    st.markdown(
        f"<div class='city-card'><h3>📍 {city.name}, {city.country}</h3>"
        f"Informant: {city.informant.name}</div>",
        unsafe_allow_html=True,
    )
    if st.session_state.last_result is not None:
        render_dialogue(st.session_state.last_result)

    if snap.encounter_line is not None:
        if st.button("➡️ CONTINUE", type="primary"):
            run_action(engine().continue_encounter)
        return

    col1, col2 = st.columns(2)
    with col1:
        if st.button("💬 ASK FOR CLUES", use_container_width=True):
            run_action(engine().request_clues)
    with col2:
        if st.button("✈️ TRAVEL", type="primary", use_container_width=True):
            run_action(engine().begin_travel)


def render_travel() -> None:
    snap = engine().snapshot()
    st.markdown(f"### ✈️ Departing {snap.current_city.name}")
    if st.session_state.last_result is not None:
        render_dialogue(st.session_state.last_result)

    options = engine().destination_options()
    labels = {f"{c.name}, {c.country}": c.id for c in options}
    choice = st.selectbox("Where did Nadine go?", list(labels))
    col1, col2 = st.columns(2)
    with col1:
        if st.button("🛫 FLY THERE", type="primary", use_container_width=True):
            run_action(engine().guess_destination, labels[choice])
    with col2:
        if st.button("↩️ BACK TO INVESTIGATION", use_container_width=True):
            run_action(engine().back_to_investigation)


def render_ending() -> None:
    snap = engine().snapshot()
    stats = summary(engine().state, engine().manager.catalog)
    if snap.has_won:
        st.markdown("<h1 class='main-header'>🎉 CASE CLOSED</h1>", unsafe_allow_html=True)
    else:
        st.markdown("<h1 class='main-header'>❌ THE TRAIL HAS GONE COLD</h1>", unsafe_allow_html=True)
        if st.session_state.last_result is not None:
            render_dialogue(st.session_state.last_result)
        if snap.failure_details is not None and snap.failure_details.next_destination:
            st.info(f"Nadine was heading to {snap.failure_details.next_destination}.")

    st.markdown(f"<div class='score-display'>{stats['score']}</div>", unsafe_allow_html=True)
    col1, col2, col3 = st.columns(3)
    col1.metric("Route", stats["route_progress"])
    col2.metric("Clues", stats["clues_collected"])
    col3.metric("Efficiency", f"{stats['efficiency']}%")
    st.caption(f"Path: {stats['path']} · Time {stats['elapsed']}")

    if st.button("🔄 NEW CASE", type="primary"):
        new_case()


def main() -> None:
    if not init_session_state():
        return

    render_sidebar()

    phase = engine().snapshot().phase
    if phase == PHASE_INTRO:
        render_intro()
    elif phase == PHASE_INVESTIGATION:
        render_investigation()
    elif phase == PHASE_TRAVEL:
        render_travel()
    elif phase in (PHASE_CONCLUSION, PHASE_GAME_OVER):
        render_ending()


if __name__ == "__main__":
    main()
