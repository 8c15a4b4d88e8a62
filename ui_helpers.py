"""
ui_helpers.py
=============
Stateless display helpers shared by the Streamlit UI and the CLI.

These functions carry no game state of their own; they receive snapshots,
clues and cities as arguments. Keeping them separate from app.py means they
can be imported and tested in isolation without a live Streamlit session.

Contains:
  - group_clues_by_tier()  : evidence board, one column per difficulty tier
  - group_clues_by_city()  : evidence board, one section per source city
  - format_clue()          : one-line clue rendering with tier badge
  - progress_line()        : "City 2/5 · Score 5 · Attempts 2"
  - attempts_meter()       : filled/empty markers for remaining attempts
  - build_css()            : returns the full travel-dossier CSS string
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Dict, List, Mapping, Sequence

from config import GAME_CONFIG
from models import CLUE_TIERS, City, Clue

TIER_BADGES: Dict[str, str] = {
    "difficult": "🔴 Hard",
    "medium":    "🟡 Medium",
    "easy":      "🟢 Easy",
}


# ---------------------------------------------------------------------------
# Evidence board
# ---------------------------------------------------------------------------

def group_clues_by_tier(clues: Sequence[Clue]) -> Dict[str, List[Clue]]:
    """
    Bucket clues by difficulty tier, hardest first.

    Every tier key is present even when empty, so callers can lay out a
    fixed number of columns.
    """
    board: Dict[str, List[Clue]] = {tier: [] for tier in CLUE_TIERS}
    for clue in clues:
        board.setdefault(clue.difficulty, []).append(clue)
    return board


def group_clues_by_city(
    clues: Sequence[Clue],
    cities: Mapping[str, City],
) -> "OrderedDict[str, List[Clue]]":
    """
    Bucket clues by the city where they were heard, in collection order.

    Keys are display names; ids missing from `cities` are used as-is.
    """
    board: "OrderedDict[str, List[Clue]]" = OrderedDict()
    for clue in clues:
        city = cities.get(clue.source_city)
        label = city.name if city is not None else clue.source_city
        board.setdefault(label, []).append(clue)
    return board


def format_clue(clue: Clue) -> str:
    """
    Example:
        >>> format_clue(Clue("She bought pesos.", "easy", "rome", "buenos_aires"))
        '🟢 Easy · She bought pesos.'
    """
    badge = TIER_BADGES.get(clue.difficulty, clue.difficulty)
    return f"{badge} · {clue.text}"


# ---------------------------------------------------------------------------
# Status line
# ---------------------------------------------------------------------------

def attempts_meter(remaining: int, total: int = GAME_CONFIG.max_attempts) -> str:
    remaining = max(0, min(remaining, total))
    return "●" * remaining + "○" * (total - remaining)


def progress_line(
    route_index: int,
    route_length: int,
    score: int,
    attempts_remaining: int,
) -> str:
    """One-line status used by the CLI prompt and the Streamlit sidebar."""
    length = route_length or GAME_CONFIG.route_length
    return (
        f"City {route_index + 1}/{length} · Score {score} · "
        f"Attempts {attempts_meter(attempts_remaining)}"
    )


# ---------------------------------------------------------------------------
# Travel-dossier CSS
# ---------------------------------------------------------------------------

def build_css() -> str:
    """
    Return the CSS string injected into the Streamlit app.

    Returns:
        A raw CSS string (without <style> tags; the caller wraps it).
    """
    return """
    @import url('https://fonts.googleapis.com/css2?family=Special+Elite&family=Courier+Prime:wght@400;700&display=swap');

    /* ── Global background ── */
    html, body, .stApp, .main, .block-container {
        background: linear-gradient(180deg, #f4ecd8 0%, #efe3c4 100%) !important;
        color: #2b2118 !important;
    }

    /* ── Sidebar ── */
    [data-testid="stSidebar"], section[data-testid="stSidebar"] > div {
        background: #2b2118 !important;
        border-right: 1px solid #8a6d3b !important;
    }
    [data-testid="stSidebar"] p,
    [data-testid="stSidebar"] span,
    [data-testid="stSidebar"] div,
    [data-testid="stSidebar"] h3 { color: #f4ecd8 !important; }

    /* ── Typography ── */
    .main-header {
        text-align: center; color: #7a1f1f;
        font-family: 'Special Elite', cursive; letter-spacing: 3px;
    }
    .sub-header {
        text-align: center; color: #6b5a44;
        font-family: 'Courier Prime', monospace; font-style: italic;
    }

    /* ── Dossier cards ── */
    .city-card {
        background: #fffaf0; padding: 20px; border-radius: 4px;
        border-left: 4px solid #7a1f1f; box-shadow: 0 3px 10px rgba(0,0,0,0.15);
        font-family: 'Courier Prime', monospace;
    }
    .informant-line {
        background: #fdf6e3; border: 1px dashed #8a6d3b; border-radius: 6px;
        padding: 10px 14px; margin: 6px 0; font-family: 'Special Elite', cursive;
    }
    .clue-card {
        background: #fffdf7; border: 1px solid #d8c8a0; border-radius: 4px;
        padding: 8px 12px; margin: 4px 0; font-family: 'Courier Prime', monospace;
    }

    /* ── Score display ── */
    .score-display {
        font-size: 56px; font-weight: bold; text-align: center;
        color: #7a1f1f; font-family: 'Special Elite', cursive;
    }

    /* ── Buttons ── */
    .stButton > button {
        background: #fffaf0; color: #2b2118; border: 1px solid #8a6d3b;
        font-family: 'Courier Prime', monospace;
    }
    .stButton > button:hover { border-color: #7a1f1f; color: #7a1f1f; }
    .stButton > button[kind="primary"] { background: #7a1f1f; color: #fff; border: none; }

    /* ── Progress bars ── */
    .stProgress > div > div { background-color: #7a1f1f !important; }
    """
