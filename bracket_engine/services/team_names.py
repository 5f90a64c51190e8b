"""
Team name matching and feed status normalisation.

Score feeds and bracket seeding rarely agree on spelling
("Saint Mary's (CA)" vs "St. Mary's"), so every comparison between a
feed team and a bracket node side goes through these helpers.
"""
import re
from typing import Optional

from bracket_engine.orm.bracket import GameStatus, NodeSide

_LEADING_THE = re.compile(r"^THE\s+")
_FILLER_WORDS = re.compile(r"\bUNIVERSITY\b|\bUNIV\b\.?|\bCOLLEGE\b|\bOF\b")
_NON_ALNUM = re.compile(r"[^A-Z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_team_name(name: str) -> str:
    """Upper-case, drop "THE"/"UNIVERSITY"/"COLLEGE"/"OF" and punctuation."""
    value = name.strip().upper()
    value = _LEADING_THE.sub("", value)
    value = _FILLER_WORDS.sub("", value)
    value = _NON_ALNUM.sub("", value)
    value = _WHITESPACE.sub(" ", value)
    return value.strip()


def names_match(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    if a == b:
        return True
    na = normalize_team_name(a)
    nb = normalize_team_name(b)
    if not na or not nb:
        return False
    if na == nb:
        return True
    return na in nb or nb in na


def match_node_side(
    team_name: str,
    home_team_name: Optional[str],
    away_team_name: Optional[str],
) -> Optional[NodeSide]:
    """
    Map a feed team name onto one side of a node.

    Returns None when neither or both sides match; an ambiguous match is
    never guessed. Exact normalised equality wins over containment, so
    "Kansas State" is not confused with "Kansas".
    """
    target = normalize_team_name(team_name)
    home_exact = bool(home_team_name) and normalize_team_name(home_team_name) == target
    away_exact = bool(away_team_name) and normalize_team_name(away_team_name) == target
    if home_exact != away_exact:
        return NodeSide.HOME if home_exact else NodeSide.AWAY

    home = names_match(team_name, home_team_name)
    away = names_match(team_name, away_team_name)
    if home and not away:
        return NodeSide.HOME
    if away and not home:
        return NodeSide.AWAY
    return None


def map_feed_status(raw: Optional[str]) -> str:
    """Normalise a provider status string to a GameStatus value."""
    if not raw:
        return GameStatus.SCHEDULED.value
    s = raw.lower().strip()
    if s in ("match finished", "ft", "aet", "final", "completed", "closed"):
        return GameStatus.FINAL.value
    if s in ("not started", "ns", "scheduled", "pre", "upcoming"):
        return GameStatus.SCHEDULED.value
    if "live" in s or "progress" in s or s == "active" or s[:1].isdigit():
        return GameStatus.IN_PROGRESS.value
    if s in ("postponed", "pst"):
        return GameStatus.POSTPONED.value
    if s in ("cancelled", "canc"):
        return GameStatus.CANCELLED.value
    return s
