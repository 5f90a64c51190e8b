"""Transient ORM builders for tests that never touch a database."""
from datetime import datetime
from typing import Optional

from bracket_engine.orm import BracketNode, SportsGame

TIPOFF = datetime(2026, 3, 19, 12, 0, 0)


def make_node(
    node_id: str,
    slot: str,
    round_no: int,
    home: Optional[str] = None,
    away: Optional[str] = None,
    next_id: Optional[str] = None,
    side: Optional[str] = None,
    game_id: Optional[str] = None,
    seed_home: Optional[int] = None,
    seed_away: Optional[int] = None,
    region: Optional[str] = None,
) -> BracketNode:
    return BracketNode(
        id=node_id,
        tournament_id="t-1",
        slot=slot,
        round=round_no,
        region=region,
        home_team_name=home,
        away_team_name=away,
        next_node_id=next_id,
        next_node_side=side,
        sports_game_id=game_id,
        seed_home=seed_home,
        seed_away=seed_away,
    )


def make_game(
    game_id: str,
    home: str,
    away: str,
    home_score: Optional[int] = None,
    away_score: Optional[int] = None,
    status: str = "scheduled",
    start_time: Optional[datetime] = None,
) -> SportsGame:
    return SportsGame(
        id=game_id,
        home_team=home,
        away_team=away,
        home_score=home_score,
        away_score=away_score,
        status=status,
        start_time=start_time,
    )

