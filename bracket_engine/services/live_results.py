"""
Live Result Ingestor — joins bracket nodes to live game records.

Produces the flattened node view the bracket UI and the scoring layer
read. A node that references a game missing from the fetched set keeps a
null liveGame and a null winner; it never raises.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from bracket_engine.orm.bracket import BracketNode, GameStatus, SportsGame
from bracket_engine.services.bracket_graph import BracketArena, winner_of

logger = logging.getLogger(__name__)

LIVE_POLL_INTERVAL_MS = 10_000
IDLE_POLL_INTERVAL_MS = 60_000


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class LiveGameView:
    home_score: Optional[int]
    away_score: Optional[int]
    status: str
    start_time: Optional[datetime]
    venue: Optional[str]
    fetched_at: Optional[datetime]

    @classmethod
    def from_game(cls, game: SportsGame) -> "LiveGameView":
        return cls(
            home_score=game.home_score,
            away_score=game.away_score,
            status=game.status,
            start_time=game.start_time,
            venue=game.venue,
            fetched_at=game.fetched_at,
        )

    @property
    def is_live(self) -> bool:
        return self.status == GameStatus.IN_PROGRESS.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "homeScore": self.home_score,
            "awayScore": self.away_score,
            "status": self.status,
            "startTime": _iso(self.start_time),
            "venue": self.venue,
            "fetchedAt": _iso(self.fetched_at),
        }


@dataclass
class NodeView:
    id: str
    slot: str
    round: int
    region: Optional[str]
    seed_home: Optional[int]
    seed_away: Optional[int]
    home_team_name: Optional[str]
    away_team_name: Optional[str]
    next_node_id: Optional[str]
    next_node_side: Optional[str]
    live_game: Optional[LiveGameView]
    winner: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "slot": self.slot,
            "round": self.round,
            "region": self.region,
            "seedHome": self.seed_home,
            "seedAway": self.seed_away,
            "homeTeamName": self.home_team_name,
            "awayTeamName": self.away_team_name,
            "nextNodeId": self.next_node_id,
            "nextNodeSide": self.next_node_side,
            "liveGame": self.live_game.to_dict() if self.live_game else None,
            "winner": self.winner,
        }


def attach_live_games(
    arena: BracketArena,
    games: Iterable[SportsGame],
) -> List[NodeView]:
    """Build one NodeView per node, in ascending round order."""
    games_by_id: Dict[str, SportsGame] = {g.id: g for g in games}
    views: List[NodeView] = []
    missing = 0

    for node in arena.in_round_order():
        game = games_by_id.get(node.sports_game_id) if node.sports_game_id else None
        if node.sports_game_id and game is None:
            missing += 1
        views.append(NodeView(
            id=node.id,
            slot=node.slot,
            round=node.round,
            region=node.region,
            seed_home=node.seed_home,
            seed_away=node.seed_away,
            home_team_name=node.home_team_name,
            away_team_name=node.away_team_name,
            next_node_id=node.next_node_id,
            next_node_side=node.next_node_side,
            live_game=LiveGameView.from_game(game) if game else None,
            winner=winner_of(node, game),
        ))

    if missing:
        logger.warning(f"{missing} node(s) reference games missing from the fetched set")

    return views


def has_live_games(views: Iterable[NodeView]) -> bool:
    return any(v.live_game is not None and v.live_game.is_live for v in views)


def poll_interval_ms(live: bool) -> int:
    """Client re-fetch hint; the engine itself does not enforce it."""
    return LIVE_POLL_INTERVAL_MS if live else IDLE_POLL_INTERVAL_MS


def winners_by_node(views: Iterable[NodeView]) -> Dict[str, Optional[str]]:
    return {v.id: v.winner for v in views}
