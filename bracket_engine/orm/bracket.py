"""
Bracket Models — tournament topology and live game records

Provides:
- Tournament instances (name, season, sport)
- Bracket nodes (one matchup slot each) linked into a single-elimination in-tree
- Sports games (externally sourced live score records)

Rules:
- Nodes are created once at seeding and never deleted
- Node mutation is limited to team names (winner propagation) and game linking
- Every node except the championship has exactly one outgoing edge
- No score column anywhere: standings are derived per read
"""
import enum

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey,
    Index, UniqueConstraint
)
from sqlalchemy.orm import relationship

from bracket_engine.orm.base import BaseModel


# =============================================================================
# Enums
# =============================================================================

class NodeSide(str, enum.Enum):
    """Which slot of the next-round node a winner feeds into."""
    HOME = "HOME"
    AWAY = "AWAY"


class GameStatus(str, enum.Enum):
    """
    Normalised live game status.

    Feeds may carry other raw values; those are stored verbatim and
    treated as "not live, not final".
    """
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINAL = "final"
    POSTPONED = "postponed"
    CANCELLED = "cancelled"


# =============================================================================
# Tournament
# =============================================================================

class Tournament(BaseModel):
    """
    A bracket instance. Created once by an organizer; metadata only
    is editable afterwards.
    """
    __tablename__ = "bracket_tournaments"

    name = Column(String(200), nullable=False)
    season = Column(Integer, nullable=False)
    sport = Column(String(32), nullable=False)

    nodes = relationship(
        "BracketNode",
        back_populates="tournament",
        order_by="BracketNode.round",
    )

    __table_args__ = (
        UniqueConstraint("sport", "season", name="uq_tournament_sport_season"),
    )

    def __repr__(self):
        return f"<Tournament(id={self.id}, sport={self.sport}, season={self.season})>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "season": self.season,
            "sport": self.sport,
        }


# =============================================================================
# Bracket Node
# =============================================================================

class BracketNode(BaseModel):
    """
    One matchup slot.

    round 0 is the play-in (First Four) round; rounds 1..6 run from the
    round of 64 to the championship. region is null for Final Four and
    championship nodes. seed_home/seed_away are only meaningful on round 1
    and play-in nodes.
    """
    __tablename__ = "bracket_nodes"

    tournament_id = Column(
        String(36),
        ForeignKey("bracket_tournaments.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    round = Column(Integer, nullable=False)
    slot = Column(String(32), nullable=False)
    region = Column(String(32), nullable=True)

    seed_home = Column(Integer, nullable=True)
    seed_away = Column(Integer, nullable=True)

    home_team_name = Column(String(120), nullable=True)
    away_team_name = Column(String(120), nullable=True)

    # Outgoing edge into the next round
    next_node_id = Column(
        String(36),
        ForeignKey("bracket_nodes.id", ondelete="RESTRICT"),
        nullable=True
    )
    next_node_side = Column(String(8), nullable=True)

    sports_game_id = Column(
        String(36),
        ForeignKey("sports_games.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    tournament = relationship("Tournament", back_populates="nodes")

    __table_args__ = (
        UniqueConstraint("tournament_id", "slot", name="uq_node_tournament_slot"),
        Index("ix_node_tournament_round", "tournament_id", "round"),
    )

    def __repr__(self):
        return f"<BracketNode(slot={self.slot}, round={self.round})>"


# =============================================================================
# Sports Game
# =============================================================================

class SportsGame(BaseModel):
    """
    Live game record from an external score feed.

    The scoring read path treats this as a foreign system of record and
    never mutates it; only the feed ingest worker writes scores.
    """
    __tablename__ = "sports_games"

    sport = Column(String(32), nullable=False, default="ncaam")
    external_id = Column(String(64), nullable=True)
    source = Column(String(32), nullable=True)

    home_team = Column(String(120), nullable=False)
    away_team = Column(String(120), nullable=False)
    home_score = Column(Integer, nullable=True)
    away_score = Column(Integer, nullable=True)
    status = Column(String(32), nullable=False, default=GameStatus.SCHEDULED.value)

    start_time = Column(DateTime, nullable=True)
    venue = Column(String(200), nullable=True)
    fetched_at = Column(DateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("sport", "external_id", "source", name="uq_game_sport_external_source"),
    )

    def __repr__(self):
        return f"<SportsGame({self.away_team} @ {self.home_team}, status={self.status})>"

    def to_dict(self):
        return {
            "id": self.id,
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
            "status": self.status,
            "startTime": self.start_time.isoformat() if self.start_time else None,
        }
