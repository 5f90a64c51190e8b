"""
Pool Models — leagues, entries and picks

A league binds a set of entries to one tournament and a scoring mode.
Pick correctness is written by the resolution job, never by the user.
"""
from sqlalchemy import Column, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from bracket_engine.orm.base import BaseModel
from bracket_engine.core.db_types import ScoringRulesJSON


class BracketLeague(BaseModel):
    """Scoring context for a group of entries."""
    __tablename__ = "bracket_leagues"

    tournament_id = Column(
        String(36),
        ForeignKey("bracket_tournaments.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    name = Column(String(200), nullable=False)

    # momentum | accuracy_boldness | streak_survival | fancred_edge
    scoring_mode = Column(String(32), nullable=False, default="momentum")
    scoring_rules = Column(ScoringRulesJSON, nullable=True)

    entries = relationship(
        "BracketEntry",
        back_populates="league",
        order_by="BracketEntry.created_at",
    )

    def __repr__(self):
        return f"<BracketLeague(id={self.id}, mode={self.scoring_mode})>"


class BracketEntry(BaseModel):
    """One competitor's bracket submission within a league."""
    __tablename__ = "bracket_entries"

    league_id = Column(
        String(36),
        ForeignKey("bracket_leagues.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False
    )
    name = Column(String(120), nullable=False)

    league = relationship("BracketLeague", back_populates="entries")
    user = relationship("User")
    picks = relationship("BracketPick", back_populates="entry")

    def __repr__(self):
        return f"<BracketEntry(id={self.id}, name={self.name})>"


class BracketPick(BaseModel):
    """
    One entry's winner selection for one node.

    is_correct is tri-state: None while the node is unresolved.
    """
    __tablename__ = "bracket_picks"

    entry_id = Column(
        String(36),
        ForeignKey("bracket_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    node_id = Column(
        String(36),
        ForeignKey("bracket_nodes.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    picked_team_name = Column(String(120), nullable=True)
    is_correct = Column(Boolean, nullable=True)

    entry = relationship("BracketEntry", back_populates="picks")

    __table_args__ = (
        UniqueConstraint("entry_id", "node_id", name="uq_pick_entry_node"),
    )

    def __repr__(self):
        return f"<BracketPick(node={self.node_id}, team={self.picked_team_name}, correct={self.is_correct})>"
