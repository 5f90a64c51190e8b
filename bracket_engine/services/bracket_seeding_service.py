"""
Bracket Seeding Service

Creates a tournament and its 67 nodes for a season. Nodes are inserted
first and linked by slot in a second pass, once every node has an id.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bracket_engine.orm.bracket import BracketNode, Tournament
from bracket_engine.services.bracket_structure import (
    BracketStructure,
    FeedTarget,
    Semifinal,
    generate_ncaam_structure,
    validate_structure,
)

logger = logging.getLogger(__name__)

# Only play-in and round-of-64 teams are known before tip-off
SEEDABLE_ROUNDS = (0, 1)


class TournamentExistsError(Exception):
    def __init__(self, sport: str, season: int, tournament_id: str):
        self.sport = sport
        self.season = season
        self.tournament_id = tournament_id
        super().__init__(f"Tournament already exists for {sport} {season}")


class BracketStructureError(Exception):
    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("Bracket structure validation failed")


def validate_field(structure: BracketStructure, field: Mapping[str, Mapping[str, str]]) -> List[str]:
    rounds = {spec.slot: spec.round for spec in structure.nodes}
    errors = []
    for slot in field:
        if slot not in rounds:
            errors.append(f"Field references unknown slot: {slot}")
        elif rounds[slot] not in SEEDABLE_ROUNDS:
            errors.append(f"Field may only name teams for play-in or first-round slots, got {slot}")
    return errors


def _apply_field(nodes_by_slot: Dict[str, BracketNode], field: Mapping[str, Mapping[str, str]]) -> int:
    """Write known team names onto round-0/round-1 nodes; returns sides filled."""
    filled = 0
    for slot, teams in field.items():
        node = nodes_by_slot[slot]
        home = teams.get("home")
        away = teams.get("away")
        if home:
            node.home_team_name = home
            filled += 1
        if away:
            node.away_team_name = away
            filled += 1
    return filled


async def seed_tournament(
    db: AsyncSession,
    season: int,
    first_four: Optional[Dict[str, FeedTarget]] = None,
    final_four: Optional[Dict[str, Semifinal]] = None,
    field: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> Dict[str, Any]:
    """
    Seed one season's bracket.

    Raises:
        TournamentExistsError: a tournament for this sport and season exists
        BracketStructureError: the generated topology is inconsistent, or
            the field names unknown slots
    """
    structure = generate_ncaam_structure(season, first_four, final_four)

    result = await db.execute(
        select(Tournament).where(
            Tournament.sport == structure.sport,
            Tournament.season == season,
        )
    )
    existing = result.scalar_one_or_none()
    if existing:
        raise TournamentExistsError(structure.sport, season, existing.id)

    errors = validate_structure(structure.nodes)
    if field:
        errors.extend(validate_field(structure, field))
    if errors:
        logger.error(f"Bracket structure for {season} failed validation: {errors}")
        raise BracketStructureError(errors)

    tournament = Tournament(
        name=f"{structure.name} {season}",
        season=season,
        sport=structure.sport,
    )
    db.add(tournament)
    await db.flush()

    nodes_by_slot: Dict[str, BracketNode] = {}
    for spec in structure.nodes:
        node = BracketNode(
            tournament_id=tournament.id,
            round=spec.round,
            slot=spec.slot,
            region=spec.region,
            seed_home=spec.seed_home,
            seed_away=spec.seed_away,
            next_node_side=spec.next_side.value if spec.next_side else None,
        )
        db.add(node)
        nodes_by_slot[spec.slot] = node
    await db.flush()

    linked = 0
    for spec in structure.nodes:
        if spec.next_slot:
            nodes_by_slot[spec.slot].next_node_id = nodes_by_slot[spec.next_slot].id
            linked += 1

    teams_named = _apply_field(nodes_by_slot, field) if field else 0

    await db.commit()

    counts = structure.count_by_round()
    logger.info(
        f"Seeded {tournament.name}: {len(nodes_by_slot)} nodes, {linked} links, "
        f"{teams_named} team names"
    )

    return {
        "tournamentId": tournament.id,
        "name": tournament.name,
        "sport": tournament.sport,
        "season": season,
        "totalNodes": len(nodes_by_slot),
        "linkedEdges": linked,
        "teamsNamed": teams_named,
        "nodesByRound": {str(r): c for r, c in counts.items()},
    }
