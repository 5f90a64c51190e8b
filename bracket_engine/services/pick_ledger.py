"""
Pick Ledger — per-entry correctness tallies

Correctness is read from the persisted pick (written by the resolution
job); this module only counts, buckets by round, and attaches the seed
context the crowd-aware strategies need.

Rules:
- A pick whose node is missing gets round 0 and is excluded from
  round tallies (logged as a data-integrity smell, never fatal)
- Seeds are taken from round-1 nodes only
- max_possible >= earned total, always
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from bracket_engine.orm.bracket import BracketNode, SportsGame
from bracket_engine.orm.league import BracketPick
from bracket_engine.services.bracket_graph import BracketArena

if TYPE_CHECKING:
    from bracket_engine.services.scoring_strategies import LeaguePickDistribution, ScoreResult, ScoringStrategy

logger = logging.getLogger(__name__)

SCORED_ROUNDS = range(1, 7)
CHAMPIONSHIP_ROUND = 6


@dataclass
class PickResult:
    node_id: str
    round: int
    picked_team_name: Optional[str]
    is_correct: Optional[bool]
    slot: Optional[str] = None
    picked_seed: Optional[int] = None
    opponent_seed: Optional[int] = None
    start_time: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.is_correct is None

    @property
    def is_scored_round(self) -> bool:
        return self.round in SCORED_ROUNDS


@dataclass
class EntryLedger:
    picks: List[PickResult]
    correct_picks: int
    incorrect_picks: int
    pending_picks: int
    total_picks: int
    round_correct: Dict[int, int] = field(default_factory=dict)
    champion_pick: Optional[str] = None
    unmapped_picks: int = 0


def build_seed_map(nodes: Iterable[BracketNode]) -> Dict[str, int]:
    """Team name -> seed, from round-1 nodes only."""
    seeds: Dict[str, int] = {}
    for node in nodes:
        if node.round != 1:
            continue
        if node.home_team_name and node.seed_home is not None:
            seeds[node.home_team_name] = node.seed_home
        if node.away_team_name and node.seed_away is not None:
            seeds[node.away_team_name] = node.seed_away
    return seeds


def _opponent_of(node: BracketNode, picked: Optional[str]) -> Optional[str]:
    if not picked:
        return None
    if picked == node.home_team_name:
        return node.away_team_name
    if picked == node.away_team_name:
        return node.home_team_name
    return None


def to_pick_results(
    picks: Iterable[BracketPick],
    arena: BracketArena,
    seed_map: Dict[str, int],
    games_by_id: Optional[Dict[str, SportsGame]] = None,
) -> List[PickResult]:
    games_by_id = games_by_id or {}
    results: List[PickResult] = []

    for pick in picks:
        node = arena.get(pick.node_id)
        if node is None:
            logger.warning(
                f"Pick {pick.id} references node {pick.node_id} outside the current bracket; "
                f"treating as round 0"
            )
            results.append(PickResult(
                node_id=pick.node_id,
                round=0,
                picked_team_name=pick.picked_team_name,
                is_correct=pick.is_correct,
            ))
            continue

        opponent = _opponent_of(node, pick.picked_team_name)
        game = games_by_id.get(node.sports_game_id) if node.sports_game_id else None
        results.append(PickResult(
            node_id=node.id,
            round=node.round,
            picked_team_name=pick.picked_team_name,
            is_correct=pick.is_correct,
            slot=node.slot,
            picked_seed=seed_map.get(pick.picked_team_name) if pick.picked_team_name else None,
            opponent_seed=seed_map.get(opponent) if opponent else None,
            start_time=game.start_time if game else None,
        ))

    return results


def summarize(results: List[PickResult], unmapped: int = 0) -> EntryLedger:
    round_correct = {r: 0 for r in SCORED_ROUNDS}
    correct = incorrect = pending = 0
    champion_pick = None

    for p in results:
        if p.is_correct is True:
            correct += 1
            if p.is_scored_round:
                round_correct[p.round] += 1
        elif p.is_correct is False:
            incorrect += 1
        else:
            pending += 1
        if p.round == CHAMPIONSHIP_ROUND and champion_pick is None:
            champion_pick = p.picked_team_name

    return EntryLedger(
        picks=results,
        correct_picks=correct,
        incorrect_picks=incorrect,
        pending_picks=pending,
        total_picks=correct + incorrect,
        round_correct=round_correct,
        champion_pick=champion_pick,
        unmapped_picks=unmapped,
    )


def resolve_entry(
    picks: Iterable[BracketPick],
    arena: BracketArena,
    seed_map: Dict[str, int],
    games_by_id: Optional[Dict[str, SportsGame]] = None,
) -> EntryLedger:
    """Resolve one entry's picks into tallies."""
    results = to_pick_results(picks, arena, seed_map, games_by_id)
    unmapped = sum(1 for p in results if p.node_id not in arena)
    return summarize(results, unmapped=unmapped)


def max_possible(
    ledger: EntryLedger,
    strategy: "ScoringStrategy",
    score: "ScoreResult",
    distribution: Optional["LeaguePickDistribution"] = None,
) -> Decimal:
    """
    Theoretical ceiling for an entry under the active scoring mode.

    Points already earned, plus what every still-alive pending pick could
    add. Under momentum this is the round value of every pick not yet wrong.
    """
    return strategy.max_total(ledger.picks, score, distribution)
