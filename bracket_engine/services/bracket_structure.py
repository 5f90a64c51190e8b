"""
NCAA Men's Tournament bracket topology.

Generates the 67-node, 68-team single-elimination structure:
- First Four (round 0): two 16-seed and two 11-seed play-in games
- Four regions x (R64, R32, S16, E8) = rounds 1..4
- Final Four (round 5) and Championship (round 6)

Nodes are described by slot; edges point from each slot to the slot its
winner advances into and the side (HOME/AWAY) it occupies there. The
seeding service turns these specs into persisted BracketNode rows.
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from bracket_engine.orm.bracket import NodeSide

SPORT_NCAAM = "ncaam"
TOURNAMENT_NAME = "NCAA Men's Tournament"

REGION_NAMES: Dict[str, str] = {
    "E": "East",
    "W": "West",
    "S": "South",
    "M": "Midwest",
}

# Standard round-of-64 pairing order within a region
R64_MATCHUPS = [
    (1, 16),
    (8, 9),
    (5, 12),
    (4, 13),
    (6, 11),
    (3, 14),
    (7, 10),
    (2, 15),
]

CHAMPIONSHIP_SLOT = "CHAMP"


@dataclass(frozen=True)
class FeedTarget:
    next_slot: str
    next_side: NodeSide


@dataclass(frozen=True)
class Semifinal:
    home_region: str
    away_region: str


@dataclass
class NodeSpec:
    slot: str
    round: int
    region: Optional[str]
    seed_home: Optional[int] = None
    seed_away: Optional[int] = None
    next_slot: Optional[str] = None
    next_side: Optional[NodeSide] = None


@dataclass
class BracketStructure:
    name: str
    sport: str
    season: int
    nodes: List[NodeSpec] = field(default_factory=list)

    def count_by_round(self) -> Dict[int, int]:
        return dict(sorted(Counter(n.round for n in self.nodes).items()))


def default_first_four() -> Dict[str, FeedTarget]:
    return {
        "FF-16-A": FeedTarget("E-R64-1", NodeSide.AWAY),
        "FF-16-B": FeedTarget("W-R64-1", NodeSide.AWAY),
        "FF-11-A": FeedTarget("S-R64-5", NodeSide.AWAY),
        "FF-11-B": FeedTarget("M-R64-5", NodeSide.AWAY),
    }


def default_final_four() -> Dict[str, Semifinal]:
    return {
        "FF-1": Semifinal(home_region="E", away_region="W"),
        "FF-2": Semifinal(home_region="S", away_region="M"),
    }


def _side(index: int) -> NodeSide:
    """Even-indexed feeders take the HOME side of the next node."""
    return NodeSide.HOME if index % 2 == 0 else NodeSide.AWAY


def generate_ncaam_structure(
    season: int,
    first_four: Optional[Dict[str, FeedTarget]] = None,
    final_four: Optional[Dict[str, Semifinal]] = None,
) -> BracketStructure:
    """Build every node spec for one season's tournament."""
    first_four = first_four or default_first_four()
    final_four = final_four or default_final_four()

    nodes: List[NodeSpec] = []

    for slot, target in first_four.items():
        play_in_seed = int(slot.split("-")[1])
        nodes.append(NodeSpec(
            slot=slot,
            round=0,
            region=None,
            seed_home=play_in_seed,
            seed_away=play_in_seed,
            next_slot=target.next_slot,
            next_side=target.next_side,
        ))

    semifinal_for_region: Dict[str, tuple] = {}
    for semi_slot, semi in final_four.items():
        semifinal_for_region[semi.home_region] = (semi_slot, NodeSide.HOME)
        semifinal_for_region[semi.away_region] = (semi_slot, NodeSide.AWAY)

    for code, region_name in REGION_NAMES.items():
        for i, (seed_home, seed_away) in enumerate(R64_MATCHUPS):
            nodes.append(NodeSpec(
                slot=f"{code}-R64-{i + 1}",
                round=1,
                region=region_name,
                seed_home=seed_home,
                seed_away=seed_away,
                next_slot=f"{code}-R32-{i // 2 + 1}",
                next_side=_side(i),
            ))

        for i in range(4):
            nodes.append(NodeSpec(
                slot=f"{code}-R32-{i + 1}",
                round=2,
                region=region_name,
                next_slot=f"{code}-S16-{i // 2 + 1}",
                next_side=_side(i),
            ))

        for i in range(2):
            nodes.append(NodeSpec(
                slot=f"{code}-S16-{i + 1}",
                round=3,
                region=region_name,
                next_slot=f"{code}-E8-1",
                next_side=_side(i),
            ))

        semi_slot, semi_side = semifinal_for_region.get(code, (None, None))
        nodes.append(NodeSpec(
            slot=f"{code}-E8-1",
            round=4,
            region=region_name,
            next_slot=semi_slot,
            next_side=semi_side,
        ))

    for i, semi_slot in enumerate(final_four):
        nodes.append(NodeSpec(
            slot=semi_slot,
            round=5,
            region=None,
            next_slot=CHAMPIONSHIP_SLOT,
            next_side=_side(i),
        ))

    nodes.append(NodeSpec(slot=CHAMPIONSHIP_SLOT, round=6, region=None))

    return BracketStructure(
        name=TOURNAMENT_NAME,
        sport=SPORT_NCAAM,
        season=season,
        nodes=nodes,
    )


def validate_structure(nodes: List[NodeSpec]) -> List[str]:
    """
    Check the in-tree invariants.

    Returns a list of human-readable problems; empty means valid.
    """
    errors: List[str] = []
    slot_counts = Counter(n.slot for n in nodes)
    all_slots = set(slot_counts)

    for slot, count in slot_counts.items():
        if count > 1:
            errors.append(f"Duplicate slot: {slot}")

    roots = [n.slot for n in nodes if not n.next_slot]
    if len(roots) != 1:
        errors.append(f"Expected exactly one root node, found {len(roots)}: {sorted(roots)}")

    inbound: Counter = Counter()
    side_taken: Dict[tuple, str] = {}
    for n in nodes:
        if not n.next_slot:
            continue
        if n.next_slot not in all_slots:
            errors.append(f"{n.slot} references missing nextSlot: {n.next_slot}")
            continue
        if n.next_side is None:
            errors.append(f"{n.slot} has nextSlot {n.next_slot} but no nextSide")
            continue
        inbound[n.next_slot] += 1
        key = (n.next_slot, n.next_side)
        if key in side_taken:
            errors.append(
                f"{n.slot} and {side_taken[key]} both feed {n.next_slot} {n.next_side.value}"
            )
        else:
            side_taken[key] = n.slot

    for slot, count in inbound.items():
        if count > 2:
            errors.append(f"{slot} has {count} inbound edges")

    return errors
