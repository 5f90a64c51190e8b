"""
Bracket Graph — arena of nodes plus winner derivation

The bracket is kept as rows: nodes indexed by id, with each node's
(next_node_id, next_node_side) pair as its single outgoing edge. No tree
object, no parent pointers; processing nodes in ascending round order
replaces any graph traversal.

Rules:
- winner_of never guesses: a tied or unfinished game has no winner
- The read path never mutates nodes; propagate_winner is write-path only
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from bracket_engine.orm.bracket import BracketNode, GameStatus, NodeSide, SportsGame
from bracket_engine.services.team_names import match_node_side

logger = logging.getLogger(__name__)


class BracketArena:
    """Nodes of one tournament, indexed by id and slot."""

    def __init__(self, nodes: Iterable[BracketNode]):
        self._nodes: Dict[str, BracketNode] = {}
        self._by_slot: Dict[str, BracketNode] = {}
        self._feeders: Dict[str, List[str]] = defaultdict(list)

        for node in nodes:
            self._nodes[node.id] = node
            self._by_slot[node.slot] = node
        for node in self._nodes.values():
            if node.next_node_id:
                self._feeders[node.next_node_id].append(node.id)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get(self, node_id: str) -> Optional[BracketNode]:
        return self._nodes.get(node_id)

    def by_slot(self, slot: str) -> Optional[BracketNode]:
        return self._by_slot.get(slot)

    def next_of(self, node: BracketNode) -> Optional[BracketNode]:
        if not node.next_node_id:
            return None
        return self._nodes.get(node.next_node_id)

    def children_of(self, node: BracketNode) -> List[BracketNode]:
        return [self._nodes[i] for i in self._feeders.get(node.id, [])]

    def in_round_order(self) -> List[BracketNode]:
        """Ascending round, then slot, so earlier winners exist before later nodes are read."""
        return sorted(self._nodes.values(), key=lambda n: (n.round, n.slot))

    def root(self) -> Optional[BracketNode]:
        roots = [n for n in self._nodes.values() if not n.next_node_id]
        if len(roots) != 1:
            return None
        return roots[0]

    def round_map(self) -> Dict[str, int]:
        return {node_id: node.round for node_id, node in self._nodes.items()}


def winner_of(node: BracketNode, live_game: Optional[SportsGame]) -> Optional[str]:
    """
    Resolved winner of a node, or None if undecided.

    Names come from the node; a side the node has not been told about yet
    falls back to the game's team name. When the feed lists the teams in
    the opposite orientation to the node, the winning feed team is mapped
    back onto the matching node side.
    """
    if live_game is None:
        return None
    if live_game.status != GameStatus.FINAL.value:
        return None
    if live_game.home_score is None or live_game.away_score is None:
        return None
    if live_game.home_score == live_game.away_score:
        logger.warning(
            f"Node {node.slot}: final game {live_game.id} is tied "
            f"{live_game.home_score}-{live_game.away_score}; leaving unresolved"
        )
        return None

    home_won = live_game.home_score > live_game.away_score
    game_winner = live_game.home_team if home_won else live_game.away_team

    if node.home_team_name and node.away_team_name and game_winner:
        side = match_node_side(game_winner, node.home_team_name, node.away_team_name)
        if side is NodeSide.HOME:
            return node.home_team_name
        if side is NodeSide.AWAY:
            return node.away_team_name

    if home_won:
        return node.home_team_name or live_game.home_team
    return node.away_team_name or live_game.away_team


def propagate_winner(
    arena: BracketArena,
    node: BracketNode,
    winner_name: str,
) -> Optional[BracketNode]:
    """
    Write the winner into the next node's home or away name.

    Only an empty side is filled; returns the next node when it changed.
    """
    if not node.next_node_id or not node.next_node_side:
        return None

    next_node = arena.next_of(node)
    if next_node is None:
        raise KeyError(f"Node {node.slot}: nextNodeId {node.next_node_id} not found")

    if node.next_node_side.upper() == NodeSide.HOME.value:
        if next_node.home_team_name:
            return None
        next_node.home_team_name = winner_name
    else:
        if next_node.away_team_name:
            return None
        next_node.away_team_name = winner_name
    return next_node
