from .base import Base

# Bracket topology + live games
from .bracket import Tournament, BracketNode, SportsGame, NodeSide, GameStatus

# Pools
from .user import User
from .league import BracketLeague, BracketEntry, BracketPick


__all__ = [
    "Base",
    "Tournament",
    "BracketNode",
    "SportsGame",
    "NodeSide",
    "GameStatus",
    "User",
    "BracketLeague",
    "BracketEntry",
    "BracketPick",
]
