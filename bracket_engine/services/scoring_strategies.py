"""
Scoring Strategies

Four interchangeable ways of turning an entry's resolved picks into a
total. A league selects one through its scoring_mode; unknown values
fall back to momentum.

Modes:
- momentum: round points per correct pick
- accuracy_boldness: round points times a rarity multiplier
- streak_survival: round points plus a bonus for consecutive correct picks
- fancred_edge: alternate round table, steeper rarity curve, leverage
  floor and an upset delta bonus

Pending picks score 0 but still count toward max possible; false picks
score 0 and end streaks.
"""
import logging
from abc import ABC, abstractmethod
from collections import Counter, defaultdict
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type

from bracket_engine.services.pick_ledger import PickResult, SCORED_ROUNDS

logger = logging.getLogger(__name__)


class ScoringMode(str, Enum):
    MOMENTUM = "momentum"
    ACCURACY_BOLDNESS = "accuracy_boldness"
    STREAK_SURVIVAL = "streak_survival"
    FANCRED_EDGE = "fancred_edge"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ScoringMode":
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            logger.warning(f"Unknown scoring mode {value!r}, falling back to momentum")
            return cls.MOMENTUM


ROUND_PTS: Dict[int, int] = {1: 1, 2: 2, 3: 4, 4: 8, 5: 16, 6: 32}
FANCRED_ROUND_PTS: Dict[int, int] = {1: 1, 2: 2, 3: 5, 4: 10, 5: 18, 6: 30}

TWOPLACES = Decimal("0.01")
FOURPLACES = Decimal("0.0001")
ZERO = Decimal("0")
ONE = Decimal("1")


def _points(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def parse_round_points(scoring_rules: Optional[Mapping[str, Any]]) -> Optional[Dict[int, int]]:
    """
    Read a league's roundPoints override.

    Invalid tables are ignored with a warning; the mode's own table is
    used instead.
    """
    if not scoring_rules:
        return None
    raw = scoring_rules.get("roundPoints")
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        logger.warning(f"Ignoring roundPoints override: expected an object, got {type(raw).__name__}")
        return None

    table: Dict[int, int] = {}
    try:
        for key, value in raw.items():
            round_no = int(key)
            points = int(value)
            if round_no not in SCORED_ROUNDS or points < 0:
                raise ValueError(f"round {key}: {value}")
            table[round_no] = points
    except (TypeError, ValueError) as e:
        logger.warning(f"Ignoring roundPoints override: {e}")
        return None
    return table


class LeaguePickDistribution:
    """How many entries in a league picked each team at each node."""

    def __init__(self):
        self._counts: Dict[str, Counter] = defaultdict(Counter)

    @classmethod
    def from_picks(cls, picks: Iterable[Any]) -> "LeaguePickDistribution":
        dist = cls()
        for pick in picks:
            dist.add(pick.node_id, pick.picked_team_name)
        return dist

    def add(self, node_id: str, team_name: Optional[str]) -> None:
        if team_name:
            self._counts[node_id][team_name] += 1

    def pickers(self, node_id: str) -> int:
        counts = self._counts.get(node_id)
        return sum(counts.values()) if counts else 0

    def count(self, node_id: str, team_name: Optional[str]) -> int:
        counts = self._counts.get(node_id)
        if not counts or not team_name:
            return 0
        return counts[team_name]


@dataclass(frozen=True)
class CrowdCurve:
    """Tuning for the rarity-weighted strategies."""
    max_multiplier: float
    exponent: float
    leverage_threshold: Optional[float] = None
    leverage_multiplier: float = 1.0
    upset_bonus: bool = False

    @property
    def ceiling(self) -> float:
        if self.leverage_threshold is None:
            return self.max_multiplier
        return max(self.max_multiplier, self.leverage_multiplier)


ACCURACY_BOLDNESS_CURVE = CrowdCurve(max_multiplier=2.0, exponent=1.0)
FANCRED_EDGE_CURVE = CrowdCurve(
    max_multiplier=1.5,
    exponent=2.0,
    leverage_threshold=0.60,
    leverage_multiplier=1.5,
    upset_bonus=True,
)

STREAK_STEP = Decimal("1")
STREAK_CAP = 5


@dataclass
class ScoreResult:
    total: Decimal
    details: Dict[str, Any]
    pick_points: Dict[str, Decimal] = field(default_factory=dict)


class ScoringStrategy(ABC):
    mode: ScoringMode
    default_round_points: Dict[int, int] = ROUND_PTS

    def __init__(self, round_points: Optional[Mapping[int, int]] = None):
        # A partial override only replaces the rounds it names
        self.round_points: Dict[int, int] = {**self.default_round_points, **(round_points or {})}

    def base_points(self, round_no: int) -> Decimal:
        return Decimal(self.round_points.get(round_no, 0))

    @abstractmethod
    def score(
        self,
        picks: List[PickResult],
        distribution: Optional[LeaguePickDistribution] = None,
    ) -> ScoreResult:
        ...

    def pick_ceiling(
        self,
        pick: PickResult,
        distribution: Optional[LeaguePickDistribution] = None,
    ) -> Decimal:
        """Most a still-pending pick could add under this mode."""
        return self.base_points(pick.round)

    def max_total(
        self,
        picks: List[PickResult],
        score: ScoreResult,
        distribution: Optional[LeaguePickDistribution] = None,
    ) -> Decimal:
        """Earned points plus the ceiling of every pending pick in a scored round."""
        remaining = sum(
            (self.pick_ceiling(p, distribution) for p in picks if p.is_pending and p.is_scored_round),
            ZERO,
        )
        return score.total + remaining

    def _round_table(self) -> Dict[int, int]:
        return {r: self.round_points.get(r, 0) for r in SCORED_ROUNDS}


class MomentumStrategy(ScoringStrategy):
    mode = ScoringMode.MOMENTUM

    def score(self, picks, distribution=None):
        by_round = {r: ZERO for r in SCORED_ROUNDS}
        pick_points: Dict[str, Decimal] = {}

        for p in picks:
            if p.is_correct is not True or not p.is_scored_round:
                continue
            pts = self.base_points(p.round)
            pick_points[p.node_id] = pts
            by_round[p.round] += pts

        total = sum(by_round.values(), ZERO)
        return ScoreResult(
            total=total,
            details={
                "mode": self.mode.value,
                "roundPoints": by_round,
                "roundTable": self._round_table(),
            },
            pick_points=pick_points,
        )


class CrowdWeightedStrategy(ScoringStrategy):
    """Shared rarity scoring for accuracy_boldness and fancred_edge."""
    curve: CrowdCurve

    def __init__(self, round_points=None, curve: Optional[CrowdCurve] = None):
        super().__init__(round_points)
        if curve is not None:
            self.curve = curve

    def boldness_multiplier(
        self,
        pick: PickResult,
        distribution: Optional[LeaguePickDistribution],
    ) -> Decimal:
        """
        1 + (max - 1) * rarity ** exponent, with rarity = (n - k) / (n - 1).

        Everyone agreeing gives exactly 1.0 and a sole picker gets the
        curve's maximum. Missing distribution data counts as typical.
        """
        if distribution is None:
            return ONE
        n = distribution.pickers(pick.node_id)
        k = distribution.count(pick.node_id, pick.picked_team_name)
        if n <= 1 or k == 0:
            return ONE

        rarity = (n - k) / (n - 1)
        multiplier = 1 + (self.curve.max_multiplier - 1) * rarity ** self.curve.exponent

        threshold = self.curve.leverage_threshold
        if threshold is not None and (n - k) / n > threshold:
            multiplier = max(multiplier, self.curve.leverage_multiplier)

        return Decimal(str(multiplier)).quantize(FOURPLACES, rounding=ROUND_HALF_UP)

    def upset_delta(self, pick: PickResult) -> Decimal:
        if not self.curve.upset_bonus:
            return ZERO
        if pick.picked_seed is None or pick.opponent_seed is None:
            return ZERO
        if pick.picked_seed <= pick.opponent_seed:
            return ZERO
        return Decimal(pick.picked_seed - pick.opponent_seed)

    def score(self, picks, distribution=None):
        base_total = ZERO
        boldness_total = ZERO
        upset_total = ZERO
        bold_correct = 0
        upsets = 0
        pick_points: Dict[str, Decimal] = {}

        for p in picks:
            if p.is_correct is not True or not p.is_scored_round:
                continue
            base = self.base_points(p.round)
            multiplier = self.boldness_multiplier(p, distribution)
            weighted = _points(base * multiplier)
            upset = self.upset_delta(p)

            base_total += base
            boldness_total += weighted - base
            upset_total += upset
            if multiplier > ONE:
                bold_correct += 1
            if upset > ZERO:
                upsets += 1
            pick_points[p.node_id] = weighted + upset

        total = sum(pick_points.values(), ZERO)
        details: Dict[str, Any] = {
            "mode": self.mode.value,
            "basePoints": base_total,
            "boldnessBonus": boldness_total,
            "boldCorrectPicks": bold_correct,
        }
        if self.curve.upset_bonus:
            details["upsetBonus"] = upset_total
            details["upsetsCalled"] = upsets
        return ScoreResult(total=total, details=details, pick_points=pick_points)

    def pick_ceiling(self, pick, distribution=None):
        # League picks are locked, so the multiplier a pending pick would earn is already known
        ceiling = _points(self.base_points(pick.round) * self.boldness_multiplier(pick, distribution))
        if self.curve.upset_bonus and pick.picked_seed is not None:
            # Opponent not known yet: the best possible opponent is a 1 seed
            best_opponent = pick.opponent_seed if pick.opponent_seed is not None else 1
            ceiling += Decimal(max(pick.picked_seed - best_opponent, 0))
        return ceiling


class AccuracyBoldnessStrategy(CrowdWeightedStrategy):
    mode = ScoringMode.ACCURACY_BOLDNESS
    curve = ACCURACY_BOLDNESS_CURVE


class FanCredEdgeStrategy(CrowdWeightedStrategy):
    mode = ScoringMode.FANCRED_EDGE
    curve = FANCRED_EDGE_CURVE
    default_round_points = FANCRED_ROUND_PTS


def _chronological_key(pick: PickResult):
    return (
        pick.round,
        pick.start_time or datetime.max,
        pick.slot or "",
        pick.node_id,
    )


class StreakSurvivalStrategy(ScoringStrategy):
    mode = ScoringMode.STREAK_SURVIVAL

    def __init__(self, round_points=None, step: Decimal = STREAK_STEP, cap: int = STREAK_CAP):
        super().__init__(round_points)
        self.step = step
        self.cap = cap

    def score(self, picks, distribution=None):
        run = 0
        longest = 0
        base_total = ZERO
        bonus_total = ZERO
        pick_points: Dict[str, Decimal] = {}

        for p in sorted(picks, key=_chronological_key):
            if not p.is_scored_round or p.is_correct is None:
                continue
            if p.is_correct is False:
                run = 0
                continue
            run += 1
            longest = max(longest, run)
            base = self.base_points(p.round)
            bonus = self.step * min(run - 1, self.cap)
            base_total += base
            bonus_total += bonus
            pick_points[p.node_id] = base + bonus

        return ScoreResult(
            total=base_total + bonus_total,
            details={
                "mode": self.mode.value,
                "currentStreak": run,
                "longestStreak": longest,
                "basePoints": base_total,
                "streakBonus": bonus_total,
            },
            pick_points=pick_points,
        )

    def pick_ceiling(self, pick, distribution=None):
        return self.base_points(pick.round) + self.step * self.cap

    def max_total(self, picks, score, distribution=None):
        # A pending pick that lands also lengthens the runs of later picks,
        # so rescore with every pending pick assumed correct
        optimistic = [
            replace(p, is_correct=True) if p.is_pending else p
            for p in picks
        ]
        return max(self.score(optimistic, distribution).total, score.total)


STRATEGIES: Dict[ScoringMode, Type[ScoringStrategy]] = {
    ScoringMode.MOMENTUM: MomentumStrategy,
    ScoringMode.ACCURACY_BOLDNESS: AccuracyBoldnessStrategy,
    ScoringMode.STREAK_SURVIVAL: StreakSurvivalStrategy,
    ScoringMode.FANCRED_EDGE: FanCredEdgeStrategy,
}


def get_strategy(
    mode: Any,
    round_points: Optional[Mapping[int, int]] = None,
) -> ScoringStrategy:
    """Strategy instance for a league's scoring mode and optional round table."""
    return STRATEGIES[ScoringMode.parse(mode)](round_points)


def strategy_for_league(scoring_mode: Optional[str], scoring_rules: Optional[Mapping[str, Any]]) -> ScoringStrategy:
    return get_strategy(scoring_mode, parse_round_points(scoring_rules))
