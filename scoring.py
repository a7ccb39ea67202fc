from __future__ import annotations
import math
from dataclasses import replace
from typing import Dict, Optional, Protocol, runtime_checkable

from errors import DomainError
from models import (
    AccuracyTier, GoodRecord, IncidenceBand, QuantityMode, QuestionResult,
    ScoringMode, SessionLedger,
)

CORRECT_THRESHOLD = 0.1
# Absorbs float noise such as abs(1.1 - 1.0) == 0.10000000000000009
_TOLERANCE = 1e-9

DEMAND_MAX_POINTS = 2000
SUPPLY_MAX_POINTS = 2000
INCIDENCE_MAX_POINTS = 1000
ELASTICITY_SCALE = 2.0
# Incidence differences live in [0, 1] rather than [0, 5]
INCIDENCE_SCALE = 10.0

_TIER_BOUNDS = (
    (0.1, AccuracyTier.EXCELLENT),
    (0.3, AccuracyTier.VERY_CLOSE),
    (0.5, AccuracyTier.GOOD_TRY),
)

def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))

def calculate_points(difference: float, max_points: int, scale_factor: float = ELASTICITY_SCALE) -> int:
    """
    Exponential-decay award: round(max_points * e^(-difference * scale_factor)).
    Equals max_points at difference 0 and never increases with difference.
    """
    if not math.isfinite(difference) or difference < 0:
        raise ValueError(f"difference must be a finite number >= 0, got {difference!r}")
    return round_half_up(max_points * math.exp(-difference * scale_factor))

def is_correct(guess: float, actual: float) -> bool:
    return abs(guess - actual) <= CORRECT_THRESHOLD + _TOLERANCE

def accuracy_tier(guess: float, actual: float) -> AccuracyTier:
    d = abs(guess - actual)
    for bound, tier in _TIER_BOUNDS:
        if d <= bound + _TOLERANCE:
            return tier
    return AccuracyTier.KEEP_PRACTICING

def buyer_share(demand_elasticity: float, supply_elasticity: float) -> float:
    """
    Share of a tax or tariff borne by buyers:
        supply / (|demand| + supply)
    The less elastic side carries more of the burden.
    """
    denom = abs(demand_elasticity) + supply_elasticity
    if denom == 0 or not math.isfinite(denom):
        raise DomainError(
            f"tax incidence undefined for demand={demand_elasticity}, supply={supply_elasticity}"
        )
    return supply_elasticity / denom

def incidence_band(share: float) -> IncidenceBand:
    if share > 0.6:
        return IncidenceBand.BUYERS
    if share < 0.4:
        return IncidenceBand.SELLERS
    return IncidenceBand.EVEN

def _safe_share(demand: float, supply: float) -> Optional[float]:
    try:
        return buyer_share(demand, supply)
    except DomainError:
        return None

def max_points_per_question(quantity_mode: QuantityMode) -> int:
    if quantity_mode is QuantityMode.DEMAND_ONLY:
        return DEMAND_MAX_POINTS
    return DEMAND_MAX_POINTS + SUPPLY_MAX_POINTS + INCIDENCE_MAX_POINTS

def score_question(
    good: GoodRecord,
    question_number: int,
    demand_guess: float,
    supply_guess: Optional[float] = None,
) -> QuestionResult:
    """Every award and tier for one question; the scoring mode decides what counts."""
    demand_points = calculate_points(abs(demand_guess - good.demand_elasticity), DEMAND_MAX_POINTS)
    demand_ok = is_correct(demand_guess, good.demand_elasticity)
    result = QuestionResult(
        question_number=question_number,
        good=good.name,
        demand_guess=demand_guess,
        demand_actual=good.demand_elasticity,
        demand_points=demand_points,
        demand_tier=accuracy_tier(demand_guess, good.demand_elasticity),
        total_points=demand_points,
        correct=demand_ok,
    )
    if supply_guess is None:
        return result

    supply_actual = good.supply_elasticity
    if supply_actual is None:
        raise ValueError(f"good {good.name!r} has no supply elasticity")

    supply_points = calculate_points(abs(supply_guess - supply_actual), SUPPLY_MAX_POINTS)
    guessed = _safe_share(demand_guess, supply_guess)
    actual = _safe_share(good.demand_elasticity, supply_actual)
    incidence_points = 0
    if guessed is not None and actual is not None:
        incidence_points = calculate_points(abs(guessed - actual), INCIDENCE_MAX_POINTS, INCIDENCE_SCALE)

    return replace(
        result,
        supply_guess=supply_guess,
        supply_actual=supply_actual,
        supply_points=supply_points,
        supply_tier=accuracy_tier(supply_guess, supply_actual),
        incidence_guess=guessed,
        incidence_actual=actual,
        incidence_points=incidence_points,
        total_points=demand_points + supply_points + incidence_points,
        correct=demand_ok and is_correct(supply_guess, supply_actual),
    )

@runtime_checkable
class ScoringStrategy(Protocol):
    def fold(self, ledger: SessionLedger, result: QuestionResult) -> SessionLedger: ...

class BinaryScoring:
    """One point per correct question; streak resets on a miss."""
    def fold(self, ledger: SessionLedger, result: QuestionResult) -> SessionLedger:
        streak = ledger.streak + 1 if result.correct else 0
        return SessionLedger(
            total_score=ledger.total_score + (1 if result.correct else 0),
            questions_completed=ledger.questions_completed + 1,
            streak=streak,
            best_streak=max(ledger.best_streak, streak),
            history=ledger.history + (result,),
        )

class ContinuousScoring:
    """Adds the question's decayed point total."""
    def fold(self, ledger: SessionLedger, result: QuestionResult) -> SessionLedger:
        return replace(
            ledger,
            total_score=ledger.total_score + result.total_points,
            questions_completed=ledger.questions_completed + 1,
            history=ledger.history + (result,),
        )

STRATEGIES: Dict[ScoringMode, ScoringStrategy] = {
    ScoringMode.BINARY: BinaryScoring(),
    ScoringMode.CONTINUOUS: ContinuousScoring(),
}
