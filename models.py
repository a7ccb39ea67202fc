from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple

class ScoringMode(str, Enum):
    BINARY = "binary"
    CONTINUOUS = "continuous"

class QuantityMode(str, Enum):
    DEMAND_ONLY = "demand_only"
    FULL = "full"

class QuizStage(str, Enum):
    AWAITING_GUESS = "awaiting_guess"
    AWAITING_DEMAND_GUESS = "awaiting_demand_guess"
    AWAITING_SUPPLY_GUESS = "awaiting_supply_guess"
    SHOWING_RESULT = "showing_result"
    SESSION_COMPLETE = "session_complete"

class AccuracyTier(str, Enum):
    EXCELLENT = "Excellent"
    VERY_CLOSE = "Very close"
    GOOD_TRY = "Good try"
    KEEP_PRACTICING = "Keep practicing"

class IncidenceBand(str, Enum):
    BUYERS = "buyers"
    SELLERS = "sellers"
    EVEN = "even"

@dataclass(frozen=True)
class GoodRecord:
    name: str
    demand_elasticity: float
    supply_elasticity: Optional[float] = None

@dataclass(frozen=True)
class SessionConfig:
    scoring_mode: ScoringMode = ScoringMode.CONTINUOUS
    quantity_mode: QuantityMode = QuantityMode.FULL
    # None means the session never completes
    session_length: Optional[int] = None

@dataclass(frozen=True)
class QuestionResult:
    question_number: int
    good: str
    demand_guess: float
    demand_actual: float
    demand_points: int
    demand_tier: AccuracyTier
    # Full quiz only:
    supply_guess: Optional[float] = None
    supply_actual: Optional[float] = None
    supply_points: int = 0
    supply_tier: Optional[AccuracyTier] = None
    # None when the incidence is undefined for that side
    incidence_guess: Optional[float] = None
    incidence_actual: Optional[float] = None
    incidence_points: int = 0
    total_points: int = 0
    correct: bool = False

@dataclass(frozen=True)
class SessionLedger:
    total_score: int = 0
    questions_completed: int = 0
    streak: int = 0
    best_streak: int = 0
    history: Tuple[QuestionResult, ...] = ()

@dataclass(frozen=True)
class SessionState:
    session_id: str
    config: SessionConfig
    stage: QuizStage
    current_good: Optional[GoodRecord] = None
    pending_demand: Optional[float] = None
    ledger: SessionLedger = field(default_factory=SessionLedger)
    used: FrozenSet[str] = frozenset()
    last_result: Optional[QuestionResult] = None
