from __future__ import annotations
import logging
import math
import random
import threading
import uuid
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import config
from dataset import load_dataset
from errors import DatasetUnavailableError, EmptyDatasetError, UnknownSessionError
from models import (
    GoodRecord, QuantityMode, QuestionResult, QuizStage, ScoringMode,
    SessionConfig, SessionLedger, SessionState,
)
from scoring import STRATEGIES, max_points_per_question, round_half_up, score_question
from selector import select_good

logger = logging.getLogger(__name__)

_GUESS_STAGES = (QuizStage.AWAITING_GUESS, QuizStage.AWAITING_DEMAND_GUESS)

def parse_guess(raw: Any) -> Optional[float]:
    """Numeric string or number -> float; None for anything that is not a usable guess."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None

def make_config(
    scoring_mode: ScoringMode = ScoringMode.CONTINUOUS,
    quantity_mode: QuantityMode = QuantityMode.FULL,
    session_length: Optional[int] = None,
) -> SessionConfig:
    """Points sessions default to a fixed length; streak sessions run until reset."""
    if session_length is not None and session_length <= 0:
        raise ValueError("session_length must be positive")
    if session_length is None and scoring_mode is ScoringMode.CONTINUOUS:
        session_length = config.SESSION_LENGTH
    return SessionConfig(scoring_mode=scoring_mode, quantity_mode=quantity_mode, session_length=session_length)

def first_stage(cfg: SessionConfig) -> QuizStage:
    if cfg.quantity_mode is QuantityMode.DEMAND_ONLY:
        return QuizStage.AWAITING_GUESS
    return QuizStage.AWAITING_DEMAND_GUESS

def eligible_goods(goods: Sequence[GoodRecord], cfg: SessionConfig) -> List[GoodRecord]:
    if cfg.quantity_mode is QuantityMode.FULL:
        return [g for g in goods if g.supply_elasticity is not None]
    return list(goods)

def _draw(goods: Sequence[GoodRecord], cfg: SessionConfig, used, rng) -> Tuple[GoodRecord, frozenset]:
    pool = eligible_goods(goods, cfg)
    if not pool:
        if goods:
            raise EmptyDatasetError("No goods in the dataset have a supply elasticity")
        raise EmptyDatasetError("The dataset is empty")
    return select_good(pool, used, rng)

# ---------- Transitions ----------
# Each returns a new SessionState, or the same object when the action is rejected.

def new_session(
    goods: Sequence[GoodRecord],
    cfg: SessionConfig,
    session_id: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> SessionState:
    good, used = _draw(goods, cfg, frozenset(), rng)
    return SessionState(
        session_id=session_id or str(uuid.uuid4()),
        config=cfg,
        stage=first_stage(cfg),
        current_good=good,
        used=used,
    )

def submit_demand(state: SessionState, raw: Any) -> SessionState:
    if state.stage not in _GUESS_STAGES or state.current_good is None:
        return state
    guess = parse_guess(raw)
    if guess is None:
        return state
    if state.stage is QuizStage.AWAITING_DEMAND_GUESS:
        return replace(state, stage=QuizStage.AWAITING_SUPPLY_GUESS, pending_demand=guess)
    return _reveal(state, guess, None)

def submit_supply(state: SessionState, raw: Any) -> SessionState:
    if state.stage is not QuizStage.AWAITING_SUPPLY_GUESS or state.pending_demand is None:
        return state
    guess = parse_guess(raw)
    if guess is None:
        return state
    return _reveal(state, state.pending_demand, guess)

def _reveal(state: SessionState, demand_guess: float, supply_guess: Optional[float]) -> SessionState:
    result = score_question(
        state.current_good,
        question_number=state.ledger.questions_completed + 1,
        demand_guess=demand_guess,
        supply_guess=supply_guess,
    )
    ledger = STRATEGIES[state.config.scoring_mode].fold(state.ledger, result)
    return replace(
        state,
        stage=QuizStage.SHOWING_RESULT,
        pending_demand=demand_guess,
        ledger=ledger,
        last_result=result,
    )

def advance(state: SessionState, goods: Sequence[GoodRecord], rng: Optional[random.Random] = None) -> SessionState:
    if state.stage is not QuizStage.SHOWING_RESULT:
        return state
    length = state.config.session_length
    if length is not None and state.ledger.questions_completed >= length:
        return replace(state, stage=QuizStage.SESSION_COMPLETE, pending_demand=None)
    used = state.used | {state.current_good.name}
    good, used = _draw(goods, state.config, used, rng)
    return replace(
        state,
        stage=first_stage(state.config),
        current_good=good,
        pending_demand=None,
        used=used,
        last_result=None,
    )

def reset(state: SessionState, goods: Sequence[GoodRecord], rng: Optional[random.Random] = None) -> SessionState:
    return new_session(goods, state.config, session_id=state.session_id, rng=rng)

# ---------- Snapshot helpers ----------

def average_points(ledger: SessionLedger) -> int:
    if ledger.questions_completed == 0:
        return 0
    return round_half_up(ledger.total_score / ledger.questions_completed)

def max_session_points(cfg: SessionConfig) -> Optional[int]:
    if cfg.scoring_mode is not ScoringMode.CONTINUOUS or cfg.session_length is None:
        return None
    return cfg.session_length * max_points_per_question(cfg.quantity_mode)

def accuracy_percent(state: SessionState) -> Optional[int]:
    """Share of the attainable points (points mode) or of questions answered correctly (streak mode)."""
    ledger = state.ledger
    ceiling = max_session_points(state.config)
    if ceiling:
        return round_half_up(100.0 * ledger.total_score / ceiling)
    if state.config.scoring_mode is ScoringMode.BINARY and ledger.questions_completed:
        return round_half_up(100.0 * ledger.total_score / ledger.questions_completed)
    return None

def recent(ledger: SessionLedger, n: int = 3) -> List[QuestionResult]:
    """Last n results, newest first."""
    if n <= 0:
        return []
    return list(reversed(ledger.history[-n:]))

class ElasticityQuizEngine:
    """
    Holds the reference dataset and every live session.
    - Dataset: loaded once; a failed load leaves the engine unavailable until load() succeeds.
    - Sessions: each action replaces the stored SessionState; a rejected action leaves it as is.
    - Actions on sessions run one at a time; the API serves requests from a threadpool.
    """
    def __init__(self, goods: Optional[Sequence[GoodRecord]] = None, rng: Optional[random.Random] = None):
        self._goods: Optional[List[GoodRecord]] = list(goods) if goods is not None else None
        self.load_error: Optional[str] = None
        self._rng = rng or random.Random()
        self._sessions: Dict[str, SessionState] = {}
        self._lock = threading.Lock()

    # ---------- Dataset ----------
    def load(self, source: str) -> bool:
        try:
            goods = load_dataset(source)
        except DatasetUnavailableError as e:
            with self._lock:
                self._goods = None
                self.load_error = str(e)
            logger.error("Dataset unavailable: %s", e)
            return False
        with self._lock:
            self._goods = goods
            self.load_error = None
        return True

    @property
    def available(self) -> bool:
        return self._goods is not None

    @property
    def goods(self) -> List[GoodRecord]:
        if self._goods is None:
            raise DatasetUnavailableError(self.load_error or "Dataset not loaded")
        return self._goods

    # ---------- Session lifecycle ----------
    def start_session(
        self,
        scoring_mode: ScoringMode = ScoringMode.CONTINUOUS,
        quantity_mode: QuantityMode = QuantityMode.FULL,
        session_length: Optional[int] = None,
    ) -> SessionState:
        cfg = make_config(scoring_mode, quantity_mode, session_length)
        with self._lock:
            state = new_session(self.goods, cfg, rng=self._rng)
            self._sessions[state.session_id] = state
        logger.info(
            "Session %s started (%s, %s, length=%s)",
            state.session_id, cfg.scoring_mode.value, cfg.quantity_mode.value, cfg.session_length,
        )
        return state

    def get_state(self, session_id: str) -> Optional[SessionState]:
        return self._sessions.get(session_id)

    # ---------- Actions ----------
    def submit_demand(self, session_id: str, raw: Any) -> Tuple[SessionState, bool]:
        return self._apply(session_id, lambda st: submit_demand(st, raw))

    def submit_supply(self, session_id: str, raw: Any) -> Tuple[SessionState, bool]:
        return self._apply(session_id, lambda st: submit_supply(st, raw))

    def advance(self, session_id: str) -> Tuple[SessionState, bool]:
        return self._apply(session_id, lambda st: advance(st, self.goods, self._rng))

    def reset(self, session_id: str) -> SessionState:
        with self._lock:
            state = reset(self._require_session(session_id), self.goods, self._rng)
            self._sessions[session_id] = state
        logger.info("Session %s reset", session_id)
        return state

    # ---------- helpers ----------
    def _require_session(self, session_id: str) -> SessionState:
        st = self._sessions.get(session_id)
        if not st:
            raise UnknownSessionError(session_id)
        return st

    def _apply(
        self, session_id: str, step: Callable[[SessionState], SessionState],
    ) -> Tuple[SessionState, bool]:
        # Read, transition and store under one lock so no action overwrites another
        with self._lock:
            old = self._require_session(session_id)
            new = step(old)
            if new is not old:
                self._sessions[session_id] = new
        if new is old:
            logger.debug("Session %s: action ignored in stage %s", session_id, old.stage.value)
            return old, False
        if new.stage is QuizStage.SHOWING_RESULT and new.last_result is not None:
            r = new.last_result
            logger.info(
                "Session %s Q%d %s: %d pts (correct=%s)",
                session_id, r.question_number, r.good, r.total_points, r.correct,
            )
        elif new.stage is QuizStage.SESSION_COMPLETE:
            logger.info("Session %s complete: score %d", session_id, new.ledger.total_score)
        return new, True
