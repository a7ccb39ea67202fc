from __future__ import annotations
from typing import Any, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

import config
from engine import (
    ElasticityQuizEngine, accuracy_percent, average_points, max_session_points, recent,
)
from errors import DatasetUnavailableError, EmptyDatasetError
from feedback import INCIDENCE_NARRATIVES, TIER_MESSAGES
from models import QuantityMode, QuestionResult, QuizStage, ScoringMode, SessionState
from scoring import incidence_band

# ---------- Pydantic IO models ----------
class StartSessionIn(BaseModel):
    scoring_mode: ScoringMode = ScoringMode.CONTINUOUS
    quantity_mode: QuantityMode = QuantityMode.FULL
    session_length: Optional[int] = Field(None, gt=0, examples=[10])

class GuessIn(BaseModel):
    # Raw JSON value; the engine decides what counts as a number
    value: Any = Field(None, examples=["-0.45"])

class GoodOut(BaseModel):
    name: str
    # Hidden until the result is shown
    demand_elasticity: Optional[float] = None
    supply_elasticity: Optional[float] = None

class QuestionResultOut(BaseModel):
    question_number: int
    good: str
    demand_guess: float
    demand_actual: float
    demand_points: int
    demand_tier: str
    demand_feedback: str
    # Full quiz:
    supply_guess: Optional[float] = None
    supply_actual: Optional[float] = None
    supply_points: Optional[int] = None
    supply_tier: Optional[str] = None
    supply_feedback: Optional[str] = None
    incidence_guess: Optional[float] = None
    incidence_actual: Optional[float] = None
    incidence_points: Optional[int] = None
    incidence_narrative: Optional[str] = None
    total_points: int
    correct: bool

class LedgerOut(BaseModel):
    total_score: int
    questions_completed: int
    streak: int
    best_streak: int
    average_points: int
    accuracy_percent: Optional[int] = None
    max_session_points: Optional[int] = None
    history: List[QuestionResultOut]
    recent: List[QuestionResultOut]

class SessionStateOut(BaseModel):
    session_id: str
    scoring_mode: ScoringMode
    quantity_mode: QuantityMode
    session_length: Optional[int] = None
    stage: QuizStage
    accepted: bool = True
    current_good: Optional[GoodOut] = None
    pending_demand: Optional[float] = None
    last_result: Optional[QuestionResultOut] = None
    ledger: LedgerOut

class HealthOut(BaseModel):
    dataset_available: bool
    goods: int
    error: Optional[str] = None

# ---------- App ----------
config.setup_logging()

app = FastAPI(title="Elasticity Quiz API", version="1.0.0")

_engine = ElasticityQuizEngine()
_engine.load(config.DATASET_SOURCE)

def _to_result_out(r: QuestionResult) -> QuestionResultOut:
    full = r.supply_guess is not None
    narrative = None
    if r.incidence_actual is not None:
        narrative = INCIDENCE_NARRATIVES[incidence_band(r.incidence_actual)]
    return QuestionResultOut(
        question_number=r.question_number,
        good=r.good,
        demand_guess=r.demand_guess,
        demand_actual=r.demand_actual,
        demand_points=r.demand_points,
        demand_tier=r.demand_tier.value,
        demand_feedback=TIER_MESSAGES[r.demand_tier],
        # Only include supply/incidence for the full quiz
        supply_guess=r.supply_guess,
        supply_actual=r.supply_actual,
        supply_points=r.supply_points if full else None,
        supply_tier=r.supply_tier.value if r.supply_tier else None,
        supply_feedback=TIER_MESSAGES[r.supply_tier] if r.supply_tier else None,
        incidence_guess=r.incidence_guess,
        incidence_actual=r.incidence_actual,
        incidence_points=r.incidence_points if full else None,
        incidence_narrative=narrative,
        total_points=r.total_points,
        correct=r.correct,
    )

def _to_state_out(st: SessionState, accepted: bool = True) -> SessionStateOut:
    good = None
    if st.current_good is not None:
        revealed = st.stage in (QuizStage.SHOWING_RESULT, QuizStage.SESSION_COMPLETE)
        good = GoodOut(
            name=st.current_good.name,
            demand_elasticity=st.current_good.demand_elasticity if revealed else None,
            supply_elasticity=st.current_good.supply_elasticity if revealed else None,
        )
    ledger = st.ledger
    return SessionStateOut(
        session_id=st.session_id,
        scoring_mode=st.config.scoring_mode,
        quantity_mode=st.config.quantity_mode,
        session_length=st.config.session_length,
        stage=st.stage,
        accepted=accepted,
        current_good=good,
        pending_demand=st.pending_demand,
        last_result=_to_result_out(st.last_result) if st.last_result else None,
        ledger=LedgerOut(
            total_score=ledger.total_score,
            questions_completed=ledger.questions_completed,
            streak=ledger.streak,
            best_streak=ledger.best_streak,
            average_points=average_points(ledger),
            accuracy_percent=accuracy_percent(st),
            max_session_points=max_session_points(st.config),
            history=[_to_result_out(r) for r in ledger.history],
            recent=[_to_result_out(r) for r in recent(ledger)],
        ),
    )

def _require(session_id: str) -> SessionState:
    st = _engine.get_state(session_id)
    if not st:
        raise HTTPException(404, "Session not found")
    return st

@app.get("/v1/quiz/health", response_model=HealthOut)
def health():
    if not _engine.available:
        return HealthOut(dataset_available=False, goods=0, error=_engine.load_error)
    return HealthOut(dataset_available=True, goods=len(_engine.goods))

@app.post("/v1/quiz/sessions", response_model=SessionStateOut, response_model_exclude_none=True)
def start_session(payload: StartSessionIn):
    try:
        st = _engine.start_session(
            scoring_mode=payload.scoring_mode,
            quantity_mode=payload.quantity_mode,
            session_length=payload.session_length,
        )
    except DatasetUnavailableError as e:
        raise HTTPException(status_code=503, detail=f"Dataset unavailable: {e}")
    except EmptyDatasetError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _to_state_out(st)

@app.get("/v1/quiz/sessions/{session_id}", response_model=SessionStateOut, response_model_exclude_none=True)
def get_state(session_id: str):
    return _to_state_out(_require(session_id))

@app.post("/v1/quiz/sessions/{session_id}/demand", response_model=SessionStateOut, response_model_exclude_none=True)
def submit_demand(session_id: str, g: GuessIn):
    _require(session_id)
    st, accepted = _engine.submit_demand(session_id, g.value)
    return _to_state_out(st, accepted)

@app.post("/v1/quiz/sessions/{session_id}/supply", response_model=SessionStateOut, response_model_exclude_none=True)
def submit_supply(session_id: str, g: GuessIn):
    _require(session_id)
    st, accepted = _engine.submit_supply(session_id, g.value)
    return _to_state_out(st, accepted)

@app.post("/v1/quiz/sessions/{session_id}/advance", response_model=SessionStateOut, response_model_exclude_none=True)
def advance(session_id: str):
    _require(session_id)
    try:
        st, accepted = _engine.advance(session_id)
    except DatasetUnavailableError as e:
        raise HTTPException(status_code=503, detail=f"Dataset unavailable: {e}")
    except EmptyDatasetError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _to_state_out(st, accepted)

@app.post("/v1/quiz/sessions/{session_id}/reset", response_model=SessionStateOut, response_model_exclude_none=True)
def reset(session_id: str):
    _require(session_id)
    try:
        st = _engine.reset(session_id)
    except DatasetUnavailableError as e:
        raise HTTPException(status_code=503, detail=f"Dataset unavailable: {e}")
    except EmptyDatasetError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _to_state_out(st)
