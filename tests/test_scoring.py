import math

import pytest

from errors import DomainError
from models import AccuracyTier, GoodRecord, IncidenceBand, QuestionResult, ScoringMode, SessionLedger
from scoring import (
    STRATEGIES, BinaryScoring, ContinuousScoring, ScoringStrategy, accuracy_tier,
    buyer_share, calculate_points, incidence_band, is_correct, score_question,
)

def test_points_at_zero_difference_is_max():
    assert calculate_points(0, 2000, 2) == 2000
    assert calculate_points(0, 1000, 10) == 1000

def test_points_documented_value():
    # round(2000 * e^-1)
    assert calculate_points(0.5, 2000, 2) == 736

def test_points_non_increasing():
    diffs = [i * 0.05 for i in range(0, 120)]
    pts = [calculate_points(d, 2000, 2) for d in diffs]
    assert all(a >= b for a, b in zip(pts, pts[1:]))
    assert pts[-1] < pts[0]

def test_points_rejects_negative_and_nan():
    with pytest.raises(ValueError):
        calculate_points(-0.1, 2000)
    with pytest.raises(ValueError):
        calculate_points(float("nan"), 2000)

def test_is_correct_boundary():
    assert is_correct(0.1, 0.0)
    assert is_correct(1.1, 1.0)
    assert is_correct(-0.5, -0.4)
    assert not is_correct(0.10001, 0.0)

@pytest.mark.parametrize("guess,tier", [
    (-0.4, AccuracyTier.EXCELLENT),
    (-0.5, AccuracyTier.EXCELLENT),
    (-0.6, AccuracyTier.VERY_CLOSE),
    (-0.7, AccuracyTier.VERY_CLOSE),
    (-0.85, AccuracyTier.GOOD_TRY),
    (-0.9, AccuracyTier.GOOD_TRY),
    (-1.0, AccuracyTier.KEEP_PRACTICING),
])
def test_accuracy_tiers(guess, tier):
    assert accuracy_tier(guess, -0.4) is tier

def test_buyer_share_oil_tariff():
    assert buyer_share(-0.4, 0.15) == pytest.approx(0.2727, abs=1e-4)

def test_buyer_share_bounds():
    assert buyer_share(-1.0, 0.0) == 0.0
    assert buyer_share(0.0, 2.0) == 1.0

def test_buyer_share_degenerate():
    with pytest.raises(DomainError):
        buyer_share(0.0, 0.0)
    # DomainError is still a ValueError for callers that only catch that
    with pytest.raises(ValueError):
        buyer_share(-0.5, -0.5)

def test_incidence_bands():
    assert incidence_band(0.8) is IncidenceBand.BUYERS
    assert incidence_band(0.2727) is IncidenceBand.SELLERS
    assert incidence_band(0.5) is IncidenceBand.EVEN
    assert incidence_band(0.6) is IncidenceBand.EVEN
    assert incidence_band(0.4) is IncidenceBand.EVEN

def test_score_question_perfect(oil):
    r = score_question(oil, 1, -0.4, 0.15)
    assert r.demand_points == 2000
    assert r.supply_points == 2000
    assert r.incidence_guess == pytest.approx(0.2727, abs=1e-4)
    assert r.incidence_guess == r.incidence_actual
    assert r.incidence_points == 1000
    assert r.total_points == 5000
    assert r.correct

def test_score_question_demand_only():
    good = GoodRecord("Bread", -0.25)
    r = score_question(good, 3, -0.75)
    assert r.question_number == 3
    assert r.demand_points == calculate_points(0.5, 2000)
    assert r.total_points == r.demand_points
    assert r.supply_guess is None
    assert r.incidence_points == 0
    assert not r.correct

def test_score_question_degenerate_guess_scores_zero_incidence(oil):
    r = score_question(oil, 1, 0, 0)
    assert r.incidence_guess is None
    assert r.incidence_actual == pytest.approx(0.2727, abs=1e-4)
    assert r.incidence_points == 0
    assert r.total_points == r.demand_points + r.supply_points
    assert not math.isnan(r.total_points)

def test_score_question_requires_supply_value():
    with pytest.raises(ValueError):
        score_question(GoodRecord("Bread", -0.25), 1, -0.3, 0.5)

def test_full_question_correct_needs_both(oil):
    assert not score_question(oil, 1, -0.4, 0.5).correct
    assert score_question(oil, 1, -0.45, 0.2).correct

def _result(points, correct):
    return QuestionResult(
        question_number=1, good="X", demand_guess=0, demand_actual=0,
        demand_points=points, demand_tier=AccuracyTier.EXCELLENT,
        total_points=points, correct=correct,
    )

def test_binary_fold_tracks_streaks():
    ledger = SessionLedger()
    s = BinaryScoring()
    for correct in (True, True, False, True):
        ledger = s.fold(ledger, _result(100, correct))
    assert ledger.total_score == 3
    assert ledger.questions_completed == 4
    assert ledger.streak == 1
    assert ledger.best_streak == 2
    assert len(ledger.history) == 4

def test_continuous_fold_sums_points():
    ledger = SessionLedger()
    s = ContinuousScoring()
    ledger = s.fold(ledger, _result(1200, False))
    ledger = s.fold(ledger, _result(800, True))
    assert ledger.total_score == 2000
    assert ledger.questions_completed == 2
    assert ledger.streak == 0
    assert [r.total_points for r in ledger.history] == [1200, 800]

def test_every_mode_has_a_strategy():
    for mode in ScoringMode:
        assert isinstance(STRATEGIES[mode], ScoringStrategy)
