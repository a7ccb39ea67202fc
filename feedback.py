from __future__ import annotations

from models import AccuracyTier, IncidenceBand

TIER_MESSAGES = {
    AccuracyTier.EXCELLENT: "Excellent! Spot on.",
    AccuracyTier.VERY_CLOSE: "Very close! Just a little off.",
    AccuracyTier.GOOD_TRY: "Good try. You're in the right neighbourhood.",
    AccuracyTier.KEEP_PRACTICING: "Keep practicing. Think about substitutes and necessity.",
}

INCIDENCE_NARRATIVES = {
    IncidenceBand.BUYERS: "Buyers are less flexible than sellers, so they bear most of the tax burden.",
    IncidenceBand.SELLERS: "Sellers are less flexible than buyers, so they absorb most of the tax burden.",
    IncidenceBand.EVEN: "Both parties have similar flexibility, so the tax burden is relatively evenly split.",
}

SCORING_GUIDE = """Scoring
- Demand elasticity: up to 2,000 points
- Supply elasticity: up to 2,000 points
- Tax incidence (buyer's share): up to 1,000 points
- Points decay exponentially with the distance from the reference value.

Streak mode
- A guess within 0.1 of the reference value is correct.
- Consecutive correct answers build your streak.

Buyer's share = supply elasticity / (|demand elasticity| + supply elasticity)
"""
