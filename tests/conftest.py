import random

import pytest

from models import GoodRecord

@pytest.fixture
def oil():
    return GoodRecord(name="Oil", demand_elasticity=-0.4, supply_elasticity=0.15)

@pytest.fixture
def goods():
    # demand and supply for every good
    return [
        GoodRecord("Oil", -0.4, 0.15),
        GoodRecord("Coffee", -0.3, 0.6),
        GoodRecord("Restaurant meals", -2.3, 1.2),
        GoodRecord("New cars", -1.2, 1.5),
        GoodRecord("Salt", -0.1, 1.8),
    ]

@pytest.fixture
def demand_only_goods():
    return [
        GoodRecord("Bread", -0.25),
        GoodRecord("Jewelry", -2.6),
        GoodRecord("Tobacco", -0.45),
    ]

@pytest.fixture
def rng():
    return random.Random(1234)
