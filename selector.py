from __future__ import annotations
import random
from typing import AbstractSet, FrozenSet, Optional, Sequence, Tuple

from errors import EmptyDatasetError
from models import GoodRecord

def select_good(
    goods: Sequence[GoodRecord],
    used: AbstractSet[str],
    rng: Optional[random.Random] = None,
) -> Tuple[GoodRecord, FrozenSet[str]]:
    """
    Pick a good whose name is not in `used`, uniformly at random.
    When every good has been used the pool starts over: the returned used-set
    is empty and the pick comes from the full list. The caller adds the
    picked name to the used-set once the question has been shown.
    """
    if not goods:
        raise EmptyDatasetError("No goods to choose from")
    rng = rng or random
    pool = frozenset(used)
    available = [g for g in goods if g.name not in pool]
    if not available:
        pool = frozenset()
        available = list(goods)
    return rng.choice(available), pool
