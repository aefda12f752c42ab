# agirace/utils.py
from typing import Callable, Iterable, Optional
import numpy as np

from .constants import MIN_STAT, MAX_STAT

Rng = Callable[[], float]

def clamp(x: float, lo: float = MIN_STAT, hi: float = MAX_STAT) -> float:
    return float(min(hi, max(lo, x)))

def round1(x: float) -> float:
    return round(float(x), 1)

def pair_key(a: str, b: str) -> str:
    """Order-independent key for a faction pair."""
    return "|".join(sorted((a, b)))

def make_rng(seed: Optional[int] = None) -> Rng:
    """Seedable uniform [0, 1) source; one float per call."""
    gen = np.random.default_rng(seed)
    return lambda: float(gen.random())

def sequence_rng(values: Iterable[float]) -> Rng:
    """Replays a fixed sequence. Raises StopIteration when exhausted."""
    it = iter(values)
    return lambda: float(next(it))
