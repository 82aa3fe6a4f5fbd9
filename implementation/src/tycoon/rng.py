"""
tycoon.rng
Seed-in / seed-out linear congruential generator.

Every stochastic function takes a 32-bit seed and returns the advanced
seed next to its value, so the caller persists exactly one integer and a
replay from that integer reproduces every draw.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, List, Sequence, Tuple, TypeVar

T = TypeVar("T")

LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
UINT32_MASK = 0xFFFFFFFF


def next_seed(seed: int) -> int:
    return (int(seed) * LCG_MULTIPLIER + LCG_INCREMENT) & UINT32_MASK


def random_float(seed: int) -> Tuple[float, int]:
    """Return (value in [0, 1], next_seed)."""
    nxt = next_seed(seed)
    return nxt / UINT32_MASK, nxt


def rand_range(seed: int, lo: float, hi: float) -> Tuple[float, int]:
    value, nxt = random_float(seed)
    return lo + (hi - lo) * value, nxt


def pick_index(seed: int, size: int) -> Tuple[int, int]:
    """Uniform index in [0, size). `size` must be positive."""
    value, nxt = random_float(seed)
    return min(size - 1, int(value * size)), nxt


def shuffled(items: Sequence[T], seed: int) -> Tuple[List[T], int]:
    """Fisher-Yates shuffle driven by the LCG; returns (new list, next_seed)."""
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j, seed = pick_index(seed, i + 1)
        out[i], out[j] = out[j], out[i]
    return out, seed


def stable_seed(*parts: Any, salt: str = "tycoon") -> int:
    """Stable 32-bit seed from arbitrary JSON-able parts (no built-in hash())."""
    payload = json.dumps(parts, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256((salt + "|" + payload).encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big", signed=False)
