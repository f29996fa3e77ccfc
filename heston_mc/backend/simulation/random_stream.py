"""
Random Streams: Mersenne Twister Uniforms and Box–Muller Normals

═══════════════════════════════════════════════════════════════════════════════
RANDOM NUMBER PIPELINE
═══════════════════════════════════════════════════════════════════════════════

1. UNIFORM GENERATION (MT19937):
   ═══════════════════════════════════════════════════════════════════════════

   Each stream owns one Mersenne Twister state (624 × uint32 key + index).
   Raw 32-bit outputs x ∈ {0, …, 2³²-1} are mapped to the OPEN interval

   u = (x + 0.5) / 2³²  ∈ (0, 1)

   so u = 0 can never occur and ln(u) below is always defined.

2. BOX–MULLER TRANSFORM:
   ═══════════════════════════════════════════════════════════════════════════

   z₁ = √(-2·ln u₁) · cos(2π·u₂)
   z₂ = √(-2·ln u₁) · sin(2π·u₂)

   (z₁, z₂) are independent N(0, 1).

3. CORRELATION:
   ═══════════════════════════════════════════════════════════════════════════

   Z_S = z₁
   Z_V = ρ·z₁ + √(1-ρ²)·z₂

   Corr(Z_S, Z_V) = ρ, both marginals N(0, 1).

4. SEEDING:
   ═══════════════════════════════════════════════════════════════════════════

   A root seed is expanded with numpy's SeedSequence; spawn() yields
   statistically independent child seeds, one per generator. Identical
   seeds give identical streams.

═══════════════════════════════════════════════════════════════════════════════
"""

import numbers
import numpy as np
from dataclasses import dataclass
from typing import List, Tuple, Union

from heston_mc.backend.core.errors import ConfigurationError, NumericDomainError

UINT32_SCALE = 1.0 / 4294967296.0  # 2^-32
TWO_PI = 2.0 * np.pi

SeedLike = Union[int, np.integer, np.random.SeedSequence]


@dataclass(frozen=True)
class RandomStreamState:
    """Snapshot of a generator's internal state."""
    key: np.ndarray   # 624 unsigned 32-bit words
    pos: int          # index of the next word to temper


def box_muller(u1, u2) -> Tuple[np.ndarray, np.ndarray]:
    """
    Map uniforms to a pair of independent standard normals.

    Accepts scalars or arrays. u1 must lie in (0, 1].
    """
    u1 = np.asarray(u1, dtype=np.float64)
    u2 = np.asarray(u2, dtype=np.float64)
    bad = (u1 <= 0.0) | (u1 > 1.0) | ~np.isfinite(u1)
    if np.any(bad):
        raise NumericDomainError(float(np.atleast_1d(u1)[np.atleast_1d(bad)][0]))

    radius = np.sqrt(-2.0 * np.log(u1))
    angle = TWO_PI * u2
    return radius * np.cos(angle), radius * np.sin(angle)


def correlate(z1, z2, rho: float) -> Tuple[np.ndarray, np.ndarray]:
    """Return (Z_S, Z_V) with correlation ρ from independent normals."""
    return z1, rho * z1 + np.sqrt(1.0 - rho * rho) * z2


def _as_seed_sequence(seed: SeedLike) -> np.random.SeedSequence:
    if isinstance(seed, np.random.SeedSequence):
        return seed
    if isinstance(seed, bool) or not isinstance(seed, numbers.Integral):
        raise ConfigurationError('seed', seed, "must be a non-negative integer")
    if seed < 0:
        raise ConfigurationError('seed', seed, "must be a non-negative integer")
    return np.random.SeedSequence(int(seed))


class RandomStream:
    """
    One Mersenne Twister generator with uniform, normal and correlated draws.

    A stream is not meant to be shared: whoever drives it owns its state.
    Batch draws of n pairs consume exactly what n consecutive scalar pair
    draws would.
    """

    def __init__(self, seed: SeedLike):
        self._bit_generator = np.random.MT19937(_as_seed_sequence(seed))
        self.pairs_drawn = 0

    @property
    def state(self) -> RandomStreamState:
        mt_state = self._bit_generator.state['state']
        return RandomStreamState(key=np.array(mt_state['key'], copy=True), pos=int(mt_state['pos']))

    # ═══════════════════════════════════════════════════════════════════════
    # Batch draws
    # ═══════════════════════════════════════════════════════════════════════

    def uniform_pairs(self, n: int) -> Tuple[np.ndarray, np.ndarray]:
        """n pairs (u1, u2), each in the open interval (0, 1)."""
        raw = self._bit_generator.random_raw(2 * n)
        u = (raw.astype(np.float64) + 0.5) * UINT32_SCALE
        self.pairs_drawn += n
        pairs = u.reshape(n, 2)
        return np.ascontiguousarray(pairs[:, 0]), np.ascontiguousarray(pairs[:, 1])

    def normal_pairs(self, n: int) -> Tuple[np.ndarray, np.ndarray]:
        return box_muller(*self.uniform_pairs(n))

    def correlated_pairs(self, n: int, rho: float) -> Tuple[np.ndarray, np.ndarray]:
        """n pairs (Z_S, Z_V) with correlation ρ."""
        z1, z2 = self.normal_pairs(n)
        return correlate(z1, z2, rho)

    # ═══════════════════════════════════════════════════════════════════════
    # Scalar draws
    # ═══════════════════════════════════════════════════════════════════════

    def next_uniform_pair(self) -> Tuple[float, float]:
        u1, u2 = self.uniform_pairs(1)
        return float(u1[0]), float(u2[0])

    def next_normal_pair(self) -> Tuple[float, float]:
        z1, z2 = self.normal_pairs(1)
        return float(z1[0]), float(z2[0])

    def next_correlated_pair(self, rho: float) -> Tuple[float, float]:
        z_s, z_v = self.correlated_pairs(1, rho)
        return float(z_s[0]), float(z_v[0])


def spawn_streams(seed: SeedLike, count: int) -> List[RandomStream]:
    """Independent streams for `count` generators, derived from one root seed."""
    if count < 1:
        raise ConfigurationError('num_rngs', count, "must be a positive integer")
    root = _as_seed_sequence(seed)
    return [RandomStream(child) for child in root.spawn(count)]
