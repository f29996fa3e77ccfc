"""
Path Simulation: Euler–Maruyama with Full Truncation

═══════════════════════════════════════════════════════════════════════════════
DISCRETIZATION
═══════════════════════════════════════════════════════════════════════════════

For each of M steps of size Δt = T/M:

   V⁺     = max(V, 0)
   V_next = V + κ(θ - V⁺)Δt + ξ·√(V⁺Δt)·Z_V
   S_next = S·exp[(r - ½V⁺)Δt + √(V⁺Δt)·Z_S]

V itself may go negative; only V⁺ enters the drift and diffusion, so the
square root is always defined (full truncation, Lord et al. 2010).

BARRIER MONITORING:
   A path is breached when S ≥ upper or S ≤ lower. The check runs on the
   initial price and after every step. Once set the flag never clears, and
   the remaining steps still run so every path costs exactly M steps.

MEMORY:
   Only the current (S, V, breached) triple is kept per path. A batch holds
   one triple per concurrent path; no time history is stored.

═══════════════════════════════════════════════════════════════════════════════
"""

import numbers
import numpy as np
from dataclasses import dataclass
from typing import Optional

from heston_mc.backend.core.errors import ConfigurationError
from heston_mc.backend.core.parameters import SimulationParameters
from heston_mc.backend.simulation.random_stream import RandomStream


@dataclass
class PathState:
    """Current state of a single path."""
    price: float
    variance: float
    barrier_breached: bool = False


@dataclass
class PathBatch:
    """Current state of a batch of paths driven by one generator."""
    price: np.ndarray
    variance: np.ndarray
    barrier_breached: np.ndarray

    @classmethod
    def start(cls, params: SimulationParameters, n: int) -> 'PathBatch':
        return cls(
            price=np.full(n, params.S0, dtype=np.float64),
            variance=np.full(n, params.V0, dtype=np.float64),
            barrier_breached=np.zeros(n, dtype=bool),
        )

    def __len__(self) -> int:
        return self.price.shape[0]


@dataclass(frozen=True)
class PathOutcome:
    final_price: float
    barrier_breached: bool


@dataclass(frozen=True)
class BatchOutcome:
    final_prices: np.ndarray
    barrier_breached: np.ndarray

    def __len__(self) -> int:
        return self.final_prices.shape[0]


def euler_step(price, variance, z_s, z_v, dt: float, params: SimulationParameters):
    """
    One full-truncation Euler step. Works on scalars or numpy arrays.

    Returns:
        (price_next, variance_next)
    """
    v_plus = np.maximum(variance, 0.0)
    sqrt_v_dt = np.sqrt(v_plus * dt)

    variance_next = variance + params.kappa * (params.theta - v_plus) * dt + params.xi * sqrt_v_dt * z_v
    price_next = price * np.exp((params.r - 0.5 * v_plus) * dt + sqrt_v_dt * z_s)

    return price_next, variance_next


def crosses_barrier(price, upper: Optional[float], lower: Optional[float]):
    """True where the price has touched the upper or lower level."""
    hit = np.zeros(np.shape(price), dtype=bool)
    if upper is not None:
        hit |= price >= upper
    if lower is not None:
        hit |= price <= lower
    return hit


class PathSimulator:
    """
    Drives paths through M Euler steps using increments from a RandomStream.

    Barrier monitoring is enabled with `monitor_barrier`; it requires at
    least one barrier level on the parameters.
    """

    def __init__(self, params: SimulationParameters, num_steps: int, monitor_barrier: bool = False):
        if isinstance(num_steps, bool) or not isinstance(num_steps, numbers.Integral) or num_steps < 1:
            raise ConfigurationError('num_steps', num_steps, "must be a positive integer")
        if monitor_barrier and not params.has_barrier:
            raise ConfigurationError(
                'upper_barrier', None, "barrier monitoring needs an upper or lower level"
            )

        self.p = params
        self.num_steps = num_steps
        self.dt = params.T / num_steps
        self.monitor_barrier = monitor_barrier

    def _breached(self, price):
        return crosses_barrier(price, self.p.upper_barrier, self.p.lower_barrier)

    def start(self) -> PathState:
        state = PathState(price=self.p.S0, variance=self.p.V0)
        if self.monitor_barrier:
            state.barrier_breached = bool(self._breached(state.price))
        return state

    def step(self, state: PathState, z_s: float, z_v: float) -> PathState:
        """Advance a single path by one step in place."""
        price, variance = euler_step(state.price, state.variance, z_s, z_v, self.dt, self.p)
        state.price = float(price)
        state.variance = float(variance)
        if self.monitor_barrier and not state.barrier_breached:
            state.barrier_breached = bool(self._breached(state.price))
        return state

    def simulate(self, stream: RandomStream) -> PathOutcome:
        """Run one path to maturity, one correlated pair per step."""
        state = self.start()
        for _ in range(self.num_steps):
            z_s, z_v = stream.next_correlated_pair(self.p.rho)
            self.step(state, z_s, z_v)
        return PathOutcome(final_price=state.price, barrier_breached=state.barrier_breached)

    def simulate_batch(self, stream: RandomStream, n: int) -> BatchOutcome:
        """
        Run n concurrent paths fed by one stream.

        At every step the stream hands out n correlated pairs, pair j going
        to path j, so a batch of one reproduces simulate() exactly.
        """
        batch = PathBatch.start(self.p, n)
        if self.monitor_barrier:
            batch.barrier_breached |= self._breached(batch.price)

        for _ in range(self.num_steps):
            z_s, z_v = stream.correlated_pairs(n, self.p.rho)
            batch.price, batch.variance = euler_step(
                batch.price, batch.variance, z_s, z_v, self.dt, self.p
            )
            if self.monitor_barrier:
                batch.barrier_breached |= self._breached(batch.price)

        return BatchOutcome(final_prices=batch.price, barrier_breached=batch.barrier_breached)
