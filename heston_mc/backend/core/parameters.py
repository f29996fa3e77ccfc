"""
Heston Simulation Parameters with Validation

═══════════════════════════════════════════════════════════════════════════════
HESTON DYNAMICS UNDER THE RISK-NEUTRAL MEASURE
═══════════════════════════════════════════════════════════════════════════════

1. ASSET PRICE SDE:
   dS_t = r·S_t dt + √V_t·S_t dW_S^t

2. VARIANCE SDE (CIR process):
   dV_t = κ(θ - V_t)dt + ξ√V_t dW_V^t

   - κ (kappa) ≥ 0: mean reversion speed
   - θ (theta) ≥ 0: long-run variance
   - ξ (xi)    ≥ 0: volatility of variance (vol-of-vol)

3. CORRELATION:
   E[dW_S^t · dW_V^t] = ρ dt,  ρ ∈ [-1, 1]

4. CONTRACT:
   European option with strike K and maturity T. Barrier contracts add an
   upper and/or lower level and a polarity:
   - knock_out: payoff is cancelled once a level is touched
   - knock_in:  payoff only exists once a level is touched

5. FELLER CONDITION:
   2κθ > ξ²

   When violated the variance can reach zero. The Euler full-truncation
   scheme stays well defined (it uses max(V, 0)), so this is a warning,
   not an error.

═══════════════════════════════════════════════════════════════════════════════
"""

import math
import warnings
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Optional

from heston_mc.backend.core.errors import ConfigurationError

KNOCK_OUT = 'knock_out'
KNOCK_IN = 'knock_in'
BARRIER_TYPES = (KNOCK_OUT, KNOCK_IN)


@dataclass(frozen=True)
class SimulationParameters:
    """
    Immutable model and contract description shared by every path.

    Validated on construction; any violation raises ConfigurationError.
    """

    # ═══════════════════════════════════════════════════════════════════════
    # Initial Conditions
    # ═══════════════════════════════════════════════════════════════════════

    S0: float     # Initial spot price S(0)
    V0: float     # Initial variance V(0), initial volatility = √V0

    # ═══════════════════════════════════════════════════════════════════════
    # Market and Variance Process
    # ═══════════════════════════════════════════════════════════════════════

    r: float      # Risk-free rate (continuous compounding)
    kappa: float  # κ: mean reversion speed
    theta: float  # θ: long-run variance
    xi: float     # ξ: vol-of-vol
    rho: float    # ρ: correlation between price and variance drivers

    # ═══════════════════════════════════════════════════════════════════════
    # Contract
    # ═══════════════════════════════════════════════════════════════════════

    K: float      # Strike
    T: float      # Time to maturity (years)

    upper_barrier: Optional[float] = None
    lower_barrier: Optional[float] = None
    barrier_type: str = KNOCK_OUT

    def __post_init__(self):
        """
        Validate against the model's constraints.

        Requirements:
        ═══════════════════════════════════════════════════════════════════════
        1. S₀ > 0, V₀ > 0, K > 0, T > 0
        2. κ, θ, ξ ≥ 0
        3. -1 ≤ ρ ≤ 1
        4. ξ = 0 together with θ = 0 is degenerate: variance decays
           deterministically to zero and every path collapses to the
           deterministic forward
        5. Barrier levels, when given, are positive and lower < upper
        6. barrier_type ∈ {knock_out, knock_in}
        ═══════════════════════════════════════════════════════════════════════
        """
        for name in ('S0', 'V0', 'K', 'T'):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(name, value, "must be a positive finite number")

        for name in ('kappa', 'theta', 'xi'):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(name, value, "must be non-negative")

        if not math.isfinite(self.r):
            raise ConfigurationError('r', self.r, "must be finite")

        if not -1.0 <= self.rho <= 1.0:
            raise ConfigurationError('rho', self.rho, "correlation must lie in [-1, 1]")

        if self.xi == 0 and self.theta == 0:
            raise ConfigurationError(
                'xi', self.xi,
                "zero vol-of-vol with zero long-run variance gives degenerate paths"
            )

        for name in ('upper_barrier', 'lower_barrier'):
            value = getattr(self, name)
            if value is not None and (not math.isfinite(value) or value <= 0):
                raise ConfigurationError(name, value, "barrier level must be positive")

        if (self.upper_barrier is not None and self.lower_barrier is not None
                and self.lower_barrier >= self.upper_barrier):
            raise ConfigurationError(
                'lower_barrier', self.lower_barrier,
                f"must be below upper_barrier={self.upper_barrier}"
            )

        if self.barrier_type not in BARRIER_TYPES:
            raise ConfigurationError(
                'barrier_type', self.barrier_type, f"expected one of {BARRIER_TYPES}"
            )

        if not self.feller_satisfied:
            warnings.warn(
                f"Feller condition violated: 2κθ = {2 * self.kappa * self.theta:.6f} "
                f"≤ ξ² = {self.xi ** 2:.6f}. Variance may reach zero; "
                f"full truncation keeps the simulation defined."
            )

    # ═══════════════════════════════════════════════════════════════════════
    # Derived quantities
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def feller_ratio(self) -> float:
        """F = 2κθ/ξ² (infinite for deterministic variance)."""
        if self.xi == 0:
            return math.inf
        return 2 * self.kappa * self.theta / self.xi ** 2

    @property
    def feller_satisfied(self) -> bool:
        return self.feller_ratio > 1.0

    @property
    def discount_factor(self) -> float:
        """e^{-rT}"""
        return math.exp(-self.r * self.T)

    @property
    def has_barrier(self) -> bool:
        return self.upper_barrier is not None or self.lower_barrier is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'SimulationParameters':
        """Create SimulationParameters from dictionary; unknown keys are rejected."""
        unknown = sorted(set(d) - {f.name for f in fields(cls)})
        if unknown:
            raise ConfigurationError(unknown[0], d[unknown[0]], "unknown parameter")
        upper = d.get('upper_barrier')
        lower = d.get('lower_barrier')
        return cls(
            S0=float(d['S0']),
            V0=float(d['V0']),
            r=float(d['r']),
            kappa=float(d['kappa']),
            theta=float(d['theta']),
            xi=float(d['xi']),
            rho=float(d['rho']),
            K=float(d['K']),
            T=float(d['T']),
            upper_barrier=None if upper is None else float(upper),
            lower_barrier=None if lower is None else float(lower),
            barrier_type=d.get('barrier_type', KNOCK_OUT),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# TYPICAL PARAMETER SETS
# ═══════════════════════════════════════════════════════════════════════════════

def get_default_params() -> SimulationParameters:
    """
    At-the-money one-year contract with equity-like dynamics.

    Satisfies the Feller condition (2·2·0.04 = 0.16 > 0.09).
    """
    return SimulationParameters(
        S0=100.0,     # Spot price
        V0=0.04,      # Initial volatility = 20%
        r=0.05,       # 5% risk-free rate
        kappa=2.0,    # Moderate mean reversion
        theta=0.04,   # 20% long-run volatility
        xi=0.3,       # Moderate vol-of-vol
        rho=-0.7,     # Strong negative correlation (leverage effect)
        K=100.0,
        T=1.0,
    )


def get_default_barrier_params(barrier_type: str = KNOCK_OUT) -> SimulationParameters:
    """Default contract wrapped in a 80/120 double barrier."""
    params = get_default_params().to_dict()
    params.update(upper_barrier=120.0, lower_barrier=80.0, barrier_type=barrier_type)
    return SimulationParameters.from_dict(params)
