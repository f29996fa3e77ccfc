"""
Monte Carlo Pricing of European Vanilla and Barrier Options under Heston

═══════════════════════════════════════════════════════════════════════════════
MONTE CARLO PIPELINE
═══════════════════════════════════════════════════════════════════════════════

1. RANDOM STREAMS:
   R independent MT19937 generators, uniforms on (0, 1), Box–Muller normals,
   correlated pairs Z_S = z₁, Z_V = ρz₁ + √(1-ρ²)z₂.

2. PATHS (Euler, full truncation):
   V_{n+1} = V_n + κ(θ - V_n⁺)Δt + ξ√(V_n⁺Δt)·Z_V
   S_{n+1} = S_n·exp[(r - ½V_n⁺)Δt + √(V_n⁺Δt)·Z_S]

3. PAYOFFS:
   (S_T - K)⁺ and (K - S_T)⁺, gated by the breach flag for barrier kernels.

4. SCHEDULING:
   NUM_SIMGROUPS rounds × R generators × NUM_SIMS paths, per-generator
   partial sums merged once at the end.

5. ESTIMATOR:
   Price = e^{-rT}·mean(payoff),  SE = e^{-rT}·std(payoff)/√N

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from heston_mc.backend.core.config import EngineConfig
from heston_mc.backend.core.parameters import SimulationParameters
from heston_mc.backend.simulation.aggregator import (
    PricingResult,
    ResultAggregator,
    VerificationReport,
)
from heston_mc.backend.simulation.scheduler import SimulationGroupScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationReport:
    """Prices plus run metadata and, when requested, verification."""
    result: PricingResult
    kernel: str
    num_simgroups: int
    elapsed_seconds: float
    verification: Optional[VerificationReport] = None

    @property
    def call_price(self) -> float:
        return self.result.call_price

    @property
    def put_price(self) -> float:
        return self.result.put_price


class MonteCarloSimulator:
    """
    Heston Monte Carlo engine.

    Both arguments are immutable and validated on construction, so a bad
    configuration fails here rather than mid-run.
    """

    def __init__(self, params: SimulationParameters, config: EngineConfig):
        """
        Args:
            params: Model and contract parameters
            config: Kernel selection and simulation sizing
        """
        self.p = params
        self.config = config
        self.scheduler = SimulationGroupScheduler(params, config)

    def price(self) -> PricingResult:
        """Run every path and return discounted call and put prices."""
        return self.run().result

    def run(self) -> SimulationReport:
        """
        Run the simulation; verify against the configured expected prices
        when any are set.
        """
        start = time.perf_counter()
        accumulator = self.scheduler.run()
        elapsed = time.perf_counter() - start

        aggregator = ResultAggregator(self.p, accumulator)
        result = aggregator.finalize()
        logger.info(
            "call=%.6f (±%.6f) put=%.6f (±%.6f) in %.2fs",
            result.call_price, result.call_stderr,
            result.put_price, result.put_stderr, elapsed,
        )

        verification = None
        if self.config.verifying:
            verification = aggregator.verify(
                self.config.expected_call, self.config.expected_put, self.config.tolerance
            )
            for mismatch in verification.mismatches:
                logger.warning(
                    "%s price %.6f differs from expected %.6f by %.6f (tolerance %.6f)",
                    mismatch.quantity, mismatch.computed, mismatch.expected,
                    mismatch.error, mismatch.tolerance,
                )

        return SimulationReport(
            result=result,
            kernel=self.config.kernel,
            num_simgroups=self.scheduler.num_simgroups,
            elapsed_seconds=elapsed,
            verification=verification,
        )
