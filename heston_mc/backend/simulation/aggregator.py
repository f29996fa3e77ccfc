"""
Payoff Accumulation and the Monte Carlo Estimator

═══════════════════════════════════════════════════════════════════════════════
ESTIMATOR
═══════════════════════════════════════════════════════════════════════════════

   Call ≈ e^{-rT}·(1/N)·Σᵢ callᵢ
   Put  ≈ e^{-rT}·(1/N)·Σᵢ putᵢ

Standard error (sample standard deviation s of the undiscounted payoffs):

   SE = e^{-rT}·s/√N,   s² = (Σx² - (Σx)²/N)/(N - 1)

95% confidence interval: [price - 1.96·SE, price + 1.96·SE]

Accumulation is plain summation, so partial sums from independent workers
can be merged in any grouping; only floating-point rounding changes.

═══════════════════════════════════════════════════════════════════════════════
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
from scipy.stats import norm

from heston_mc.backend.core.config import DEFAULT_TOLERANCE
from heston_mc.backend.core.parameters import SimulationParameters


@dataclass
class PayoffAccumulator:
    """Running sums of call/put payoffs over completed paths."""
    call_sum: float = 0.0
    put_sum: float = 0.0
    call_sq_sum: float = 0.0
    put_sq_sum: float = 0.0
    count: int = 0

    def add(self, call_payoffs, put_payoffs):
        call_payoffs = np.asarray(call_payoffs, dtype=np.float64)
        put_payoffs = np.asarray(put_payoffs, dtype=np.float64)
        self.call_sum += float(np.sum(call_payoffs))
        self.put_sum += float(np.sum(put_payoffs))
        self.call_sq_sum += float(np.sum(call_payoffs * call_payoffs))
        self.put_sq_sum += float(np.sum(put_payoffs * put_payoffs))
        self.count += int(call_payoffs.size)

    def merge(self, other: 'PayoffAccumulator') -> 'PayoffAccumulator':
        self.call_sum += other.call_sum
        self.put_sum += other.put_sum
        self.call_sq_sum += other.call_sq_sum
        self.put_sq_sum += other.put_sq_sum
        self.count += other.count
        return self


@dataclass(frozen=True)
class PricingResult:
    call_price: float
    put_price: float
    call_stderr: float
    put_stderr: float
    num_paths: int

    def confidence_interval(self, level: float = 0.95) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """Normal-approximation intervals for (call, put)."""
        z = norm.ppf(0.5 + level / 2.0)
        return (
            (self.call_price - z * self.call_stderr, self.call_price + z * self.call_stderr),
            (self.put_price - z * self.put_stderr, self.put_price + z * self.put_stderr),
        )


@dataclass(frozen=True)
class VerificationMismatch:
    """A computed price outside tolerance of its expected value."""
    quantity: str
    expected: float
    computed: float
    tolerance: float

    @property
    def error(self) -> float:
        return abs(self.computed - self.expected)


@dataclass(frozen=True)
class VerificationReport:
    tolerance: float
    checked: Tuple[str, ...]
    mismatches: List[VerificationMismatch] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.mismatches


def _stderr(total: float, sq_total: float, n: int, discount: float) -> float:
    if n < 2:
        return math.nan
    sample_var = max((sq_total - total * total / n) / (n - 1), 0.0)
    return discount * math.sqrt(sample_var / n)


class ResultAggregator:
    """Reduces a PayoffAccumulator into discounted call/put prices."""

    def __init__(self, params: SimulationParameters, accumulator: PayoffAccumulator):
        self.p = params
        self.accumulator = accumulator
        self._result: Optional[PricingResult] = None

    def finalize(self) -> PricingResult:
        """Discounted means; computed once, later calls return the same result."""
        if self._result is not None:
            return self._result

        acc = self.accumulator
        if acc.count == 0:
            raise ValueError("No payoffs accumulated")

        discount = self.p.discount_factor
        self._result = PricingResult(
            call_price=discount * acc.call_sum / acc.count,
            put_price=discount * acc.put_sum / acc.count,
            call_stderr=_stderr(acc.call_sum, acc.call_sq_sum, acc.count, discount),
            put_stderr=_stderr(acc.put_sum, acc.put_sq_sum, acc.count, discount),
            num_paths=acc.count,
        )
        return self._result

    def verify(
        self,
        expected_call: Optional[float] = None,
        expected_put: Optional[float] = None,
        tolerance: float = DEFAULT_TOLERANCE
    ) -> VerificationReport:
        """
        Compare finalized prices with expected values (absolute tolerance).

        A mismatch is reported, never raised: it may only mean the sample
        count is too small.
        """
        result = self.finalize()
        checked = []
        mismatches = []
        for name, expected, computed in (
            ('call', expected_call, result.call_price),
            ('put', expected_put, result.put_price),
        ):
            if expected is None:
                continue
            checked.append(name)
            if not abs(computed - expected) <= tolerance:
                mismatches.append(VerificationMismatch(name, expected, computed, tolerance))

        return VerificationReport(tolerance=tolerance, checked=tuple(checked), mismatches=mismatches)
