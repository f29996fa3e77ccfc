"""
Payoff evaluation at maturity.

    call = max(S_T - K, 0)
    put  = max(K - S_T, 0)

Barrier kernels gate both payoffs on the breach flag:
    knock_out: payoff survives only if the path never touched a level
    knock_in:  payoff exists only if the path touched a level

Payoffs are undiscounted; e^{-rT} is applied once by the aggregator.
"""

import numpy as np
from typing import Tuple

from heston_mc.backend.core.config import KERNELS, BARRIER_KERNEL
from heston_mc.backend.core.errors import ConfigurationError
from heston_mc.backend.core.parameters import SimulationParameters, KNOCK_IN


class PayoffEvaluator:
    """Turns terminal prices (and breach flags) into call/put payoffs."""

    def __init__(self, params: SimulationParameters, kernel: str):
        if kernel not in KERNELS:
            raise ConfigurationError('kernel', kernel, f"expected one of {KERNELS}")
        if kernel == BARRIER_KERNEL and not params.has_barrier:
            raise ConfigurationError(
                'upper_barrier', None, f"kernel '{kernel}' needs an upper or lower barrier"
            )
        self.p = params
        self.kernel = kernel

    @property
    def is_barrier(self) -> bool:
        return self.kernel == BARRIER_KERNEL

    def evaluate(self, final_price, barrier_breached=False) -> Tuple[np.ndarray, np.ndarray]:
        """
        Args:
            final_price: terminal price(s), scalar or array
            barrier_breached: breach flag(s), ignored for vanilla

        Returns:
            (call_payoff, put_payoff), same shape as final_price
        """
        final_price = np.asarray(final_price, dtype=np.float64)
        call = np.maximum(final_price - self.p.K, 0.0)
        put = np.maximum(self.p.K - final_price, 0.0)

        if not self.is_barrier:
            return call, put

        breached = np.asarray(barrier_breached, dtype=bool)
        active = breached if self.p.barrier_type == KNOCK_IN else ~breached
        return np.where(active, call, 0.0), np.where(active, put, 0.0)
